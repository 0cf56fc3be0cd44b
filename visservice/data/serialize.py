from __future__ import annotations

from pydantic import ValidationError

from visservice.models.schemas import Dataset


class DatasetSerializationError(ValueError):
    pass


def serialize_dataset(dataset: Dataset) -> bytes:
    return dataset.model_dump_json().encode("utf-8")


def deserialize_dataset(data: bytes | str) -> Dataset:
    try:
        return Dataset.model_validate_json(data)
    except (ValidationError, UnicodeDecodeError) as exc:
        raise DatasetSerializationError(f"Stored value is not a dataset: {exc}") from exc
