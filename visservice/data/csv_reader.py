from __future__ import annotations

import io
import math

import pandas as pd
from pandas.api.types import is_bool_dtype, is_numeric_dtype

from visservice.models.schemas import Dataset, DatasetField


class DatasetReadError(ValueError):
    pass


def _to_field(name: str, series: pd.Series) -> DatasetField:
    if is_numeric_dtype(series) and not is_bool_dtype(series):
        values = [float(v) if not pd.isna(v) and math.isfinite(v) else None for v in series.tolist()]
        return DatasetField(name=str(name), type="number", values=values)
    values = [None if pd.isna(v) else str(v) for v in series.tolist()]
    return DatasetField(name=str(name), type="string", values=values)


def read_csv(content: str | bytes, name: str = "data") -> Dataset:
    """
    Parse CSV text into a Dataset.

    The first row is the header. Columns pandas reads as numeric become
    `number` fields; everything else is kept as strings. Empty cells and
    non-finite numbers (inf, -inf) are None.
    """
    if isinstance(content, bytes):
        try:
            content = content.decode("utf-8")
        except UnicodeDecodeError as exc:
            raise DatasetReadError("CSV content must be UTF-8 encoded") from exc

    if not content or not content.strip():
        raise DatasetReadError("CSV content is empty")

    try:
        frame = pd.read_csv(io.StringIO(content), skipinitialspace=True)
    except (pd.errors.ParserError, pd.errors.EmptyDataError, UnicodeError) as exc:
        raise DatasetReadError(f"Could not parse CSV: {exc}") from exc

    if len(frame.columns) == 0:
        raise DatasetReadError("CSV content has no columns")

    return Dataset(name=name, columns=[_to_field(col, frame[col]) for col in frame.columns])
