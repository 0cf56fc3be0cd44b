from __future__ import annotations

from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field

FieldType = Literal["number", "string"]

# Interactive control metadata produced by the compiler. Passed through untouched.
ControlDescriptor = Any


class DatasetField(BaseModel):
    model_config = ConfigDict(frozen=True)

    name: str
    type: FieldType = "string"
    values: list[float | str | None] = Field(default_factory=list)


class Dataset(BaseModel):
    """A named set of typed columns, all of equal length."""

    model_config = ConfigDict(frozen=True)

    name: str = "data"
    columns: list[DatasetField]

    @property
    def row_count(self) -> int:
        return len(self.columns[0].values) if self.columns else 0

    def column(self, name: str) -> DatasetField | None:
        for col in self.columns:
            if col.name == name:
                return col
        return None


class VisualizationResult(BaseModel):
    js: str
    css: str = ""
    controls: ControlDescriptor = None
