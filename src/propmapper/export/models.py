"""Data models for export tables."""

from pydantic import BaseModel, Field

from ..tabular import render_table

LONG_TABLE_HEADERS = ["LineNumber", "PropertyName", "PropertyValue", "UnitOfMeasure"]


class ExportTable(BaseModel):
    """A rectangular output table with raw (unescaped) cells."""

    filename: str
    headers: list[str]
    rows: list[list[str]] = Field(default_factory=list)

    def to_csv(self) -> str:
        """Render with every cell escaped."""
        return render_table([self.headers, *self.rows])


class ExportBundle(BaseModel):
    """Both encodings of one final mapping, narrow table first."""

    narrow: ExportTable
    long: ExportTable

    def tables(self) -> list[ExportTable]:
        return [self.narrow, self.long]


class NothingToExportError(Exception):
    """Raised when no row has a definite selection."""

    pass
