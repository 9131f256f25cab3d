"""Data models and errors for delimited table parsing."""

from enum import Enum

from pydantic import BaseModel, Field


class TableRole(str, Enum):
    """What a parsed table is used for."""

    SOURCE = "source"
    KNOWLEDGE_BASE = "knowledge-base"


KNOWLEDGE_BASE_COLUMNS = ("anchor", "positive", "negative")


class ParsedTable(BaseModel):
    """Header list plus the retained data rows of a delimited file."""

    role: TableRole
    headers: list[str]
    rows: list[list[str]] = Field(default_factory=list)

    def column(self, header: str) -> list[str]:
        """Return every value of one column, in row order."""
        index = self.headers.index(header)
        return [row[index] for row in self.rows]

    def column_index(self, header: str, case_sensitive: bool = True) -> int:
        """Return the 0-based position of a header, or -1 if absent."""
        if case_sensitive:
            return self.headers.index(header) if header in self.headers else -1
        lowered = [h.lower() for h in self.headers]
        return lowered.index(header.lower()) if header.lower() in lowered else -1


class InputFormatError(Exception):
    """Raised when an uploaded file cannot be used."""

    pass


class EmptyInputError(InputFormatError):
    """Raised when a file has no non-blank lines."""

    def __init__(self, role: TableRole):
        self.role = role
        super().__init__(f"{role.value} file is empty")


class NoHeadersError(InputFormatError):
    """Raised when a source file has no usable header cells."""

    def __init__(self, role: TableRole):
        self.role = role
        super().__init__(f"No valid column headers found in the {role.value} file")


class MissingColumnsError(InputFormatError):
    """Raised when a knowledge-base file lacks required columns."""

    def __init__(self, missing: list[str]):
        self.missing = missing
        super().__init__(
            f"Knowledge-base file missing required headers: {', '.join(missing)}. "
            f"Headers must be {', '.join(repr(c) for c in KNOWLEDGE_BASE_COLUMNS)}."
        )
