"""Delimited text parsing and escaping."""

from .models import (
    TableRole,
    ParsedTable,
    KNOWLEDGE_BASE_COLUMNS,
    InputFormatError,
    EmptyInputError,
    NoHeadersError,
    MissingColumnsError,
)
from .parser import parse_table, escape_cell, render_table

__all__ = [
    "TableRole",
    "ParsedTable",
    "KNOWLEDGE_BASE_COLUMNS",
    "InputFormatError",
    "EmptyInputError",
    "NoHeadersError",
    "MissingColumnsError",
    "parse_table",
    "escape_cell",
    "render_table",
]
