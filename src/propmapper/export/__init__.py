"""Narrow and long export encodings of the final mapping."""

from .models import LONG_TABLE_HEADERS, ExportTable, ExportBundle, NothingToExportError
from .formatter import ExportFormatter, fallback_property_name

__all__ = [
    "LONG_TABLE_HEADERS",
    "ExportTable",
    "ExportBundle",
    "NothingToExportError",
    "ExportFormatter",
    "fallback_property_name",
]
