"""Parser and escaper for comma-delimited text."""

import csv
import io
import logging
from typing import Iterable, Optional

from .models import (
    KNOWLEDGE_BASE_COLUMNS,
    EmptyInputError,
    InputFormatError,
    MissingColumnsError,
    NoHeadersError,
    ParsedTable,
    TableRole,
)

logger = logging.getLogger(__name__)

_CHARS_NEEDING_QUOTES = (",", '"', "\n", "\r")


def _clean(cell: str) -> str:
    # csv.reader has already removed surrounding quotes and undoubled inner ones
    return cell.strip()


def _is_blank(record: list[str]) -> bool:
    """A blank line parses to no cells or a single whitespace cell."""
    return len(record) == 0 or (len(record) == 1 and not record[0].strip())


def _read_records(text: str, delimiter: str) -> list[list[str]]:
    reader = csv.reader(io.StringIO(text), delimiter=delimiter, skipinitialspace=True)
    try:
        return [record for record in reader if not _is_blank(record)]
    except csv.Error as e:
        raise InputFormatError(f"Could not parse delimited text: {e}") from e


def parse_table(
    text: str,
    role: TableRole = TableRole.SOURCE,
    max_rows: Optional[int] = None,
    delimiter: str = ",",
) -> ParsedTable:
    """
    Parse delimited text into a header list and data rows.

    Args:
        text: Raw file content
        role: ``source`` or ``knowledge-base``; controls header validation
        max_rows: Only the first ``max_rows`` data lines are considered
        delimiter: Cell delimiter

    Returns:
        ParsedTable with cleaned headers and the rows that survived filtering

    Raises:
        EmptyInputError: If there are no non-blank lines
        NoHeadersError: If a source file has only empty header cells
        MissingColumnsError: If a knowledge-base file lacks anchor/positive/negative
    """
    records = _read_records(text or "", delimiter)
    if not records:
        raise EmptyInputError(role)

    raw_headers = [_clean(cell) for cell in records[0]]

    if role == TableRole.KNOWLEDGE_BASE:
        lowered = [h.lower() for h in raw_headers]
        missing = [name for name in KNOWLEDGE_BASE_COLUMNS if name not in lowered]
        if missing:
            raise MissingColumnsError(missing)
        headers = raw_headers
    else:
        headers = [h for h in raw_headers if h != ""]
        if not headers:
            raise NoHeadersError(role)

    data_records = records[1:]
    if max_rows is not None:
        data_records = data_records[:max_rows]

    rows = []
    for record in data_records:
        cells = [_clean(cell) for cell in record]
        if len(cells) != len(headers) or not any(cells):
            continue
        rows.append(cells)

    dropped = len(data_records) - len(rows)
    if dropped:
        logger.debug(f"Dropped {dropped} malformed or empty {role.value} rows")

    return ParsedTable(role=role, headers=headers, rows=rows)


def escape_cell(value: Optional[object]) -> str:
    """Quote a cell if it contains a delimiter, quote or line break."""
    if value is None:
        return ""
    text = str(value)
    if any(ch in text for ch in _CHARS_NEEDING_QUOTES):
        return '"' + text.replace('"', '""') + '"'
    return text


def render_table(rows: Iterable[Iterable[object]]) -> str:
    """Render rows as CSV text, escaping every cell and joining lines with CRLF."""
    return "\r\n".join(",".join(escape_cell(cell) for cell in row) for row in rows)
