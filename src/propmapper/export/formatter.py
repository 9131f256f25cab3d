"""Builds the narrow and long export tables from a final mapping."""

import logging
import re
from typing import Iterable, Optional

from ..config import settings
from ..mapping import MappingRow, is_definite
from ..schema import SchemaCache
from ..tabular import ParsedTable
from .models import LONG_TABLE_HEADERS, ExportBundle, ExportTable, NothingToExportError

logger = logging.getLogger(__name__)

_NON_ALPHANUMERIC = re.compile(r"[^A-Za-z0-9]")


def fallback_property_name(display_name: str, prefix: str) -> str:
    """Best-effort identifier for a property that has none; may collide."""
    return prefix + _NON_ALPHANUMERIC.sub("", display_name)


class ExportFormatter:
    """
    Turns the final mapping plus the sample rows into two tables.

    The narrow table has one fixed column per standard property. The long
    table has one row per sample row and mapped non-standard property.
    """

    NARROW_FILENAME = "narrow_table.csv"
    LONG_FILENAME = "long_table.csv"

    def __init__(
        self,
        standard_properties: Optional[list[str]] = None,
        line_identifier_target: Optional[str] = None,
        fallback_prefix: Optional[str] = None,
    ):
        self.standard_properties = list(
            standard_properties if standard_properties is not None else settings.standard_properties
        )
        self.line_identifier_target = (
            line_identifier_target
            if line_identifier_target is not None
            else settings.line_identifier_target
        )
        self.fallback_prefix = (
            fallback_prefix if fallback_prefix is not None else settings.fallback_property_prefix
        )

    def target_columns(self, rows: Iterable[MappingRow], source: ParsedTable) -> dict[str, int]:
        """
        Map each definitely selected target to its source column index.

        When several rows share a target, the first one in column order wins.
        """
        columns: dict[str, int] = {}
        for row in sorted(rows, key=lambda r: r.position):
            target = row.selected_target
            if not is_definite(target) or target in columns:
                continue
            index = source.column_index(row.source_header)
            if index != -1:
                columns[target] = index
        return columns

    def narrow_table(self, columns: dict[str, int], source: ParsedTable) -> ExportTable:
        table = ExportTable(filename=self.NARROW_FILENAME, headers=list(self.standard_properties))
        for sample in source.rows:
            table.rows.append(
                [
                    sample[columns[name]] if name in columns else ""
                    for name in self.standard_properties
                ]
            )
        return table

    def property_name(self, target: str, schema: SchemaCache) -> str:
        """Stored local identifier of a target, or a derived fallback."""
        prop = schema.get(target)
        if prop is not None and prop.local_id:
            return prop.local_id
        name = fallback_property_name(target, self.fallback_prefix)
        logger.warning(f"No identifier for property '{target}', using fallback '{name}'")
        return name

    def long_table(
        self, columns: dict[str, int], source: ParsedTable, schema: SchemaCache
    ) -> ExportTable:
        table = ExportTable(filename=self.LONG_FILENAME, headers=list(LONG_TABLE_HEADERS))
        standard = set(self.standard_properties)
        extra = [target for target in columns if target not in standard]
        names = {target: self.property_name(target, schema) for target in extra}
        id_index = columns.get(self.line_identifier_target)

        for sample in source.rows:
            line_id = sample[id_index] if id_index is not None else ""
            for target in extra:
                value = sample[columns[target]]
                if value == "":
                    continue
                table.rows.append([line_id, names[target], value, ""])
        return table

    def build(
        self, rows: Iterable[MappingRow], source: ParsedTable, schema: SchemaCache
    ) -> ExportBundle:
        """
        Build both tables.

        Raises:
            NothingToExportError: If no row has a definite selection
        """
        columns = self.target_columns(rows, source)
        if not columns:
            raise NothingToExportError(
                "No valid column mappings found. Please map columns before exporting."
            )
        bundle = ExportBundle(
            narrow=self.narrow_table(columns, source),
            long=self.long_table(columns, source, schema),
        )
        logger.info(
            f"Export built: {len(bundle.narrow.rows)} narrow rows, {len(bundle.long.rows)} long rows"
        )
        return bundle
