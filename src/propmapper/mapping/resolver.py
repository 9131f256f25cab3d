"""Assignment resolver: owns the mapping rows and derives consistency facts."""

import logging
from typing import Optional

from .models import (
    MappingEvent,
    MappingRow,
    MappingState,
    SourceLoaded,
    UnknownSourceHeaderError,
    is_definite,
)
from .transitions import mark_duplicates, transition

logger = logging.getLogger(__name__)

DUPLICATE_TARGETS_MESSAGE = (
    "Validation Error: One or more target columns are selected multiple times. "
    "Please resolve."
)


class AssignmentResolver:
    """
    Holds the current mapping state.

    The resolver never chooses a value; it applies events produced elsewhere
    and reports which targets are claimed and which rows collide.
    """

    def __init__(self):
        self.state = MappingState()

    @property
    def rows(self) -> list[MappingRow]:
        return list(self.state.rows.values())

    def __len__(self) -> int:
        return len(self.state.rows)

    def get(self, source_header: str) -> MappingRow:
        try:
            return self.state.rows[source_header]
        except KeyError:
            raise UnknownSourceHeaderError(source_header) from None

    def apply(self, event: MappingEvent) -> MappingState:
        """Replace the current state with the result of ``event``."""
        self.state = transition(self.state, event)
        return self.state

    def rebuild(self, headers: list[str]):
        """Replace all rows with fresh, empty ones."""
        self.apply(SourceLoaded(headers=headers))
        logger.debug(f"Mapping table rebuilt with {len(headers)} rows")

    def clear(self):
        self.state = MappingState()

    def recompute_duplicates(self) -> bool:
        """Re-flag duplicate rows; returns whether any duplicate exists."""
        return mark_duplicates(self.state)

    def has_duplicates(self) -> bool:
        return any(row.is_duplicate for row in self.state.rows.values())

    def duplicate_targets(self) -> list[str]:
        """Targets currently selected by more than one row, in first-seen order."""
        targets: list[str] = []
        for row in self.state.rows.values():
            if row.is_duplicate and row.selected_target not in targets:
                targets.append(row.selected_target)
        return targets

    def duplicate_message(self) -> Optional[str]:
        """Standing validation message while duplicates remain."""
        return DUPLICATE_TARGETS_MESSAGE if self.has_duplicates() else None

    def claimed_targets(self) -> set[str]:
        """Targets already used by a row with a definite selection."""
        return {
            row.selected_target
            for row in self.state.rows.values()
            if is_definite(row.selected_target)
        }

    def unresolved_headers(self) -> list[str]:
        return [row.source_header for row in self.state.rows.values() if row.is_unresolved]

    def selections(self) -> dict[str, str]:
        """Current ``source_header -> selected_target`` mapping."""
        return {header: row.selected_target for header, row in self.state.rows.items()}
