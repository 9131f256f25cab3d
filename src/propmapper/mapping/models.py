"""Data models for the source-column to target-property mapping."""

from enum import Enum
from typing import Literal, Optional, Union

from pydantic import BaseModel, Field

NOT_APPLICABLE = "N/A"

# Legacy spelling of the sentinel still found in older knowledge-base files
_NOT_APPLICABLE_ALIASES = {"n/a", "__n/a_mapping__"}


def is_not_applicable(value: Optional[str]) -> bool:
    """True for the ``N/A`` sentinel in any of its accepted spellings."""
    return bool(value) and value.strip().lower() in _NOT_APPLICABLE_ALIASES


def is_definite(value: Optional[str]) -> bool:
    """A definite selection is neither empty nor the ``N/A`` sentinel."""
    return bool(value) and not is_not_applicable(value)


class SuggestionOrigin(str, Enum):
    """Which phase produced a row's suggestion."""

    KNOWLEDGE = "knowledge"
    PROVIDER = "provider"
    NONE = "none"


class MappingRow(BaseModel):
    """Mapping state of one source column."""

    source_header: str
    position: int
    selected_target: str = ""
    suggested_target: Optional[str] = None
    suggestion_origin: SuggestionOrigin = SuggestionOrigin.NONE
    is_duplicate: bool = False
    is_transient_highlight: bool = False

    @property
    def is_unresolved(self) -> bool:
        """Rows left empty or set to ``N/A`` are eligible for suggestions."""
        return not is_definite(self.selected_target)


class MappingState(BaseModel):
    """Arena of mapping rows keyed by source header, in column order."""

    rows: dict[str, MappingRow] = Field(default_factory=dict)


class SourceLoaded(BaseModel):
    """A new source file replaced every row."""

    kind: Literal["source_loaded"] = "source_loaded"
    headers: list[str]


class TargetSelected(BaseModel):
    """The user picked a target (or cleared/N/A'd the row)."""

    kind: Literal["target_selected"] = "target_selected"
    source_header: str
    target: str


class SuggestionAccepted(BaseModel):
    """An automated phase assigned a value."""

    kind: Literal["suggestion_accepted"] = "suggestion_accepted"
    source_header: str
    target: str
    origin: SuggestionOrigin


class HighlightExpired(BaseModel):
    """The display window of an automated assignment is over."""

    kind: Literal["highlight_expired"] = "highlight_expired"
    source_header: str


MappingEvent = Union[SourceLoaded, TargetSelected, SuggestionAccepted, HighlightExpired]


class NoSourceLoadedError(Exception):
    """Raised when an operation needs a parsed source file."""

    pass


class UnknownSourceHeaderError(KeyError):
    """Raised when an event names a header that has no mapping row."""

    pass


class UnknownTargetError(ValueError):
    """Raised when a manual selection names a target outside the catalog."""

    pass
