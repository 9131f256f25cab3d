"""Mapping rows, their pure transitions and the assignment resolver."""

from .models import (
    NOT_APPLICABLE,
    is_not_applicable,
    is_definite,
    SuggestionOrigin,
    MappingRow,
    MappingState,
    SourceLoaded,
    TargetSelected,
    SuggestionAccepted,
    HighlightExpired,
    MappingEvent,
    NoSourceLoadedError,
    UnknownSourceHeaderError,
    UnknownTargetError,
)
from .transitions import transition, mark_duplicates
from .resolver import AssignmentResolver, DUPLICATE_TARGETS_MESSAGE
from .highlight import HighlightScheduler

__all__ = [
    "NOT_APPLICABLE",
    "is_not_applicable",
    "is_definite",
    "SuggestionOrigin",
    "MappingRow",
    "MappingState",
    "SourceLoaded",
    "TargetSelected",
    "SuggestionAccepted",
    "HighlightExpired",
    "MappingEvent",
    "NoSourceLoadedError",
    "UnknownSourceHeaderError",
    "UnknownTargetError",
    "transition",
    "mark_duplicates",
    "AssignmentResolver",
    "DUPLICATE_TARGETS_MESSAGE",
    "HighlightScheduler",
]
