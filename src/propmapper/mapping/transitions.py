"""Pure state transitions for the mapping table."""

from .models import (
    HighlightExpired,
    MappingEvent,
    MappingRow,
    MappingState,
    SourceLoaded,
    SuggestionAccepted,
    TargetSelected,
    UnknownSourceHeaderError,
    is_definite,
)


def mark_duplicates(state: MappingState) -> bool:
    """
    Flag every row whose definite selection is shared by two or more rows.

    Mutates ``state`` in place and returns whether any duplicate exists.
    """
    counts: dict[str, int] = {}
    for row in state.rows.values():
        if is_definite(row.selected_target):
            counts[row.selected_target] = counts.get(row.selected_target, 0) + 1

    found = False
    for row in state.rows.values():
        row.is_duplicate = is_definite(row.selected_target) and counts[row.selected_target] > 1
        found = found or row.is_duplicate
    return found


def _row(state: MappingState, header: str) -> MappingRow:
    try:
        return state.rows[header]
    except KeyError:
        raise UnknownSourceHeaderError(header) from None


def transition(state: MappingState, event: MappingEvent) -> MappingState:
    """Return the state that results from applying ``event`` to ``state``.

    The input state is never modified.
    """
    if isinstance(event, SourceLoaded):
        return MappingState(
            rows={
                header: MappingRow(source_header=header, position=i)
                for i, header in enumerate(event.headers)
            }
        )

    new_state = state.model_copy(deep=True)

    if isinstance(event, TargetSelected):
        row = _row(new_state, event.source_header)
        row.selected_target = event.target
        row.is_transient_highlight = False
    elif isinstance(event, SuggestionAccepted):
        row = _row(new_state, event.source_header)
        row.selected_target = event.target
        row.suggested_target = event.target
        row.suggestion_origin = event.origin
        row.is_transient_highlight = True
    elif isinstance(event, HighlightExpired):
        row = _row(new_state, event.source_header)
        row.is_transient_highlight = False
        return new_state
    else:
        raise TypeError(f"Unsupported mapping event: {event!r}")

    mark_duplicates(new_state)
    return new_state
