"""Data models and errors for the suggestion phases."""

from typing import Optional

from pydantic import BaseModel, Field

from ..mapping import SuggestionOrigin


class SuggestedAssignment(BaseModel):
    """One automated assignment made during a run."""

    source_header: str
    target: str
    origin: SuggestionOrigin


class SuggestionReport(BaseModel):
    """Outcome of one suggestion run."""

    knowledge_phase_ran: bool = False
    provider_phase_ran: bool = False
    assignments: list[SuggestedAssignment] = Field(default_factory=list)
    unresolved: list[str] = Field(default_factory=list)
    provider_error: Optional[str] = None

    def by_origin(self, origin: SuggestionOrigin) -> list[SuggestedAssignment]:
        return [a for a in self.assignments if a.origin == origin]


class SuggestionProviderError(Exception):
    """Raised when the provider phase fails; knowledge-phase results are kept."""

    def __init__(self, message: str, report: Optional[SuggestionReport] = None):
        self.report = report
        super().__init__(message)


class ProviderUnavailableError(SuggestionProviderError):
    """Raised when no suggestion provider is configured."""

    pass
