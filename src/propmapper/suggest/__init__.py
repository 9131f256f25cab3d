"""Knowledge- and provider-based mapping suggestions."""

from .models import (
    SuggestedAssignment,
    SuggestionReport,
    SuggestionProviderError,
    ProviderUnavailableError,
)
from .prompts import SUGGESTION_SYSTEM_PROMPT, MAPPING_INSTRUCTION, build_mapping_prompt
from .provider import SuggestionProvider, parse_suggestions, strip_code_fence
from .orchestrator import SuggestionOrchestrator

__all__ = [
    "SuggestedAssignment",
    "SuggestionReport",
    "SuggestionProviderError",
    "ProviderUnavailableError",
    "SUGGESTION_SYSTEM_PROMPT",
    "MAPPING_INSTRUCTION",
    "build_mapping_prompt",
    "SuggestionProvider",
    "parse_suggestions",
    "strip_code_fence",
    "SuggestionOrchestrator",
]
