"""Generative-text suggestion provider."""

import json
import logging
import re

import anthropic
import httpx

from ..llm import LLMClient
from .models import SuggestionProviderError
from .prompts import SUGGESTION_SYSTEM_PROMPT, build_mapping_prompt

logger = logging.getLogger(__name__)

_FENCE_PATTERN = re.compile(r"^```(\w*)?\s*\n?(.*?)\n?\s*```$", re.DOTALL)


def strip_code_fence(text: str) -> str:
    """Remove a surrounding markdown code fence, if any."""
    text = text.strip()
    match = _FENCE_PATTERN.match(text)
    if match and match.group(2):
        return match.group(2).strip()
    return text


def parse_suggestions(text: str) -> dict[str, str]:
    """
    Parse the provider's ``{source header: target}`` JSON object.

    Non-string values are dropped.

    Raises:
        SuggestionProviderError: If the text is not a JSON object
    """
    payload = strip_code_fence(text or "")
    try:
        data = json.loads(payload)
    except json.JSONDecodeError as e:
        snippet = payload[:200]
        raise SuggestionProviderError(
            f"Provider response is not valid JSON ({e}). Snippet: {snippet!r}"
        ) from e

    if not isinstance(data, dict):
        raise SuggestionProviderError(
            f"Provider response must be a JSON object, got {type(data).__name__}"
        )
    return {str(k): v for k, v in data.items() if isinstance(v, str)}


class SuggestionProvider:
    """Asks an LLM for a one-to-one header to target mapping."""

    def __init__(self, client: LLMClient, model: str, max_tokens: int = 2048):
        self.client = client
        self.model = model
        self.max_tokens = max_tokens

    async def suggest(self, source_headers: list[str], target_names: list[str]) -> dict[str, str]:
        """
        Request suggestions for one batch of headers.

        Args:
            source_headers: Headers still lacking a selection
            target_names: Targets not yet claimed by any row

        Returns:
            Mapping of source header to proposed target (or "N/A")

        Raises:
            SuggestionProviderError: On transport failure or an unparsable answer
        """
        prompt = build_mapping_prompt(source_headers, target_names)
        logger.info(
            f"Requesting suggestions for {len(source_headers)} headers "
            f"against {len(target_names)} targets"
        )
        try:
            response = await self.client.create_message(
                messages=[{"role": "user", "content": prompt}],
                system=SUGGESTION_SYSTEM_PROMPT,
                max_tokens=self.max_tokens,
                model=self.model,
            )
        except (httpx.HTTPError, anthropic.APIError) as e:
            raise SuggestionProviderError(f"Suggestion provider request failed: {e}") from e
        except (KeyError, IndexError, TypeError, ValueError) as e:
            raise SuggestionProviderError(f"Malformed suggestion provider response: {e}") from e

        if response.usage:
            logger.debug(
                f"Provider usage: {response.usage.get('input_tokens', 0)} in, "
                f"{response.usage.get('output_tokens', 0)} out"
            )
        return parse_suggestions(response.text)
