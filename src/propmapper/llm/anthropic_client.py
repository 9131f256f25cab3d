"""Anthropic LLM client."""

from typing import Optional

from anthropic import AsyncAnthropic

from .base import LLMClient, LLMResponse


class AnthropicClient(LLMClient):
    """Async Claude client; failed requests are not retried."""

    def __init__(self, api_key: str, timeout: Optional[float] = None):
        kwargs = {"api_key": api_key, "max_retries": 0}
        if timeout is not None:
            kwargs["timeout"] = timeout
        self.client = AsyncAnthropic(**kwargs)

    async def create_message(
        self,
        messages: list[dict],
        system: str,
        max_tokens: int,
        model: str,
    ) -> LLMResponse:
        """Send one message and wait for the full reply."""
        response = await self.client.messages.create(
            model=model,
            max_tokens=max_tokens,
            system=system,
            messages=messages,
        )

        usage = None
        if response.usage is not None:
            usage = {
                "input_tokens": response.usage.input_tokens,
                "output_tokens": response.usage.output_tokens,
            }
        return LLMResponse(content=response.content, stop_reason=response.stop_reason, usage=usage)
