"""OpenRouter LLM client."""

from typing import Optional

import httpx

from .base import LLMClient, LLMResponse


class OpenRouterClient(LLMClient):
    """OpenRouter HTTP API client."""

    def __init__(
        self,
        api_key: str,
        base_url: str = "https://openrouter.ai/api/v1",
        timeout: float = 60.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.api_key = api_key
        self.base_url = base_url
        self.timeout = timeout
        self._transport = transport

    async def create_message(
        self,
        messages: list[dict],
        system: str,
        max_tokens: int,
        model: str,
    ) -> LLMResponse:
        """Create a message via OpenRouter API."""
        headers = {
            "Authorization": f"Bearer {self.api_key}",
            "Content-Type": "application/json",
            "X-Title": "PropMapper",
        }

        payload = {
            "model": model,
            "messages": self._convert_messages(messages, system),
            "max_tokens": max_tokens,
        }

        async with httpx.AsyncClient(timeout=self.timeout, transport=self._transport) as client:
            response = await client.post(
                f"{self.base_url}/chat/completions",
                headers=headers,
                json=payload,
            )
            response.raise_for_status()
            data = response.json()

        return self._convert_response(data)

    def _convert_messages(self, messages: list[dict], system: str) -> list[dict]:
        """Chat messages with the system prompt first and text blocks flattened."""
        converted = [{"role": "system", "content": system}] if system else []
        for msg in messages:
            content = msg["content"]
            if isinstance(content, list):
                content = " ".join(
                    block.get("text", "")
                    for block in content
                    if isinstance(block, dict) and block.get("type") == "text"
                )
            converted.append({"role": msg["role"], "content": content})
        return converted

    def _convert_response(self, data: dict) -> LLMResponse:
        """Convert a chat completion into an LLMResponse.

        Raises:
            ValueError: If the body carries no completion choice
        """
        choices = data.get("choices") if isinstance(data, dict) else None
        if not choices or not isinstance(choices[0], dict):
            detail = data.get("error") if isinstance(data, dict) else None
            raise ValueError(f"OpenRouter returned no completion: {detail or data!r}")

        choice = choices[0]
        text = (choice.get("message") or {}).get("content")
        content = [{"type": "text", "text": text}] if text else []

        usage = None
        if data.get("usage"):
            usage = {
                "input_tokens": data["usage"].get("prompt_tokens", 0),
                "output_tokens": data["usage"].get("completion_tokens", 0),
            }

        return LLMResponse(
            content=content,
            stop_reason=choice.get("finish_reason") or "stop",
            usage=usage,
        )
