"""Tests for OpenRouter client."""

import json

import httpx
import pytest

from propmapper.llm.openrouter_client import OpenRouterClient


class TestOpenRouterClient:
    """Tests for OpenRouterClient."""

    def test_convert_messages_adds_system_prompt(self):
        """Test that the system prompt becomes the first message."""
        client = OpenRouterClient(api_key="test-key")

        result = client._convert_messages([{"role": "user", "content": "Map these"}], "Be brief")

        assert result == [
            {"role": "system", "content": "Be brief"},
            {"role": "user", "content": "Map these"},
        ]

    def test_convert_messages_flattens_text_blocks(self):
        """Test that Anthropic-style text blocks are joined."""
        client = OpenRouterClient(api_key="test-key")
        messages = [
            {
                "role": "user",
                "content": [
                    {"type": "text", "text": "first"},
                    {"type": "image"},
                    {"type": "text", "text": "second"},
                ],
            }
        ]

        result = client._convert_messages(messages, "")

        assert result == [{"role": "user", "content": "first second"}]

    def test_convert_response(self):
        """Test conversion of a chat completion into an LLMResponse."""
        client = OpenRouterClient(api_key="test-key")
        data = {
            "choices": [{"message": {"content": '{"Tag": "Tag Number"}'}, "finish_reason": "length"}],
            "usage": {"prompt_tokens": 12, "completion_tokens": 7},
        }

        response = client._convert_response(data)

        assert response.text == '{"Tag": "Tag Number"}'
        assert response.stop_reason == "length"
        assert response.usage == {"input_tokens": 12, "output_tokens": 7}

    def test_convert_response_without_content(self):
        """Test that an empty message yields no text."""
        client = OpenRouterClient(api_key="test-key")

        response = client._convert_response({"choices": [{"message": {"content": None}}]})

        assert response.content == []
        assert response.stop_reason == "stop"
        assert response.usage is None

    @pytest.mark.asyncio
    async def test_create_message_posts_chat_completion(self):
        """Test the request sent to the chat completions endpoint."""
        seen = {}

        def handler(request: httpx.Request) -> httpx.Response:
            seen["url"] = str(request.url)
            seen["auth"] = request.headers["Authorization"]
            seen["body"] = json.loads(request.content)
            return httpx.Response(
                200,
                json={"choices": [{"message": {"content": "{}"}, "finish_reason": "stop"}]},
            )

        client = OpenRouterClient(
            api_key="test-key",
            base_url="http://openrouter.test/api/v1",
            transport=httpx.MockTransport(handler),
        )

        response = await client.create_message(
            messages=[{"role": "user", "content": "hi"}],
            system="sys",
            max_tokens=256,
            model="vendor/model",
        )

        assert response.text == "{}"
        assert seen["url"] == "http://openrouter.test/api/v1/chat/completions"
        assert seen["auth"] == "Bearer test-key"
        assert seen["body"]["model"] == "vendor/model"
        assert seen["body"]["max_tokens"] == 256
        assert seen["body"]["messages"][0] == {"role": "system", "content": "sys"}

    @pytest.mark.asyncio
    async def test_create_message_raises_on_http_error(self):
        """Test that HTTP errors propagate to the caller."""
        client = OpenRouterClient(
            api_key="test-key",
            transport=httpx.MockTransport(lambda request: httpx.Response(429)),
        )

        with pytest.raises(httpx.HTTPStatusError):
            await client.create_message(
                messages=[{"role": "user", "content": "hi"}],
                system="",
                max_tokens=16,
                model="vendor/model",
            )

    def test_convert_response_without_choices_raises(self):
        """Test that an error body is rejected instead of indexed."""
        client = OpenRouterClient(api_key="test-key")

        with pytest.raises(ValueError, match="rate limited"):
            client._convert_response({"error": {"message": "rate limited"}})

    @pytest.mark.asyncio
    async def test_error_body_becomes_provider_error(self):
        """Test that a 200 reply without choices surfaces as a provider error."""
        from propmapper.suggest import SuggestionProvider, SuggestionProviderError

        client = OpenRouterClient(
            api_key="test-key",
            transport=httpx.MockTransport(
                lambda request: httpx.Response(200, json={"error": {"message": "overloaded"}})
            ),
        )
        provider = SuggestionProvider(client, model="vendor/model")

        with pytest.raises(SuggestionProviderError, match="overloaded"):
            await provider.suggest(["Tag"], ["Tag Number"])

    @pytest.mark.asyncio
    async def test_non_json_body_becomes_provider_error(self):
        """Test that an unparsable HTTP body surfaces as a provider error."""
        from propmapper.suggest import SuggestionProvider, SuggestionProviderError

        client = OpenRouterClient(
            api_key="test-key",
            transport=httpx.MockTransport(
                lambda request: httpx.Response(200, text="<html>gateway</html>")
            ),
        )
        provider = SuggestionProvider(client, model="vendor/model")

        with pytest.raises(SuggestionProviderError):
            await provider.suggest(["Tag"], ["Tag Number"])
