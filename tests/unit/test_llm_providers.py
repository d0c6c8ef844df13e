"""Unit tests for LLM provider adapters: OpenAI, Anthropic, Ollama."""

from __future__ import annotations

from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from ragingest.config.settings import Settings
from ragingest.utils.errors import LLMError


def _settings(**overrides) -> Settings:
    defaults = {
        "openai_api_key": "sk-test",
        "openai_base_url": "",
        "openai_text_model": "",
        "openai_vision_model": "",
        "anthropic_api_key": "test-anthropic",
        "anthropic_model": "",
        "ollama_base_url": "http://localhost:11434",
    }
    defaults.update(overrides)
    return Settings(_env_file=None, **defaults)


def _chat_response(content) -> MagicMock:  # noqa: ANN001
    response = MagicMock()
    response.choices = [MagicMock(message=MagicMock(content=content))]
    response.usage = MagicMock(total_tokens=100)
    return response


# ======================================================================
# Media type sniffing
# ======================================================================


class TestResolveMediaType:
    def test_declared_image_type_wins(self) -> None:
        from ragingest.providers.llm.openai_provider import resolve_media_type

        assert resolve_media_type(b"\x89PNG\r\n\x1a\n", "image/webp") == "image/webp"

    @pytest.mark.parametrize(
        ("data", "expected"),
        [
            (b"\x89PNG\r\n\x1a\n....", "image/png"),
            (b"RIFF\x00\x00\x00\x00WEBPVP8 ", "image/webp"),
            (b"GIF89a....", "image/gif"),
            (b"\xff\xd8\xff\xe0....", "image/jpeg"),
            (b"unknown", "image/jpeg"),
        ],
    )
    def test_sniffed_from_magic_bytes(self, data: bytes, expected: str) -> None:
        from ragingest.providers.llm.openai_provider import resolve_media_type

        assert resolve_media_type(data, "application/octet-stream") == expected


# ======================================================================
# OpenAI LLM Provider
# ======================================================================


class TestOpenAILLMProvider:
    @pytest.fixture()
    def settings(self) -> Settings:
        return _settings()

    def test_provider_name_and_vision(self, settings: Settings) -> None:
        from ragingest.providers.llm.openai_provider import OpenAILLMProvider

        provider = OpenAILLMProvider(settings)
        assert provider.get_provider_name() == "openai"
        assert provider.supports_vision() is True
        assert provider.is_available() is True

    def test_custom_endpoint_without_vision_model(self) -> None:
        from ragingest.providers.llm.openai_provider import OpenAILLMProvider

        provider = OpenAILLMProvider(_settings(openai_base_url="https://api.together.xyz/v1"))
        assert provider.get_provider_name() == "openai-compatible"
        assert provider.supports_vision() is False

    def test_is_available_without_key(self) -> None:
        from ragingest.providers.llm.openai_provider import OpenAILLMProvider

        assert OpenAILLMProvider(_settings(openai_api_key="")).is_available() is False

    @pytest.mark.asyncio
    async def test_complete_success(self, settings: Settings) -> None:
        from ragingest.providers.llm.openai_provider import OpenAILLMProvider

        mock_client = AsyncMock()
        mock_client.chat.completions.create = AsyncMock(return_value=_chat_response("LLM response text"))

        with patch("ragingest.providers.llm.openai_provider.openai.AsyncOpenAI", return_value=mock_client):
            provider = OpenAILLMProvider(settings)
            result = await provider.complete("system prompt", "user prompt")

        assert result == "LLM response text"
        kwargs = mock_client.chat.completions.create.call_args.kwargs
        assert kwargs["model"] == "gpt-4o-mini"
        assert kwargs["messages"][0] == {"role": "system", "content": "system prompt"}

    @pytest.mark.asyncio
    async def test_complete_decodes_list_content(self, settings: Settings) -> None:
        from ragingest.providers.llm.openai_provider import OpenAILLMProvider

        parts = [{"type": "text", "text": "Hello "}, {"type": "text", "text": "world"}]
        mock_client = AsyncMock()
        mock_client.chat.completions.create = AsyncMock(return_value=_chat_response(parts))

        with patch("ragingest.providers.llm.openai_provider.openai.AsyncOpenAI", return_value=mock_client):
            result = await OpenAILLMProvider(settings).complete("s", "u")

        assert result == "Hello world"

    @pytest.mark.asyncio
    async def test_complete_empty_response_raises(self, settings: Settings) -> None:
        from ragingest.providers.llm.openai_provider import OpenAILLMProvider

        mock_client = AsyncMock()
        mock_client.chat.completions.create = AsyncMock(return_value=_chat_response(None))

        with patch("ragingest.providers.llm.openai_provider.openai.AsyncOpenAI", return_value=mock_client):
            with pytest.raises(LLMError, match="empty response"):
                await OpenAILLMProvider(settings).complete("s", "u")

    @pytest.mark.asyncio
    async def test_complete_api_error_raises_llm_error(self, settings: Settings) -> None:
        import openai

        from ragingest.providers.llm.openai_provider import OpenAILLMProvider

        mock_client = AsyncMock()
        mock_client.chat.completions.create = AsyncMock(
            side_effect=openai.APIError(message="Rate limit exceeded", request=MagicMock(), body=None)
        )

        with patch("ragingest.providers.llm.openai_provider.openai.AsyncOpenAI", return_value=mock_client):
            with pytest.raises(LLMError) as exc_info:
                await OpenAILLMProvider(settings).complete("system", "user")

        assert exc_info.value.provider_name == "openai"

    @pytest.mark.asyncio
    async def test_vision_extract_sends_data_uri(self, settings: Settings) -> None:
        from ragingest.providers.llm.openai_provider import OpenAILLMProvider

        mock_client = AsyncMock()
        mock_client.chat.completions.create = AsyncMock(return_value=_chat_response("INVOICE 42"))

        with patch("ragingest.providers.llm.openai_provider.openai.AsyncOpenAI", return_value=mock_client):
            result = await OpenAILLMProvider(settings).vision_extract(b"\xff\xd8\xff", "Extract text", "image/jpeg")

        assert result == "INVOICE 42"
        content = mock_client.chat.completions.create.call_args.kwargs["messages"][0]["content"]
        assert content[0] == {"type": "text", "text": "Extract text"}
        assert content[1]["image_url"]["url"].startswith("data:image/jpeg;base64,")

    @pytest.mark.asyncio
    async def test_vision_unsupported_raises(self) -> None:
        from ragingest.providers.llm.openai_provider import OpenAILLMProvider

        provider = OpenAILLMProvider(_settings(openai_base_url="https://api.together.xyz/v1"))
        with pytest.raises(LLMError, match="Vision not supported"):
            await provider.vision_extract(b"img", "prompt", "image/png")

    @pytest.mark.asyncio
    async def test_missing_key_builds_no_client(self) -> None:
        from ragingest.providers.llm.openai_provider import OpenAILLMProvider

        with patch("ragingest.providers.llm.openai_provider.openai.AsyncOpenAI") as client_cls:
            provider = OpenAILLMProvider(_settings(openai_api_key=""))

        client_cls.assert_not_called()
        assert provider.is_available() is False
        with pytest.raises(LLMError, match="no API key configured"):
            await provider.complete("system", "user")


# ======================================================================
# Anthropic LLM Provider
# ======================================================================


class TestAnthropicLLMProvider:
    @pytest.fixture()
    def settings(self) -> Settings:
        return _settings()

    def test_basics(self, settings: Settings) -> None:
        from ragingest.providers.llm.anthropic_provider import AnthropicLLMProvider

        provider = AnthropicLLMProvider(settings)
        assert provider.get_provider_name() == "anthropic"
        assert provider.supports_vision() is True
        assert provider.is_available() is True
        assert AnthropicLLMProvider(_settings(anthropic_api_key="")).is_available() is False

    @pytest.mark.asyncio
    async def test_complete_joins_text_blocks(self, settings: Settings) -> None:
        from ragingest.providers.llm.anthropic_provider import AnthropicLLMProvider

        text_block = MagicMock(type="text", text="Anthropic response")
        other_block = MagicMock(type="tool_use", text=None)
        mock_response = MagicMock()
        mock_response.content = [other_block, text_block]
        mock_response.usage = MagicMock(input_tokens=50, output_tokens=50)

        mock_client = AsyncMock()
        mock_client.messages.create = AsyncMock(return_value=mock_response)

        with patch("ragingest.providers.llm.anthropic_provider.anthropic.AsyncAnthropic", return_value=mock_client):
            result = await AnthropicLLMProvider(settings).complete("system", "user")

        assert result == "Anthropic response"
        kwargs = mock_client.messages.create.call_args.kwargs
        assert kwargs["system"] == "system"
        assert kwargs["model"] == "claude-sonnet-4-20250514"

    @pytest.mark.asyncio
    async def test_vision_puts_image_first(self, settings: Settings) -> None:
        from ragingest.providers.llm.anthropic_provider import AnthropicLLMProvider

        mock_response = MagicMock()
        mock_response.content = [MagicMock(type="text", text="A cat on a sofa")]
        mock_response.usage = MagicMock(input_tokens=10, output_tokens=5)
        mock_client = AsyncMock()
        mock_client.messages.create = AsyncMock(return_value=mock_response)

        with patch("ragingest.providers.llm.anthropic_provider.anthropic.AsyncAnthropic", return_value=mock_client):
            result = await AnthropicLLMProvider(settings).vision_extract(b"GIF89a..", "Describe", "image/gif")

        assert result == "A cat on a sofa"
        content = mock_client.messages.create.call_args.kwargs["messages"][0]["content"]
        assert content[0]["type"] == "image"
        assert content[0]["source"]["media_type"] == "image/gif"
        assert content[1] == {"type": "text", "text": "Describe"}

    @pytest.mark.asyncio
    async def test_unsupported_declared_type_is_resniffed(self, settings: Settings) -> None:
        from ragingest.providers.llm.anthropic_provider import AnthropicLLMProvider

        mock_response = MagicMock()
        mock_response.content = [MagicMock(type="text", text="scan text")]
        mock_client = AsyncMock()
        mock_client.messages.create = AsyncMock(return_value=mock_response)

        with patch("ragingest.providers.llm.anthropic_provider.anthropic.AsyncAnthropic", return_value=mock_client):
            await AnthropicLLMProvider(settings).vision_extract(
                b"\x89PNG\r\n\x1a\nrest", "Extract", "image/tiff"
            )

        content = mock_client.messages.create.call_args.kwargs["messages"][0]["content"]
        assert content[0]["source"]["media_type"] == "image/png"

    @pytest.mark.asyncio
    async def test_no_text_blocks_raises(self, settings: Settings) -> None:
        from ragingest.providers.llm.anthropic_provider import AnthropicLLMProvider

        mock_response = MagicMock()
        mock_response.content = []
        mock_client = AsyncMock()
        mock_client.messages.create = AsyncMock(return_value=mock_response)

        with patch("ragingest.providers.llm.anthropic_provider.anthropic.AsyncAnthropic", return_value=mock_client):
            with pytest.raises(LLMError, match="no text content"):
                await AnthropicLLMProvider(settings).complete("s", "u")


# ======================================================================
# Ollama LLM Provider
# ======================================================================


class TestOllamaLLMProvider:
    def test_basics(self) -> None:
        from ragingest.providers.llm.ollama_provider import OllamaLLMProvider

        provider = OllamaLLMProvider(_settings())
        assert provider.get_provider_name() == "ollama"
        assert provider.is_available() is True
        assert OllamaLLMProvider(_settings(ollama_base_url="")).is_available() is False

    @pytest.mark.asyncio
    async def test_complete_uses_v1_endpoint(self) -> None:
        from ragingest.providers.llm.ollama_provider import OllamaLLMProvider

        mock_client = AsyncMock()
        mock_client.chat.completions.create = AsyncMock(return_value=_chat_response("local answer"))

        with patch(
            "ragingest.providers.llm.ollama_provider.openai.AsyncOpenAI", return_value=mock_client
        ) as factory:
            result = await OllamaLLMProvider(_settings()).complete("s", "u")

        assert result == "local answer"
        assert factory.call_args.kwargs["base_url"] == "http://localhost:11434/v1"
        assert mock_client.chat.completions.create.call_args.kwargs["model"] == "llama3.1"

    @pytest.mark.asyncio
    async def test_vision_uses_llava(self) -> None:
        from ragingest.providers.llm.ollama_provider import OllamaLLMProvider

        mock_client = AsyncMock()
        mock_client.chat.completions.create = AsyncMock(return_value=_chat_response("RECEIPT 7"))

        with patch("ragingest.providers.llm.ollama_provider.openai.AsyncOpenAI", return_value=mock_client):
            provider = OllamaLLMProvider(_settings())
            result = await provider.vision_extract(b"\x89PNG\r\n\x1a\nrest", "Extract text", "")

        assert result == "RECEIPT 7"
        assert provider.supports_vision() is True
        kwargs = mock_client.chat.completions.create.call_args.kwargs
        assert kwargs["model"] == "llava"
        image_part = kwargs["messages"][0]["content"][1]
        assert image_part["image_url"]["url"].startswith("data:image/png;base64,")

    def test_unconfigured_server_is_unavailable(self) -> None:
        from ragingest.providers.llm.ollama_provider import OllamaLLMProvider

        with patch("ragingest.providers.llm.ollama_provider.openai.AsyncOpenAI"):
            provider = OllamaLLMProvider(_settings(ollama_base_url=""))

        assert provider.is_available() is False
