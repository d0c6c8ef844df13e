"""LLM provider adapters (OpenAI, Anthropic, Ollama)."""

from ragingest.providers.llm.anthropic_provider import AnthropicLLMProvider
from ragingest.providers.llm.ollama_provider import OllamaLLMProvider
from ragingest.providers.llm.openai_provider import OpenAILLMProvider

__all__ = ["AnthropicLLMProvider", "OllamaLLMProvider", "OpenAILLMProvider"]
