"""LLM provider implementations.

AnthropicLLMProvider and OpenAILLMProvider both implement ILLMProvider and
are consumed only by LLMKeyValueExtractor.
"""

from docprocessor.providers.llm.anthropic_provider import AnthropicLLMProvider
from docprocessor.providers.llm.openai_provider import OpenAILLMProvider

__all__ = ["AnthropicLLMProvider", "OpenAILLMProvider"]
