"""Startup-time selection of the key-value extraction backend.

``AI_PROVIDER`` names the backend.  A model backend whose API key is
missing is silently replaced by the deterministic mock; this is the only
substitution in the extraction layer.  Once built, the extractor is fixed
for the lifetime of the process.
"""

from __future__ import annotations

from docprocessor.config.settings import Settings
from docprocessor.interfaces.key_value_extractor import IKeyValueExtractor
from docprocessor.models.document import ProcessingMethod
from docprocessor.providers.extraction.llm_extractor import LLMKeyValueExtractor
from docprocessor.providers.extraction.mock_extractor import MockKeyValueExtractor
from docprocessor.providers.llm.anthropic_provider import AnthropicLLMProvider
from docprocessor.providers.llm.openai_provider import OpenAILLMProvider
from docprocessor.utils.logging import get_logger

logger = get_logger(__name__)


def build_key_value_extractor(settings: Settings) -> IKeyValueExtractor:
    """Return the extractor selected by *settings*.

    Unknown provider names fall through to the mock, as does a known
    provider without credentials (logged as a warning).
    """
    provider = settings.ai_provider
    logger.info("ai_provider_selected", requested=provider or "mock")

    if provider == "anthropic":
        if settings.anthropic_api_key:
            return LLMKeyValueExtractor(
                llm=AnthropicLLMProvider(settings=settings),
                processing_method=ProcessingMethod.ANTHROPIC,
            )
        logger.warning(
            "ai_provider_credentials_missing",
            provider="anthropic",
            fallback="mock",
        )
        return MockKeyValueExtractor()

    if provider == "openai":
        if settings.openai_api_key:
            return LLMKeyValueExtractor(
                llm=OpenAILLMProvider(settings=settings),
                processing_method=ProcessingMethod.OPENAI,
            )
        logger.warning(
            "ai_provider_credentials_missing",
            provider="openai",
            fallback="mock",
        )
        return MockKeyValueExtractor()

    if provider != "mock":
        logger.warning("ai_provider_unknown", provider=provider, fallback="mock")
    return MockKeyValueExtractor()
