"""Anthropic LLM provider adapter.

Wraps the ``anthropic`` async client to implement :class:`ILLMProvider`.

Differences from the OpenAI adapter:
    - Uses the Messages API rather than chat.completions
    - The system prompt is a top-level parameter, not a message
    - Response content is a list of blocks; only text blocks are joined
"""

from __future__ import annotations

import anthropic
import structlog

from docprocessor.config.settings import Settings
from docprocessor.interfaces.llm_provider import ILLMProvider
from docprocessor.utils.errors import LLMError, ProviderUnavailableError

logger = structlog.get_logger(logger_name=__name__)

_TIMEOUT_SECONDS = 60.0
_MAX_RETRIES = 2


class AnthropicLLMProvider(ILLMProvider):
    """LLM provider backed by the Anthropic Claude API.

    The model defaults to ``claude-sonnet-4-20250514`` and can be changed
    with ``ANTHROPIC_MODEL``.
    """

    def __init__(self, settings: Settings) -> None:
        self._api_key = settings.anthropic_api_key
        self._client: anthropic.AsyncAnthropic | None = None
        self._model = settings.anthropic_model

    # ------------------------------------------------------------------
    # ILLMProvider implementation
    # ------------------------------------------------------------------

    async def complete(
        self,
        system_prompt: str,
        user_prompt: str,
        temperature: float = 0.0,
        max_tokens: int = 2000,
    ) -> str:
        try:
            response = await self._get_client().messages.create(
                model=self._model,
                max_tokens=max_tokens,
                system=system_prompt,
                messages=[{"role": "user", "content": user_prompt}],
                temperature=temperature,
            )
        except anthropic.AuthenticationError as exc:
            raise LLMError(
                message="Anthropic rejected the API key (check ANTHROPIC_API_KEY)",
                provider_name=self.get_provider_name(),
            ) from exc
        except anthropic.RateLimitError as exc:
            raise LLMError(
                message=f"Anthropic rate limit reached: {exc}",
                provider_name=self.get_provider_name(),
            ) from exc
        except anthropic.APIError as exc:
            raise LLMError(
                message=f"Anthropic API error: {exc}",
                provider_name=self.get_provider_name(),
            ) from exc

        text_blocks = [block.text for block in response.content if block.type == "text"]
        if not text_blocks:
            raise LLMError(
                message="Anthropic returned no text content",
                provider_name=self.get_provider_name(),
            )
        if response.stop_reason == "max_tokens":
            # A cut-off answer usually means an unterminated JSON array.
            logger.warning("anthropic_output_truncated", model=self._model, max_tokens=max_tokens)
        logger.info(
            "anthropic_completion",
            model=self._model,
            input_tokens=response.usage.input_tokens,
            output_tokens=response.usage.output_tokens,
        )
        return "\n".join(text_blocks)

    def is_available(self) -> bool:
        """Return ``True`` if an Anthropic API key is configured."""
        return bool(self._api_key)

    def get_provider_name(self) -> str:
        return "anthropic"

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _get_client(self) -> anthropic.AsyncAnthropic:
        if not self.is_available():
            raise ProviderUnavailableError(
                "ANTHROPIC_API_KEY is not configured",
                provider_name=self.get_provider_name(),
            )
        if self._client is None:
            self._client = anthropic.AsyncAnthropic(
                api_key=self._api_key,
                timeout=_TIMEOUT_SECONDS,
                max_retries=_MAX_RETRIES,
            )
        return self._client
