"""OpenAI-compatible LLM provider adapter.

Wraps the ``openai`` async client to implement :class:`ILLMProvider`.  When
``OPENAI_BASE_URL`` is set the client talks to that endpoint instead, so any
OpenAI-compatible service (TogetherAI, Groq, a local gateway) can serve as
the second model backend.
"""

from __future__ import annotations

import openai
import structlog

from docprocessor.config.settings import Settings
from docprocessor.interfaces.llm_provider import ILLMProvider
from docprocessor.utils.errors import LLMError, ProviderUnavailableError

logger = structlog.get_logger(logger_name=__name__)

_DEFAULT_TEXT_MODEL = "gpt-4o-mini"
_TIMEOUT_SECONDS = 60.0


class OpenAILLMProvider(ILLMProvider):
    """LLM provider backed by an OpenAI-compatible chat completions API.

    The SDK client is built on first use: ``openai.AsyncOpenAI`` refuses an
    empty key, and an unconfigured provider must still answer
    :meth:`is_available`.
    """

    def __init__(self, settings: Settings) -> None:
        self._api_key = settings.openai_api_key
        self._base_url = settings.openai_base_url
        self._client: openai.AsyncOpenAI | None = None
        self._text_model = settings.openai_text_model or _DEFAULT_TEXT_MODEL
        # Shows up in logs and error messages only.
        self._provider_label = "openai-compatible" if settings.openai_base_url else "openai"

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
            response = await self._get_client().chat.completions.create(
                model=self._text_model,
                messages=[
                    {"role": "system", "content": system_prompt},
                    {"role": "user", "content": user_prompt},
                ],
                temperature=temperature,
                max_tokens=max_tokens,
            )
        except openai.APITimeoutError as exc:
            raise LLMError(
                message=f"{self._provider_label} timed out after {_TIMEOUT_SECONDS:.0f}s",
                provider_name=self.get_provider_name(),
            ) from exc
        except openai.AuthenticationError as exc:
            raise LLMError(
                message=f"{self._provider_label} rejected the API key (check OPENAI_API_KEY)",
                provider_name=self.get_provider_name(),
            ) from exc
        except openai.RateLimitError as exc:
            raise LLMError(
                message=f"{self._provider_label} rate limit reached: {exc}",
                provider_name=self.get_provider_name(),
            ) from exc
        except openai.APIError as exc:
            raise LLMError(
                message=f"{self._provider_label} API error: {exc}",
                provider_name=self.get_provider_name(),
            ) from exc

        choice = response.choices[0]
        content = choice.message.content
        if content is None:
            raise LLMError(
                message=f"{self._provider_label} returned empty response",
                provider_name=self.get_provider_name(),
            )
        if choice.finish_reason == "length":
            logger.warning(
                "openai_output_truncated",
                model=self._text_model,
                max_tokens=max_tokens,
            )
        logger.info(
            "openai_completion",
            model=self._text_model,
            provider=self._provider_label,
            tokens=response.usage.total_tokens if response.usage else None,
        )
        return content

    def is_available(self) -> bool:
        """Return ``True`` if an API key is configured (doesn't verify it works)."""
        return bool(self._api_key)

    def get_provider_name(self) -> str:
        # Documents record "openai" either way; see LLMKeyValueExtractor.
        return "openai"

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _get_client(self) -> openai.AsyncOpenAI:
        if not self.is_available():
            raise ProviderUnavailableError(
                "OPENAI_API_KEY is not configured",
                provider_name=self.get_provider_name(),
            )
        if self._client is None:
            client_kwargs: dict = {
                "api_key": self._api_key,
                "timeout": openai.Timeout(_TIMEOUT_SECONDS, connect=5.0),
            }
            if self._base_url:
                client_kwargs["base_url"] = self._base_url
            self._client = openai.AsyncOpenAI(**client_kwargs)
        return self._client
