"""Key-value extraction backed by a large language model.

The model is asked for exactly one JSON array of ``{"key", "value"}``
objects.  Models often wrap that array in prose or code fences, so the
answer is scanned for the first bracket-delimited span and only that span
is parsed.
"""

from __future__ import annotations

import json
import re
from typing import Any

from docprocessor.interfaces.key_value_extractor import IKeyValueExtractor
from docprocessor.interfaces.llm_provider import ILLMProvider
from docprocessor.models.chat import DocumentContext
from docprocessor.models.document import KeyValuePair, ProcessingMethod
from docprocessor.utils.errors import MalformedModelOutputError
from docprocessor.utils.logging import get_logger

# Greedy + DOTALL: spans from the first "[" to the last "]" across lines.
_JSON_ARRAY_RE = re.compile(r"\[.*\]", re.DOTALL)

_EXTRACTION_SYSTEM_PROMPT = (
    "You extract structured data from documents. Reply with ONLY a valid JSON "
    "array of objects, each with a 'key' and a 'value' property. No prose."
)

_EXTRACTION_USER_PROMPT = """Extract key-value pairs from this document text. Return ONLY a valid JSON \
array with objects containing 'key' and 'value' properties. Focus on important information like \
names, dates, amounts, addresses, phone numbers, emails, etc.

Document text:
{text}

Return format example:
[{{"key": "Name", "value": "John Doe"}}, {{"key": "Email", "value": "john@example.com"}}]"""

_CHAT_SYSTEM_PROMPT = (
    "You are a helpful AI assistant that can answer questions about user documents. "
    "The user has uploaded documents and you have access to extracted key-value pairs "
    "from those documents."
)

_CHAT_USER_PROMPT = """User Question: "{query}"

Available Document Data:
{documents}

Instructions:
- Provide a direct, concise answer based on the document data
- If the answer is a single value (like a number, date, name), return just that value
- If there are multiple relevant values, list them clearly
- If you can't find the specific information requested, say so clearly
- Keep responses short and focused
- Use markdown formatting for emphasis when helpful

Answer:"""


def parse_key_value_array(raw_output: str, provider_name: str | None = None) -> list[KeyValuePair]:
    """Pull the first JSON array out of *raw_output* and coerce it to pairs.

    Array items that are not objects with a ``key`` are dropped; values keep
    whatever JSON type the model produced.

    Raises
    ------
    MalformedModelOutputError
        If no array is present or the bracketed span is not valid JSON.
    """
    match = _JSON_ARRAY_RE.search(raw_output or "")
    if match is None:
        raise MalformedModelOutputError(
            message="No valid JSON array found in model response",
            provider_name=provider_name,
            raw_output=raw_output or "",
        )
    try:
        items = json.loads(match.group(0))
    except json.JSONDecodeError as exc:
        raise MalformedModelOutputError(
            message=f"Failed to parse model response as JSON: {exc.msg}",
            provider_name=provider_name,
            raw_output=raw_output,
        ) from exc
    if not isinstance(items, list):
        raise MalformedModelOutputError(
            message="Model response JSON is not an array",
            provider_name=provider_name,
            raw_output=raw_output,
        )

    pairs: list[KeyValuePair] = []
    for item in items:
        if not isinstance(item, dict) or item.get("key") in (None, ""):
            continue
        pairs.append(KeyValuePair(key=str(item["key"]), value=item.get("value")))
    return pairs


class LLMKeyValueExtractor(IKeyValueExtractor):
    """Key-value extractor delegating to an :class:`ILLMProvider`.

    One instance wraps one provider; there is no fallback between models.
    Provider errors propagate with the provider name attached.
    """

    def __init__(self, llm: ILLMProvider, processing_method: ProcessingMethod) -> None:
        self._llm = llm
        self._processing_method = processing_method
        self._logger = get_logger(__name__)

    async def extract_pairs(self, text: str) -> list[KeyValuePair]:
        raw_output = await self._llm.complete(
            system_prompt=_EXTRACTION_SYSTEM_PROMPT,
            user_prompt=_EXTRACTION_USER_PROMPT.format(text=text),
            temperature=0.0,
            max_tokens=2000,
        )
        pairs = parse_key_value_array(raw_output, provider_name=self.get_provider_name())
        self._logger.info(
            "llm_pairs_parsed",
            provider=self.get_provider_name(),
            pair_count=len(pairs),
        )
        return pairs

    async def chat_answer(self, query: str, documents: list[DocumentContext]) -> str:
        payload: list[dict[str, Any]] = [doc.model_dump(mode="json") for doc in documents]
        answer = await self._llm.complete(
            system_prompt=_CHAT_SYSTEM_PROMPT,
            user_prompt=_CHAT_USER_PROMPT.format(
                query=query, documents=json.dumps(payload, indent=2)
            ),
            temperature=0.3,
            max_tokens=1000,
        )
        return answer.strip()

    def get_provider_name(self) -> str:
        return self._llm.get_provider_name()

    def get_processing_method(self) -> ProcessingMethod:
        return self._processing_method
