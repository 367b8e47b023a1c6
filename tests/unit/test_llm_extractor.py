"""Unit tests for the LLM-backed key-value extractor and its output parser."""

from __future__ import annotations

from unittest.mock import AsyncMock, MagicMock

import pytest
from structlog.testing import capture_logs

from docprocessor.models.chat import DocumentContext
from docprocessor.models.document import ProcessingMethod
from docprocessor.providers.extraction.llm_extractor import (
    LLMKeyValueExtractor,
    parse_key_value_array,
)
from docprocessor.services.kv_gateway import KeyValueExtractionGateway
from docprocessor.utils.errors import ExtractionErrorKind, LLMError, MalformedModelOutputError


def _mock_llm(response: str = "[]", name: str = "anthropic") -> MagicMock:
    llm = MagicMock()
    llm.complete = AsyncMock(return_value=response)
    llm.get_provider_name.return_value = name
    return llm


# ======================================================================
# parse_key_value_array
# ======================================================================


class TestParseKeyValueArray:
    def test_plain_array(self) -> None:
        pairs = parse_key_value_array('[{"key": "Name", "value": "John Doe"}]')
        assert [(p.key, p.value) for p in pairs] == [("Name", "John Doe")]

    def test_array_wrapped_in_prose_and_fences(self) -> None:
        raw = 'Here are the fields:\n```json\n[{"key": "Email", "value": "a@b.co"}]\n```\nDone.'
        pairs = parse_key_value_array(raw)
        assert [(p.key, p.value) for p in pairs] == [("Email", "a@b.co")]

    def test_values_keep_json_types(self) -> None:
        raw = (
            '[{"key": "Total", "value": 12.5}, {"key": "Paid", "value": true}, '
            '{"key": "Items", "value": ["a", "b"]}, {"key": "Address", "value": {"city": "Oslo"}}]'
        )
        values = [p.value for p in parse_key_value_array(raw)]
        assert values == [12.5, True, ["a", "b"], {"city": "Oslo"}]

    def test_skips_items_without_key(self) -> None:
        raw = '[1, "x", {"value": "orphan"}, {"key": "", "value": "y"}, {"key": "A", "value": null}]'
        pairs = parse_key_value_array(raw)
        assert [(p.key, p.value) for p in pairs] == [("A", None)]

    def test_no_array_raises(self) -> None:
        with pytest.raises(MalformedModelOutputError, match="No valid JSON array") as exc_info:
            parse_key_value_array("I could not find any fields.", provider_name="openai")
        assert exc_info.value.provider_name == "openai"
        assert exc_info.value.raw_snippet == "I could not find any fields."
        assert exc_info.value.kind is ExtractionErrorKind.MALFORMED_MODEL_OUTPUT

    def test_invalid_json_raises(self) -> None:
        with pytest.raises(MalformedModelOutputError, match="Failed to parse"):
            parse_key_value_array("[{key: Name}]")

    def test_empty_output_raises(self) -> None:
        with pytest.raises(MalformedModelOutputError):
            parse_key_value_array("")

    def test_malformed_is_an_llm_error(self) -> None:
        with pytest.raises(LLMError):
            parse_key_value_array("nothing here")


# ======================================================================
# LLMKeyValueExtractor
# ======================================================================


class TestLLMKeyValueExtractor:
    @pytest.mark.asyncio
    async def test_extract_pairs_sends_text(self) -> None:
        llm = _mock_llm('[{"key": "Name", "value": "John"}]')
        extractor = LLMKeyValueExtractor(llm, ProcessingMethod.ANTHROPIC)

        pairs = await extractor.extract_pairs("Name: John")

        assert [(p.key, p.value) for p in pairs] == [("Name", "John")]
        kwargs = llm.complete.await_args.kwargs
        assert "Name: John" in kwargs["user_prompt"]
        assert kwargs["temperature"] == 0.0

    @pytest.mark.asyncio
    async def test_malformed_output_propagates(self) -> None:
        extractor = LLMKeyValueExtractor(_mock_llm("no json"), ProcessingMethod.OPENAI)
        with pytest.raises(MalformedModelOutputError):
            await extractor.extract_pairs("text")

    @pytest.mark.asyncio
    async def test_provider_error_propagates(self) -> None:
        llm = _mock_llm()
        llm.complete = AsyncMock(side_effect=LLMError("boom", provider_name="anthropic"))
        extractor = LLMKeyValueExtractor(llm, ProcessingMethod.ANTHROPIC)
        with pytest.raises(LLMError, match="boom"):
            await extractor.extract_pairs("text")

    @pytest.mark.asyncio
    async def test_chat_answer_includes_documents(self) -> None:
        llm = _mock_llm("  **42**  \n")
        extractor = LLMKeyValueExtractor(llm, ProcessingMethod.ANTHROPIC)
        docs = [DocumentContext(filename="invoice.pdf", key_value_pairs=[{"key": "Total", "value": 42}])]

        answer = await extractor.chat_answer("What is the total?", docs)

        assert answer == "**42**"
        prompt = llm.complete.await_args.kwargs["user_prompt"]
        assert "What is the total?" in prompt
        assert "invoice.pdf" in prompt

    def test_identity(self) -> None:
        extractor = LLMKeyValueExtractor(_mock_llm(name="openai"), ProcessingMethod.OPENAI)
        assert extractor.get_provider_name() == "openai"
        assert extractor.get_processing_method() is ProcessingMethod.OPENAI


# ======================================================================
# KeyValueExtractionGateway
# ======================================================================


class TestKeyValueExtractionGateway:
    @pytest.mark.asyncio
    async def test_malformed_output_logged_with_snippet(self) -> None:
        extractor = LLMKeyValueExtractor(
            _mock_llm("SECRET-RAW-OUTPUT: nothing to report"), ProcessingMethod.ANTHROPIC
        )
        gateway = KeyValueExtractionGateway(extractor)

        with capture_logs() as logs, pytest.raises(MalformedModelOutputError):
            await gateway.extract("Name: John")

        failed = [entry for entry in logs if entry["event"] == "kv_extraction_failed"]
        assert len(failed) == 1
        assert failed[0]["provider"] == "anthropic"
        assert failed[0]["kind"] == "MalformedModelOutput"
        assert failed[0]["raw_snippet"] == "SECRET-RAW-OUTPUT: nothing to report"

    @pytest.mark.asyncio
    async def test_provider_error_logged_and_reraised(self) -> None:
        llm = _mock_llm()
        llm.complete = AsyncMock(side_effect=LLMError("boom", provider_name="anthropic"))
        gateway = KeyValueExtractionGateway(LLMKeyValueExtractor(llm, ProcessingMethod.ANTHROPIC))

        with capture_logs() as logs, pytest.raises(LLMError, match="boom"):
            await gateway.extract("Name: John")

        failed = [entry for entry in logs if entry["event"] == "kv_extraction_failed"]
        assert failed[0]["error"] == "[anthropic] boom"
        assert "raw_snippet" not in failed[0]
