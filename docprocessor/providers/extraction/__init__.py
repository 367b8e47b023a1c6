"""Key-value extraction backends and the startup factory that picks one."""

from docprocessor.providers.extraction.factory import build_key_value_extractor
from docprocessor.providers.extraction.llm_extractor import (
    LLMKeyValueExtractor,
    parse_key_value_array,
)
from docprocessor.providers.extraction.mock_extractor import MockKeyValueExtractor

__all__ = [
    "LLMKeyValueExtractor",
    "MockKeyValueExtractor",
    "build_key_value_extractor",
    "parse_key_value_array",
]
