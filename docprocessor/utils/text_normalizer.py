"""Text normalization utilities for extracted documents.

This module handles two normalization concerns:

1. **Key normalization** -- Maps field names such as "First Name",
   "first-name!" and "FIRST   NAME" onto one canonical form
   (``first_name``) so the key-value index can answer fuzzy key searches
   with a plain substring match.

2. **Native-text quality** -- Decides whether the text layer pulled out of
   a PDF is real content or the residue of a scanned page (stray symbols,
   page numbers, metadata).  Scanned PDFs must be routed to OCR instead.
"""

import re

# Hyphens and slashes separate words in field labels ("first-name",
# "date/time"), so they become spaces before punctuation is stripped.
_WORD_JOINERS_RE = re.compile(r"[-/]")
# ASCII semantics: the index must produce identical keys regardless of the
# locale of the OCR output.
_NON_WORD_RE = re.compile(r"[^\w\s]", re.ASCII)
_WHITESPACE_RE = re.compile(r"\s+")
_ALNUM_RE = re.compile(r"[A-Za-z0-9]")

# Native PDF text is trusted when more than 30% of its visible characters
# are alphanumeric and it is longer than 20 characters.
MIN_ALNUM_RATIO = 0.3
MIN_TEXT_LENGTH = 20


def normalize_key(key: str) -> str:
    """Return the canonical, search-friendly form of a field name.

    Lowercases, strips punctuation, and collapses whitespace runs into a
    single underscore.  The function is idempotent:
    ``normalize_key(normalize_key(k)) == normalize_key(k)``.

    Args:
        key: Raw key as extracted from the document.

    Returns:
        Normalized key, e.g. ``"First Name"`` -> ``"first_name"``.
    """
    normalized = key.lower().strip()
    normalized = _WORD_JOINERS_RE.sub(" ", normalized)
    normalized = _NON_WORD_RE.sub("", normalized).strip()
    return _WHITESPACE_RE.sub("_", normalized)


def alnum_ratio(text: str) -> float:
    """Ratio of ASCII alphanumeric characters to non-whitespace characters."""
    visible = _WHITESPACE_RE.sub("", text)
    if not visible:
        return 0.0
    return len(_ALNUM_RE.findall(visible)) / len(visible)


def is_meaningful_text(
    text: str,
    min_ratio: float = MIN_ALNUM_RATIO,
    min_length: int = MIN_TEXT_LENGTH,
) -> bool:
    """Return ``True`` if *text* looks like real document content.

    Both conditions are strict: the trimmed text must be longer than
    *min_length* and the alphanumeric ratio must exceed *min_ratio*.
    """
    cleaned = text.strip()
    if len(cleaned) <= min_length:
        return False
    return alnum_ratio(cleaned) > min_ratio
