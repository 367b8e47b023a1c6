"""Unit tests for text normalization utilities."""

from __future__ import annotations

import pytest

from docprocessor.utils.text_normalizer import alnum_ratio, is_meaningful_text, normalize_key


# ======================================================================
# normalize_key
# ======================================================================


class TestNormalizeKey:
    """Tests for the normalize_key function."""

    def test_lowercases_and_joins_words(self) -> None:
        assert normalize_key("First Name") == "first_name"

    def test_hyphen_separates_words(self) -> None:
        assert normalize_key("first-name!") == "first_name"

    def test_slash_separates_words(self) -> None:
        assert normalize_key("Date/Time") == "date_time"

    def test_collapses_whitespace_runs(self) -> None:
        assert normalize_key("  FIRST   NAME  ") == "first_name"

    def test_strips_punctuation(self) -> None:
        assert normalize_key("Invoice #:") == "invoice"

    def test_keeps_digits_and_underscores(self) -> None:
        assert normalize_key("Line_2 Total") == "line_2_total"

    def test_empty_key(self) -> None:
        assert normalize_key("") == ""

    @pytest.mark.parametrize(
        "key",
        ["First Name", "first-name!", "E-mail Address", "  Total  (USD) ", "already_normal"],
    )
    def test_idempotent(self, key: str) -> None:
        once = normalize_key(key)
        assert normalize_key(once) == once

    def test_equivalent_spellings_collide(self) -> None:
        variants = {"First Name", "first-name", "FIRST   NAME", "first name!"}
        assert {normalize_key(v) for v in variants} == {"first_name"}


# ======================================================================
# alnum_ratio / is_meaningful_text
# ======================================================================


class TestAlnumRatio:
    def test_empty_text(self) -> None:
        assert alnum_ratio("") == 0.0

    def test_whitespace_ignored(self) -> None:
        assert alnum_ratio("ab  !!") == 0.5

    def test_all_alphanumeric(self) -> None:
        assert alnum_ratio("abc 123") == 1.0


class TestIsMeaningfulText:
    def test_real_content(self) -> None:
        assert is_meaningful_text("Name: John Doe\nEmail: john@example.com") is True

    def test_too_short(self) -> None:
        assert is_meaningful_text("Page 1") is False

    def test_length_threshold_is_strict(self) -> None:
        assert is_meaningful_text("a" * 20) is False
        assert is_meaningful_text("a" * 21) is True

    def test_length_counts_trimmed_text(self) -> None:
        assert is_meaningful_text("   " + "a" * 20 + "\n\n") is False

    def test_symbol_residue_rejected(self) -> None:
        assert is_meaningful_text("--- *** ||| ### !!! ~~~ ^^^ ... ,,,") is False

    def test_ratio_threshold_is_strict(self) -> None:
        # 9 alphanumerics out of 30 visible characters is exactly 0.3.
        text = "abc!!!!!!! def!!!!!!! ghi!!!!!!!"
        assert alnum_ratio(text) == pytest.approx(0.3)
        assert is_meaningful_text(text) is False

    def test_custom_thresholds(self) -> None:
        assert is_meaningful_text("short text", min_ratio=0.1, min_length=5) is True
