"""
Tests for text normalization.
"""

import pytest
import sys
from pathlib import Path

# Add src to path
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))


class TestNormalizeText:
    """Test whitespace cleanup and glued-word splitting."""

    def test_collapse_horizontal_whitespace(self):
        from scanlayer.normalizer import normalize_text

        assert normalize_text("Hello   big\t\tworld") == "Hello big world"

    def test_trim_around_newlines(self):
        from scanlayer.normalizer import normalize_text

        assert normalize_text("Hello  \n  world") == "Hello\nworld"

    def test_newline_runs_capped_at_three(self):
        from scanlayer.normalizer import normalize_text

        assert normalize_text("a\n\n\n\n\n\nb") == "a\n\n\nb"
        assert normalize_text("a\n\n\nb") == "a\n\n\nb"

    def test_glued_words_split(self):
        from scanlayer.normalizer import normalize_text

        assert normalize_text("helloWorld") == "hello World"
        assert normalize_text("page12") == "page 12"
        assert normalize_text("12pages") == "12 pages"
        assert normalize_text("catandmouse") == "cat and mouse"

    def test_space_after_sentence_end(self):
        from scanlayer.normalizer import normalize_text

        assert normalize_text("End.Next") == "End. Next"

    def test_empty(self):
        from scanlayer.normalizer import normalize_text

        assert normalize_text("") == ""
        assert normalize_text("   ") == ""

    def test_wide_gap_marks_survive(self):
        from scanlayer.normalizer import normalize_text
        from scanlayer.spacing import WIDE_SPACE_MARK, TAB_MARK

        text = f"Name{WIDE_SPACE_MARK}Value{TAB_MARK}Total"
        assert normalize_text(text) == text

    @pytest.mark.parametrize("text", [
        "Hello   World\n\n\n\n\nNext",
        "catandmouse page12 End.Next",
        "  leading and trailing  \n  spaces \r\n windows ",
        "helloWorld12abc",
        "plain text with nothing to fix",
    ])
    def test_idempotent(self, text):
        from scanlayer.normalizer import normalize_text

        once = normalize_text(text)
        assert normalize_text(once) == once


class TestBasicSpacing:
    """Test the last-resort tokenizer."""

    def test_splits_spaceless_text(self):
        from scanlayer.normalizer import basic_spacing

        assert basic_spacing("HelloWorld") == "Hello World"
        assert basic_spacing("Hello,world") == "Hello, world"
        assert basic_spacing("Item42") == "Item 42"

    def test_text_with_spaces_untouched(self):
        from scanlayer.normalizer import basic_spacing

        assert basic_spacing("already spaced") == "already spaced"

    def test_never_empty_for_non_empty_input(self):
        from scanlayer.normalizer import basic_spacing

        assert basic_spacing("") == ""
        assert basic_spacing("x") == "x"
        assert basic_spacing("...") == "..."
