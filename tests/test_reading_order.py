"""
Tests for reading-order recovery.
"""

import pytest
import sys
from pathlib import Path

# Add src to path
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))


def make_word(text, left, top, right, bottom):
    from scanlayer.geometry import Quad
    from scanlayer.models import Word
    return Word(text=text, quad=Quad.from_rect(left, top, right, bottom), confidence=0.9)


class TestNeedsRecovery:
    """Test the degenerate-page trigger."""

    def test_spaceless_multi_word_line_triggers(self):
        from scanlayer.models import Line, Page
        from scanlayer.reading_order import needs_recovery

        page = Page(lines=(Line(words=(make_word("a", 0, 0, 5, 5), make_word("b", 0, 0, 5, 5))),))
        assert needs_recovery("ab", page) is True
        assert needs_recovery("a b", page) is False

    def test_single_word_lines_do_not_trigger(self):
        from scanlayer.models import Line, Page
        from scanlayer.reading_order import needs_recovery

        page = Page(lines=(Line(words=(make_word("a", 0, 0, 5, 5),)),))
        assert needs_recovery("a", page) is False


class TestOrderWords:
    """Test global row grouping."""

    @pytest.fixture
    def engine(self):
        from scanlayer.spacing import SpacingEngine
        return SpacingEngine()

    def test_rows_then_left_to_right(self, engine):
        from scanlayer.models import Line, Page
        from scanlayer.reading_order import order_words, recover_page_text

        page = Page(lines=(
            Line(words=(make_word("World", 56, 1, 110, 21), make_word("Hello", 0, 0, 50, 20))),
            Line(words=(make_word("below", 0, 40, 50, 60),)),
        ))
        assert [w.text for w in order_words(page, engine)] == ["Hello", "World", "below"]
        assert recover_page_text(page, engine) == "Hello World\nbelow"

    def test_unplaced_words_follow(self, engine):
        from scanlayer.models import Line, Page, Word
        from scanlayer.reading_order import order_words

        page = Page(lines=(Line(words=(Word("loose"), make_word("placed", 0, 0, 50, 20))),))
        assert [w.text for w in order_words(page, engine)] == ["placed", "loose"]

    def test_zero_height_words(self, engine):
        from scanlayer.models import Line, Page
        from scanlayer.reading_order import order_words

        page = Page(lines=(Line(words=(make_word("b", 20, 5, 30, 5), make_word("a", 0, 5, 10, 5))),))
        assert [w.text for w in order_words(page, engine)] == ["a", "b"]


class TestCollapsedGeometry:
    """Identical quads for every word still yield separated words."""

    def test_collapsed_quads_are_spaced(self):
        from scanlayer.geometry import Quad
        from scanlayer.models import Line, Page, Word
        from scanlayer.transcript import TranscriptBuilder

        quad = Quad.from_flat([0, 0, 10, 0, 10, 10, 0, 10])
        words = tuple(Word(text=t, quad=quad, confidence=0.9) for t in ("Alpha", "Beta", "Gamma"))
        page = Page(lines=(Line(words=words),))

        result = TranscriptBuilder(max_workers=1).build_page(page)
        assert result.recovered is True
        assert result.text.count(" ") >= 2
        assert result.text == "Alpha Beta Gamma"

    def test_zero_area_quads_lowercase(self):
        from scanlayer.geometry import Quad
        from scanlayer.models import Line, Page, Word
        from scanlayer.transcript import TranscriptBuilder

        quad = Quad.from_flat([0] * 8)
        words = tuple(Word(text=t, quad=quad, confidence=0.9) for t in ("alpha", "beta", "gamma"))
        page = Page(lines=(Line(words=words),))

        result = TranscriptBuilder(max_workers=1).build_page(page)
        assert result.recovered is True
        assert result.text.count(" ") >= 2
        assert result.text == "alpha beta gamma"
