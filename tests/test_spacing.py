"""
Tests for geometry-based spacing inference.
"""

import pytest
import sys
from pathlib import Path

# Add src to path
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))


def make_word(text, left, top, right, bottom, confidence=None):
    from scanlayer.geometry import Quad
    from scanlayer.models import Word
    return Word(text=text, quad=Quad.from_rect(left, top, right, bottom), confidence=confidence)


class TestWordGaps:
    """Horizontal gaps between words on one line (text height 20)."""

    @pytest.fixture
    def engine(self):
        from scanlayer.spacing import SpacingEngine
        return SpacingEngine()

    def gap_token(self, engine, gap):
        prev = make_word("a", 0, 0, 100, 20)
        nxt = make_word("b", 100 + gap, 0, 150 + gap, 20)
        return engine.between_words(prev, nxt)

    def test_wide_space_at_six_tenths_height(self, engine):
        from scanlayer.spacing import SpacingToken
        assert self.gap_token(engine, 20 * 0.6) is SpacingToken.WIDE_SPACE

    def test_overlap_is_none(self, engine):
        from scanlayer.spacing import SpacingToken
        assert self.gap_token(engine, -5) is SpacingToken.NONE

    def test_tiny_gap_is_none(self, engine):
        from scanlayer.spacing import SpacingToken
        assert self.gap_token(engine, 3) is SpacingToken.NONE

    def test_space_up_to_half_height(self, engine):
        from scanlayer.spacing import SpacingToken
        assert self.gap_token(engine, 4) is SpacingToken.SPACE
        assert self.gap_token(engine, 10) is SpacingToken.SPACE

    def test_wide_space(self, engine):
        from scanlayer.spacing import SpacingToken
        assert self.gap_token(engine, 11) is SpacingToken.WIDE_SPACE
        assert self.gap_token(engine, 23) is SpacingToken.WIDE_SPACE

    def test_four_space(self, engine):
        from scanlayer.spacing import SpacingToken
        assert self.gap_token(engine, 25) is SpacingToken.FOUR_SPACE
        assert self.gap_token(engine, 40) is SpacingToken.FOUR_SPACE

    def test_four_space_is_wide_space_repeated(self):
        from scanlayer.spacing import SpacingToken, expand_protected
        assert SpacingToken.FOUR_SPACE.value == SpacingToken.WIDE_SPACE.value * 2
        assert expand_protected(SpacingToken.FOUR_SPACE.protected) == "    "

    def test_tab_beyond_twice_height(self, engine):
        from scanlayer.spacing import SpacingToken
        assert self.gap_token(engine, 41) is SpacingToken.TAB

    def test_unknown_geometry_is_space(self, engine):
        from scanlayer.models import Word
        from scanlayer.spacing import SpacingToken

        token = engine.between_words(Word("a"), make_word("b", 0, 0, 10, 10))
        assert token is SpacingToken.SPACE


class TestLineGaps:
    """Vertical gaps between lines (text height 20)."""

    @pytest.fixture
    def engine(self):
        from scanlayer.spacing import SpacingEngine
        return SpacingEngine()

    def gap_token(self, engine, gap):
        prev = make_word("a", 0, 0, 100, 20)
        nxt = make_word("b", 0, 20 + gap, 100, 40 + gap)
        return engine.between_words(prev, nxt)

    def test_jitter_is_space(self, engine):
        from scanlayer.spacing import SpacingToken
        # Overlapping boxes on different lines count as a zero gap
        assert self.gap_token(engine, -2) is SpacingToken.SPACE
        assert self.gap_token(engine, 5) is SpacingToken.SPACE

    def test_newline(self, engine):
        from scanlayer.spacing import SpacingToken
        assert self.gap_token(engine, 20) is SpacingToken.NEWLINE

    def test_paragraph_break(self, engine):
        from scanlayer.spacing import SpacingToken
        assert self.gap_token(engine, 30) is SpacingToken.PARAGRAPH_BREAK
        assert self.gap_token(engine, 40) is SpacingToken.PARAGRAPH_BREAK

    def test_section_break(self, engine):
        from scanlayer.spacing import SpacingToken
        assert self.gap_token(engine, 41) is SpacingToken.SECTION_BREAK


class TestJoining:
    """Test concatenation of words and lines."""

    def test_join_words_protects_wide_gaps(self):
        from scanlayer.spacing import SpacingEngine, WIDE_SPACE_MARK, expand_protected

        engine = SpacingEngine()
        words = [make_word("Name", 0, 0, 80, 20), make_word("Value", 95, 0, 180, 20)]
        joined = engine.join_words(words)
        assert joined == f"Name{WIDE_SPACE_MARK}Value"
        assert expand_protected(joined) == "Name  Value"

    def test_join_lines_reports_geometry(self):
        from scanlayer.models import Line, Word
        from scanlayer.spacing import SpacingEngine

        engine = SpacingEngine()
        positioned = [
            Line(words=(make_word("one", 0, 0, 60, 20),)),
            Line(words=(make_word("two", 0, 40, 60, 60),)),
        ]
        assert engine.join_lines(positioned) == ("one\ntwo", True)

        unknown = [Line(words=(Word("one"),)), Line(words=(Word("two"),))]
        assert engine.join_lines(unknown) == ("one\ntwo", False)

    def test_empty_lines_contribute_nothing(self):
        from scanlayer.models import Line
        from scanlayer.spacing import SpacingEngine

        engine = SpacingEngine()
        lines = [Line(), Line(words=(make_word("only", 0, 0, 60, 20),)), Line()]
        assert engine.join_lines(lines) == ("only", True)

    def test_has_whitespace_counts_marks(self):
        from scanlayer.spacing import has_whitespace, TAB_MARK

        assert has_whitespace(f"a{TAB_MARK}b")
        assert not has_whitespace("ab")
