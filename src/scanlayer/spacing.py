"""
Spacing inference between adjacent words and lines.

Classifies the gap between two OCR fragments from their geometry into a
SpacingToken. Thresholds are multiples of the average text height and
are evaluated in ascending order; the first match wins.
"""

import logging
from enum import Enum
from typing import List, Optional, Sequence, Tuple

from .config import SpacingConfig
from .geometry import Bounds, safe_height
from .models import Line, Word

logger = logging.getLogger(__name__)


# ============================================================================
# Spacing Tokens
# ============================================================================

# Placeholders for multi-character whitespace. The normalizer collapses
# ASCII spaces and tabs, so wide gaps travel through it as these code
# points and are expanded at the very end.
WIDE_SPACE_MARK = "\ue000"
FOUR_SPACE_MARK = "\ue001"
TAB_MARK = "\ue002"

_PROTECTED = {
    WIDE_SPACE_MARK: "  ",
    FOUR_SPACE_MARK: "    ",
    TAB_MARK: "\t",
}


class SpacingToken(Enum):
    """
    Classification of the gap between two text fragments.

    FOUR_SPACE is a wide space repeated twice, kept as its own member so
    the doubled run survives normalization as one protected mark.
    """
    NONE = ""
    SPACE = " "
    WIDE_SPACE = "  "
    FOUR_SPACE = "    "
    TAB = "\t"
    NEWLINE = "\n"
    PARAGRAPH_BREAK = "\n\n"
    SECTION_BREAK = "\n\n\n"

    @property
    def protected(self) -> str:
        """Rendering that survives normalization."""
        if self is SpacingToken.WIDE_SPACE:
            return WIDE_SPACE_MARK
        if self is SpacingToken.FOUR_SPACE:
            return FOUR_SPACE_MARK
        if self is SpacingToken.TAB:
            return TAB_MARK
        return self.value


def expand_protected(text: str) -> str:
    """Replace wide-gap placeholders with their literal whitespace."""
    for mark, literal in _PROTECTED.items():
        text = text.replace(mark, literal)
    return text


def has_whitespace(text: str) -> bool:
    return any(ch.isspace() or ch in _PROTECTED for ch in text)


# ============================================================================
# Spacing Engine
# ============================================================================

class SpacingEngine:
    """
    Geometry-based gap classifier.

    Word boxes and line boxes go through the same thresholds; the line
    variant is used when concatenating OCR lines within a page.
    """

    def __init__(self, config: Optional[SpacingConfig] = None):
        self.config = config or SpacingConfig()

    def classify(self, prev: Bounds, nxt: Bounds) -> SpacingToken:
        """Classify the gap between two known boxes."""
        cfg = self.config
        height = safe_height(prev, nxt, cfg.default_height)

        center_distance = abs(nxt.center_y - prev.center_y)
        same_line = center_distance < height * cfg.line_height_tolerance

        if same_line:
            gap = nxt.left - prev.right
            if gap < 0:
                # Overlap, e.g. ligatures
                return SpacingToken.NONE
            if gap <= cfg.min_word_gap_pixels:
                return SpacingToken.NONE
            if gap <= height * cfg.word_spacing_threshold:
                return SpacingToken.SPACE
            if gap <= height * cfg.wide_spacing_threshold:
                return SpacingToken.WIDE_SPACE
            if gap <= height * cfg.very_wide_spacing_threshold:
                return SpacingToken.FOUR_SPACE
            return SpacingToken.TAB

        line_gap = max(0.0, nxt.top - prev.bottom)
        if line_gap <= height * cfg.line_jitter_threshold:
            return SpacingToken.SPACE
        if line_gap <= height * cfg.newline_threshold:
            return SpacingToken.NEWLINE
        if line_gap <= height * cfg.paragraph_spacing_threshold:
            return SpacingToken.PARAGRAPH_BREAK
        return SpacingToken.SECTION_BREAK

    def between_words(self, prev: Word, nxt: Word) -> SpacingToken:
        """Spacing after ``prev``; a plain space when geometry is unknown."""
        a, b = prev.bounds, nxt.bounds
        if a is None or b is None:
            return SpacingToken.SPACE
        return self.classify(a, b)

    def between_lines(self, prev: Line, nxt: Line) -> Tuple[SpacingToken, bool]:
        """
        Spacing between two lines.

        Returns the token and whether it was derived from geometry. Lines
        without usable boxes are separated by a newline.
        """
        a, b = prev.bounds, nxt.bounds
        if a is None or b is None:
            return SpacingToken.NEWLINE, False
        return self.classify(a, b), True

    def join_words(self, words: Sequence[Word]) -> str:
        """Concatenate words with protected spacing tokens."""
        parts: List[str] = []
        for i, word in enumerate(words):
            if i > 0:
                parts.append(self.between_words(words[i - 1], word).protected)
            parts.append(word.text)
        return "".join(parts)

    def join_lines(self, lines: Sequence[Line]) -> Tuple[str, bool]:
        """
        Concatenate the lines of a page.

        Empty lines contribute nothing. Returns the text and whether every
        line break was classified from geometry.
        """
        text = ""
        previous: Optional[Line] = None
        geometric = True

        for line in lines:
            if not line.words:
                continue
            line_text = self.join_words(line.words)
            if previous is not None and line_text.strip():
                token, from_geometry = self.between_lines(previous, line)
                geometric = geometric and from_geometry
                text += token.protected
            text += line_text
            if line_text.strip():
                previous = line

        logger.debug(f"Joined {len(lines)} lines (geometric breaks: {geometric})")
        return text, geometric
