"""
Reading-order recovery for pages whose primary concatenation produced a
spaceless blob.

Words are flattened across OCR lines, regrouped into rows by vertical
center, sorted left to right and re-joined with the spacing engine. This
is more expensive than the line-grouped path and only runs when the
degenerate trigger fires.
"""

import logging
from typing import List, Tuple

import numpy as np

from .models import Page, Word
from .normalizer import basic_spacing
from .spacing import SpacingEngine, has_whitespace

logger = logging.getLogger(__name__)


def needs_recovery(page_text: str, page: Page) -> bool:
    """True when the page text has no whitespace but some line has 2+ words."""
    if has_whitespace(page_text):
        return False
    return any(len(line.words) >= 2 for line in page.lines)


def order_words(page: Page, engine: SpacingEngine) -> List[Word]:
    """
    Sort all words of a page into rows, top to bottom and left to right.

    Rows group words whose vertical centers are within half the average
    word height of the row's first word. Words without geometry follow
    in their original order.
    """
    positioned: List[Tuple[int, Word]] = []
    unplaced: List[Word] = []
    for i, word in enumerate(page.words):
        if word.bounds is None:
            unplaced.append(word)
        else:
            positioned.append((i, word))

    if not positioned:
        return unplaced

    heights = [w.bounds.height for _, w in positioned]
    average_height = float(np.mean(heights))
    if average_height <= 0:
        average_height = engine.config.default_height
    threshold = average_height * engine.config.row_grouping_factor

    # Stable sort by center keeps original order for ties
    by_center = sorted(positioned, key=lambda item: item[1].bounds.center_y)
    rows = {}
    row = 0
    anchor = by_center[0][1].bounds.center_y
    for index, word in by_center:
        center = word.bounds.center_y
        if center - anchor >= threshold:
            row += 1
            anchor = center
        rows[index] = row

    ordered = sorted(
        positioned,
        key=lambda item: (rows[item[0]], item[1].bounds.left, item[0])
    )
    return [w for _, w in ordered] + unplaced


def recover_page_text(page: Page, engine: SpacingEngine) -> str:
    """
    Re-derive the page text from a global spatial ordering of its words.

    Words that all share one box carry no spacing information and are
    separated by single spaces. Falls back to pattern-based tokenization
    when geometry is too sparse to produce any whitespace.
    """
    words = order_words(page, engine)
    text = engine.join_words(words)
    logger.debug(f"Page {page.index + 1}: reading order recovered for {len(words)} words")

    if not has_whitespace(text) and len(words) > 1 and len({w.bounds for w in words}) == 1:
        logger.info(f"Page {page.index + 1}: all words share one box, joining with spaces")
        text = " ".join(w.text for w in words)

    if not has_whitespace(text):
        logger.info(f"Page {page.index + 1}: geometry too sparse, using pattern spacing")
        text = basic_spacing(text)
    return text
