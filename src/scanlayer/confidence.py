"""
Confidence aggregation.

Page confidence is the plain mean of the word confidences present on the
page; words without a confidence are left out of the mean entirely.
Document confidence is the mean of all page confidences; a page with no
scored words counts as 0.
"""

import math
from typing import List, Sequence

import numpy as np

from .models import Page


def _scores(page: Page) -> List[float]:
    return [w.confidence for w in page.words if w.confidence is not None]


def page_confidence(page: Page) -> float:
    scores = _scores(page)
    return float(np.mean(scores)) if scores else 0.0


def document_confidence(pages: Sequence[Page]) -> float:
    if not pages:
        return 0.0
    return float(np.mean([page_confidence(p) for p in pages]))


def confidence_percent(confidence: float) -> int:
    """Round a 0..1 confidence half-up to an integer percent in 0..100."""
    if not math.isfinite(confidence):
        return 0
    percent = math.floor(confidence * 100 + 0.5)
    return int(min(100, max(0, percent)))
