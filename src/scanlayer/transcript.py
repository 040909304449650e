"""
Transcript assembly.

Turns an OcrDocument into a Transcript:
- spacing-engine concatenation of words and lines per page
- reading-order recovery for degenerate pages
- normalization and paragraph structuring
- confidence aggregation

Pages are independent and are reconstructed concurrently; the result
always follows the input page order.
"""

import logging
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from typing import List, Optional

from .confidence import document_confidence, page_confidence
from .config import PipelineConfig
from .models import OcrDocument, Page, RawOcrText, Transcript
from .normalizer import normalize_text
from .paragraphs import structure_paragraphs
from .reading_order import needs_recovery, recover_page_text
from .spacing import SpacingEngine, expand_protected

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PageText:
    """Reconstructed text of a single page."""
    index: int
    text: str
    confidence: float
    recovered: bool = False
    geometric: bool = True


class TranscriptBuilder:
    """Builds transcripts from OCR results."""

    def __init__(
        self,
        config: Optional[PipelineConfig] = None,
        max_workers: Optional[int] = None
    ):
        self.config = config or PipelineConfig()
        self.max_workers = max_workers or self.config.max_workers
        self.engine = SpacingEngine(self.config.spacing)

    def build_page(self, page: Page) -> PageText:
        """
        Reconstruct the text of one page.

        Paragraph structuring only runs when some line break on the page
        could not be classified from geometry; geometry-derived breaks are
        kept as they are.
        """
        text, geometric = self.engine.join_lines(page.lines)

        recovered = False
        if needs_recovery(text, page):
            logger.info(f"Page {page.index + 1}: no whitespace in line-joined text, recovering reading order")
            text = recover_page_text(page, self.engine)
            recovered = True
            geometric = False

        text = normalize_text(text)
        if not geometric:
            text = structure_paragraphs(text)
        text = expand_protected(text)

        return PageText(
            index=page.index,
            text=text,
            confidence=page_confidence(page),
            recovered=recovered,
            geometric=geometric,
        )

    def build(self, document: OcrDocument) -> Transcript:
        """Build the transcript of a whole document."""
        pages = list(document.pages)
        if len(pages) > 1 and self.max_workers > 1:
            with ThreadPoolExecutor(max_workers=min(self.max_workers, len(pages))) as pool:
                results = list(pool.map(self.build_page, pages))
        else:
            results = [self.build_page(p) for p in pages]

        results.sort(key=lambda r: r.index)
        recovered = sum(1 for r in results if r.recovered)
        if recovered:
            logger.info(f"Reading order recovered on {recovered}/{len(results)} page(s)")

        return self._assemble(
            [r.text for r in results],
            [r.confidence for r in results],
            document_confidence(pages),
        )

    def from_raw_text(self, raw: RawOcrText, confidence: float) -> Transcript:
        """
        Build a transcript from already-extracted text (no geometry).

        Every non-empty page is assigned ``confidence``.
        """
        texts: List[str] = []
        for page_text in raw.page_texts():
            text = structure_paragraphs(normalize_text(page_text))
            texts.append(expand_protected(text))

        scores = [confidence if t else 0.0 for t in texts]
        overall = confidence if any(texts) else 0.0
        return self._assemble(texts, scores, overall)

    def _assemble(self, texts: List[str], scores: List[float], overall: float) -> Transcript:
        full_text = self.config.page_separator.join(t for t in texts if t)
        return Transcript(
            text=full_text,
            page_texts=tuple(texts),
            per_page_confidence=tuple(scores),
            overall_confidence=overall,
        )
