"""
Invisible text overlays on existing PDF pages (PyMuPDF).

Two renderers, both leaving the visible page content untouched:
- precise: every OCR word at its own position, font fitted to its box
- simple: the page transcript listed top to bottom down the left margin

Both return PDF bytes, or None when there is nothing they can place.
"""

import logging
from typing import Optional, Sequence

import fitz

from .config import SynthesisConfig
from .models import OcrDocument, Page

logger = logging.getLogger(__name__)

INVISIBLE = 3  # PDF text render mode: neither fill nor stroke


def _scale(ocr_page: Page, rect: fitz.Rect):
    """Factors mapping OCR page units onto PDF points."""
    sx = rect.width / ocr_page.width if ocr_page.width else 1.0
    sy = rect.height / ocr_page.height if ocr_page.height else 1.0
    return sx, sy


def _fit_font_size(text: str, width: float, height: float, config: SynthesisConfig) -> float:
    fontsize = max(config.min_font_size, height * 0.9)
    if width > 0:
        natural = fitz.get_text_length(text, fontname=config.font_name, fontsize=fontsize)
        if natural > width:
            fontsize = max(config.min_font_size, fontsize * width / natural)
    return fontsize


def overlay_words(pdf_page: fitz.Page, ocr_page: Page, config: SynthesisConfig) -> int:
    """Insert each positioned word of ``ocr_page`` as invisible text. Returns the count."""
    rect = pdf_page.rect
    sx, sy = _scale(ocr_page, rect)
    font = fitz.Font(config.font_name)
    inserted = 0

    for word in ocr_page.words:
        box = word.bounds
        text = word.text.strip()
        if box is None or not text:
            continue

        x0, y1 = rect.x0 + box.left * sx, rect.y0 + box.bottom * sy
        fontsize = _fit_font_size(text, box.width * sx, box.height * sy, config)

        # Baseline sits above the box bottom by the font's descender
        point = fitz.Point(x0, y1 + font.descender * fontsize)
        point.x = max(rect.x0, min(point.x, rect.x1))
        point.y = max(rect.y0, min(point.y, rect.y1))

        pdf_page.insert_text(
            point,
            text,
            fontsize=fontsize,
            fontname=config.font_name,
            render_mode=INVISIBLE,
            overlay=True
        )
        inserted += 1

    return inserted


def build_precise_overlay(
    pdf_bytes: bytes,
    document: Optional[OcrDocument],
    config: Optional[SynthesisConfig] = None
) -> Optional[bytes]:
    """Overlay every OCR word at its measured position."""
    config = config or SynthesisConfig()
    if document is None or not any(w.bounds for p in document.pages for w in p.words):
        logger.debug("No positioned words, precise overlay not applicable")
        return None

    with fitz.open(stream=pdf_bytes, filetype="pdf") as doc:
        total = 0
        for ocr_page in document.pages:
            if ocr_page.index >= doc.page_count:
                logger.warning(f"OCR page {ocr_page.index + 1} has no PDF page, skipped")
                continue
            total += overlay_words(doc[ocr_page.index], ocr_page, config)

        logger.info(f"Precise overlay placed {total} words on {doc.page_count} pages")
        return doc.tobytes(garbage=3, deflate=True)


def overlay_lines(pdf_page: fitz.Page, text: str, config: SynthesisConfig) -> int:
    """List ``text`` line by line down the page as invisible text."""
    lines = text.split("\n")
    rect = pdf_page.rect
    margin = config.overlay_margin
    fontsize = config.overlay_font_size
    step = (rect.height - 2 * margin) / max(len(lines), 1)

    tw = fitz.TextWriter(rect)
    font = fitz.Font(config.font_name)
    written = 0
    for i, line in enumerate(lines):
        if not line.strip():
            continue
        x = rect.x0 + margin
        y = rect.y0 + margin + i * step + fontsize * 0.8
        tw.append((x, y), line.strip(), font=font, fontsize=fontsize)
        written += 1

    if written:
        tw.write_text(pdf_page, render_mode=INVISIBLE, overlay=True)
    return written


def build_simple_overlay(
    pdf_bytes: bytes,
    page_texts: Sequence[str],
    config: Optional[SynthesisConfig] = None
) -> Optional[bytes]:
    """Overlay each page's transcript as a left-aligned listing."""
    config = config or SynthesisConfig()
    if not any(t.strip() for t in page_texts):
        logger.debug("Empty transcript, simple overlay not applicable")
        return None

    with fitz.open(stream=pdf_bytes, filetype="pdf") as doc:
        written = 0
        for index, text in enumerate(page_texts):
            if index >= doc.page_count:
                break
            written += overlay_lines(doc[index], text, config)

        logger.info(f"Simple overlay wrote {written} lines")
        return doc.tobytes(garbage=3, deflate=True)
