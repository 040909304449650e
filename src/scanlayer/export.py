"""
Fresh PDF generation with fpdf2.

Handles:
- Image-backed pages with an invisible text layer
- Plain paginated text dumps (last resort, always renderable)
"""

import logging
from datetime import datetime
from io import BytesIO
from typing import List, Optional, Sequence, Tuple

from fpdf import FPDF
from fpdf.enums import TextMode, XPos, YPos

from .config import SynthesisConfig
from .io import SourceDocument, image_size, rasterize_pdf
from .models import OcrDocument, Page

logger = logging.getLogger(__name__)

NO_TEXT_PLACEHOLDER = "No text could be extracted from this document."


def to_latin1(text: str) -> str:
    """Coerce text to what the PDF core fonts can encode."""
    text = text.replace("\t", "    ")
    return text.encode("latin-1", errors="replace").decode("latin-1")


# ============================================================================
# Image-Backed Pages
# ============================================================================

def _page_images(source: SourceDocument, dpi: int) -> List[Tuple[object, int, int]]:
    """Images of the source as (image, width_px, height_px)."""
    if source.is_pdf:
        return [(img, img.size[0], img.size[1]) for img in rasterize_pdf(source.data, dpi)]

    size = image_size(source.data)
    if size is None:
        return []
    return [(BytesIO(source.data), size[0], size[1])]


def _write_positioned_lines(pdf: FPDF, ocr_page: Page, width: int, height: int) -> int:
    sx = width / ocr_page.width if ocr_page.width else 1.0
    sy = height / ocr_page.height if ocr_page.height else 1.0
    written = 0
    for line in ocr_page.lines:
        box = line.bounds
        text = to_latin1(line.text.strip())
        if box is None or not text:
            continue
        pdf.set_font("Helvetica", size=max(1.0, box.height * sy * 0.9))
        pdf.text(box.left * sx, box.bottom * sy, text)
        written += 1
    return written


def _write_stacked_lines(pdf: FPDF, text: str, config: SynthesisConfig) -> int:
    pdf.set_font("Helvetica", size=config.image_font_size)
    y = config.dump_margin
    written = 0
    for line in text.split("\n"):
        if not line.strip():
            continue
        pdf.text(config.dump_margin, y, to_latin1(line.strip()))
        y += config.image_line_step
        written += 1
    return written


def build_image_document(
    source: SourceDocument,
    document: Optional[OcrDocument],
    page_texts: Sequence[str],
    config: Optional[SynthesisConfig] = None
) -> Optional[bytes]:
    """
    Build a new PDF with one page per source image and invisible line text.

    Pages are sized to the image's pixel dimensions. Lines are placed at
    their OCR position when known, otherwise listed from the top.
    """
    config = config or SynthesisConfig()
    images = _page_images(source, config.rasterize_dpi)
    if not images:
        logger.debug(f"No decodable image in {source.name}")
        return None

    pdf = FPDF(unit="pt")
    pdf.set_auto_page_break(False)
    ocr_pages = list(document.pages) if document is not None else []

    for index, (image, width, height) in enumerate(images):
        pdf.add_page(format=(width, height))
        pdf.image(image, x=0, y=0, w=width, h=height)

        pdf.text_mode = TextMode.INVISIBLE
        written = 0
        if index < len(ocr_pages):
            written = _write_positioned_lines(pdf, ocr_pages[index], width, height)
        if not written and index < len(page_texts):
            written = _write_stacked_lines(pdf, page_texts[index], config)
        pdf.text_mode = TextMode.FILL
        logger.debug(f"Image page {index + 1}: {written} invisible lines")

    return bytes(pdf.output())


# ============================================================================
# Text Dump
# ============================================================================

class TextDumpPDF(FPDF):
    """A4 text document with a confidence and timestamp footer on every page."""

    def __init__(self, confidence_percent: int, config: SynthesisConfig):
        super().__init__(unit="pt", format=config.page_format)
        self.confidence_percent = confidence_percent
        self.generated = datetime.now().strftime("%Y-%m-%d %H:%M:%S")
        self.config = config

    def footer(self):
        self.set_y(-self.config.dump_margin + 10)
        self.set_font("Helvetica", size=self.config.dump_footer_size)
        self.cell(
            0, self.config.dump_footer_size,
            f"Confidence: {self.confidence_percent}%   Generated: {self.generated}",
            new_x=XPos.LMARGIN, new_y=YPos.NEXT
        )


def build_text_dump(
    text: str,
    confidence_percent: int,
    config: Optional[SynthesisConfig] = None
) -> bytes:
    """Render the transcript as a plain paginated PDF."""
    config = config or SynthesisConfig()
    pdf = TextDumpPDF(confidence_percent, config)
    margin = config.dump_margin
    pdf.set_margins(margin, margin, margin)
    pdf.set_auto_page_break(auto=True, margin=margin)
    pdf.add_page()

    pdf.set_font("Helvetica", "B", config.dump_title_size)
    pdf.multi_cell(0, config.dump_title_size * 1.25, config.dump_title,
                   new_x=XPos.LMARGIN, new_y=YPos.NEXT)
    pdf.ln(config.dump_line_height)

    pdf.set_font("Helvetica", size=config.dump_font_size)
    body = to_latin1(text.strip()) or NO_TEXT_PLACEHOLDER
    pdf.multi_cell(0, config.dump_line_height, body,
                   new_x=XPos.LMARGIN, new_y=YPos.NEXT)

    return bytes(pdf.output())
