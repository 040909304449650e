"""
I/O utilities for the searchable-scan pipeline.

Handles:
- Source loading and validation (PDF or image)
- PDF structural validation
- Existing text-layer extraction from PDFs
- Image decoding and PDF rasterization
"""

from io import BytesIO
import logging
import re
from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional, Tuple, Union

import numpy as np

from .config import IMAGE_EXTENSIONS, PDF_EXTENSIONS
from .errors import InvalidInputError

logger = logging.getLogger(__name__)

PDF_KIND = "pdf"
IMAGE_KIND = "image"

_MIN_PDF_BYTES = 100
_PDF_HEADER = b"%PDF-"
_PDF_MARKERS = re.compile(rb"/Type\s*/Catalog|/Root|startxref")


# ============================================================================
# Source Documents
# ============================================================================

@dataclass(frozen=True)
class SourceDocument:
    """Original bytes of the scanned document."""
    data: bytes
    kind: str
    name: str = "document"

    @property
    def is_pdf(self) -> bool:
        return self.kind == PDF_KIND


def detect_input_type(path: Union[str, Path]) -> Optional[str]:
    """Return 'pdf', 'image' or None for an unsupported extension."""
    suffix = Path(path).suffix.lower()
    if suffix in PDF_EXTENSIONS:
        return PDF_KIND
    if suffix in IMAGE_EXTENSIONS:
        return IMAGE_KIND
    return None


def is_valid_pdf(data: Optional[bytes]) -> bool:
    """
    Structural sanity check of PDF bytes.

    Requires at least 100 bytes, a ``%PDF-`` header in the first 10 bytes
    and a catalog, root or startxref marker in the first or last 1 KB.
    """
    if not data or len(data) < _MIN_PDF_BYTES:
        return False
    if not data[:10].startswith(_PDF_HEADER):
        return False
    return bool(_PDF_MARKERS.search(data[:1024]) or _PDF_MARKERS.search(data[-1024:]))


def load_source(path: Union[str, Path], max_bytes: int = 20 * 1024 * 1024) -> SourceDocument:
    """
    Read and validate a source document.

    Args:
        path: Path to a PDF or image file
        max_bytes: Upper bound on the file size

    Returns:
        SourceDocument with the raw bytes

    Raises:
        InvalidInputError: If the file is missing, empty, too large, of an
            unsupported type, or a structurally invalid PDF
    """
    path = Path(path)
    kind = detect_input_type(path)
    if kind is None:
        raise InvalidInputError(f"Unsupported file type: {path.suffix or path.name}")

    if not path.is_file():
        raise InvalidInputError(f"File not found: {path}")

    size = path.stat().st_size
    if size == 0:
        raise InvalidInputError(f"File is empty: {path}")
    if size > max_bytes:
        raise InvalidInputError(
            f"File too large: {size} bytes (max {max_bytes // (1024 * 1024)}MB)"
        )

    try:
        data = path.read_bytes()
    except OSError as e:
        raise InvalidInputError(f"Could not read {path}: {e}") from e

    if kind == PDF_KIND and not is_valid_pdf(data):
        raise InvalidInputError(f"Invalid or corrupted PDF: {path}")

    logger.info(f"Loaded {kind}: {path.name} ({size} bytes)")
    return SourceDocument(data=data, kind=kind, name=path.stem)


# ============================================================================
# Existing Text Layer
# ============================================================================

def extract_existing_text(pdf_bytes: bytes) -> List[str]:
    """Extract the text layer of every page of a PDF, in page order."""
    import fitz

    try:
        with fitz.open(stream=pdf_bytes, filetype="pdf") as doc:
            return [page.get_text("text") for page in doc]
    except (RuntimeError, ValueError) as e:
        logger.warning(f"Could not read PDF text layer: {e}")
        return []


def has_searchable_text(pages: List[str], min_chars: int = 50) -> bool:
    """True when the extracted text is long enough to skip OCR."""
    return sum(len(p.strip()) for p in pages) > min_chars


# ============================================================================
# Images
# ============================================================================

def decode_image(data: bytes) -> Optional[np.ndarray]:
    """Decode image bytes to a BGR array, or None if undecodable."""
    import cv2

    buffer = np.frombuffer(data, dtype=np.uint8)
    img = cv2.imdecode(buffer, cv2.IMREAD_COLOR)
    if img is not None:
        return img

    # OpenCV cannot decode every format (GIF on older builds)
    from PIL import Image, UnidentifiedImageError
    try:
        with Image.open(BytesIO(data)) as pil_img:
            rgb = np.array(pil_img.convert("RGB"))
    except (UnidentifiedImageError, OSError):
        return None
    return rgb[:, :, ::-1].copy()


def image_size(data: bytes) -> Optional[Tuple[int, int]]:
    """Return (width, height) in pixels of encoded image bytes."""
    img = decode_image(data)
    if img is None:
        return None
    h, w = img.shape[:2]
    return w, h


def rasterize_pdf(pdf_bytes: bytes, dpi: int = 150) -> list:
    """
    Render PDF pages to PIL images using pdf2image (poppler backend).

    Raises:
        RuntimeError: If the PDF cannot be rasterized
    """
    from pdf2image import convert_from_bytes
    from pdf2image.exceptions import PDFPageCountError, PDFSyntaxError

    try:
        images = convert_from_bytes(pdf_bytes, dpi=dpi, fmt="png")
    except (PDFPageCountError, PDFSyntaxError) as e:
        raise RuntimeError(f"Failed to parse PDF: {e}") from e

    logger.info(f"Rasterized {len(images)} pages at {dpi} DPI")
    return images
