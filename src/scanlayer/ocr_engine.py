"""
OCR engine adapters.

Provides:
- ReadApiClient: REST "Read" API (submit, then poll the operation URL)
- TesseractEngine: local Tesseract via pytesseract
- create_engine: engine selection from configuration

Both return an OcrDocument with word-level quads and confidences in [0, 1].
"""

import logging
import time
from typing import Any, Dict, List, Optional, Tuple

import numpy as np
import requests

from .config import OCRConfig
from .errors import OcrEngineError, OcrTimeoutError
from .geometry import Quad
from .io import SourceDocument, decode_image, rasterize_pdf
from .models import Line, OcrDocument, Page, Word

logger = logging.getLogger(__name__)


# ============================================================================
# Read API Client
# ============================================================================

class ReadApiClient:
    """
    Client for an asynchronous Read OCR API.

    The document is submitted as an octet stream; the service answers with
    an ``Operation-Location`` header that is polled until the operation
    has succeeded or failed.
    """

    def __init__(self, config: Optional[OCRConfig] = None, session: Optional[requests.Session] = None):
        self.config = config or OCRConfig()
        if not self.config.endpoint or not self.config.api_key:
            raise OcrEngineError(
                "Read API endpoint and key are required. "
                "Set SCANLAYER_OCR_ENDPOINT and SCANLAYER_OCR_KEY."
            )
        self.session = session or requests.Session()
        self.sleep = time.sleep

    @property
    def analyze_url(self) -> str:
        return self.config.endpoint.rstrip("/") + self.config.api_path

    def _headers(self, content_type: Optional[str] = None) -> Dict[str, str]:
        headers = {"Ocp-Apim-Subscription-Key": self.config.api_key}
        if content_type:
            headers["Content-Type"] = content_type
        return headers

    def submit(self, data: bytes) -> str:
        """Submit a document and return the operation URL."""
        try:
            response = self.session.post(
                self.analyze_url,
                headers=self._headers("application/octet-stream"),
                data=data,
                timeout=self.config.request_timeout
            )
            response.raise_for_status()
        except requests.exceptions.RequestException as e:
            raise OcrEngineError(f"Read API submit failed: {e}") from e

        operation_url = response.headers.get("Operation-Location")
        if not operation_url:
            raise OcrEngineError("Read API response carried no Operation-Location header")
        return operation_url

    def poll(self, operation_url: str) -> Dict[str, Any]:
        """
        Poll an operation until it leaves the notStarted/running states.

        Raises:
            OcrTimeoutError: After ``max_poll_attempts`` unfinished polls
            OcrEngineError: If the service reports failure or errors out
        """
        attempts = self.config.max_poll_attempts
        for attempt in range(1, attempts + 1):
            try:
                response = self.session.get(
                    operation_url,
                    headers=self._headers(),
                    timeout=self.config.request_timeout
                )
                response.raise_for_status()
                result = response.json()
            except requests.exceptions.RequestException as e:
                raise OcrEngineError(f"Read API poll failed: {e}") from e
            except ValueError as e:
                raise OcrEngineError(f"Read API returned invalid JSON: {e}") from e

            status = str(result.get("status", "")).lower()
            logger.debug(f"Read operation status: {status} (attempt {attempt}/{attempts})")

            if status == "succeeded":
                return result
            if status == "failed":
                raise OcrEngineError("Read API reported a failed operation")

            self.sleep(self.config.poll_interval)

        raise OcrTimeoutError(attempts, self.config.poll_interval)

    def recognize(self, source: SourceDocument) -> OcrDocument:
        logger.info(f"Submitting {source.name} to Read API")
        result = self.poll(self.submit(source.data))
        document = OcrDocument.from_dict(result)
        logger.info(f"Read API returned {len(document.pages)} pages, {document.word_count} words")
        return document


# ============================================================================
# Tesseract Engine
# ============================================================================

class TesseractEngine:
    """OCR using Tesseract."""

    def __init__(self, config: Optional[OCRConfig] = None, rasterize_dpi: int = 150):
        self.config = config or OCRConfig()
        self.rasterize_dpi = rasterize_dpi
        try:
            import pytesseract
            self.pytesseract = pytesseract
            pytesseract.get_tesseract_version()
        except Exception as e:
            raise OcrEngineError(
                f"Tesseract not available: {e}\n"
                "Install with: pip install pytesseract\n"
                "Also install Tesseract: https://github.com/tesseract-ocr/tesseract"
            ) from e

    def _page_images(self, source: SourceDocument) -> list:
        if source.is_pdf:
            try:
                return [np.array(img.convert("RGB")) for img in
                        rasterize_pdf(source.data, self.rasterize_dpi)]
            except RuntimeError as e:
                raise OcrEngineError(str(e)) from e
        img = decode_image(source.data)
        if img is None:
            raise OcrEngineError(f"Could not decode image: {source.name}")
        return [img]

    def recognize_page(self, image: np.ndarray, index: int = 0) -> Page:
        """Recognize one page image into a Page of lines and words."""
        try:
            data = self.pytesseract.image_to_data(
                image,
                lang=self.config.tesseract_lang,
                config=self.config.tesseract_config,
                output_type=self.pytesseract.Output.DICT
            )
        except Exception as e:
            raise OcrEngineError(f"Tesseract error: {e}") from e

        height, width = image.shape[:2]
        return page_from_tesseract(data, index=index, width=width, height=height)

    def recognize(self, source: SourceDocument) -> OcrDocument:
        images = self._page_images(source)
        pages = tuple(self.recognize_page(img, i) for i, img in enumerate(images))
        document = OcrDocument(pages=pages)
        logger.info(f"Tesseract recognized {document.word_count} words on {len(pages)} pages")
        return document


def page_from_tesseract(
    data: Dict[str, List[Any]],
    index: int = 0,
    width: Optional[float] = None,
    height: Optional[float] = None
) -> Page:
    """
    Build a Page from ``pytesseract.image_to_data`` dict output.

    Words are grouped into lines by (block, paragraph, line) number;
    entries with a negative confidence carry no text and are skipped.
    """
    grouped: Dict[Tuple[int, int, int], List[Word]] = {}
    for i in range(len(data.get("text", []))):
        text = str(data["text"][i]).strip()
        try:
            conf = float(data["conf"][i])
        except (TypeError, ValueError):
            conf = -1.0
        if conf < 0 or not text:
            continue

        left, top = float(data["left"][i]), float(data["top"][i])
        quad = Quad.from_rect(
            left, top,
            left + float(data["width"][i]),
            top + float(data["height"][i])
        )
        key = (data["block_num"][i], data["par_num"][i], data["line_num"][i])
        grouped.setdefault(key, []).append(Word(text=text, quad=quad, confidence=conf / 100.0))

    lines = tuple(
        Line(words=tuple(words), text=" ".join(w.text for w in words))
        for _, words in sorted(grouped.items(), key=lambda item: item[0])
    )
    return Page(lines=lines, index=index, width=width, height=height, unit="pixel")


# ============================================================================
# Engine Factory
# ============================================================================

def create_engine(config: Optional[OCRConfig] = None, rasterize_dpi: int = 150):
    """Create the configured OCR engine."""
    config = config or OCRConfig()
    if config.engine == "tesseract":
        return TesseractEngine(config, rasterize_dpi)
    if config.engine == "read-api":
        return ReadApiClient(config)
    raise OcrEngineError(f"Unknown OCR engine: {config.engine}")
