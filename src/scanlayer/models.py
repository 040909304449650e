"""
Data model for OCR input and pipeline output.

Provides:
- Word / Line / Page / OcrDocument parsed from OCR engine JSON
- Transcript (reconstructed text + confidence)
- SynthesisResult and ProcessingResult handed to the document store
- RawOcrText, a tagged variant for plain/paged extracted text
"""

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional, Dict, Any, Tuple

from .geometry import Quad, Bounds, bounds, union_bounds

logger = logging.getLogger(__name__)


# ============================================================================
# OCR Input
# ============================================================================

@dataclass(frozen=True)
class Word:
    """A single recognized word."""
    text: str
    quad: Optional[Quad] = None
    confidence: Optional[float] = None

    @property
    def bounds(self) -> Optional[Bounds]:
        return bounds(self.quad)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'Word':
        confidence = data.get("confidence")
        try:
            confidence = float(confidence) if confidence is not None else None
        except (TypeError, ValueError):
            confidence = None
        return cls(
            text=str(data.get("text") or ""),
            quad=Quad.from_flat(data.get("boundingBox")),
            confidence=confidence,
        )


@dataclass(frozen=True)
class Line:
    """Words of one OCR line, in the order the engine returned them."""
    words: Tuple[Word, ...] = ()
    quad: Optional[Quad] = None
    text: str = ""

    @property
    def bounds(self) -> Optional[Bounds]:
        """Line box, or the union of its word boxes when the engine gave none."""
        if self.quad is not None:
            return bounds(self.quad)
        return union_bounds(w.bounds for w in self.words)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'Line':
        words = tuple(Word.from_dict(w) for w in (data.get("words") or []))
        text = data.get("text") or " ".join(w.text for w in words)
        return cls(words=words, quad=Quad.from_flat(data.get("boundingBox")), text=text)


@dataclass(frozen=True)
class Page:
    """One OCR page. ``width``/``height`` are in the engine's units."""
    lines: Tuple[Line, ...] = ()
    index: int = 0
    width: Optional[float] = None
    height: Optional[float] = None
    unit: str = "pixel"

    @property
    def words(self) -> List[Word]:
        return [w for line in self.lines for w in line.words]

    @classmethod
    def from_dict(cls, data: Dict[str, Any], index: int = 0) -> 'Page':
        lines = tuple(Line.from_dict(l) for l in (data.get("lines") or []))
        return cls(
            lines=lines,
            index=index,
            width=_positive_or_none(data.get("width")),
            height=_positive_or_none(data.get("height")),
            unit=str(data.get("unit") or "pixel"),
        )


@dataclass(frozen=True)
class OcrDocument:
    """Document-level OCR result."""
    pages: Tuple[Page, ...] = ()

    @classmethod
    def from_dict(cls, data: Any) -> 'OcrDocument':
        """
        Parse an OCR engine result.

        Accepts ``{"pages": [...]}``, the Read API envelope
        ``{"analyzeResult": {"readResults": [...]}}``, ``{"readResults": [...]}``
        or a bare list of pages.
        """
        if isinstance(data, dict):
            if "analyzeResult" in data:
                data = data.get("analyzeResult") or {}
            pages = data.get("pages")
            if pages is None:
                pages = data.get("readResults")
        else:
            pages = data
        pages = pages or []
        return cls(pages=tuple(Page.from_dict(p, i) for i, p in enumerate(pages)))

    @property
    def word_count(self) -> int:
        return sum(len(p.words) for p in self.pages)


def _positive_or_none(value: Any) -> Optional[float]:
    try:
        number = float(value)
    except (TypeError, ValueError):
        return None
    return number if number > 0 else None


# ============================================================================
# Extracted Text Variant
# ============================================================================

class RawTextKind(Enum):
    PLAIN = "plain"
    PAGED = "paged"
    EMPTY = "empty"


@dataclass(frozen=True)
class RawOcrText:
    """
    Extracted text resolved once at the boundary.

    Upstream sources hand over extracted text as a plain string, a list of
    per-page strings, or an object carrying a ``text`` field.
    """
    kind: RawTextKind
    plain: str = ""
    pages: Tuple[str, ...] = ()

    @classmethod
    def from_value(cls, value: Any) -> 'RawOcrText':
        if value is None:
            return cls(RawTextKind.EMPTY)
        if isinstance(value, RawOcrText):
            return value
        if isinstance(value, str):
            return cls(RawTextKind.PLAIN, plain=value) if value.strip() else cls(RawTextKind.EMPTY)
        if isinstance(value, dict):
            return cls.from_value(value.get("text"))
        if isinstance(value, (list, tuple)):
            pages = tuple(_text_of(item) for item in value)
            if not any(p.strip() for p in pages):
                return cls(RawTextKind.EMPTY)
            return cls(RawTextKind.PAGED, pages=pages)
        if hasattr(value, "text"):
            return cls.from_value(getattr(value, "text"))
        return cls.from_value(str(value))

    def page_texts(self) -> List[str]:
        if self.kind is RawTextKind.PLAIN:
            return [self.plain]
        if self.kind is RawTextKind.PAGED:
            return list(self.pages)
        return []


def _text_of(item: Any) -> str:
    if item is None:
        return ""
    if isinstance(item, str):
        return item
    if isinstance(item, dict):
        return str(item.get("text") or "")
    return str(getattr(item, "text", "") or "")


# ============================================================================
# Output
# ============================================================================

@dataclass(frozen=True)
class Transcript:
    """Reconstructed text of a document. Page order matches the input."""
    text: str
    page_texts: Tuple[str, ...] = ()
    per_page_confidence: Tuple[float, ...] = ()
    overall_confidence: float = 0.0

    @property
    def confidence_percent(self) -> int:
        from .confidence import confidence_percent
        return confidence_percent(self.overall_confidence)


@dataclass(frozen=True)
class SynthesisResult:
    """Searchable PDF produced by the synthesis pipeline."""
    data: bytes
    tier_used: int
    validated: bool

    @property
    def degraded(self) -> bool:
        return self.tier_used > 0


@dataclass
class ProcessingResult:
    """Payload handed to the document store."""
    text: str
    confidence_percent: int
    pages: int
    synthesized_document: Optional[bytes] = None
    tier_used: Optional[int] = None
    metadata: Dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "text": self.text,
            "confidencePercent": self.confidence_percent,
            "pages": self.pages,
            "synthesizedDocument": self.synthesized_document,
            "tierUsed": self.tier_used,
        }
