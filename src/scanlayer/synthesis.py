"""
Searchable-PDF synthesis.

Produces a PDF that looks like the original scan but carries an invisible
text layer. Five renderers are tried from most to least faithful; every
candidate is validated and any failure moves to the next tier:

    0 REUSE             source PDF already has a text layer, returned as-is
    1 OVERLAY_PRECISE   word-positioned invisible text on the source PDF
    2 OVERLAY_SIMPLE    line listing of the transcript on the source PDF
    3 FRESH_FROM_IMAGE  new PDF of the page images with invisible lines
    4 TEXT_DUMP         paginated plain-text PDF, always renderable
"""

import logging
from enum import IntEnum
from typing import Callable, Dict, Optional

from .config import SynthesisConfig
from .errors import InternalError
from .export import build_image_document, build_text_dump
from .io import PDF_KIND, SourceDocument, is_valid_pdf
from .models import OcrDocument, SynthesisResult, Transcript
from .overlay import build_precise_overlay, build_simple_overlay

logger = logging.getLogger(__name__)

__all__ = ["Tier", "advance_on_failure", "is_valid_pdf", "SynthesisPipeline"]


class Tier(IntEnum):
    REUSE = 0
    OVERLAY_PRECISE = 1
    OVERLAY_SIMPLE = 2
    FRESH_FROM_IMAGE = 3
    TEXT_DUMP = 4


def advance_on_failure(tier: Tier, source_kind: str) -> Tier:
    """
    Next tier after ``tier`` failed.

    Image sources have no PDF to overlay, so they go from reuse straight to
    the image-backed document.

    Raises:
        InternalError: If the text dump itself failed
    """
    if tier is Tier.REUSE:
        return Tier.OVERLAY_PRECISE if source_kind == PDF_KIND else Tier.FRESH_FROM_IMAGE
    if tier is Tier.TEXT_DUMP:
        raise InternalError("Text dump produced an invalid PDF")
    return Tier(tier + 1)


class SynthesisPipeline:
    """Runs the tier state machine for one document at a time."""

    _BUILDERS: Dict[Tier, str] = {
        Tier.REUSE: "build_reuse",
        Tier.OVERLAY_PRECISE: "build_precise",
        Tier.OVERLAY_SIMPLE: "build_simple",
        Tier.FRESH_FROM_IMAGE: "build_from_image",
        Tier.TEXT_DUMP: "build_text_dump",
    }

    def __init__(self, config: Optional[SynthesisConfig] = None):
        self.config = config or SynthesisConfig()

    # ------------------------------------------------------------------
    # Tier renderers. Each returns PDF bytes or None when not applicable.
    # ------------------------------------------------------------------

    def build_reuse(self, source, document, transcript, source_has_text) -> Optional[bytes]:
        if source.kind != PDF_KIND or not source_has_text:
            return None
        return source.data

    def build_precise(self, source, document, transcript, source_has_text) -> Optional[bytes]:
        return build_precise_overlay(source.data, document, self.config)

    def build_simple(self, source, document, transcript, source_has_text) -> Optional[bytes]:
        return build_simple_overlay(source.data, transcript.page_texts, self.config)

    def build_from_image(self, source, document, transcript, source_has_text) -> Optional[bytes]:
        return build_image_document(source, document, transcript.page_texts, self.config)

    def build_text_dump(self, source, document, transcript, source_has_text) -> Optional[bytes]:
        return build_text_dump(transcript.text, transcript.confidence_percent, self.config)

    def _builder(self, tier: Tier) -> Callable:
        return getattr(self, self._BUILDERS[tier])

    # ------------------------------------------------------------------

    def synthesize(
        self,
        source: SourceDocument,
        document: Optional[OcrDocument],
        transcript: Transcript,
        source_has_text: bool = False
    ) -> SynthesisResult:
        """
        Produce a validated searchable PDF.

        Args:
            source: Original document bytes
            document: OCR result with geometry, or None when the text came
                from the source's own text layer
            transcript: Reconstructed text
            source_has_text: Whether the source PDF is already searchable

        Returns:
            SynthesisResult with the first tier whose output validated

        Raises:
            InternalError: If even the text dump fails validation
        """
        tier = Tier.REUSE
        while True:
            try:
                candidate = self._builder(tier)(source, document, transcript, source_has_text)
            except Exception as e:
                logger.warning(f"Tier {tier.value} ({tier.name}) raised: {e}")
                candidate = None
            else:
                if candidate is not None and not is_valid_pdf(candidate):
                    logger.warning(f"Tier {tier.value} ({tier.name}) produced an invalid PDF")
                    candidate = None

            if candidate is not None:
                break
            tier = advance_on_failure(tier, source.kind)

        if tier > Tier.REUSE:
            logger.warning(f"Synthesis degraded to tier {tier.value} ({tier.name}) for {source.name}")
        else:
            logger.info(f"Source PDF of {source.name} already searchable, reused")

        return SynthesisResult(data=bytes(candidate), tier_used=int(tier), validated=True)
