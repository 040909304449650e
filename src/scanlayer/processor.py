"""
Document processor for the searchable-scan pipeline.

Provides:
- DocumentProcessor, the orchestration facade
- Existing-text detection for PDFs that are already searchable
- ProcessingResult assembly for the document store
"""

import logging
import time
import uuid
from pathlib import Path
from typing import Any, Optional, Union

from .config import PipelineConfig, get_config
from .io import SourceDocument, extract_existing_text, has_searchable_text, load_source
from .models import OcrDocument, ProcessingResult, RawOcrText
from .rate_limit import RateLimiter
from .synthesis import SynthesisPipeline
from .transcript import TranscriptBuilder

logger = logging.getLogger(__name__)


class DocumentProcessor:
    """
    Orchestrates one document through the pipeline.

    Coordinates:
    - Rate limiting (when a limiter is injected)
    - Source loading and validation
    - Existing text reuse or OCR
    - Transcript reconstruction
    - Searchable PDF synthesis
    """

    def __init__(
        self,
        config: Optional[PipelineConfig] = None,
        engine: Any = None,
        rate_limiter: Optional[RateLimiter] = None
    ):
        self.config = config or get_config()
        if self.config.debug_mode:
            logging.getLogger("scanlayer").setLevel(logging.DEBUG)
        self.rate_limiter = rate_limiter
        self.transcripts = TranscriptBuilder(self.config)
        self.synthesis = SynthesisPipeline(self.config.synthesis)

        # Created lazily; only needed when no OCR result is supplied
        self._engine = engine

    @property
    def engine(self):
        if self._engine is None:
            from .ocr_engine import create_engine
            self._engine = create_engine(self.config.ocr, self.config.synthesis.rasterize_dpi)
        return self._engine

    def _existing_text(self, source: SourceDocument) -> Optional[RawOcrText]:
        if not source.is_pdf:
            return None
        pages = extract_existing_text(source.data)
        if not has_searchable_text(pages, self.config.existing_text_min_chars):
            return None
        logger.info(f"{source.name} already has a text layer, skipping OCR")
        return RawOcrText.from_value(pages)

    def _ocr(self, source: SourceDocument, ocr_result: Any) -> OcrDocument:
        if isinstance(ocr_result, OcrDocument):
            return ocr_result
        if ocr_result is not None:
            return OcrDocument.from_dict(ocr_result)
        return self.engine.recognize(source)

    def process(
        self,
        path: Union[str, Path],
        ocr_result: Any = None,
        client_id: Optional[str] = None,
        generate_overlay: bool = True
    ) -> ProcessingResult:
        """
        Process a document.

        Args:
            path: PDF or image file
            ocr_result: Precomputed OCR result (dict or OcrDocument); the
                configured engine is called when omitted
            client_id: Key for rate limiting
            generate_overlay: Whether to synthesize the searchable PDF

        Returns:
            ProcessingResult for the document store

        Raises:
            RateLimitExceeded: If ``client_id`` is over its quota
            InvalidInputError: If the source is unusable
            OcrTimeoutError, OcrEngineError: If OCR fails
            InternalError: If synthesis breaks its guarantees
        """
        start_time = time.time()
        if self.rate_limiter is not None and client_id is not None:
            self.rate_limiter.check(client_id)

        source = load_source(path, self.config.max_file_size_bytes)

        existing = None if ocr_result is not None else self._existing_text(source)
        if existing is not None:
            document = None
            transcript = self.transcripts.from_raw_text(
                existing, self.config.existing_text_confidence
            )
            page_count = len(existing.page_texts())
        else:
            document = self._ocr(source, ocr_result)
            transcript = self.transcripts.build(document)
            page_count = len(document.pages)

        synthesized = None
        if generate_overlay:
            synthesized = self.synthesis.synthesize(
                source, document, transcript, source_has_text=existing is not None
            )

        elapsed = time.time() - start_time
        logger.info(
            f"Processed {source.name}: {page_count} page(s), "
            f"confidence {transcript.confidence_percent}%, {elapsed:.2f}s"
        )

        return ProcessingResult(
            text=transcript.text,
            confidence_percent=transcript.confidence_percent,
            pages=page_count,
            synthesized_document=synthesized.data if synthesized else None,
            tier_used=synthesized.tier_used if synthesized else None,
            metadata={
                "task_id": str(uuid.uuid4()),
                "source_file": str(path),
                "source_kind": source.kind,
                "text_source": "existing" if existing is not None else "ocr",
                "per_page_confidence": list(transcript.per_page_confidence),
                "processing_time": elapsed,
            },
        )
