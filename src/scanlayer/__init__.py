"""
Searchable Scan Pipeline
========================

Turns a scanned document and its word-level OCR result into a correctly
spaced, paragraph-structured transcript and a searchable PDF carrying an
invisible text layer.

Main components:
- Spacing inference from word and line geometry
- Reading-order recovery for degenerate OCR output
- Text normalization and paragraph structuring
- Confidence aggregation
- Tiered, self-validating searchable PDF synthesis
"""

__version__ = "1.0.0"
__author__ = "Searchable Scan Team"

from .config import PipelineConfig, get_config
from .errors import (
    ScanLayerError, InvalidInputError, OcrTimeoutError, OcrEngineError,
    InternalError, RateLimitExceeded,
)
from .models import OcrDocument, Page, Line, Word, Transcript, SynthesisResult, ProcessingResult
from .spacing import SpacingEngine, SpacingToken
from .normalizer import normalize_text
from .paragraphs import structure_paragraphs
from .confidence import page_confidence, document_confidence, confidence_percent
from .transcript import TranscriptBuilder
from .synthesis import SynthesisPipeline, Tier, advance_on_failure, is_valid_pdf
from .rate_limit import RateLimiter
from .processor import DocumentProcessor

__all__ = [
    # Config
    "PipelineConfig", "get_config",
    # Errors
    "ScanLayerError", "InvalidInputError", "OcrTimeoutError", "OcrEngineError",
    "InternalError", "RateLimitExceeded",
    # Model
    "OcrDocument", "Page", "Line", "Word", "Transcript", "SynthesisResult", "ProcessingResult",
    # Layout reconstruction
    "SpacingEngine", "SpacingToken", "normalize_text", "structure_paragraphs",
    "page_confidence", "document_confidence", "confidence_percent",
    "TranscriptBuilder",
    # Synthesis
    "SynthesisPipeline", "Tier", "advance_on_failure", "is_valid_pdf",
    # Orchestration
    "RateLimiter", "DocumentProcessor",
]
