"""
Configuration and constants for the searchable-scan pipeline.

This module provides:
- Global logging setup
- Spacing thresholds used for layout reconstruction
- OCR engine settings (remote Read API or local Tesseract)
- PDF synthesis parameters
"""

import os
from dataclasses import dataclass, field
from typing import Optional, Tuple
import logging

# ============================================================================
# Logging Configuration
# ============================================================================

logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger("scanlayer")


# ============================================================================
# Processing Configuration
# ============================================================================

@dataclass
class SpacingConfig:
    """Thresholds for gap classification, as multiples of the text height."""
    word_spacing_threshold: float = 0.5
    wide_spacing_threshold: float = 1.2
    very_wide_spacing_threshold: float = 2.0
    line_height_tolerance: float = 0.7
    paragraph_spacing_threshold: float = 2.0
    line_jitter_threshold: float = 0.3
    newline_threshold: float = 1.2
    min_word_gap_pixels: float = 3.0
    default_height: float = 12.0  # Used when both boxes are degenerate
    # Rows are grouped when centers differ by less than average height * this
    row_grouping_factor: float = 0.5


@dataclass
class OCRConfig:
    """OCR engine configuration."""
    engine: str = "read-api"  # read-api, tesseract
    endpoint: Optional[str] = None
    api_key: Optional[str] = None
    api_path: str = "/vision/v3.2/read/analyze"
    request_timeout: float = 30.0
    # Polling of the asynchronous read operation
    poll_interval: float = 1.0
    max_poll_attempts: int = 30
    # Tesseract configuration
    tesseract_lang: str = "eng"
    tesseract_config: str = "--oem 3 --psm 6"


@dataclass
class SynthesisConfig:
    """Searchable PDF generation configuration."""
    font_name: str = "helv"  # PyMuPDF base-14 alias
    overlay_font_size: float = 8.0
    overlay_margin: float = 10.0
    min_font_size: float = 1.0
    image_font_size: float = 12.0
    image_line_step: float = 15.0
    # Text dump (last resort) layout, A4 in points
    page_format: Tuple[float, float] = (595.0, 842.0)
    dump_margin: float = 50.0
    dump_title: str = "OCR Extracted Text"
    dump_title_size: int = 16
    dump_font_size: int = 12
    dump_line_height: float = 14.0
    dump_footer_size: int = 10
    rasterize_dpi: int = 150


@dataclass
class PipelineConfig:
    """Main pipeline configuration."""
    spacing: SpacingConfig = field(default_factory=SpacingConfig)
    ocr: OCRConfig = field(default_factory=OCRConfig)
    synthesis: SynthesisConfig = field(default_factory=SynthesisConfig)

    # Global settings
    max_file_size_bytes: int = 20 * 1024 * 1024
    max_workers: int = 4
    existing_text_min_chars: int = 50
    existing_text_confidence: float = 0.95
    page_separator: str = "\n\n"
    debug_mode: bool = False


# ============================================================================
# Default Configuration Instance
# ============================================================================

def get_config() -> PipelineConfig:
    """Get the default pipeline configuration with environment overrides."""
    config = PipelineConfig()

    config.ocr.endpoint = (
        os.environ.get("SCANLAYER_OCR_ENDPOINT") or os.environ.get("VISION_ENDPOINT")
    )
    config.ocr.api_key = (
        os.environ.get("SCANLAYER_OCR_KEY") or os.environ.get("VISION_KEY")
    )

    engine = os.environ.get("SCANLAYER_OCR_ENGINE")
    if engine:
        config.ocr.engine = engine.lower()

    workers = os.environ.get("SCANLAYER_MAX_WORKERS", "")
    if workers.isdigit() and int(workers) > 0:
        config.max_workers = int(workers)

    if os.environ.get("SCANLAYER_DEBUG", "").lower() == "true":
        config.debug_mode = True

    return config


# ============================================================================
# Supported Inputs
# ============================================================================

PDF_EXTENSIONS = ('.pdf',)
IMAGE_EXTENSIONS = ('.jpg', '.jpeg', '.png', '.gif', '.bmp', '.tiff', '.tif')
