#!/usr/bin/env python
"""
Command-line interface for the searchable-scan pipeline.

Usage:
    scanlayer --input <pdf_or_image> --output <output_dir> [options]

Examples:
    # OCR an image with the Read API (endpoint and key from the environment)
    scanlayer --input scan.png --output ./output

    # Reuse an OCR result saved as JSON
    scanlayer --input scan.pdf --ocr-json scan_ocr.json --output ./output

    # Local OCR with Tesseract, text only
    scanlayer --input scan.jpg --output ./output --engine tesseract --no-overlay
"""

import argparse
import json
import logging
import os
import sys
import time
from pathlib import Path
from typing import List, Optional

from scanlayer import __version__

# Setup logging
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger("scanlayer")


def setup_argparser() -> argparse.ArgumentParser:
    """Create argument parser."""
    parser = argparse.ArgumentParser(
        description="Searchable scan pipeline - reconstruct text from OCR and build a searchable PDF",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  OCR an image and build a searchable PDF:
    scanlayer --input scan.png --output ./output

  Use a saved OCR result instead of calling an engine:
    scanlayer --input scan.pdf --ocr-json scan_ocr.json --output ./output

  Local Tesseract OCR, transcript only:
    scanlayer --input scan.jpg --output ./output --engine tesseract --no-overlay
        """
    )

    # Required arguments
    parser.add_argument(
        "--input", "-i",
        required=True,
        help="Input PDF or image file"
    )

    parser.add_argument(
        "--output", "-o",
        required=True,
        help="Output directory for generated files"
    )

    # Optional arguments
    parser.add_argument(
        "--ocr-json",
        default=None,
        help="OCR result as JSON (pages/lines/words); skips the OCR engine"
    )

    parser.add_argument(
        "--engine",
        choices=["read-api", "tesseract"],
        default=None,
        help="OCR engine (default: read-api, or SCANLAYER_OCR_ENGINE)"
    )

    parser.add_argument(
        "--no-overlay",
        action="store_true",
        help="Only write the transcript, do not build a searchable PDF"
    )

    parser.add_argument(
        "--workers",
        type=int,
        default=None,
        help="Worker threads for per-page text reconstruction (default: 4)"
    )

    parser.add_argument(
        "--verbose", "-v",
        action="store_true",
        help="Enable verbose output"
    )

    parser.add_argument(
        "--quiet", "-q",
        action="store_true",
        help="Suppress non-error output"
    )

    parser.add_argument(
        "--version",
        action="version",
        version=f"%(prog)s {__version__}"
    )

    return parser


def check_dependencies(engine: str, needs_engine: bool) -> bool:
    """Check if required dependencies are available."""
    missing: List[str] = []

    for module, package in (
        ("numpy", "numpy"),
        ("cv2", "opencv-python"),
        ("fitz", "PyMuPDF"),
        ("fpdf", "fpdf2"),
        ("requests", "requests"),
    ):
        try:
            __import__(module)
        except ImportError:
            missing.append(package)

    if needs_engine and engine == "tesseract":
        try:
            import pytesseract
            try:
                pytesseract.get_tesseract_version()
            except Exception:
                missing.append("tesseract-ocr (system package)")
        except ImportError:
            missing.append("pytesseract")

    try:
        import pdf2image  # noqa: F401
    except ImportError:
        logger.warning("pdf2image not installed, PDF rasterization will be unavailable")

    if missing:
        logger.error("Missing required dependencies:")
        for dep in missing:
            logger.error(f"  - {dep}")
        logger.error("\nInstall with: pip install -e .")
        return False

    return True


def run_pipeline(args) -> int:
    """Run the searchable-scan pipeline."""
    from scanlayer.config import get_config
    from scanlayer.errors import ScanLayerError
    from scanlayer.processor import DocumentProcessor

    start_time = time.time()

    config = get_config()
    if args.engine:
        config.ocr.engine = args.engine
    if args.workers:
        config.max_workers = max(1, args.workers)

    output_dir = Path(args.output)
    output_dir.mkdir(parents=True, exist_ok=True)
    input_path = Path(args.input)

    ocr_result: Optional[dict] = None
    if args.ocr_json:
        try:
            with open(args.ocr_json, "r", encoding="utf-8") as f:
                ocr_result = json.load(f)
        except (OSError, ValueError) as e:
            logger.error(f"Could not read OCR JSON {args.ocr_json}: {e}")
            return 1

    processor = DocumentProcessor(config)
    try:
        result = processor.process(
            input_path,
            ocr_result=ocr_result,
            generate_overlay=not args.no_overlay
        )
    except ScanLayerError as e:
        logger.error(f"Processing failed: {e}")
        return 1

    stem = input_path.stem
    text_path = output_dir / f"{stem}.txt"
    text_path.write_text(result.text, encoding="utf-8")
    logger.info(f"Saved transcript: {text_path}")

    pdf_path = None
    if result.synthesized_document is not None:
        pdf_path = output_dir / f"{stem}_searchable.pdf"
        pdf_path.write_bytes(result.synthesized_document)
        logger.info(f"Saved searchable PDF: {pdf_path}")

    summary = result.to_dict()
    summary["synthesizedDocument"] = str(pdf_path) if pdf_path else None
    summary["metadata"] = result.metadata
    json_path = output_dir / f"{stem}.json"
    with open(json_path, "w", encoding="utf-8") as f:
        json.dump(summary, f, indent=2, ensure_ascii=False)
    logger.info(f"Saved JSON: {json_path}")

    elapsed = time.time() - start_time
    if not args.quiet:
        print("\n" + "=" * 60)
        print("SEARCHABLE SCAN COMPLETE")
        print("=" * 60)
        print(f"Source: {input_path}")
        print(f"Output: {output_dir}")
        print(f"Pages processed: {result.pages}")
        print(f"Confidence: {result.confidence_percent}%")
        if result.tier_used is not None:
            print(f"Synthesis tier: {result.tier_used}")
        print(f"Processing time: {elapsed:.2f}s")
        print("=" * 60)

    return 0


def main():
    """Main entry point."""
    parser = setup_argparser()
    args = parser.parse_args()

    # Configure logging level
    if args.verbose:
        logging.getLogger().setLevel(logging.DEBUG)
    elif args.quiet:
        logging.getLogger().setLevel(logging.ERROR)

    engine = args.engine or os.environ.get("SCANLAYER_OCR_ENGINE", "read-api").lower()
    if not check_dependencies(engine, needs_engine=args.ocr_json is None):
        sys.exit(1)

    try:
        exit_code = run_pipeline(args)
        sys.exit(exit_code)
    except KeyboardInterrupt:
        logger.info("Interrupted by user")
        sys.exit(130)


if __name__ == "__main__":
    main()
