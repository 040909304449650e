"""
Tests for source loading and PDF helpers.
"""

import pytest
import numpy as np
import sys
from pathlib import Path

# Add src to path
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))


def make_pdf(text=None):
    import fitz
    doc = fitz.open()
    page = doc.new_page(width=300, height=200)
    if text:
        page.insert_text((20, 40), text, fontsize=11)
    data = doc.tobytes()
    doc.close()
    return data


class TestLoadSource:
    """Test validation of input files."""

    def test_load_pdf(self, tmp_path):
        from scanlayer.io import load_source

        path = tmp_path / "doc.pdf"
        path.write_bytes(make_pdf())
        source = load_source(path)
        assert source.kind == "pdf"
        assert source.is_pdf
        assert source.name == "doc"

    def test_load_image(self, tmp_path):
        import cv2
        from scanlayer.io import load_source

        ok, buffer = cv2.imencode(".png", np.zeros((10, 10, 3), dtype=np.uint8))
        path = tmp_path / "scan.PNG"
        path.write_bytes(buffer.tobytes())
        assert load_source(path).kind == "image"

    def test_missing_file(self, tmp_path):
        from scanlayer.errors import InvalidInputError
        from scanlayer.io import load_source

        with pytest.raises(InvalidInputError):
            load_source(tmp_path / "absent.pdf")

    def test_empty_file(self, tmp_path):
        from scanlayer.errors import InvalidInputError
        from scanlayer.io import load_source

        path = tmp_path / "empty.png"
        path.write_bytes(b"")
        with pytest.raises(InvalidInputError, match="empty"):
            load_source(path)

    def test_oversize_file(self, tmp_path):
        from scanlayer.errors import InvalidInputError
        from scanlayer.io import load_source

        path = tmp_path / "big.png"
        path.write_bytes(b"\0" * 2048)
        with pytest.raises(InvalidInputError, match="too large"):
            load_source(path, max_bytes=1024)

    def test_unsupported_type(self, tmp_path):
        from scanlayer.errors import InvalidInputError
        from scanlayer.io import load_source

        path = tmp_path / "notes.txt"
        path.write_text("hello")
        with pytest.raises(InvalidInputError, match="Unsupported"):
            load_source(path)

    def test_corrupted_pdf(self, tmp_path):
        from scanlayer.errors import InvalidInputError
        from scanlayer.io import load_source

        path = tmp_path / "broken.pdf"
        path.write_bytes(b"%PDF-1.4\n" + b"x" * 500)
        with pytest.raises(InvalidInputError, match="Invalid"):
            load_source(path)


class TestExistingText:
    """Test text-layer detection."""

    def test_extract_text_layer(self):
        from scanlayer.io import extract_existing_text, has_searchable_text

        sentence = "This page already carries a real text layer with enough characters."
        pages = extract_existing_text(make_pdf(sentence))
        assert len(pages) == 1
        assert "real text layer" in pages[0]
        assert has_searchable_text(pages)

    def test_scanned_pdf_has_no_text(self):
        from scanlayer.io import extract_existing_text, has_searchable_text

        pages = extract_existing_text(make_pdf())
        assert pages == [""] or not pages[0].strip()
        assert not has_searchable_text(pages)

    def test_threshold_is_exclusive(self):
        from scanlayer.io import has_searchable_text

        assert not has_searchable_text(["x" * 50])
        assert has_searchable_text(["x" * 30, "y" * 21])


class TestImages:
    """Test image decoding."""

    def test_image_size(self):
        import cv2
        from scanlayer.io import image_size

        ok, buffer = cv2.imencode(".png", np.zeros((40, 70, 3), dtype=np.uint8))
        assert image_size(buffer.tobytes()) == (70, 40)

    def test_undecodable(self):
        from scanlayer.io import image_size

        assert image_size(b"not an image at all") is None
