# ============================================================================
# FILE: tests/unit/test_image_preprocessor.py
# ============================================================================
"""
Unit tests for document preprocessing (PDF rasterization, grayscale, contrast)
"""

import io

import numpy as np
import pytest
from PIL import Image
from reportlab.lib.pagesizes import A4
from reportlab.pdfgen import canvas

from bloodwork_analysis.config.ocr_config import OCRSettings
from bloodwork_analysis.preprocessors import ImagePreprocessor, is_pdf
from bloodwork_analysis.utils.exceptions import DocumentDecodeError


def make_pdf(pages=1):
    """Small lab-report-like PDF"""
    buffer = io.BytesIO()
    pdf = canvas.Canvas(buffer, pagesize=A4)
    for number in range(pages):
        pdf.setFont("Helvetica", 12)
        pdf.drawString(72, 760, f"COMPLETE BLOOD COUNT - page {number + 1}")
        pdf.drawString(72, 730, "Hemoglobin    14.2    g/dL    13.5 - 17.5")
        pdf.showPage()
    pdf.save()
    return buffer.getvalue()


@pytest.fixture
def preprocessor():
    return ImagePreprocessor(OCRSettings(OCR_RENDER_SCALE=1.5, OCR_MAX_PAGES=2))


def test_is_pdf():
    assert is_pdf(make_pdf())
    assert not is_pdf(b"\x89PNG\r\n")


def test_image_becomes_grayscale(preprocessor, png_bytes):
    image = preprocessor.preprocess(png_bytes)

    assert image.mode == "L"
    assert image.size == (120, 40)


def test_contrast_push_darkens_and_lightens(preprocessor):
    gray = np.array([[40.0, 128.0, 200.0]], dtype=np.float32)
    pushed = np.asarray(preprocessor.push_contrast(gray))

    assert pushed[0, 0] < 40
    assert pushed[0, 1] == 128
    assert pushed[0, 2] > 200
    assert pushed.dtype == np.uint8


def test_contrast_is_clipped(preprocessor):
    gray = np.array([[0.0, 255.0]], dtype=np.float32)
    pushed = np.asarray(preprocessor.push_contrast(gray))

    assert pushed[0, 0] == 0
    assert pushed[0, 1] == 255


def test_luminance_weights(preprocessor):
    red = Image.new("RGB", (1, 1), (255, 0, 0))
    assert preprocessor.to_grayscale(red)[0, 0] == pytest.approx(0.299 * 255, abs=0.01)


def test_transparent_image_is_flattened_onto_white(preprocessor):
    transparent = Image.new("RGBA", (10, 10), (0, 0, 0, 0))
    buffer = io.BytesIO()
    transparent.save(buffer, format="PNG")

    image = preprocessor.preprocess(buffer.getvalue())

    assert np.asarray(image).min() == 255


def test_pdf_is_rasterized(preprocessor):
    image = preprocessor.preprocess(make_pdf())

    assert image.mode == "L"
    # A4 at 1.5x is roughly 893 x 1263 pixels
    assert 880 <= image.width <= 900
    assert image.height > image.width
    # Text was rendered, so the page is not blank
    assert np.asarray(image).min() < 128


def test_pdf_pages_are_stacked_up_to_limit(preprocessor):
    one = preprocessor.preprocess(make_pdf(pages=1))
    two = preprocessor.preprocess(make_pdf(pages=2))
    three = preprocessor.preprocess(make_pdf(pages=3))

    assert two.height == 2 * one.height
    assert three.height == two.height


def test_path_source(preprocessor, png_bytes, tmp_path):
    path = tmp_path / "report.png"
    path.write_bytes(png_bytes)

    assert preprocessor.preprocess(path).size == (120, 40)
    assert preprocessor.preprocess(str(path)).size == (120, 40)


@pytest.mark.parametrize("data", [b"", b"not an image at all", b"%PDF-1.4 garbage"])
def test_corrupt_input_raises_decode_error(preprocessor, data):
    with pytest.raises(DocumentDecodeError) as exc_info:
        preprocessor.preprocess(data)
    assert exc_info.value.recovery == "retry"


def test_missing_file_raises_decode_error(preprocessor, tmp_path):
    with pytest.raises(DocumentDecodeError):
        preprocessor.preprocess(tmp_path / "missing.pdf")
