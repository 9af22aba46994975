# ============================================================================
# src/bloodwork_analysis/preprocessors/image_preprocessor.py
# ============================================================================
"""
Image Preprocessor

Turns an uploaded report (PDF or raster image) into a single grayscale,
contrast-enhanced canvas for OCR:
- PDF pages rendered with pypdfium2 at a high scale on a white fill,
  stacked top to bottom
- Transparent images flattened onto white
- ITU-R 601 luminance grayscale (0.299 R + 0.587 G + 0.114 B)
- Contrast push around the gray midpoint: ink darker, paper lighter
"""

import io
import logging
from pathlib import Path
from typing import List, Union

import numpy as np
import pypdfium2
from PIL import Image, UnidentifiedImageError

from ..config.ocr_config import OCRSettings, ocr_settings
from ..utils.exceptions import DocumentDecodeError
from ..utils.logging import log_performance

logger = logging.getLogger(__name__)

PDF_MAGIC = b"%PDF"
WHITE = (255, 255, 255)
LUMINANCE_WEIGHTS = np.array([0.299, 0.587, 0.114], dtype=np.float32)

DocumentSource = Union[bytes, bytearray, str, Path]


def is_pdf(data: bytes) -> bool:
    return data.lstrip()[:4] == PDF_MAGIC


class ImagePreprocessor:
    """Rasterize and enhance documents ahead of recognition."""

    def __init__(self, settings: OCRSettings = ocr_settings):
        self.settings = settings

    @log_performance(logger, "Image preprocessing")
    def preprocess(self, source: DocumentSource) -> Image.Image:
        """
        Produce one preprocessed grayscale image.

        Args:
            source: Document bytes or a path to a PDF/image file

        Returns:
            PIL image in mode "L"

        Raises:
            DocumentDecodeError: unreadable or corrupt input
        """
        data = self._read(source)
        image = self.rasterize_pdf(data) if is_pdf(data) else self.load_image(data)
        gray = self.to_grayscale(image)
        enhanced = self.push_contrast(gray)
        logger.debug(f"Preprocessed document into {enhanced.size[0]}x{enhanced.size[1]} canvas")
        return enhanced

    def _read(self, source: DocumentSource) -> bytes:
        if isinstance(source, (bytes, bytearray)):
            data = bytes(source)
        else:
            try:
                data = Path(source).read_bytes()
            except OSError as e:
                raise DocumentDecodeError(f"Cannot read document {source}: {e}") from e
        if not data:
            raise DocumentDecodeError("Document is empty")
        return data

    def rasterize_pdf(self, data: bytes) -> Image.Image:
        """Render up to OCR_MAX_PAGES pages and stack them vertically."""
        try:
            pdf = pypdfium2.PdfDocument(data)
        except pypdfium2.PdfiumError as e:
            raise DocumentDecodeError(f"Corrupt PDF: {e}") from e

        pages: List[Image.Image] = []
        try:
            page_count = len(pdf)
            if page_count == 0:
                raise DocumentDecodeError("PDF has no pages")
            if page_count > self.settings.OCR_MAX_PAGES:
                logger.warning(
                    f"PDF has {page_count} pages, only the first {self.settings.OCR_MAX_PAGES} are read"
                )
            for index in range(min(page_count, self.settings.OCR_MAX_PAGES)):
                page = pdf[index]
                try:
                    bitmap = page.render(
                        scale=self.settings.OCR_RENDER_SCALE,
                        fill_color=(255, 255, 255, 255),
                    )
                    pages.append(bitmap.to_pil().convert("RGB"))
                finally:
                    page.close()
        except pypdfium2.PdfiumError as e:
            raise DocumentDecodeError(f"Failed to render PDF: {e}") from e
        finally:
            pdf.close()

        if len(pages) == 1:
            return pages[0]

        width = max(page.width for page in pages)
        height = sum(page.height for page in pages)
        canvas = Image.new("RGB", (width, height), WHITE)
        offset = 0
        for page in pages:
            canvas.paste(page, (0, offset))
            offset += page.height
        return canvas

    def load_image(self, data: bytes) -> Image.Image:
        """Decode a raster image and flatten any transparency onto white."""
        try:
            image = Image.open(io.BytesIO(data))
            image.load()
        except (UnidentifiedImageError, OSError) as e:
            raise DocumentDecodeError(f"Unreadable image: {e}") from e

        if image.mode in ("RGBA", "LA") or (image.mode == "P" and "transparency" in image.info):
            rgba = image.convert("RGBA")
            background = Image.new("RGBA", rgba.size, WHITE + (255,))
            image = Image.alpha_composite(background, rgba)

        return image.convert("RGB")

    @staticmethod
    def to_grayscale(image: Image.Image) -> np.ndarray:
        pixels = np.asarray(image.convert("RGB"), dtype=np.float32)
        return pixels @ LUMINANCE_WEIGHTS

    def push_contrast(self, gray: np.ndarray) -> Image.Image:
        midpoint = float(self.settings.OCR_CONTRAST_MIDPOINT)
        stretched = (gray - midpoint) * self.settings.OCR_CONTRAST_GAIN + midpoint
        return Image.fromarray(np.clip(np.rint(stretched), 0, 255).astype(np.uint8))
