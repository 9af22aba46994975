# ============================================================================
# src/bloodwork_analysis/config/ocr_config.py
# ============================================================================
"""
OCR Settings
- PDF rasterization scale and page limit
- Contrast enhancement
- Tesseract page segmentation strategies and character whitelist
- Per-pass deadline and worker pool size
- Advisory confidence floor
"""

from typing import Dict
from pydantic import Field
from pydantic_settings import BaseSettings

class OCRSettings(BaseSettings):
    OCR_RENDER_SCALE: float = Field(
        default=3.0,
        gt=1.0, le=6.0,
        description="PDF render scale (1.0 = 72 DPI). 3.0 keeps small print legible."
    )
    OCR_MAX_PAGES: int = Field(
        default=3,
        ge=1,
        description="Maximum number of PDF pages rasterized into the canvas"
    )
    OCR_CONTRAST_GAIN: float = Field(
        default=1.5,
        ge=1.0, le=4.0,
        description="Contrast push applied around the gray midpoint"
    )
    OCR_CONTRAST_MIDPOINT: int = Field(
        default=128,
        ge=1, le=254,
        description="Gray level separating ink from paper"
    )
    OCR_PAGE_SEGMENTATION_MODES: Dict[str, int] = Field(
        default={"document": 3, "table": 6},
        description="Ordered strategy name -> Tesseract PSM. Earlier strategies win ties."
    )
    OCR_CHAR_WHITELIST: str = Field(
        default="0123456789ABCDEFGHIJKLMNOPQRSTUVWXYZabcdefghijklmnopqrstuvwxyz.,-+:%/()^ ",
        description="Characters Tesseract may emit (digits, units, parameter names)"
    )
    OCR_LANGUAGE: str = Field(
        default="eng",
        description="Tesseract language pack"
    )
    OCR_PASS_TIMEOUT: float = Field(
        default=30.0,
        gt=0.0,
        description="Deadline for a single recognition pass (seconds)"
    )
    OCR_MAX_WORKERS: int = Field(
        default=2,
        ge=1,
        description="Worker threads shared by all recognition passes"
    )
    OCR_CONFIDENCE_FLOOR: float = Field(
        default=60.0,
        ge=0.0, le=100.0,
        description="Below this confidence the caller should ask for manual verification"
    )

ocr_settings = OCRSettings()
