# ============================================================================
# src/bloodwork_analysis/extractors/__init__.py
# ============================================================================
"""
Document text and parameter extraction.
"""

from .ocr_extractor import MultiPassOCREngine, RecognitionContext, assemble_text
from .parameter_extractor import ParameterExtractor, extract_demographics

__all__ = [
    "MultiPassOCREngine",
    "RecognitionContext",
    "assemble_text",
    "ParameterExtractor",
    "extract_demographics",
]
