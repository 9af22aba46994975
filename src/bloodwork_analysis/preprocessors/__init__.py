# src/bloodwork_analysis/preprocessors/__init__.py

from .image_preprocessor import ImagePreprocessor, is_pdf

__all__ = ["ImagePreprocessor", "is_pdf"]
