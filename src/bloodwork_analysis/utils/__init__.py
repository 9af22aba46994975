# ============================================================================
# src/bloodwork_analysis/utils/__init__.py
# ============================================================================
"""
Shared utilities: exceptions, logging, text normalization.
"""

from .exceptions import (
    BloodworkError,
    DocumentProcessingError,
    DocumentDecodeError,
    OCRFailureError,
    NoParametersExtractedError,
    ValidationError,
    InvalidValueError,
    MissingReferenceRangeError,
    UnknownPanelError,
    ConfigurationError,
    NarrativeGenerationError,
)
from .logging import setup_logging, log_performance, JsonFormatter

__all__ = [
    "BloodworkError",
    "DocumentProcessingError",
    "DocumentDecodeError",
    "OCRFailureError",
    "NoParametersExtractedError",
    "ValidationError",
    "InvalidValueError",
    "MissingReferenceRangeError",
    "UnknownPanelError",
    "ConfigurationError",
    "NarrativeGenerationError",
    "setup_logging",
    "log_performance",
    "JsonFormatter",
]
