# ============================================================================
# src/bloodwork_analysis/utils/exceptions.py
# ============================================================================
"""
Custom exceptions for the blood work analysis engine.

Fatal errors carry a ``recovery`` hint the caller can turn into a prompt:
- "retry": the document itself could not be read
- "manual_entry": the document was read but values must be typed in
"""

from typing import List, Optional, Tuple


RECOVERY_RETRY = "retry"
RECOVERY_MANUAL_ENTRY = "manual_entry"


class BloodworkError(Exception):
    """Base exception for all blood work analysis errors."""
    recovery: Optional[str] = None


class DocumentProcessingError(BloodworkError):
    """Error while turning a document into text or parameters."""
    pass


class DocumentDecodeError(DocumentProcessingError):
    """Document bytes are not a readable PDF or raster image."""
    recovery = RECOVERY_RETRY


class OCRFailureError(DocumentProcessingError):
    """Every recognition pass failed."""
    recovery = RECOVERY_MANUAL_ENTRY

    def __init__(self, message: str, attempts: Optional[List[Tuple[str, str]]] = None):
        super().__init__(message)
        # (strategy, reason) per failed pass
        self.attempts = attempts or []


class NoParametersExtractedError(DocumentProcessingError):
    """Text was recognized but no known parameter was found in it."""
    recovery = RECOVERY_MANUAL_ENTRY

    def __init__(self, message: str, panel: str, ocr_confidence: float):
        super().__init__(message)
        self.panel = panel
        self.ocr_confidence = ocr_confidence


class ValidationError(BloodworkError):
    """Malformed input to the validation engine."""
    pass


class InvalidValueError(ValidationError):
    """Value is not a finite, non-negative number."""
    recovery = RECOVERY_MANUAL_ENTRY

    def __init__(self, message: str, parameter_id: str, value: object):
        super().__init__(message)
        self.parameter_id = parameter_id
        self.value = value


class MissingReferenceRangeError(ValidationError):
    """No reference range is defined for the parameter."""

    def __init__(self, message: str, parameter_id: str):
        super().__init__(message)
        self.parameter_id = parameter_id


class UnknownPanelError(BloodworkError):
    """Requested test panel is not in the reference data."""

    def __init__(self, message: str, panel: str):
        super().__init__(message)
        self.panel = panel


class ConfigurationError(BloodworkError):
    """Invalid configuration or malformed reference data."""
    pass


class NarrativeGenerationError(BloodworkError):
    """Narrative provider failed or returned an unusable response."""

    def __init__(self, message: str, provider: Optional[str] = None):
        super().__init__(message)
        self.provider = provider
