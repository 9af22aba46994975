# src/bloodwork_analysis/core/context/__init__.py

from .enums import Sex, MedicalStatus, RiskLevel, MedicalFlag, WarningCode
from .patient import PatientContext
from .reference import ParameterDefinition, ReferenceRange, CriticalThreshold, PlausibilityLimit
from .results import (
    OCRResult,
    ExtractedParameter,
    NormalizedParameter,
    ManualEntry,
    MedicalResult,
    PipelineWarning,
    BilingualText,
    ExtractionResult,
    PanelAnalysis,
)

__all__ = [
    "Sex",
    "MedicalStatus",
    "RiskLevel",
    "MedicalFlag",
    "WarningCode",
    "PatientContext",
    "ParameterDefinition",
    "ReferenceRange",
    "CriticalThreshold",
    "PlausibilityLimit",
    "OCRResult",
    "ExtractedParameter",
    "NormalizedParameter",
    "ManualEntry",
    "MedicalResult",
    "PipelineWarning",
    "BilingualText",
    "ExtractionResult",
    "PanelAnalysis",
]
