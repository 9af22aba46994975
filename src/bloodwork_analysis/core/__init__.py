# ============================================================================
# src/bloodwork_analysis/core/__init__.py
# ============================================================================
"""
Core components for the bloodwork analysis engine.

Domain records are re-exported here; the assembler and pipeline are
imported from their own modules (core.assembler, core.pipeline).
"""

from .context import (
    Sex,
    MedicalStatus,
    RiskLevel,
    MedicalFlag,
    WarningCode,
    PatientContext,
    ParameterDefinition,
    ReferenceRange,
    CriticalThreshold,
    PlausibilityLimit,
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
