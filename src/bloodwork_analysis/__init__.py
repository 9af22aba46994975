# ============================================================================
# src/bloodwork_analysis/__init__.py
# ============================================================================
"""
Bloodwork Analysis

Reads laboratory blood test reports (PDF or photo) or typed-in values,
normalizes them to canonical units and classifies each value against
sex- and age-specific reference ranges, with cross-parameter pattern
detection and a bilingual (English / Urdu) summary.

Quick start:
    from bloodwork_analysis.core.pipeline import AnalysisPipeline
    from bloodwork_analysis.core import ManualEntry, PatientContext

    pipeline = AnalysisPipeline()
    analysis = pipeline.analyze(
        "cbc",
        PatientContext(age=45, sex="male"),
        [ManualEntry("hemoglobin", 14.2, "g/dL")],
    )
"""

__version__ = "0.1.0"
