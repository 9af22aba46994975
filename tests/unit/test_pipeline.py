# ============================================================================
# FILE: tests/unit/test_pipeline.py
# ============================================================================
"""
Unit tests for the analysis pipeline (OCR engine and narrative replaced by fakes)
"""

import pytest

from bloodwork_analysis.core.context import (
    BilingualText,
    ManualEntry,
    MedicalStatus,
    OCRResult,
    WarningCode,
)
from bloodwork_analysis.core.pipeline import AnalysisPipeline
from bloodwork_analysis.narrative.base import NarrativeGenerator, NarrativeReport
from bloodwork_analysis.utils.exceptions import (
    NarrativeGenerationError,
    NoParametersExtractedError,
    OCRFailureError,
    UnknownPanelError,
)


class FakeOCREngine:
    """Returns a canned OCR result and records the images it was given"""

    def __init__(self, text="", confidence=90.0, error=None):
        self.result = OCRResult(text=text, confidence=confidence, strategy="table")
        self.error = error
        self.calls = 0

    async def recognize_async(self, image):
        self.calls += 1
        if self.error is not None:
            raise self.error
        return self.result


class FakeNarrative(NarrativeGenerator):
    def __init__(self, report=None, error=None):
        super().__init__()
        self.report = report
        self.error = error
        self.requests = []

    @property
    def name(self):
        return "fake"

    async def generate(self, request):
        self.requests.append(request)
        if self.error is not None:
            raise self.error
        return self.report.summary

    async def generate_report(self, request):
        await self.generate(request)
        return self.report


def make_pipeline(engine):
    return AnalysisPipeline(ocr_engine=engine)


def codes(warnings):
    return [warning.code for warning in warnings]


@pytest.mark.asyncio
async def test_extract_document(png_bytes, sample_cbc_text):
    """Image bytes through OCR, extraction and unit normalization"""
    pipeline = make_pipeline(FakeOCREngine(sample_cbc_text, 88.0))

    extraction = await pipeline.extract_document(png_bytes, "cbc")

    values = {p.parameter_id: p.value for p in extraction.parameters}
    assert values == {"wbc": 7.5, "hemoglobin": 14.2, "mcv": 88.0, "platelets": 250}
    assert extraction.ocr_confidence == 88.0
    assert extraction.ocr_strategy == "table"
    assert extraction.warnings == []
    assert extraction.needs_verification is False
    assert extraction.demographics["age"] == 45


@pytest.mark.asyncio
async def test_low_confidence_extraction_is_flagged(png_bytes, sample_cbc_text):
    """Values are still returned but the caller is asked to verify them"""
    pipeline = make_pipeline(FakeOCREngine(sample_cbc_text, 45.0))

    extraction = await pipeline.extract_document(png_bytes, "cbc")

    assert len(extraction.parameters) == 4
    assert extraction.ocr_confidence == 45.0
    assert codes(extraction.warnings) == [WarningCode.LOW_OCR_CONFIDENCE]
    assert extraction.needs_verification is True


@pytest.mark.asyncio
async def test_no_parameters_raises(png_bytes):
    pipeline = make_pipeline(FakeOCREngine("Thank you for choosing our laboratory", 91.0))

    with pytest.raises(NoParametersExtractedError) as exc_info:
        await pipeline.extract_document(png_bytes, "cbc")

    assert exc_info.value.recovery == "manual_entry"
    assert exc_info.value.ocr_confidence == 91.0


@pytest.mark.asyncio
async def test_no_parameters_allowed_when_not_required(png_bytes):
    pipeline = make_pipeline(FakeOCREngine("Thank you for choosing our laboratory", 91.0))

    extraction = await pipeline.extract_document(png_bytes, "cbc", require_parameters=False)
    assert extraction.parameters == []


@pytest.mark.asyncio
async def test_ocr_failure_propagates(png_bytes):
    engine = FakeOCREngine(error=OCRFailureError("All 2 OCR passes failed", attempts=[]))

    with pytest.raises(OCRFailureError) as exc_info:
        await make_pipeline(engine).extract_document(png_bytes, "cbc")
    assert exc_info.value.recovery == "manual_entry"


@pytest.mark.asyncio
async def test_unknown_panel_checked_before_ocr(png_bytes):
    engine = FakeOCREngine("Hemoglobin 14.2 g/dL")

    with pytest.raises(UnknownPanelError):
        await make_pipeline(engine).extract_document(png_bytes, "urinalysis")
    assert engine.calls == 0


def test_analyze_manual_values(male_patient):
    pipeline = make_pipeline(FakeOCREngine())
    analysis = pipeline.analyze("cbc", male_patient, [ManualEntry("hemoglobin", 11.0, "g/dL")])

    assert analysis.result_for("hemoglobin").status == MedicalStatus.LOW
    assert analysis.ocr_confidence is None


@pytest.mark.asyncio
async def test_analyze_document_merges_manual_values(png_bytes, sample_cbc_text, male_patient):
    """Manual values win; document-level warnings are carried through"""
    pipeline = make_pipeline(FakeOCREngine(sample_cbc_text, 45.0))

    analysis = await pipeline.analyze_document(
        png_bytes, "cbc", male_patient, manual_entries=[ManualEntry("hemoglobin", 6.5)]
    )

    assert analysis.result_for("hemoglobin").status == MedicalStatus.CRITICAL_LOW
    assert analysis.result_for("wbc").status == MedicalStatus.NORMAL
    assert analysis.ocr_confidence == 45.0
    assert codes(analysis.warnings)[0] == WarningCode.LOW_OCR_CONFIDENCE


@pytest.mark.asyncio
@pytest.mark.parametrize("text, parameter_id, expected", [
    ("WBC 7500", "wbc", 7.5),
    ("Total WBC Count 7500 /cu mm", "wbc", 7.5),
    ("Platelet Count 250000", "platelets", 250),
    ("Platelets 150 - 450 x10^3/uL 250", "platelets", 250),
])
async def test_raw_counts_are_read_in_thousands(png_bytes, male_patient, text, parameter_id, expected):
    """Counts printed per cubic millimetre or without a unit are not taken as thousands"""
    pipeline = make_pipeline(FakeOCREngine(text, 90.0))

    analysis = await pipeline.analyze_document(png_bytes, "cbc", male_patient)

    result = analysis.result_for(parameter_id)
    assert result.value == expected
    assert result.unit == "10^3/uL"
    assert result.status == MedicalStatus.NORMAL


@pytest.mark.asyncio
async def test_analyze_document_empty_extraction_with_manual_values(png_bytes, male_patient):
    pipeline = make_pipeline(FakeOCREngine("illegible", 30.0))

    analysis = await pipeline.analyze_document(
        png_bytes, "cbc", male_patient, manual_entries=[ManualEntry("wbc", 7.0)]
    )
    assert [r.parameter_id for r in analysis.results] == ["wbc"]


@pytest.mark.asyncio
async def test_narrative_replaces_summary(png_bytes, sample_cbc_text, male_patient):
    report = NarrativeReport(
        summary=BilingualText(en="All good.", ur="سب ٹھیک ہے۔"),
        key_insights=("Hemoglobin is within range",),
        recommendations=BilingualText(en="Keep it up.", ur="جاری رکھیں۔"),
    )
    narrative = FakeNarrative(report=report)
    pipeline = make_pipeline(FakeOCREngine(sample_cbc_text, 88.0))

    analysis = await pipeline.analyze_document(png_bytes, "cbc", male_patient, narrative=narrative)

    assert analysis.summary == report.summary
    assert analysis.summary_source == "fake"
    assert analysis.key_insights == ["Hemoglobin is within range"]
    assert analysis.recommendations == report.recommendations

    request = narrative.requests[0]
    assert request.panel_name.en == "Complete Blood Count"
    assert request.results == analysis.results


@pytest.mark.asyncio
async def test_narrative_failure_keeps_rule_based_summary(male_patient):
    pipeline = make_pipeline(FakeOCREngine())
    analysis = pipeline.analyze("cbc", male_patient, [ManualEntry("hemoglobin", 14.0)])
    rule_based = analysis.summary

    narrative = FakeNarrative(error=NarrativeGenerationError("HTTP 503", "fake"))
    await pipeline.narrate(analysis, narrative)

    assert analysis.summary == rule_based
    assert analysis.summary_source == "rule_based"
    assert codes(analysis.warnings) == [WarningCode.NARRATIVE_UNAVAILABLE]
