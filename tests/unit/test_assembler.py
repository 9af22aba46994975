# ============================================================================
# FILE: tests/unit/test_assembler.py
# ============================================================================
"""
Unit tests for result assembly (merge, warnings, summary)
"""

import pytest

from bloodwork_analysis.core.assembler import ResultAssembler
from bloodwork_analysis.core.context import (
    ManualEntry,
    MedicalFlag,
    MedicalStatus,
    NormalizedParameter,
    ReferenceRange,
    RiskLevel,
    WarningCode,
)
from bloodwork_analysis.utils.exceptions import InvalidValueError, UnknownPanelError
from bloodwork_analysis.validators import RelationshipFlag


@pytest.fixture(scope="module")
def assembler():
    return ResultAssembler()


def extracted(parameter_id, value, unit):
    return NormalizedParameter(parameter_id, value, unit, raw_value=value, raw_unit=unit)


def codes(analysis):
    return [warning.code for warning in analysis.warnings]


def test_manual_value_overrides_extracted(assembler, male_patient):
    analysis = assembler.assemble(
        "cbc",
        male_patient,
        [extracted("hemoglobin", 14.0, "g/dL")],
        [ManualEntry("hemoglobin", 6.5, "g/dL")],
    )

    result = analysis.result_for("hemoglobin")
    assert result.value == 6.5
    assert result.status == MedicalStatus.CRITICAL_LOW
    assert len(analysis.results) == 1


def test_results_in_panel_order(assembler, male_patient):
    analysis = assembler.assemble("cbc", male_patient, manual_entries=[
        ManualEntry("platelets", 250),
        ManualEntry("hemoglobin", 14.0),
        ManualEntry("wbc", 7.5),
    ])
    assert [r.parameter_id for r in analysis.results] == ["wbc", "hemoglobin", "platelets"]


def test_all_normal_summary(assembler, male_patient):
    analysis = assembler.assemble("cbc", male_patient, manual_entries=[
        ManualEntry("hemoglobin", 14.0),
        ManualEntry("wbc", 7.5),
    ])

    assert analysis.overall_risk == RiskLevel.LOW
    assert analysis.relationship_flags == ()
    assert analysis.summary.en.startswith("Excellent! All your Complete Blood Count results")
    assert "بہترین" in analysis.summary.ur
    assert analysis.key_insights == []
    assert analysis.warnings == []


def test_critical_summary_and_overall_risk(assembler, male_patient):
    analysis = assembler.assemble("cbc", male_patient, manual_entries=[
        ManualEntry("hemoglobin", 6.5),
        ManualEntry("mcv", 72),
        ManualEntry("platelets", 25),
    ])

    assert analysis.overall_risk == RiskLevel.CRITICAL
    assert analysis.summary.en.startswith("CRITICAL ALERT: 2 parameters")
    assert RelationshipFlag.ANEMIA_PATTERN in analysis.relationship_flags
    assert RelationshipFlag.BLEEDING_RISK_PATTERN in analysis.relationship_flags
    assert "anemia" in analysis.summary.en
    assert analysis.key_insights[0] == "Platelets is CRITICAL LOW (25 10^3/uL, reference 150-450 10^3/uL)"
    assert "Hemoglobin is CRITICAL LOW (6.5 g/dL, reference 13.5-17.5 g/dL)" in analysis.key_insights
    assert analysis.key_insights[-1].startswith("Mean Corpuscular Volume is LOW")


def test_abnormal_summary_counts(assembler, female_patient):
    analysis = assembler.assemble("cbc", female_patient, manual_entries=[
        ManualEntry("hemoglobin", 11.0),
        ManualEntry("wbc", 12.5),
        ManualEntry("mcv", 90),
    ])
    assert analysis.summary.en.startswith("Your test results show 2 parameters outside normal ranges")


def test_missing_range_yields_not_evaluated(assembler, male_patient):
    analysis = assembler.assemble("cbc", male_patient, manual_entries=[ManualEntry("vitamin_d", 30)])
    result = analysis.result_for("vitamin_d")

    assert result.status == MedicalStatus.NOT_EVALUATED
    assert result.has_flag(MedicalFlag.NO_REFERENCE_RANGE)
    assert WarningCode.NO_REFERENCE_RANGE in codes(analysis)
    assert analysis.overall_risk is None
    assert analysis.summary.en.startswith("No test values could be evaluated")


def test_printed_range_used_when_store_has_none(assembler, male_patient):
    analysis = assembler.assemble("cbc", male_patient, manual_entries=[
        ManualEntry("vitamin_d", 18, reference_range=ReferenceRange(30, 100)),
    ])
    assert analysis.result_for("vitamin_d").status == MedicalStatus.LOW


def test_store_range_beats_printed_range(assembler, male_patient):
    parameter = NormalizedParameter(
        "hemoglobin", 13.0, "g/dL", raw_value=13.0, raw_unit="g/dL",
        reference_range=ReferenceRange(12.0, 16.0),
    )
    analysis = assembler.assemble("cbc", male_patient, [parameter])
    assert analysis.result_for("hemoglobin").status == MedicalStatus.LOW


def test_unknown_unit_is_flagged(assembler, male_patient):
    analysis = assembler.assemble("cbc", male_patient, manual_entries=[
        ManualEntry("hemoglobin", 14.2, "furlongs"),
    ])
    result = analysis.result_for("hemoglobin")

    assert result.has_flag(MedicalFlag.UNIT_UNVERIFIED)
    assert result.status == MedicalStatus.NORMAL
    assert codes(analysis) == [WarningCode.UNIT_UNVERIFIED]


def test_implausible_value_warning_suggests_correction(assembler, male_patient):
    analysis = assembler.assemble("cbc", male_patient, manual_entries=[ManualEntry("hemoglobin", 142)])
    result = analysis.result_for("hemoglobin")

    assert result.has_flag(MedicalFlag.IMPLAUSIBLE)
    assert result.value == 142
    warning = analysis.warnings[0]
    assert warning.code == WarningCode.IMPLAUSIBLE_VALUE
    assert "did you mean 14.2" in warning.message


def test_invalid_manual_value_raises(assembler, male_patient):
    with pytest.raises(InvalidValueError):
        assembler.assemble("cbc", male_patient, manual_entries=[ManualEntry("hemoglobin", "n/a")])


def test_unknown_panel_raises(assembler, male_patient):
    with pytest.raises(UnknownPanelError):
        assembler.assemble("urinalysis", male_patient, manual_entries=[ManualEntry("hemoglobin", 14)])


def test_to_dict_is_json_ready(assembler, male_patient):
    analysis = assembler.assemble("cbc", male_patient, manual_entries=[ManualEntry("hemoglobin", 6.5)])
    data = analysis.to_dict()

    assert data["overall_risk"] == "critical"
    assert data["results"][0]["status"] == "CRITICAL_LOW"
    assert data["results"][0]["flags"] == ["CRITICAL", "URGENT"]
    assert data["patient"] == {"age": 45, "sex": "male", "conditions": []}
    assert data["summary_source"] == "rule_based"
