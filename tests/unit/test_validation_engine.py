# ============================================================================
# FILE: tests/unit/test_validation_engine.py
# ============================================================================
"""
Unit tests for the validation engine
"""

import dataclasses

import pytest

from bloodwork_analysis.core.context import (
    CriticalThreshold,
    MedicalFlag,
    MedicalStatus,
    PlausibilityLimit,
    ReferenceRange,
    RiskLevel,
)
from bloodwork_analysis.utils.exceptions import InvalidValueError, MissingReferenceRangeError
from bloodwork_analysis.validators import (
    calculate_deviation,
    calculate_risk_level,
    coerce_value,
    determine_status,
    unevaluated_result,
    validate_parameter,
)

HEMOGLOBIN_MALE = ReferenceRange(min=13.5, max=17.5)
HEMOGLOBIN_CRITICAL = CriticalThreshold(critical_low=7.0, critical_high=20.0)
HEMOGLOBIN_PLAUSIBLE = PlausibilityLimit(min=1.0, max=25.0)


def test_scenario_a_critical_low_hemoglobin():
    """Hemoglobin 6.5 g/dL in a male is critically low and urgent"""
    result = validate_parameter("hemoglobin", 6.5, "g/dL", HEMOGLOBIN_MALE, HEMOGLOBIN_CRITICAL)

    assert result.status == MedicalStatus.CRITICAL_LOW
    assert {MedicalFlag.CRITICAL, MedicalFlag.URGENT} <= result.flags
    assert result.risk_level == RiskLevel.CRITICAL
    assert result.deviation_percent < 0


def test_scenario_b_normal_hemoglobin():
    """Hemoglobin 14.0 g/dL in a male is normal with zero deviation"""
    result = validate_parameter("hemoglobin", 14.0, "g/dL", HEMOGLOBIN_MALE, HEMOGLOBIN_CRITICAL)

    assert result.status == MedicalStatus.NORMAL
    assert result.deviation_percent == 0
    assert result.risk_level == RiskLevel.LOW
    assert result.flags == frozenset()


@pytest.mark.parametrize("value", [13.5, 15.0, 17.5])
def test_in_range_values_are_normal(value):
    """Both boundaries are inside the range"""
    result = validate_parameter("hemoglobin", value, "g/dL", HEMOGLOBIN_MALE, HEMOGLOBIN_CRITICAL)
    assert result.status == MedicalStatus.NORMAL
    assert result.deviation_percent == 0


@pytest.mark.parametrize("value", [7.0, 9.8, 12.0, 13.49])
def test_below_range_without_critical_breach_is_low(value):
    result = validate_parameter("hemoglobin", value, "g/dL", HEMOGLOBIN_MALE, HEMOGLOBIN_CRITICAL)
    assert result.status == MedicalStatus.LOW
    assert result.deviation_percent < 0


@pytest.mark.parametrize("value", [17.6, 18.0, 20.0])
def test_above_range_without_critical_breach_is_high(value):
    result = validate_parameter("hemoglobin", value, "g/dL", HEMOGLOBIN_MALE, HEMOGLOBIN_CRITICAL)
    assert result.status == MedicalStatus.HIGH
    assert result.deviation_percent > 0


def test_deviation_is_measured_from_breached_boundary():
    """12.0 against a 13.5 minimum is -11.1%"""
    result = validate_parameter("hemoglobin", 12.0, "g/dL", HEMOGLOBIN_MALE)
    assert result.deviation_percent == pytest.approx(-11.111, abs=0.01)

    result = validate_parameter("hemoglobin", 21.0, "g/dL", HEMOGLOBIN_MALE)
    assert result.deviation_percent == pytest.approx(20.0, abs=0.01)


def test_critical_overrides_same_direction_abnormal():
    """Critical breach wins even though the value is also simply HIGH"""
    result = validate_parameter("hemoglobin", 21.0, "g/dL", HEMOGLOBIN_MALE, HEMOGLOBIN_CRITICAL)
    assert result.status == MedicalStatus.CRITICAL_HIGH
    assert result.risk_level == RiskLevel.CRITICAL


def test_critical_status_inside_printed_range_still_deviates():
    """A lab-printed range wider than the critical limit still yields a non-zero deviation"""
    wide_range = ReferenceRange(min=5.0, max=18.0)
    result = validate_parameter("hemoglobin", 6.5, "g/dL", wide_range, HEMOGLOBIN_CRITICAL)

    assert result.status == MedicalStatus.CRITICAL_LOW
    assert result.deviation_percent != 0


@pytest.mark.parametrize("value,expected", [
    (6.9, RiskLevel.CRITICAL),
    (12.0, RiskLevel.LOW),
    (17.4, RiskLevel.LOW),
    (19.9, RiskLevel.LOW),
])
def test_risk_is_critical_iff_status_is_critical(value, expected):
    result = validate_parameter("hemoglobin", value, "g/dL", HEMOGLOBIN_MALE, HEMOGLOBIN_CRITICAL)
    assert result.risk_level == expected
    assert (result.risk_level == RiskLevel.CRITICAL) == result.status.is_critical


def test_high_risk_parameters_use_lower_threshold():
    """25% above range is moderate for LDL but low for MCV"""
    ldl = validate_parameter("ldl_cholesterol", 125, "mg/dL", ReferenceRange(50, 100))
    mcv = validate_parameter("mcv", 125, "fL", ReferenceRange(80, 100))

    assert ldl.status == MedicalStatus.HIGH
    assert ldl.risk_level == RiskLevel.MODERATE
    assert mcv.status == MedicalStatus.HIGH
    assert mcv.risk_level == RiskLevel.LOW


def test_severe_deviation_is_high_risk():
    result = validate_parameter("mcv", 160, "fL", ReferenceRange(80, 100))
    assert result.deviation_percent == pytest.approx(60.0)
    assert result.risk_level == RiskLevel.HIGH


def test_implausible_value_is_flagged_not_rejected():
    """Hemoglobin 142 (decimal slip) is classified normally and flagged"""
    flagged = validate_parameter(
        "hemoglobin", 142, "g/dL", HEMOGLOBIN_MALE, HEMOGLOBIN_CRITICAL, HEMOGLOBIN_PLAUSIBLE
    )
    plain = validate_parameter("hemoglobin", 142, "g/dL", HEMOGLOBIN_MALE, HEMOGLOBIN_CRITICAL)

    assert MedicalFlag.IMPLAUSIBLE in flagged.flags
    assert flagged.status == plain.status
    assert flagged.deviation_percent == plain.deviation_percent
    assert flagged.risk_level == plain.risk_level


def test_numeric_strings_are_accepted():
    result = validate_parameter("hemoglobin", " 14.2 ", "g/dL", HEMOGLOBIN_MALE)
    assert result.value == 14.2


@pytest.mark.parametrize("value", ["abc", "", None, True, float("nan"), float("inf"), -1])
def test_invalid_values_raise(value):
    with pytest.raises(InvalidValueError) as exc_info:
        validate_parameter("hemoglobin", value, "g/dL", HEMOGLOBIN_MALE)
    assert exc_info.value.parameter_id == "hemoglobin"
    assert exc_info.value.recovery == "manual_entry"


def test_missing_range_raises():
    with pytest.raises(MissingReferenceRangeError):
        validate_parameter("hemoglobin", 14.0, "g/dL", None)


def test_unevaluated_result_is_explicit():
    result = unevaluated_result("vitamin_d", 30.0, "ng/mL")

    assert result.status == MedicalStatus.NOT_EVALUATED
    assert result.deviation_percent is None
    assert result.risk_level is None
    assert result.flags == frozenset({MedicalFlag.NO_REFERENCE_RANGE})


def test_results_are_immutable():
    result = validate_parameter("hemoglobin", 14.0, "g/dL", HEMOGLOBIN_MALE)
    with pytest.raises(dataclasses.FrozenInstanceError):
        result.status = MedicalStatus.HIGH


def test_with_flags_keeps_classification():
    result = validate_parameter("hemoglobin", 12.0, "g/dL", HEMOGLOBIN_MALE)
    flagged = result.with_flags(MedicalFlag.UNIT_UNVERIFIED)

    assert flagged is not result
    assert MedicalFlag.UNIT_UNVERIFIED not in result.flags
    assert flagged.has_flag(MedicalFlag.UNIT_UNVERIFIED)
    assert (flagged.status, flagged.deviation_percent, flagged.risk_level) == (
        result.status, result.deviation_percent, result.risk_level
    )


def test_building_blocks():
    assert coerce_value("wbc", 7) == 7.0
    assert determine_status(6.5, HEMOGLOBIN_MALE) == MedicalStatus.LOW
    assert determine_status(6.5, HEMOGLOBIN_MALE, HEMOGLOBIN_CRITICAL) == MedicalStatus.CRITICAL_LOW
    assert calculate_deviation(14.0, HEMOGLOBIN_MALE, MedicalStatus.NORMAL) == 0.0
    assert calculate_risk_level("wbc", MedicalStatus.CRITICAL_HIGH, 5.0) == RiskLevel.CRITICAL
