# ============================================================================
# src/bloodwork_analysis/validators/validation_engine.py
# ============================================================================
"""
Validation Engine

Pure classification of a single value against its reference data:
1. Plausibility (flag only)
2. Status, critical thresholds first
3. Deviation from the breached reference boundary
4. Risk level
5. Flags

No state, no I/O. Identical inputs give identical MedicalResults.
Out-of-range values are the expected case and never raise; errors are
reserved for malformed input.
"""

import math
from decimal import Decimal
from typing import Any, FrozenSet, Optional

from ..config.validation_config import ValidationSettings, validation_settings
from ..core.context import (
    CriticalThreshold,
    MedicalFlag,
    MedicalResult,
    MedicalStatus,
    PlausibilityLimit,
    ReferenceRange,
    RiskLevel,
)
from ..utils.exceptions import InvalidValueError, MissingReferenceRangeError


def coerce_value(parameter_id: str, value: Any) -> float:
    """
    Turn a raw value into a finite, non-negative float.

    Raises:
        InvalidValueError: value is not numeric, not finite, or negative
    """
    if isinstance(value, bool) or value is None:
        raise InvalidValueError(f"{parameter_id}: value {value!r} is not numeric", parameter_id, value)
    if isinstance(value, (int, float, Decimal)):
        number = float(value)
    else:
        try:
            number = float(str(value).strip())
        except ValueError:
            raise InvalidValueError(
                f"{parameter_id}: value {value!r} is not numeric", parameter_id, value
            ) from None
    if not math.isfinite(number):
        raise InvalidValueError(f"{parameter_id}: value {value!r} is not finite", parameter_id, value)
    if number < 0:
        raise InvalidValueError(f"{parameter_id}: value {number} is negative", parameter_id, value)
    return number


def check_plausibility(value: float, limit: Optional[PlausibilityLimit]) -> bool:
    """True when there is no limit or the value lies within it."""
    if limit is None:
        return True
    return limit.min <= value <= limit.max


def determine_status(
    value: float,
    reference_range: ReferenceRange,
    critical: Optional[CriticalThreshold] = None,
) -> MedicalStatus:
    if critical is not None:
        if critical.critical_low is not None and value < critical.critical_low:
            return MedicalStatus.CRITICAL_LOW
        if critical.critical_high is not None and value > critical.critical_high:
            return MedicalStatus.CRITICAL_HIGH

    if value < reference_range.min:
        return MedicalStatus.LOW
    if value > reference_range.max:
        return MedicalStatus.HIGH
    return MedicalStatus.NORMAL


def calculate_deviation(
    value: float,
    reference_range: ReferenceRange,
    status: MedicalStatus,
    critical: Optional[CriticalThreshold] = None,
) -> float:
    """
    Signed percentage distance from the breached reference boundary.

    A critical status whose value still sits inside the reference range
    (possible only with a report-printed range) is measured against the
    critical threshold instead, so deviation stays non-zero.
    """
    if status == MedicalStatus.NORMAL:
        return 0.0

    if value < reference_range.min:
        return (value - reference_range.min) / reference_range.min * 100
    if value > reference_range.max:
        return (value - reference_range.max) / reference_range.max * 100

    if status == MedicalStatus.CRITICAL_LOW and critical and critical.critical_low:
        return (value - critical.critical_low) / critical.critical_low * 100
    if status == MedicalStatus.CRITICAL_HIGH and critical and critical.critical_high:
        return (value - critical.critical_high) / critical.critical_high * 100
    return 0.0


def calculate_risk_level(
    parameter_id: str,
    status: MedicalStatus,
    deviation: float,
    settings: ValidationSettings = validation_settings,
) -> RiskLevel:
    if status.is_critical:
        return RiskLevel.CRITICAL

    magnitude = abs(deviation)
    threshold = (
        settings.HIGH_RISK_DEVIATION_THRESHOLD
        if parameter_id in settings.HIGH_RISK_PARAMETERS
        else settings.DEFAULT_DEVIATION_THRESHOLD
    )

    if magnitude > settings.SEVERE_DEVIATION_THRESHOLD:
        return RiskLevel.HIGH
    if magnitude > threshold:
        return RiskLevel.MODERATE
    return RiskLevel.LOW


def identify_flags(status: MedicalStatus, plausible: bool) -> FrozenSet[MedicalFlag]:
    flags = set()
    if not plausible:
        flags.add(MedicalFlag.IMPLAUSIBLE)
    if status.is_critical:
        flags.update((MedicalFlag.CRITICAL, MedicalFlag.URGENT))
    return frozenset(flags)


def validate_parameter(
    parameter_id: str,
    value: Any,
    unit: str,
    reference_range: Optional[ReferenceRange],
    critical: Optional[CriticalThreshold] = None,
    plausibility: Optional[PlausibilityLimit] = None,
    settings: ValidationSettings = validation_settings,
) -> MedicalResult:
    """
    Classify one value.

    Args:
        parameter_id: Stable parameter key (e.g. "hemoglobin")
        value: Value in the parameter's canonical unit
        unit: Canonical unit, carried into the result
        reference_range: Resolved range for this patient
        critical: Optional critical thresholds
        plausibility: Optional biologically-possible bounds
        settings: Risk thresholds

    Returns:
        MedicalResult

    Raises:
        InvalidValueError: value is not a finite, non-negative number
        MissingReferenceRangeError: reference_range is None
    """
    number = coerce_value(parameter_id, value)
    if reference_range is None:
        raise MissingReferenceRangeError(
            f"{parameter_id}: no reference range to classify against", parameter_id
        )

    plausible = check_plausibility(number, plausibility)
    status = determine_status(number, reference_range, critical)
    deviation = calculate_deviation(number, reference_range, status, critical)
    risk_level = calculate_risk_level(parameter_id, status, deviation, settings)

    return MedicalResult(
        parameter_id=parameter_id,
        value=number,
        unit=unit,
        reference_range=reference_range,
        status=status,
        deviation_percent=deviation,
        risk_level=risk_level,
        flags=identify_flags(status, plausible),
    )


def unevaluated_result(
    parameter_id: str,
    value: Any,
    unit: str,
    plausibility: Optional[PlausibilityLimit] = None,
) -> MedicalResult:
    """Explicit outcome for a value that has no reference range to classify against."""
    number = coerce_value(parameter_id, value)
    flags = {MedicalFlag.NO_REFERENCE_RANGE}
    if not check_plausibility(number, plausibility):
        flags.add(MedicalFlag.IMPLAUSIBLE)
    return MedicalResult(
        parameter_id=parameter_id,
        value=number,
        unit=unit,
        reference_range=None,
        status=MedicalStatus.NOT_EVALUATED,
        deviation_percent=None,
        risk_level=None,
        flags=frozenset(flags),
    )
