# ============================================================================
# src/bloodwork_analysis/validators/relationships.py
# ============================================================================
"""
Relationship Analyzer

Cross-parameter pattern detection over a completed result set.
Rules look at statuses only, never raw values, and are evaluated
independently: zero, one or several patterns may fire per panel.

"Low" covers LOW and CRITICAL_LOW; "high" covers HIGH and CRITICAL_HIGH.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Callable, Dict, Iterable, List, Mapping, Tuple

from ..core.context import MedicalResult, MedicalStatus


class RelationshipFlag(str, Enum):
    ANEMIA_PATTERN = "ANEMIA_PATTERN"
    INFECTION_PATTERN = "INFECTION_PATTERN"
    BLEEDING_RISK_PATTERN = "BLEEDING_RISK_PATTERN"
    POLYCYTHEMIA_PATTERN = "POLYCYTHEMIA_PATTERN"
    CARDIOVASCULAR_RISK_PATTERN = "CARDIOVASCULAR_RISK_PATTERN"
    DIABETES_PATTERN = "DIABETES_PATTERN"
    HYPOTHYROID_PATTERN = "HYPOTHYROID_PATTERN"
    HYPERTHYROID_PATTERN = "HYPERTHYROID_PATTERN"


StatusMap = Mapping[str, MedicalStatus]


def _low(statuses: StatusMap, parameter_id: str) -> bool:
    status = statuses.get(parameter_id)
    return status is not None and status.is_low


def _high(statuses: StatusMap, parameter_id: str) -> bool:
    status = statuses.get(parameter_id)
    return status is not None and status.is_high


@dataclass(frozen=True)
class RelationshipRule:
    flag: RelationshipFlag
    parameters: Tuple[str, ...]
    matches: Callable[[StatusMap], bool]


RELATIONSHIP_RULES: List[RelationshipRule] = [
    RelationshipRule(
        RelationshipFlag.ANEMIA_PATTERN,
        ("hemoglobin", "mcv"),
        # MCV in any status helps classify the anemia
        lambda s: _low(s, "hemoglobin") and "mcv" in s,
    ),
    RelationshipRule(
        RelationshipFlag.INFECTION_PATTERN,
        ("wbc", "neutrophils"),
        lambda s: _high(s, "wbc") and _high(s, "neutrophils"),
    ),
    RelationshipRule(
        RelationshipFlag.BLEEDING_RISK_PATTERN,
        ("platelets",),
        lambda s: _low(s, "platelets"),
    ),
    RelationshipRule(
        RelationshipFlag.POLYCYTHEMIA_PATTERN,
        ("hemoglobin", "rbc", "hematocrit"),
        lambda s: _high(s, "hemoglobin") and _high(s, "rbc") and _high(s, "hematocrit"),
    ),
    RelationshipRule(
        RelationshipFlag.CARDIOVASCULAR_RISK_PATTERN,
        ("ldl_cholesterol", "hdl_cholesterol", "triglycerides"),
        lambda s: _high(s, "ldl_cholesterol") or _low(s, "hdl_cholesterol") or _high(s, "triglycerides"),
    ),
    RelationshipRule(
        RelationshipFlag.DIABETES_PATTERN,
        ("fasting_glucose", "hba1c"),
        lambda s: _high(s, "fasting_glucose") or _high(s, "hba1c"),
    ),
    RelationshipRule(
        RelationshipFlag.HYPOTHYROID_PATTERN,
        ("tsh",),
        lambda s: _high(s, "tsh"),
    ),
    RelationshipRule(
        RelationshipFlag.HYPERTHYROID_PATTERN,
        ("tsh",),
        lambda s: _low(s, "tsh"),
    ),
]


def analyze_relationships(
    results: Iterable[MedicalResult],
    rules: Iterable[RelationshipRule] = RELATIONSHIP_RULES,
) -> Tuple[RelationshipFlag, ...]:
    """
    Detect named cross-parameter patterns.

    Returns:
        Fired flags, in rule order
    """
    statuses: Dict[str, MedicalStatus] = {r.parameter_id: r.status for r in results}
    return tuple(rule.flag for rule in rules if rule.matches(statuses))
