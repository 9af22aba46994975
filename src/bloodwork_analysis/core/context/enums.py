# ============================================================================
# src/bloodwork_analysis/core/context/enums.py
# ============================================================================
"""
Analysis Enums
- Patient sex
- Medical status per parameter
- Risk levels (ordered)
- Result flags and pipeline warning codes
"""

from enum import Enum
from typing import Iterable, Optional


class Sex(str, Enum):
    MALE = "male"
    FEMALE = "female"


class MedicalStatus(str, Enum):
    NORMAL = "NORMAL"
    LOW = "LOW"
    HIGH = "HIGH"
    CRITICAL_LOW = "CRITICAL_LOW"
    CRITICAL_HIGH = "CRITICAL_HIGH"
    NOT_EVALUATED = "NOT_EVALUATED"  # no reference range available

    @property
    def is_critical(self) -> bool:
        return self in (MedicalStatus.CRITICAL_LOW, MedicalStatus.CRITICAL_HIGH)

    @property
    def is_low(self) -> bool:
        return self in (MedicalStatus.LOW, MedicalStatus.CRITICAL_LOW)

    @property
    def is_high(self) -> bool:
        return self in (MedicalStatus.HIGH, MedicalStatus.CRITICAL_HIGH)


class RiskLevel(str, Enum):
    LOW = "low"
    MODERATE = "moderate"
    HIGH = "high"
    CRITICAL = "critical"

    @property
    def severity(self) -> int:
        return _RISK_ORDER.index(self)

    @classmethod
    def highest(cls, levels: Iterable[Optional["RiskLevel"]]) -> Optional["RiskLevel"]:
        """Most severe level, ignoring None. None when nothing was evaluated."""
        present = [level for level in levels if level is not None]
        if not present:
            return None
        return max(present, key=lambda level: level.severity)


_RISK_ORDER = [RiskLevel.LOW, RiskLevel.MODERATE, RiskLevel.HIGH, RiskLevel.CRITICAL]


class MedicalFlag(str, Enum):
    IMPLAUSIBLE = "IMPLAUSIBLE"
    CRITICAL = "CRITICAL"
    URGENT = "URGENT"
    UNIT_UNVERIFIED = "UNIT_UNVERIFIED"
    NO_REFERENCE_RANGE = "NO_REFERENCE_RANGE"


class WarningCode(str, Enum):
    LOW_OCR_CONFIDENCE = "LOW_OCR_CONFIDENCE"
    UNIT_UNVERIFIED = "UNIT_UNVERIFIED"
    IMPLAUSIBLE_VALUE = "IMPLAUSIBLE_VALUE"
    NO_REFERENCE_RANGE = "NO_REFERENCE_RANGE"
    NARRATIVE_UNAVAILABLE = "NARRATIVE_UNAVAILABLE"
