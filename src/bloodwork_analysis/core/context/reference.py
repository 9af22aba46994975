# ============================================================================
# src/bloodwork_analysis/core/context/reference.py
# ============================================================================
"""
Static reference records
- Parameter definitions (names, canonical unit, rounding)
- Reference ranges, critical thresholds, plausibility limits
"""

from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class ParameterDefinition:
    id: str
    name_en: str
    name_ur: str
    canonical_unit: str
    panel: str
    decimals: int = 1
    fraction_scalable: bool = False


@dataclass(frozen=True)
class ReferenceRange:
    min: float
    max: float

    def contains(self, value: float) -> bool:
        return self.min <= value <= self.max

    def __str__(self) -> str:
        return f"{self.min:g}-{self.max:g}"


@dataclass(frozen=True)
class CriticalThreshold:
    critical_low: Optional[float] = None
    critical_high: Optional[float] = None


@dataclass(frozen=True)
class PlausibilityLimit:
    min: float
    max: float
