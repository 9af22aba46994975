# ============================================================================
# src/bloodwork_analysis/validators/plausibility.py
# ============================================================================
"""
Plausibility Checks

Physically possible bounds per parameter (knowledge/plausibility_ranges.json),
much wider than reference ranges. A breach only adds the IMPLAUSIBLE flag;
the value is still classified as read.

- Hemoglobin 142 g/dL: implausible, a dropped decimal point suggests 14.2
- Hemoglobin 6.5 g/dL: plausible, critically low but possible
"""

from typing import Optional, Tuple
import logging

from ..core.reference_data import ReferenceDataStore, get_reference_data
from .validation_engine import check_plausibility


logger = logging.getLogger(__name__)


class PlausibilityChecker:
    """
    Explains plausibility breaches and proposes decimal-shift corrections.

    Typical causes of a breach:
    - OCR dropping a decimal point (14.2 read as 142)
    - A value reported in an unconverted unit (mmol/L taken as mg/dL)
    """

    def __init__(self, store: Optional[ReferenceDataStore] = None):
        self.store = store or get_reference_data()

    def check(self, parameter_id: str, value: float) -> Tuple[bool, Optional[str]]:
        """
        Check if value is plausible.

        Returns:
            (is_plausible, reason_if_not)
        """
        limit = self.store.plausibility_limit(parameter_id)
        if check_plausibility(value, limit):
            return True, None

        unit = self._unit(parameter_id)
        if value < limit.min:
            reason = f"Value {value:g} below plausible minimum {limit.min:g} {unit}"
        else:
            reason = f"Value {value:g} above plausible maximum {limit.max:g} {unit}"
        logger.warning(f"{parameter_id}: {reason}")
        return False, reason

    def suggest_correction(self, parameter_id: str, value: float) -> Optional[float]:
        """
        Suggest corrected value if a decimal shift explains the error.

        - 142.0 -> 14.2
        - 1420 -> 14.2
        - 1.42 -> 14.2

        Returns:
            Suggested value, or None if no single shift lands in range
        """
        limit = self.store.plausibility_limit(parameter_id)
        if check_plausibility(value, limit):
            return None

        if value > limit.max:
            candidates = (value / 10, value / 100)
        else:
            candidates = (value * 10,)

        for corrected in candidates:
            if limit.min <= corrected <= limit.max:
                logger.info(f"{parameter_id}: suggesting decimal correction {value} -> {corrected:g}")
                return corrected
        return None

    def _unit(self, parameter_id: str) -> str:
        definition = self.store.definition(parameter_id)
        return definition.canonical_unit if definition else ""
