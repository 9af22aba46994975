# ============================================================================
# src/bloodwork_analysis/constants/__init__.py
# ============================================================================
"""
Convenient imports for all constants
"""

from .reference_ranges import REFERENCE_RANGES, PLAUSIBILITY_RANGES
from .unit_conversions import UNIT_CONVERSIONS
from .critical_values import CRITICAL_VALUES
