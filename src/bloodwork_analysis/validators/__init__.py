# ============================================================================
# src/bloodwork_analysis/validators/__init__.py
# ============================================================================
"""
Validators Package

- Validation engine (status, deviation, risk, flags)
- Plausibility checks (catch decimal and unit errors)
- Relationship analyzer (cross-parameter patterns)
"""

from .validation_engine import (
    validate_parameter,
    unevaluated_result,
    determine_status,
    calculate_deviation,
    calculate_risk_level,
    check_plausibility,
    identify_flags,
    coerce_value,
)
from .plausibility import PlausibilityChecker
from .relationships import RelationshipFlag, RelationshipRule, RELATIONSHIP_RULES, analyze_relationships

__all__ = [
    'validate_parameter',
    'unevaluated_result',
    'determine_status',
    'calculate_deviation',
    'calculate_risk_level',
    'check_plausibility',
    'identify_flags',
    'coerce_value',
    'PlausibilityChecker',
    'RelationshipFlag',
    'RelationshipRule',
    'RELATIONSHIP_RULES',
    'analyze_relationships',
]
