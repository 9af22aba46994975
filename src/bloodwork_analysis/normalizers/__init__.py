# ============================================================================
# src/bloodwork_analysis/normalizers/__init__.py
# ============================================================================
"""
Unit normalization to canonical units.
"""

from .unit_normalizer import UnitNormalizer, ConversionKind, ConversionRule, round_half_up, unit_key

__all__ = [
    "UnitNormalizer",
    "ConversionKind",
    "ConversionRule",
    "round_half_up",
    "unit_key",
]
