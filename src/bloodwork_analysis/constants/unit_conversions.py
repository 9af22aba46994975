# ============================================================================
# src/bloodwork_analysis/constants/unit_conversions.py
# ============================================================================
"""
Unit Conversion Tables
- Per-parameter rules converting reported units to canonical units
"""

import json

from ..config import base_settings

with open(base_settings.knowledge_file("unit_conversions.json"), encoding="utf-8") as f:
    UNIT_CONVERSIONS = json.load(f)["rules"]
