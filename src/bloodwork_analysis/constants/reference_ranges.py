# ============================================================================
# src/bloodwork_analysis/constants/reference_ranges.py
# ============================================================================
"""
Reference & Plausibility Ranges
- Panel definitions with sex and age specific normal ranges
- Plausibility ranges to catch OCR and data entry errors
"""

import json

from ..config import base_settings


def _load(name: str) -> dict:
    with open(base_settings.knowledge_file(name), encoding="utf-8") as f:
        return json.load(f)


# Raw tables; structure is checked by core.reference_data at load time
REFERENCE_RANGES = _load("reference_ranges.json")
PLAUSIBILITY_RANGES = {
    parameter_id: tuple(bounds)
    for parameter_id, bounds in _load("plausibility_ranges.json").items()
}
