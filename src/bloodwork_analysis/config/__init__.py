# ============================================================================
# src/bloodwork_analysis/config/__init__.py
# ============================================================================
"""
Convenient imports for all settings
"""

from .base_config import base_settings
from .ocr_config import ocr_settings
from .validation_config import validation_settings
from .narrative_config import narrative_settings
from .logging_config import logging_settings
