# ============================================================================
# src/bloodwork_analysis/config/validation_config.py
# ============================================================================
"""
Validation Settings
- Deviation thresholds for risk levels
- Parameters that escalate to moderate risk sooner
"""

from typing import List
from pydantic import Field
from pydantic_settings import BaseSettings

class ValidationSettings(BaseSettings):
    HIGH_RISK_DEVIATION_THRESHOLD: float = Field(
        default=20.0,
        ge=0.0,
        description="Moderate-risk deviation (%) for high-risk parameters"
    )
    DEFAULT_DEVIATION_THRESHOLD: float = Field(
        default=30.0,
        ge=0.0,
        description="Moderate-risk deviation (%) for all other parameters"
    )
    SEVERE_DEVIATION_THRESHOLD: float = Field(
        default=50.0,
        ge=0.0,
        description="Deviation (%) above which risk is high"
    )
    HIGH_RISK_PARAMETERS: List[str] = Field(
        default=[
            "ldl_cholesterol",
            "triglycerides",
            "hba1c",
            "fasting_glucose",
            "troponin_i",
            "troponin_t",
            "creatinine",
            "bun",
        ],
        description="Parameters whose deviations carry more clinical weight"
    )

validation_settings = ValidationSettings()
