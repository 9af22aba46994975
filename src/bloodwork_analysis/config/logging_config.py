# ============================================================================
# src/bloodwork_analysis/config/logging_config.py
# ============================================================================
"""
Logging Settings
- Log level
- JSON output
"""

from typing import Optional
from pathlib import Path
from pydantic import Field
from pydantic_settings import BaseSettings

class LoggingSettings(BaseSettings):
    LOG_LEVEL: str = Field(
        default="INFO",
        description="Logging level"
    )
    LOG_JSON: bool = Field(
        default=False,
        description="Emit log records as JSON lines"
    )
    LOG_FILE: Optional[Path] = Field(
        default=None,
        description="Optional log file in addition to the console"
    )

logging_settings = LoggingSettings()
