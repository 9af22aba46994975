# ============================================================================
# src/bloodwork_analysis/config/base_config.py
# ============================================================================
"""
Base Configuration
- Package root
- Knowledge base directory (reference ranges, unit tables)
"""

from pathlib import Path
from pydantic import Field
from pydantic_settings import BaseSettings

class BaseSettingsConfig(BaseSettings):
    # Root of the installed package
    PACKAGE_ROOT: Path = Field(
        default_factory=lambda: Path(__file__).parent.parent,
        description="Root directory of the bloodwork_analysis package"
    )

    # Knowledge bases
    KNOWLEDGE_DIR: Path = Field(
        default_factory=lambda: Path(__file__).parent.parent / "knowledge",
        description="Reference ranges, plausibility limits and unit conversion tables"
    )

    def knowledge_file(self, name: str) -> Path:
        """Get path to a JSON knowledge file"""
        return self.KNOWLEDGE_DIR / name

# Global instance
base_settings = BaseSettingsConfig()
