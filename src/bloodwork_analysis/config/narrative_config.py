# ============================================================================
# src/bloodwork_analysis/config/narrative_config.py
# ============================================================================
"""
Narrative Generator Configuration
- Provider API keys (a provider is enabled when its key is set)
- Models, sampling temperature, token limits
- Timeout
"""

from typing import Optional
from pydantic import Field
from pydantic_settings import BaseSettings

class NarrativeSettings(BaseSettings):
    GEMINI_API_KEY: Optional[str] = Field(
        default=None,
        description="Google Gemini API key"
    )
    GEMINI_MODEL: str = Field(
        default="gemini-1.5-flash",
        description="Gemini model used for summaries"
    )
    GEMINI_BASE_URL: str = Field(
        default="https://generativelanguage.googleapis.com/v1beta",
        description="Gemini REST endpoint"
    )
    OPENAI_API_KEY: Optional[str] = Field(
        default=None,
        description="OpenAI API key"
    )
    OPENAI_MODEL: str = Field(
        default="gpt-4o-mini",
        description="OpenAI model used for summaries"
    )
    OPENAI_BASE_URL: str = Field(
        default="https://api.openai.com/v1",
        description="OpenAI REST endpoint"
    )
    NARRATIVE_TEMPERATURE: float = Field(
        default=0.4,
        ge=0.0, le=2.0,
        description="Sampling temperature for summaries"
    )
    NARRATIVE_MAX_TOKENS: int = Field(
        default=2048,
        ge=1,
        description="Maximum tokens per summary"
    )
    NARRATIVE_TIMEOUT: int = Field(
        default=30,
        ge=1,
        description="HTTP timeout for summary generation (seconds)"
    )

narrative_settings = NarrativeSettings()
