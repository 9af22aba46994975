# ============================================================================
# src/bloodwork_analysis/narrative/__init__.py
# ============================================================================
"""
Narrative Package

- Rule-based bilingual summary (always available)
- Optional LLM narrative generator (Gemini / OpenAI over aiohttp)
"""

from .base import NarrativeGenerator, NarrativeReport, NarrativeRequest
from .rule_based import build_rule_based_summary, build_key_insights
from .providers import ProviderType, NarrativeProvider, GeminiProvider, OpenAIProvider, select_provider
from .llm_generator import LLMNarrativeGenerator, build_prompt, extract_json

__all__ = [
    'NarrativeGenerator',
    'NarrativeReport',
    'NarrativeRequest',
    'build_rule_based_summary',
    'build_key_insights',
    'ProviderType',
    'NarrativeProvider',
    'GeminiProvider',
    'OpenAIProvider',
    'select_provider',
    'LLMNarrativeGenerator',
    'build_prompt',
    'extract_json',
]
