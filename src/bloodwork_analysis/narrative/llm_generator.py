# ============================================================================
# src/bloodwork_analysis/narrative/llm_generator.py
# ============================================================================
"""
LLM Narrative Generator

Asks a hosted LLM for a bilingual explanation of results that have already
been validated. The prompt lists every status verbatim and forbids
contradicting it; the model only writes prose.

Any transport, status, timeout or parsing problem surfaces as
NarrativeGenerationError so the caller can keep the rule-based summary.
"""

import asyncio
import json
from typing import Any, Dict, Optional

import aiohttp
from json_repair import repair_json

from ..config.narrative_config import NarrativeSettings, narrative_settings
from ..core.context import BilingualText
from ..utils.exceptions import ConfigurationError, NarrativeGenerationError
from .base import NarrativeGenerator, NarrativeReport, NarrativeRequest
from .providers import NarrativeProvider, select_provider

REQUIRED_KEYS = ("summaryEn", "summaryUr")


def build_prompt(request: NarrativeRequest) -> str:
    patient = request.patient
    lines = [
        f"You are a medical AI assistant analyzing {request.panel.upper()} blood test results.",
        "",
        "PATIENT CONTEXT:",
        f"- Age: {patient.age}",
        f"- Gender: {patient.sex.value}",
        f"- Medical conditions: {', '.join(patient.conditions) if patient.conditions else 'None reported'}",
        "",
        "VALIDATED RESULTS (from the rule-based validation engine):",
    ]
    for result in request.results:
        flags = f" [{', '.join(sorted(f.value for f in result.flags))}]" if result.flags else ""
        lines.append(
            f"- {result.parameter_id}: {result.value:g} {result.unit} (STATUS: {result.status.value}{flags})"
        )

    lines += ["", "DETECTED PATTERNS:"]
    if request.relationship_flags:
        lines += [f"- {flag.value}" for flag in request.relationship_flags]
    else:
        lines.append("- None")

    has_critical = any(r.status.is_critical for r in request.results)
    lines += [
        "",
        "CRITICAL RULES:",
        "1. The STATUS of each parameter is final. Describe it exactly as given.",
        "2. NEVER contradict the validation engine or reclassify a value.",
        "3. Parameters marked NOT_EVALUATED have no reference range; do not call them normal or abnormal.",
    ]
    if has_critical:
        lines.append("4. There are CRITICAL values: emphasize that the patient must seek medical care immediately.")
    lines += [
        "5. Use simple language a patient without medical training can follow.",
        "6. Be empathetic and calm.",
        "7. Include a disclaimer that this is not a diagnosis.",
        "",
        "Respond with a JSON object with these keys:",
        '{"summaryEn": "...", "summaryUr": "...", "keyInsights": ["..."], '
        '"recommendationsEn": "...", "recommendationsUr": "..."}',
        "summaryUr and recommendationsUr must be written in Urdu script.",
    ]
    return "\n".join(lines)


def extract_json(text: Any) -> Optional[Dict[str, Any]]:
    """Parse a JSON object from model output, repairing it if needed."""
    if not isinstance(text, str) or not text.strip():
        return None
    try:
        parsed = json.loads(text.strip())
    except json.JSONDecodeError:
        parsed = repair_json(text, return_objects=True)
    return parsed if isinstance(parsed, dict) else None


class LLMNarrativeGenerator(NarrativeGenerator):
    """
    Narrative generator backed by a hosted LLM.

    Config:
        provider: explicit provider, else the first one with an API key
        settings: NarrativeSettings (timeout, temperature, token limit)
    """

    def __init__(
        self,
        provider: Optional[NarrativeProvider] = None,
        settings: NarrativeSettings = narrative_settings,
    ):
        super().__init__()
        self.settings = settings
        self.provider = provider or select_provider(settings)
        if self.provider is None:
            raise ConfigurationError("No narrative provider configured (set GEMINI_API_KEY or OPENAI_API_KEY)")

    @property
    def name(self) -> str:
        return self.provider.provider_type.value

    async def generate(self, request: NarrativeRequest) -> BilingualText:
        report = await self.generate_report(request)
        return report.summary

    async def generate_report(self, request: NarrativeRequest) -> NarrativeReport:
        prompt = build_prompt(request)
        text = await self._complete(prompt)

        payload = extract_json(text)
        if payload is None:
            raise NarrativeGenerationError(
                f"Could not parse JSON from {self.name} response: {text[:200]}", provider=self.name
            )
        missing = [key for key in REQUIRED_KEYS if not str(payload.get(key) or "").strip()]
        if missing:
            raise NarrativeGenerationError(
                f"{self.name} response is missing {', '.join(missing)}", provider=self.name
            )

        insights = payload.get("keyInsights") or []
        if not isinstance(insights, list):
            insights = [str(insights)]

        recommendations = None
        if payload.get("recommendationsEn") or payload.get("recommendationsUr"):
            recommendations = BilingualText(
                en=str(payload.get("recommendationsEn") or ""),
                ur=str(payload.get("recommendationsUr") or ""),
            )

        self.logger.info(f"Narrative generated by {self.name} ({self.provider.model_name})")
        return NarrativeReport(
            summary=BilingualText(en=str(payload["summaryEn"]), ur=str(payload["summaryUr"])),
            key_insights=tuple(str(item) for item in insights),
            recommendations=recommendations,
        )

    async def _complete(self, prompt: str) -> str:
        timeout = aiohttp.ClientTimeout(total=self.settings.NARRATIVE_TIMEOUT)

        async def _do_request() -> Dict[str, Any]:
            async with aiohttp.ClientSession(timeout=timeout) as session:
                async with session.post(
                    self.provider.endpoint(),
                    json=self.provider.format_request(prompt),
                    headers=self.provider.headers(),
                ) as response:
                    if response.status != 200:
                        error_text = await response.text()
                        raise NarrativeGenerationError(
                            f"{self.name} error ({response.status}): {error_text[:200]}",
                            provider=self.name,
                        )
                    return await response.json(content_type=None)

        try:
            body = await asyncio.wait_for(_do_request(), timeout=self.settings.NARRATIVE_TIMEOUT)
        except (asyncio.TimeoutError, TimeoutError) as e:
            raise NarrativeGenerationError(
                f"{self.name} timed out after {self.settings.NARRATIVE_TIMEOUT}s", provider=self.name
            ) from e
        except aiohttp.ClientError as e:
            raise NarrativeGenerationError(f"{self.name} request failed: {e}", provider=self.name) from e
        except ValueError as e:
            raise NarrativeGenerationError(f"{self.name} returned invalid JSON: {e}", provider=self.name) from e

        if not isinstance(body, dict):
            raise NarrativeGenerationError(f"{self.name} returned an unexpected body", provider=self.name)
        return self.provider.parse_response(body)
