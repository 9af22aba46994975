# ============================================================================
# src/bloodwork_analysis/narrative/base.py
# ============================================================================
"""
Base Narrative Generator Interface

A narrative generator turns a validated result set into patient-facing
prose. It never reclassifies anything: statuses, deviations and risk levels
arrive final and are only described.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Optional, Tuple
import logging

from ..core.context import BilingualText, MedicalResult, PatientContext
from ..validators.relationships import RelationshipFlag


@dataclass(frozen=True)
class NarrativeRequest:
    """Everything a generator may look at."""
    panel: str
    panel_name: BilingualText
    patient: PatientContext
    results: Tuple[MedicalResult, ...]
    relationship_flags: Tuple[RelationshipFlag, ...] = ()


@dataclass(frozen=True)
class NarrativeReport:
    summary: BilingualText
    key_insights: Tuple[str, ...] = field(default_factory=tuple)
    recommendations: Optional[BilingualText] = None


class NarrativeGenerator(ABC):
    """
    Abstract base class for summary generators.

    Implementations must provide:
    - name: identifier recorded as the summary source
    - generate(): async bilingual summary
    """

    def __init__(self):
        self.logger = logging.getLogger(self.__class__.__name__)

    @property
    @abstractmethod
    def name(self) -> str:
        pass

    @abstractmethod
    async def generate(self, request: NarrativeRequest) -> BilingualText:
        """
        Raises:
            NarrativeGenerationError: no usable summary could be produced
        """
        pass

    async def generate_report(self, request: NarrativeRequest) -> NarrativeReport:
        """Summary plus whatever extras the generator can offer."""
        return NarrativeReport(summary=await self.generate(request))
