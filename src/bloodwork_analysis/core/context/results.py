# ============================================================================
# src/bloodwork_analysis/core/context/results.py
# ============================================================================
"""
Records flowing through the pipeline
- OCRResult: winning recognition pass
- ExtractedParameter / NormalizedParameter: extractor and unit normalizer output
- ManualEntry: values typed in by the user
- MedicalResult: authoritative, immutable classification of one parameter
- ExtractionResult / PanelAnalysis: what the pipeline hands to callers
"""

from dataclasses import dataclass, field, replace, asdict
from typing import Any, Dict, FrozenSet, List, Optional, Tuple

from .enums import MedicalFlag, MedicalStatus, RiskLevel, WarningCode
from .patient import PatientContext
from .reference import ReferenceRange


@dataclass(frozen=True)
class OCRResult:
    text: str
    confidence: float  # 0-100, Tesseract mean word confidence
    strategy: str


@dataclass(frozen=True)
class ExtractedParameter:
    parameter_id: str
    raw_value: float
    raw_unit: str
    unit_inferred: bool = False
    reference_range: Optional[ReferenceRange] = None
    source_line: Optional[str] = None
    confidence: float = 0.0


@dataclass(frozen=True)
class NormalizedParameter:
    parameter_id: str
    value: float
    unit: str
    raw_value: float
    raw_unit: str
    converted: bool = False
    unit_recognized: bool = True
    reference_range: Optional[ReferenceRange] = None


@dataclass(frozen=True)
class ManualEntry:
    parameter_id: str
    value: Any
    unit: Optional[str] = None
    reference_range: Optional[ReferenceRange] = None


@dataclass(frozen=True)
class MedicalResult:
    parameter_id: str
    value: float
    unit: str
    reference_range: Optional[ReferenceRange]
    status: MedicalStatus
    deviation_percent: Optional[float]
    risk_level: Optional[RiskLevel]
    flags: FrozenSet[MedicalFlag] = frozenset()

    def with_flags(self, *flags: MedicalFlag) -> "MedicalResult":
        """Copy with extra flags. Classification fields are carried over untouched."""
        return replace(self, flags=self.flags | frozenset(flags))

    def has_flag(self, flag: MedicalFlag) -> bool:
        return flag in self.flags

    def to_dict(self) -> Dict[str, Any]:
        return {
            "parameter_id": self.parameter_id,
            "value": self.value,
            "unit": self.unit,
            "reference_range": (
                {"min": self.reference_range.min, "max": self.reference_range.max}
                if self.reference_range else None
            ),
            "status": self.status.value,
            "deviation_percent": self.deviation_percent,
            "risk_level": self.risk_level.value if self.risk_level else None,
            "flags": sorted(flag.value for flag in self.flags),
        }


@dataclass(frozen=True)
class PipelineWarning:
    code: WarningCode
    message: str
    parameter_id: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {"code": self.code.value, "message": self.message, "parameter_id": self.parameter_id}


@dataclass(frozen=True)
class BilingualText:
    en: str
    ur: str


@dataclass
class ExtractionResult:
    panel: str
    parameters: List[NormalizedParameter]
    ocr_confidence: float
    ocr_strategy: str
    raw_text: str = ""
    warnings: List[PipelineWarning] = field(default_factory=list)
    demographics: Dict[str, Any] = field(default_factory=dict)

    @property
    def needs_verification(self) -> bool:
        return any(w.code == WarningCode.LOW_OCR_CONFIDENCE for w in self.warnings)


@dataclass
class PanelAnalysis:
    panel: str
    patient: PatientContext
    results: Tuple[MedicalResult, ...]
    relationship_flags: Tuple[Any, ...]
    overall_risk: Optional[RiskLevel]
    summary: BilingualText
    warnings: List[PipelineWarning] = field(default_factory=list)
    key_insights: List[str] = field(default_factory=list)
    recommendations: Optional[BilingualText] = None
    ocr_confidence: Optional[float] = None
    summary_source: str = "rule_based"

    def result_for(self, parameter_id: str) -> Optional[MedicalResult]:
        for result in self.results:
            if result.parameter_id == parameter_id:
                return result
        return None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "panel": self.panel,
            "patient": {
                "age": self.patient.age,
                "sex": self.patient.sex.value,
                "conditions": list(self.patient.conditions),
            },
            "results": [result.to_dict() for result in self.results],
            "relationship_flags": [flag.value for flag in self.relationship_flags],
            "overall_risk": self.overall_risk.value if self.overall_risk else None,
            "summary": asdict(self.summary),
            "summary_source": self.summary_source,
            "key_insights": list(self.key_insights),
            "recommendations": asdict(self.recommendations) if self.recommendations else None,
            "ocr_confidence": self.ocr_confidence,
            "warnings": [warning.to_dict() for warning in self.warnings],
        }
