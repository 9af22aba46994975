# ============================================================================
# src/bloodwork_analysis/core/assembler.py
# ============================================================================
"""
Result Assembler

Turns normalized values (from a document, typed in, or both) into the
panel-level analysis record:

1. Merge: manual values replace extracted ones for the same parameter
2. Resolve the reference range (store first, report-printed range second)
3. Classify each value with the validation engine
4. Attach non-fatal warnings (unverified unit, implausible value, no range)
5. Cross-parameter relationship analysis
6. Overall risk and the rule-based bilingual summary
"""

import logging
from typing import Dict, List, Optional, Sequence

from .context import (
    BilingualText,
    ManualEntry,
    MedicalFlag,
    MedicalResult,
    NormalizedParameter,
    PanelAnalysis,
    PatientContext,
    PipelineWarning,
    RiskLevel,
    WarningCode,
)
from .reference_data import ReferenceDataStore, get_reference_data
from ..config.validation_config import ValidationSettings, validation_settings
from ..narrative.rule_based import build_key_insights, build_rule_based_summary
from ..normalizers.unit_normalizer import UnitNormalizer
from ..validators.plausibility import PlausibilityChecker
from ..validators.relationships import analyze_relationships
from ..validators.validation_engine import unevaluated_result, validate_parameter

logger = logging.getLogger(__name__)


class ResultAssembler:
    """
    Builds a PanelAnalysis from normalized parameters.

    Stateless between calls; one instance can serve concurrent requests.
    """

    def __init__(
        self,
        store: Optional[ReferenceDataStore] = None,
        unit_normalizer: Optional[UnitNormalizer] = None,
        settings: ValidationSettings = validation_settings,
    ):
        self.store = store or get_reference_data()
        self.unit_normalizer = unit_normalizer or UnitNormalizer(self.store)
        self.plausibility = PlausibilityChecker(self.store)
        self.settings = settings

    def merge(
        self,
        panel: str,
        extracted: Sequence[NormalizedParameter],
        manual_entries: Sequence[ManualEntry] = (),
    ) -> List[NormalizedParameter]:
        """
        Combine extracted and manual values, manual winning per parameter.

        Panel parameters come first in panel order, then any others in the
        order they were supplied.

        Raises:
            UnknownPanelError: panel is not defined
            InvalidValueError: a manual value is not a usable number
        """
        merged: Dict[str, NormalizedParameter] = {}
        for parameter in extracted:
            merged[parameter.parameter_id] = parameter
        for entry in manual_entries:
            if entry.parameter_id in merged:
                logger.info(f"{entry.parameter_id}: manual value replaces extracted value")
            merged[entry.parameter_id] = self.unit_normalizer.normalize_manual(entry)

        ordered = [merged.pop(d.id) for d in self.store.panel_parameters(panel) if d.id in merged]
        return ordered + list(merged.values())

    def classify(
        self,
        panel: str,
        patient: PatientContext,
        parameter: NormalizedParameter,
        warnings: List[PipelineWarning],
    ) -> MedicalResult:
        pid = parameter.parameter_id
        plausibility_limit = self.store.plausibility_limit(pid)

        reference_range = self.store.find_range(pid, patient)
        if reference_range is None and parameter.reference_range is not None:
            logger.info(f"{pid}: using the reference range printed on the report ({parameter.reference_range})")
            reference_range = parameter.reference_range

        if reference_range is None:
            logger.warning(
                f"{pid}: no reference range for {panel}, left unevaluated",
                extra={"panel": panel, "parameter_id": pid},
            )
            result = unevaluated_result(pid, parameter.value, parameter.unit, plausibility_limit)
            warnings.append(PipelineWarning(
                WarningCode.NO_REFERENCE_RANGE,
                f"No reference range is available for {pid}; the value was not classified",
                pid,
            ))
        else:
            result = validate_parameter(
                pid,
                parameter.value,
                parameter.unit,
                reference_range,
                critical=self.store.critical_threshold(pid),
                plausibility=plausibility_limit,
                settings=self.settings,
            )

        if not parameter.unit_recognized:
            result = result.with_flags(MedicalFlag.UNIT_UNVERIFIED)
            warnings.append(PipelineWarning(
                WarningCode.UNIT_UNVERIFIED,
                f"Unit '{parameter.raw_unit}' for {pid} is not recognized; the value was used as reported",
                pid,
            ))

        if result.has_flag(MedicalFlag.IMPLAUSIBLE):
            _, reason = self.plausibility.check(pid, result.value)
            message = f"{pid}: {reason}"
            suggestion = self.plausibility.suggest_correction(pid, result.value)
            if suggestion is not None:
                message += f"; did you mean {suggestion:g}?"
            warnings.append(PipelineWarning(WarningCode.IMPLAUSIBLE_VALUE, message, pid))

        return result

    def assemble(
        self,
        panel: str,
        patient: PatientContext,
        extracted: Sequence[NormalizedParameter] = (),
        manual_entries: Sequence[ManualEntry] = (),
    ) -> PanelAnalysis:
        """
        Classify every value and build the panel analysis.

        Raises:
            UnknownPanelError: panel is not defined
            InvalidValueError: a value is not a usable number
        """
        parameters = self.merge(panel, extracted, manual_entries)

        warnings: List[PipelineWarning] = []
        results = tuple(self.classify(panel, patient, p, warnings) for p in parameters)
        relationship_flags = analyze_relationships(results)
        overall_risk = RiskLevel.highest(r.risk_level for r in results)

        panel_name = BilingualText(
            en=self.store.panel_name(panel, "en"),
            ur=self.store.panel_name(panel, "ur"),
        )
        display_names = {}
        for result in results:
            definition = self.store.definition(result.parameter_id)
            display_names[result.parameter_id] = definition.name_en if definition else result.parameter_id

        logger.info(
            f"Assembled {panel}: {len(results)} results, "
            f"overall risk {overall_risk.value if overall_risk else 'n/a'}, "
            f"patterns {[flag.value for flag in relationship_flags]}"
        )

        return PanelAnalysis(
            panel=panel,
            patient=patient,
            results=results,
            relationship_flags=relationship_flags,
            overall_risk=overall_risk,
            summary=build_rule_based_summary(panel_name, results, relationship_flags),
            warnings=warnings,
            key_insights=build_key_insights(results, display_names),
        )
