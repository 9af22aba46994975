# ============================================================================
# src/bloodwork_analysis/narrative/rule_based.py
# ============================================================================
"""
Deterministic bilingual summary built from status counts and pattern flags.
Always available; used when no narrative provider is configured or when
the provider fails.
"""

from typing import List, Sequence

from ..core.context import BilingualText, MedicalResult, MedicalStatus
from ..validators.relationships import RelationshipFlag
from .content import (
    ALL_NORMAL,
    CRITICAL_ALERT,
    DISCLAIMER,
    NO_RESULTS,
    NOT_EVALUATED,
    PATTERN_INTERPRETATIONS,
    SOME_ABNORMAL,
)


def build_rule_based_summary(
    panel_name: BilingualText,
    results: Sequence[MedicalResult],
    relationship_flags: Sequence[RelationshipFlag],
) -> BilingualText:
    evaluated = [r for r in results if r.status != MedicalStatus.NOT_EVALUATED]
    critical = [r for r in evaluated if r.status.is_critical]
    abnormal = [r for r in evaluated if r.status != MedicalStatus.NORMAL]
    unevaluated = len(results) - len(evaluated)

    if not evaluated:
        headline = NO_RESULTS
        en, ur = [headline.en], [headline.ur]
    elif critical:
        en = [CRITICAL_ALERT.en.format(count=len(critical))]
        ur = [CRITICAL_ALERT.ur.format(count=len(critical))]
    elif not abnormal:
        en = [ALL_NORMAL.en.format(panel=panel_name.en)]
        ur = [ALL_NORMAL.ur.format(panel=panel_name.ur)]
    else:
        en = [SOME_ABNORMAL.en.format(count=len(abnormal))]
        ur = [SOME_ABNORMAL.ur.format(count=len(abnormal))]

    for flag in relationship_flags:
        interpretation = PATTERN_INTERPRETATIONS.get(flag)
        if interpretation:
            en.append(interpretation.en)
            ur.append(interpretation.ur)

    if unevaluated and evaluated:
        en.append(NOT_EVALUATED.en.format(count=unevaluated))
        ur.append(NOT_EVALUATED.ur.format(count=unevaluated))

    en.append(DISCLAIMER.en)
    ur.append(DISCLAIMER.ur)
    return BilingualText(en=" ".join(en), ur=" ".join(ur))


def build_key_insights(results: Sequence[MedicalResult], display_names: dict) -> List[str]:
    """One line per abnormal result, critical results first."""
    abnormal = [
        r for r in results
        if r.status not in (MedicalStatus.NORMAL, MedicalStatus.NOT_EVALUATED)
    ]
    abnormal.sort(key=lambda r: (not r.status.is_critical, -abs(r.deviation_percent or 0)))

    insights = []
    for result in abnormal:
        name = display_names.get(result.parameter_id, result.parameter_id)
        status = result.status.value.replace("_", " ")
        line = f"{name} is {status} ({result.value:g} {result.unit}"
        if result.reference_range is not None:
            line += f", reference {result.reference_range} {result.unit}"
        insights.append(line + ")")
    return insights
