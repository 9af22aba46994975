# ============================================================================
# src/bloodwork_analysis/extractors/parameter_extractor.py
# ============================================================================
"""
Parameter Extractor

Scans normalized report text line by line with panel-specific patterns and
recovers (parameter_id, raw_value, raw_unit) triples.

Per line and parameter, the first numeric value after a matching label is
the candidate, unless that value opens a printed reference range; then the
number after the range is the result. Candidates for the same parameter on
different lines are ranked plausible-first, then by a confidence score;
ties keep document order.

Units come from the token right after the value, else from a unit later on
the line that the parameter can be reported in, else they are inferred.
An inferred count unit follows the magnitude: 7500 for WBC is per uL, not
thousands per uL. Everything else falls back to the canonical unit.
"""

import logging
import re
from dataclasses import dataclass
from functools import lru_cache
from typing import Any, Dict, List, Optional, Pattern

from ..core.context import ExtractedParameter, ReferenceRange, Sex
from ..core.reference_data import ReferenceDataStore, get_reference_data
from ..normalizers.unit_normalizer import UnitNormalizer, unit_key
from ..utils.text_normalizer import canonical_unit
from ..validators.validation_engine import check_plausibility
from .patterns import (
    AGE_PATTERN,
    AGE_SEX_PATTERN,
    NAME_PATTERN,
    REFERENCE_RANGE,
    SEX_PATTERN,
    VALUE,
    compile_parameter_patterns,
)

logger = logging.getLogger(__name__)

# Confidence scoring
BASE_SCORE = 0.5
STRICT_LABEL_BONUS = 0.2
UNIT_BONUS = 0.15
DECIMAL_BONUS = 0.1
SEPARATOR_BONUS = 0.05

_NEXT_TOKEN = re.compile(r"\s*(\S+)")
_TRAILING_VALUE = re.compile(VALUE)

# Alternatives tried, in order, when a bare count is implausible in its canonical unit
INFERABLE_COUNT_UNITS = ("/uL", "lakh/uL")


@dataclass
class _Candidate:
    parameter: ExtractedParameter
    score: float
    line_index: int
    plausible: bool = True


@lru_cache(maxsize=None)
def _patterns_for(parameter_id: str) -> List[Pattern]:
    return compile_parameter_patterns(parameter_id)


class ParameterExtractor:
    """
    Pattern-based extraction of blood test values from report text.

    Expects text already passed through utils.text_normalizer.normalize_text.
    """

    def __init__(
        self,
        store: Optional[ReferenceDataStore] = None,
        unit_normalizer: Optional[UnitNormalizer] = None,
    ):
        self.store = store or get_reference_data()
        self.unit_normalizer = unit_normalizer or UnitNormalizer(self.store)

    def extract(self, text: str, panel: str) -> List[ExtractedParameter]:
        """
        Extract all parameters of a panel from text.

        Args:
            text: Normalized report text
            panel: Panel id (e.g. "cbc")

        Returns:
            One ExtractedParameter per parameter found, in panel order.
            Empty list when nothing matched.

        Raises:
            UnknownPanelError: panel is not defined
        """
        definitions = self.store.panel_parameters(panel)
        lines = [line.strip() for line in text.splitlines() if line.strip()]

        extracted = []
        for definition in definitions:
            best: Optional[_Candidate] = None
            for index, line in enumerate(lines):
                candidate = self._match_line(definition.id, definition.canonical_unit, line, index)
                if candidate is None:
                    continue
                if best is None or (candidate.plausible, candidate.score) > (best.plausible, best.score):
                    best = candidate
            if best is not None:
                extracted.append(best.parameter)

        logger.info(f"Extracted {len(extracted)}/{len(definitions)} {panel} parameters from {len(lines)} lines")
        return extracted

    def _match_line(self, parameter_id: str, default_unit: str, line: str, index: int) -> Optional[_Candidate]:
        patterns = _patterns_for(parameter_id)
        strict_count = len(patterns) // 2

        for position, pattern in enumerate(patterns):
            match = pattern.search(line)
            if match is None:
                continue

            value_text = match.group("value")
            remainder = line[match.end("value"):]
            reference_range = None

            # "Platelets 150 - 450 10^3/uL 250": range column printed first
            leading_range = REFERENCE_RANGE.match(line, match.start("value"))
            if leading_range is not None and self._range_from(leading_range) is not None:
                after_range = line[leading_range.end():]
                trailing = _TRAILING_VALUE.search(after_range)
                if trailing is not None:
                    value_text = trailing.group("value")
                    remainder = after_range
                    reference_range = self._range_from(leading_range)

            value = float(value_text)
            unit, unit_explicit = self._detect_unit(parameter_id, remainder, default_unit)
            if not unit_explicit:
                unit = self._infer_count_unit(parameter_id, value, unit)
            if reference_range is None:
                reference_range = self._parse_reference_range(remainder)

            score = BASE_SCORE
            if position < strict_count:
                score += STRICT_LABEL_BONUS
            if unit_explicit:
                score += UNIT_BONUS
            if "." in value_text:
                score += DECIMAL_BONUS
            if match.groupdict().get("sep") in (":", "="):
                score += SEPARATOR_BONUS

            parameter = ExtractedParameter(
                parameter_id=parameter_id,
                raw_value=value,
                raw_unit=unit,
                unit_inferred=not unit_explicit,
                reference_range=reference_range,
                source_line=line,
                confidence=round(score, 2),
            )
            return _Candidate(
                parameter=parameter,
                score=score,
                line_index=index,
                plausible=self._is_plausible(parameter_id, value, unit),
            )

        return None

    def _detect_unit(self, parameter_id: str, remainder: str, default_unit: str):
        """
        Returns:
            (unit, explicit) where explicit is False for the assumed default
        """
        following = _NEXT_TOKEN.match(remainder)
        if following:
            unit = canonical_unit(following.group(1))
            if unit is not None:
                return unit, True

        accepted = self.unit_normalizer.accepted_units(parameter_id)
        for token in remainder.split():
            unit = canonical_unit(token)
            if unit is not None and unit_key(unit) in accepted:
                return unit, True

        return default_unit, False

    def _infer_count_unit(self, parameter_id: str, value: float, default_unit: str) -> str:
        """Pick the count unit a bare number was most likely printed in."""
        if self._is_plausible(parameter_id, value, default_unit):
            return default_unit
        accepted = self.unit_normalizer.accepted_units(parameter_id)
        for unit in INFERABLE_COUNT_UNITS:
            if unit in accepted and self._is_plausible(parameter_id, value, unit):
                logger.debug(
                    f"{parameter_id} value {value} read as {unit}", extra={"parameter_id": parameter_id}
                )
                return unit
        return default_unit

    def _is_plausible(self, parameter_id: str, value: float, unit: str) -> bool:
        rule = self.unit_normalizer.rule_for(parameter_id, unit)
        if rule is None:
            return True
        return check_plausibility(rule.apply(value), self.store.plausibility_limit(parameter_id))

    @staticmethod
    def _range_from(match: "re.Match") -> Optional[ReferenceRange]:
        low, high = float(match.group("low")), float(match.group("high"))
        if high <= low:
            return None
        return ReferenceRange(min=low, max=high)

    @classmethod
    def _parse_reference_range(cls, remainder: str) -> Optional[ReferenceRange]:
        match = REFERENCE_RANGE.search(remainder)
        if match is None:
            return None
        return cls._range_from(match)


def extract_demographics(text: str) -> Dict[str, Any]:
    """
    Best-effort patient details from a report header.

    Returns:
        Dict with any of "name", "age", "sex"
    """
    demographics: Dict[str, Any] = {}

    combined = AGE_SEX_PATTERN.search(text)
    if combined:
        demographics["age"] = int(combined.group("age"))
        demographics["sex"] = _parse_sex(combined.group("sex"))

    if "age" not in demographics:
        age = AGE_PATTERN.search(text)
        if age:
            demographics["age"] = int(age.group("age"))

    if "sex" not in demographics:
        sex = SEX_PATTERN.search(text)
        if sex:
            demographics["sex"] = _parse_sex(sex.group("sex"))

    name = NAME_PATTERN.search(text)
    if name:
        demographics["name"] = name.group("name").strip()

    return demographics


def _parse_sex(token: str) -> Sex:
    return Sex.MALE if token.lower().startswith("m") else Sex.FEMALE
