# ============================================================================
# src/bloodwork_analysis/normalizers/unit_normalizer.py
# ============================================================================
"""
Unit Normalizer

Converts reported (value, unit) pairs into each parameter's canonical unit.

Rules are table-driven (knowledge/unit_conversions.json) and come in three kinds:
- identity: unit already canonical
- linear:   unit families differing by a scale (g/L -> g/dL) or an affine
            mapping (HbA1c IFCC mmol/mol -> NGSP %)
- molar:    molar to mass concentration via a parameter-specific factor
            (glucose mmol/L x 18.0 -> mg/dL)

Percentage parameters reported as a fraction (<= 1, no explicit "%") are
scaled x100. Results are rounded half-up to the parameter's precision.
Unknown units pass through unchanged and are reported, never raised.
"""

import logging
from dataclasses import dataclass
from decimal import Decimal, ROUND_HALF_UP
from enum import Enum
from typing import Dict, List, Optional, Set, Tuple

from pydantic import BaseModel, Field, ValidationError

from ..constants import UNIT_CONVERSIONS
from ..core.context import ExtractedParameter, ManualEntry, NormalizedParameter, ReferenceRange
from ..core.reference_data import ReferenceDataStore, get_reference_data
from ..utils.exceptions import ConfigurationError
from ..utils.text_normalizer import canonical_unit
from ..validators.validation_engine import coerce_value

logger = logging.getLogger(__name__)

PERCENT = "%"


class ConversionKind(str, Enum):
    IDENTITY = "identity"
    LINEAR = "linear"
    MOLAR = "molar"


class ConversionRuleRecord(BaseModel):
    parameters: List[str] = Field(min_length=1)
    from_unit: str = Field(min_length=1)
    kind: ConversionKind
    factor: float = Field(default=1.0, gt=0)
    offset: float = 0.0


@dataclass(frozen=True)
class ConversionRule:
    kind: ConversionKind
    factor: float = 1.0
    offset: float = 0.0

    def apply(self, value: float) -> float:
        if self.kind == ConversionKind.IDENTITY:
            return value
        return value * self.factor + self.offset


IDENTITY = ConversionRule(ConversionKind.IDENTITY)


def unit_key(unit: Optional[str]) -> str:
    """Canonical spelling when known, otherwise the trimmed raw text."""
    if not unit:
        return ""
    return canonical_unit(unit) or unit.strip()


def round_half_up(value: float, decimals: int) -> float:
    quantum = Decimal(1).scaleb(-decimals)
    return float(Decimal(str(value)).quantize(quantum, rounding=ROUND_HALF_UP))


class UnitNormalizer:
    """
    Table-driven conversion to canonical units.

    Built once per process; holds only immutable lookup tables.
    """

    def __init__(self, store: Optional[ReferenceDataStore] = None, rules: Optional[List[dict]] = None):
        self.store = store or get_reference_data()
        self._rules: Dict[Tuple[str, str], ConversionRule] = {}

        for raw in UNIT_CONVERSIONS if rules is None else rules:
            try:
                record = ConversionRuleRecord.model_validate(raw)
            except ValidationError as e:
                raise ConfigurationError(f"Malformed unit conversion rule {raw}: {e}") from e

            from_unit = unit_key(record.from_unit)
            rule = ConversionRule(record.kind, record.factor, record.offset)
            for parameter_id in record.parameters:
                definition = self.store.definition(parameter_id)
                if definition is None:
                    raise ConfigurationError(f"Unit conversion for unknown parameter '{parameter_id}'")
                if from_unit == unit_key(definition.canonical_unit):
                    raise ConfigurationError(
                        f"Unit conversion for '{parameter_id}' starts from its canonical unit {from_unit}"
                    )
                if (parameter_id, from_unit) in self._rules:
                    raise ConfigurationError(f"Duplicate conversion for '{parameter_id}' from {from_unit}")
                self._rules[(parameter_id, from_unit)] = rule

        logger.debug(f"Loaded {len(self._rules)} unit conversion rules")

    def accepted_units(self, parameter_id: str) -> Set[str]:
        """Units this parameter can be reported in (canonical included)."""
        definition = self.store.definition(parameter_id)
        if definition is None:
            return set()
        units = {unit_key(definition.canonical_unit)}
        units.update(unit for (pid, unit) in self._rules if pid == parameter_id)
        return units

    def rule_for(self, parameter_id: str, unit: Optional[str]) -> Optional[ConversionRule]:
        definition = self.store.definition(parameter_id)
        if definition is None:
            return None
        key = unit_key(unit)
        if not key or key == unit_key(definition.canonical_unit):
            return IDENTITY
        return self._rules.get((parameter_id, key))

    def convert(
        self,
        parameter_id: str,
        value: float,
        unit: Optional[str],
        explicit_unit: bool = True,
        reference_range=None,
    ) -> NormalizedParameter:
        """
        Convert one value to the parameter's canonical unit.

        Args:
            parameter_id: Stable parameter key
            value: Reported numeric value
            unit: Reported unit (None or "" means the canonical unit)
            explicit_unit: False when the unit was assumed rather than read
            reference_range: Report-printed range, converted with the value

        Returns:
            NormalizedParameter; unit_recognized is False for unknown units
        """
        definition = self.store.definition(parameter_id)
        raw_unit = unit or ""

        if definition is None:
            logger.warning(f"{parameter_id}: no parameter definition, value passed through")
            return NormalizedParameter(
                parameter_id=parameter_id,
                value=value,
                unit=raw_unit,
                raw_value=value,
                raw_unit=raw_unit,
                converted=False,
                unit_recognized=False,
                reference_range=reference_range,
            )

        rule = self.rule_for(parameter_id, unit)
        if rule is None:
            logger.warning(
                f"{parameter_id}: unknown unit '{raw_unit}' (canonical {definition.canonical_unit}), "
                f"value {value} passed through unconverted"
            )
            return NormalizedParameter(
                parameter_id=parameter_id,
                value=value,
                unit=raw_unit,
                raw_value=value,
                raw_unit=raw_unit,
                converted=False,
                unit_recognized=False,
                reference_range=reference_range,
            )

        normalized = rule.apply(value)
        converted = rule.kind != ConversionKind.IDENTITY
        if converted and reference_range is not None:
            reference_range = ReferenceRange(
                min=round_half_up(rule.apply(reference_range.min), definition.decimals),
                max=round_half_up(rule.apply(reference_range.max), definition.decimals),
            )

        explicit_percent = explicit_unit and unit_key(unit) == PERCENT
        if (
            rule.kind == ConversionKind.IDENTITY
            and definition.fraction_scalable
            and definition.canonical_unit == PERCENT
            and normalized <= 1
            and not explicit_percent
        ):
            logger.debug(f"{parameter_id}: {value} read as a fraction, scaled to percent")
            normalized *= 100
            converted = True

        normalized = round_half_up(normalized, definition.decimals)
        if converted:
            logger.debug(f"{parameter_id}: {value} {raw_unit} -> {normalized} {definition.canonical_unit}")

        return NormalizedParameter(
            parameter_id=parameter_id,
            value=normalized,
            unit=definition.canonical_unit,
            raw_value=value,
            raw_unit=raw_unit,
            converted=converted,
            unit_recognized=True,
            reference_range=reference_range,
        )

    def normalize(self, extracted: ExtractedParameter) -> NormalizedParameter:
        return self.convert(
            extracted.parameter_id,
            extracted.raw_value,
            extracted.raw_unit,
            explicit_unit=not extracted.unit_inferred,
            reference_range=extracted.reference_range,
        )

    def normalize_manual(self, entry: ManualEntry) -> NormalizedParameter:
        """
        Normalize a typed-in value.

        Raises:
            InvalidValueError: value is not a finite, non-negative number
        """
        value = coerce_value(entry.parameter_id, entry.value)
        return self.convert(
            entry.parameter_id,
            value,
            entry.unit,
            explicit_unit=bool(entry.unit),
            reference_range=entry.reference_range,
        )
