# ============================================================================
# src/bloodwork_analysis/core/reference_data.py
# ============================================================================
"""
Reference Data Store

Structured, load-time checked view over the knowledge tables:
- Panel and parameter definitions (names, canonical unit, rounding)
- Sex specific reference ranges with optional age buckets
- Critical thresholds and plausibility limits

Malformed entries raise ConfigurationError when the store is built, never
at lookup time.
"""

import logging
from functools import lru_cache
from typing import Dict, List, Mapping, Optional, Tuple

from pydantic import BaseModel, Field, ValidationError, field_validator, model_validator

from ..constants import CRITICAL_VALUES, PLAUSIBILITY_RANGES, REFERENCE_RANGES
from ..utils.exceptions import ConfigurationError, MissingReferenceRangeError, UnknownPanelError
from .context import (
    CriticalThreshold,
    ParameterDefinition,
    PatientContext,
    PlausibilityLimit,
    ReferenceRange,
    Sex,
)

logger = logging.getLogger(__name__)

SexRanges = Dict[Sex, Tuple[float, float]]


def _check_sex_ranges(ranges: SexRanges) -> SexRanges:
    missing = [sex.value for sex in Sex if sex not in ranges]
    if missing:
        raise ValueError(f"missing ranges for: {', '.join(missing)}")
    for sex, (low, high) in ranges.items():
        if low < 0:
            raise ValueError(f"{sex.value} range minimum {low} is negative")
        if high <= low:
            raise ValueError(f"{sex.value} range [{low}, {high}] is empty")
    return ranges


class AgeBucketRecord(BaseModel):
    min_age: int = Field(ge=0)
    max_age: Optional[int] = Field(default=None, ge=0)
    ranges: SexRanges

    @field_validator("ranges")
    @classmethod
    def check_ranges(cls, ranges):
        return _check_sex_ranges(ranges)

    @model_validator(mode="after")
    def check_ages(self):
        if self.max_age is not None and self.max_age < self.min_age:
            raise ValueError(f"age bucket {self.min_age}-{self.max_age} is inverted")
        return self

    def matches(self, age: int) -> bool:
        return self.min_age <= age and (self.max_age is None or age <= self.max_age)


class ParameterRecord(BaseModel):
    name_en: str = Field(min_length=1)
    name_ur: str = ""
    unit: str = Field(min_length=1)
    decimals: int = Field(default=1, ge=0, le=4)
    fraction_scalable: bool = False
    ranges: SexRanges
    age_buckets: List[AgeBucketRecord] = Field(default_factory=list)

    @field_validator("ranges")
    @classmethod
    def check_ranges(cls, ranges):
        return _check_sex_ranges(ranges)

    def all_ranges(self):
        yield from self.ranges.values()
        for bucket in self.age_buckets:
            yield from bucket.ranges.values()


class PanelRecord(BaseModel):
    name_en: str
    name_ur: str = ""
    parameters: Dict[str, ParameterRecord] = Field(min_length=1)


class ReferenceDataStore:
    """
    Immutable lookup tables for one process.

    Parameter ids are unique across panels; a parameter belongs to exactly
    one home panel. Ranges are therefore keyed by parameter id alone, and a
    table that defines the same id under two panels is rejected at load.
    """

    def __init__(
        self,
        panels: Mapping[str, dict],
        critical_values: Mapping[str, Mapping[str, float]],
        plausibility_ranges: Mapping[str, Tuple[float, float]],
    ):
        try:
            self._panels: Dict[str, PanelRecord] = {
                panel_id: PanelRecord.model_validate(panel)
                for panel_id, panel in panels.items()
            }
        except ValidationError as e:
            raise ConfigurationError(f"Malformed reference range table: {e}") from e

        self._definitions: Dict[str, ParameterDefinition] = {}
        self._records: Dict[str, ParameterRecord] = {}
        for panel_id, panel in self._panels.items():
            for parameter_id, record in panel.parameters.items():
                if parameter_id in self._definitions:
                    raise ConfigurationError(
                        f"Parameter '{parameter_id}' defined in both "
                        f"'{self._definitions[parameter_id].panel}' and '{panel_id}'"
                    )
                self._records[parameter_id] = record
                self._definitions[parameter_id] = ParameterDefinition(
                    id=parameter_id,
                    name_en=record.name_en,
                    name_ur=record.name_ur or record.name_en,
                    canonical_unit=record.unit,
                    panel=panel_id,
                    decimals=record.decimals,
                    fraction_scalable=record.fraction_scalable,
                )

        self._critical = self._build_critical(critical_values)
        self._plausibility = self._build_plausibility(plausibility_ranges)

        logger.debug(
            f"Reference data loaded: {len(self._panels)} panels, "
            f"{len(self._definitions)} parameters, {len(self._critical)} critical thresholds"
        )

    def _build_critical(self, critical_values) -> Dict[str, CriticalThreshold]:
        thresholds = {}
        for parameter_id, bounds in critical_values.items():
            record = self._records.get(parameter_id)
            if record is None:
                raise ConfigurationError(f"Critical threshold for unknown parameter '{parameter_id}'")
            unknown_keys = set(bounds) - {"low", "high"}
            if unknown_keys or not bounds:
                raise ConfigurationError(
                    f"Critical threshold for '{parameter_id}' must use 'low'/'high', got {sorted(bounds)}"
                )
            low, high = bounds.get("low"), bounds.get("high")
            for range_min, range_max in record.all_ranges():
                if low is not None and low > range_min:
                    raise ConfigurationError(
                        f"Critical low {low} for '{parameter_id}' lies above reference minimum {range_min}"
                    )
                if high is not None and high < range_max:
                    raise ConfigurationError(
                        f"Critical high {high} for '{parameter_id}' lies below reference maximum {range_max}"
                    )
            thresholds[parameter_id] = CriticalThreshold(critical_low=low, critical_high=high)
        return thresholds

    def _build_plausibility(self, plausibility_ranges) -> Dict[str, PlausibilityLimit]:
        limits = {}
        for parameter_id, bounds in plausibility_ranges.items():
            if parameter_id not in self._records:
                raise ConfigurationError(f"Plausibility range for unknown parameter '{parameter_id}'")
            if len(bounds) != 2 or bounds[1] <= bounds[0]:
                raise ConfigurationError(f"Plausibility range for '{parameter_id}' is invalid: {bounds}")
            limits[parameter_id] = PlausibilityLimit(min=bounds[0], max=bounds[1])
        return limits

    # ------------------------------------------------------------------
    # Lookups
    # ------------------------------------------------------------------

    @property
    def panels(self) -> List[str]:
        return list(self._panels)

    def panel_name(self, panel: str, language: str = "en") -> str:
        record = self._panel(panel)
        if language == "ur" and record.name_ur:
            return record.name_ur
        return record.name_en

    def panel_parameters(self, panel: str) -> List[ParameterDefinition]:
        self._panel(panel)
        return [d for d in self._definitions.values() if d.panel == panel]

    def definition(self, parameter_id: str) -> Optional[ParameterDefinition]:
        return self._definitions.get(parameter_id)

    def critical_threshold(self, parameter_id: str) -> Optional[CriticalThreshold]:
        return self._critical.get(parameter_id)

    def plausibility_limit(self, parameter_id: str) -> Optional[PlausibilityLimit]:
        return self._plausibility.get(parameter_id)

    def find_range(self, parameter_id: str, patient: PatientContext) -> Optional[ReferenceRange]:
        record = self._records.get(parameter_id)
        if record is None:
            return None
        ranges = record.ranges
        for bucket in record.age_buckets:
            if bucket.matches(patient.age):
                ranges = bucket.ranges
                break
        low, high = ranges[patient.sex]
        return ReferenceRange(min=low, max=high)

    def resolve_range(self, panel: str, parameter_id: str, patient: PatientContext) -> ReferenceRange:
        """
        Reference range for a parameter, by sex and age bucket.

        The panel is checked to exist; the range itself comes from the
        parameter's home panel.

        Raises:
            UnknownPanelError: panel is not defined
            MissingReferenceRangeError: no range is defined for the parameter
        """
        self._panel(panel)
        reference_range = self.find_range(parameter_id, patient)
        if reference_range is None:
            raise MissingReferenceRangeError(
                f"No reference range defined for '{parameter_id}'", parameter_id
            )
        return reference_range

    def _panel(self, panel: str) -> PanelRecord:
        try:
            return self._panels[panel]
        except KeyError:
            raise UnknownPanelError(
                f"Unknown test panel '{panel}'. Known panels: {', '.join(self._panels)}", panel
            ) from None


@lru_cache(maxsize=1)
def get_reference_data() -> ReferenceDataStore:
    """Process-wide store built from the bundled knowledge tables."""
    return ReferenceDataStore(REFERENCE_RANGES, CRITICAL_VALUES, PLAUSIBILITY_RANGES)
