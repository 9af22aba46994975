# ============================================================================
# src/bloodwork_analysis/core/context/patient.py
# ============================================================================
"""
Patient context supplied once per analysis request.
Read-only input to reference range resolution.
"""

from dataclasses import dataclass
from typing import Tuple, Union

from .enums import Sex


@dataclass(frozen=True)
class PatientContext:
    age: int
    sex: Sex
    conditions: Tuple[str, ...] = ()

    def __post_init__(self):
        if not isinstance(self.sex, Sex):
            object.__setattr__(self, "sex", Sex(str(self.sex).lower()))
        if isinstance(self.age, bool) or not isinstance(self.age, int) or self.age < 0:
            raise ValueError(f"Patient age must be a non-negative integer, got {self.age!r}")
        object.__setattr__(self, "conditions", tuple(self.conditions))

    @classmethod
    def create(cls, age: int, sex: Union[str, Sex], conditions=()) -> "PatientContext":
        return cls(age=age, sex=sex, conditions=tuple(conditions))
