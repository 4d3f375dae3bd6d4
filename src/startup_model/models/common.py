from __future__ import annotations

from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, conint


class ScenarioMeta(BaseModel):
    id: str
    name: str
    description: Optional[str] = None


class ScheduleEntry(BaseModel):
    model_config = ConfigDict(frozen=True)

    threshold: conint(ge=0) = Field(..., description="First period (year or month) the value applies to")
    value: float


class StepSchedule(BaseModel):
    """Step function over time.

    Entries are kept sorted by threshold. A query returns the value of the last
    entry whose threshold is <= the target period; periods past the end repeat
    the last value and periods before the first entry use the first value.
    """

    model_config = ConfigDict(frozen=True)

    entries: List[ScheduleEntry] = Field(default_factory=list)

    @classmethod
    def from_values(cls, values: List[float], start: int = 1) -> "StepSchedule":
        return cls(entries=[ScheduleEntry(threshold=start + i, value=v) for i, v in enumerate(values)])

    def value_for(self, period: int, default: float = 0.0) -> float:
        if not self.entries:
            return default
        ordered = sorted(self.entries, key=lambda entry: entry.threshold)
        current = ordered[0].value
        for entry in ordered:
            if entry.threshold <= period:
                current = entry.value
            else:
                break
        return current
