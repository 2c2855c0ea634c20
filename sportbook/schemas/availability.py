# sportbook/schemas/availability.py
"""
Availability schemas.

A ``TimeSlot`` is the (start, end) pair used everywhere a window or a
booked range is compared. Slots are frozen so they can be collected in
sets for the cross-weekday intersection.
"""

from datetime import time
from typing import List

from pydantic import BaseModel, ConfigDict, Field, model_validator

from .base import StandardizedModel


class TimeSlot(BaseModel):
    model_config = ConfigDict(frozen=True)

    start_time: time
    end_time: time

    @model_validator(mode="after")
    def _check_order(self) -> "TimeSlot":
        if self.start_time >= self.end_time:
            raise ValueError("start_time must be before end_time")
        return self

    @property
    def key(self) -> str:
        """String form used for slot identity, e.g. ``09:00:00-10:00:00``."""
        return f"{self.start_time.isoformat()}-{self.end_time.isoformat()}"

    @classmethod
    def parse(cls, value: str) -> "TimeSlot":
        start, _, end = value.partition("-")
        return cls(start_time=time.fromisoformat(start.strip()), end_time=time.fromisoformat(end.strip()))

    def overlaps(self, start_time: time, end_time: time) -> bool:
        return self.start_time < end_time and start_time < self.end_time

    def __lt__(self, other: "TimeSlot") -> bool:
        return (self.start_time, self.end_time) < (other.start_time, other.end_time)


class AvailabilityWindowIn(BaseModel):
    """One window submitted from the teacher's settings screen."""

    day_of_week: int = Field(..., ge=0, le=6, description="Sunday=0 .. Saturday=6")
    start_time: time
    end_time: time
    is_available: bool = True

    @model_validator(mode="after")
    def _check_order(self) -> "AvailabilityWindowIn":
        if self.start_time >= self.end_time:
            raise ValueError("start_time must be before end_time")
        return self

    @property
    def slot(self) -> TimeSlot:
        return TimeSlot(start_time=self.start_time, end_time=self.end_time)


class AvailabilityWindowOut(StandardizedModel):
    id: str
    teacher_id: str
    day_of_week: int
    start_time: time
    end_time: time
    is_available: bool


class BulkAvailabilityConfig(BaseModel):
    """Input of the bulk generator: same block pattern on several weekdays."""

    weekdays: List[int] = Field(..., min_length=1)
    start_time: time
    end_time: time
    session_minutes: int = Field(..., gt=0, le=24 * 60)
