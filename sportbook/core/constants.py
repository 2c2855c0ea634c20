# sportbook/core/constants.py
"""
Shared constants and enums for the booking core.
"""

from enum import Enum
from typing import Dict, List, Tuple


class ProfileRole(str, Enum):
    TEACHER = "teacher"
    STUDENT = "student"


class BookingStatus(str, Enum):
    """Booking lifecycle statuses."""

    PENDING = "pending"  # Awaiting teacher confirmation
    CONFIRMED = "confirmed"
    CANCELLED = "cancelled"
    COMPLETED = "completed"  # Set automatically after the session ends
    RESCHEDULED = "rescheduled"


class CancelledBy(str, Enum):
    STUDENT = "student"
    TEACHER = "teacher"


# Statuses that hold a teacher's time slot
ACTIVE_BOOKING_STATUSES: Tuple[BookingStatus, ...] = (
    BookingStatus.PENDING,
    BookingStatus.CONFIRMED,
)

# Day-of-week numbering used by availability rows (Sunday=0)
DAYS_OF_WEEK: List[Dict[str, object]] = [
    {"value": 0, "label": "Sunday", "short": "Sun"},
    {"value": 1, "label": "Monday", "short": "Mon"},
    {"value": 2, "label": "Tuesday", "short": "Tue"},
    {"value": 3, "label": "Wednesday", "short": "Wed"},
    {"value": 4, "label": "Thursday", "short": "Thu"},
    {"value": 5, "label": "Friday", "short": "Fri"},
    {"value": 6, "label": "Saturday", "short": "Sat"},
]

WEEKDAY_LABELS: Dict[int, str] = {int(day["value"]): str(day["label"]) for day in DAYS_OF_WEEK}

MIN_RATING = 1
MAX_RATING = 5


class PlanDuration(str, Enum):
    """Length of a recurring booking plan."""

    ONE_WEEK = "1_week"
    TWO_WEEKS = "2_weeks"
    ONE_MONTH = "1_month"
    TWO_MONTHS = "2_months"
    THREE_MONTHS = "3_months"

    @property
    def days(self) -> int:
        return PLAN_DURATION_DAYS[self]


PLAN_DURATION_DAYS: Dict["PlanDuration", int] = {
    PlanDuration.ONE_WEEK: 7,
    PlanDuration.TWO_WEEKS: 14,
    PlanDuration.ONE_MONTH: 30,
    PlanDuration.TWO_MONTHS: 60,
    PlanDuration.THREE_MONTHS: 90,
}
