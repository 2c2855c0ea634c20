# sportbook/services/booking_dates.py
"""
Recurring booking date expansion.

Turns (start date, selected weekdays, plan duration) into the concrete,
ascending list of calendar dates a recurring plan materializes into.

The walk is an inclusive day-by-day scan from ``start_date`` through
``start_date + duration_days``: the end date is included when its weekday
is selected. Weekdays use Sunday=0 numbering, matching availability rows.
"""

from datetime import date, timedelta
from typing import Iterable, List, Optional, Set, Union

from ..core.constants import PLAN_DURATION_DAYS, WEEKDAY_LABELS, PlanDuration
from ..core.exceptions import ValidationException
from ..schemas.availability import TimeSlot

__all__ = [
    "PlanDuration",
    "expand_booking_dates",
    "resolve_duration_days",
    "validate_selection",
    "weekday_index",
]


def weekday_index(value: date) -> int:
    """Day of week with Sunday=0 .. Saturday=6."""
    return value.isoweekday() % 7


def resolve_duration_days(duration: Union[PlanDuration, str, int]) -> int:
    """
    Map a plan duration to its day count.

    Accepts a ``PlanDuration``, its string value, or one of the enumerated
    day counts (7, 14, 30, 60, 90).
    """
    if isinstance(duration, PlanDuration):
        return PLAN_DURATION_DAYS[duration]
    if isinstance(duration, int) and not isinstance(duration, bool):
        if duration in PLAN_DURATION_DAYS.values():
            return duration
    elif isinstance(duration, str):
        try:
            return PLAN_DURATION_DAYS[PlanDuration(duration)]
        except ValueError:
            pass
    raise ValidationException(
        f"Unsupported plan duration: {duration}",
        code="INVALID_DURATION",
        details={"allowed_days": sorted(PLAN_DURATION_DAYS.values())},
    )


def expand_booking_dates(start_date: date, weekdays: Iterable[int], duration_days: int) -> List[date]:
    """
    Enumerate every date in [start_date, start_date + duration_days] whose
    weekday is selected.

    Args:
        start_date: First day of the plan
        weekdays: Selected weekdays (Sunday=0)
        duration_days: Plan length in days

    Returns:
        Strictly ascending list of dates without duplicates
    """
    selected: Set[int] = set(weekdays)
    if not selected or duration_days < 0:
        return []

    end_date = start_date + timedelta(days=duration_days)
    dates: List[date] = []
    current = start_date
    while current <= end_date:
        if weekday_index(current) in selected:
            dates.append(current)
        current += timedelta(days=1)
    return dates


def validate_selection(
    start_date: Optional[date],
    weekdays: Iterable[int],
    slot: Optional[TimeSlot],
    today: date,
) -> None:
    """
    Pure checks on a booking selection, run before any data-store access.

    Raises:
        ValidationException: When the start date, weekdays or slot is missing
            or the start date lies in the past
    """
    if start_date is None:
        raise ValidationException("Please choose a start date", code="MISSING_START_DATE")
    if start_date < today:
        raise ValidationException(
            "Start date cannot be in the past",
            code="START_DATE_IN_PAST",
            details={"start_date": start_date.isoformat(), "today": today.isoformat()},
        )

    days = list(weekdays)
    if not days:
        raise ValidationException("Select at least one day of the week", code="NO_WEEKDAYS_SELECTED")
    invalid = [day for day in days if day not in WEEKDAY_LABELS]
    if invalid:
        raise ValidationException(
            "Weekdays must be between 0 (Sunday) and 6 (Saturday)",
            code="NO_WEEKDAYS_SELECTED",
            details={"invalid": invalid},
        )

    if slot is None:
        raise ValidationException("Please choose a time slot", code="NO_TIME_SLOT")
