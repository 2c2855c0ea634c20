# sportbook/services/availability_service.py
"""
Availability Service for the Sportbook booking core

Represents and queries a teacher's recurring weekly availability:
- Which weekdays can be booked at all
- Which (start, end) windows exist on a weekday
- Which windows are common to every weekday of a multi-day selection
- Replacing the whole weekly set from the settings screen
- Generating back-to-back windows for the bulk wizard
"""

from collections import defaultdict
from datetime import date, datetime, time, timedelta
import logging
from typing import Dict, Iterable, List, Optional, Sequence

from sqlalchemy.orm import Session

from ..core.constants import WEEKDAY_LABELS
from ..core.exceptions import ValidationException
from ..models.availability import Availability
from ..repositories import RepositoryFactory
from ..repositories.availability_repository import AvailabilityRepository
from ..schemas.availability import AvailabilityWindowIn, BulkAvailabilityConfig, TimeSlot
from .base import BaseService

logger = logging.getLogger(__name__)


def _slot_of(window: Availability) -> TimeSlot:
    return TimeSlot(start_time=window.start_time, end_time=window.end_time)


def intersect_weekday_slots(slots_by_weekday: Dict[int, Iterable[TimeSlot]], weekdays: Iterable[int]) -> List[TimeSlot]:
    """
    Slots offered identically on every selected weekday.

    A recurring plan uses a single slot on all chosen days, so a slot that
    is missing on any one of them is not a choice at all.
    """
    selected = sorted(set(weekdays))
    if not selected:
        return []

    common = set(slots_by_weekday.get(selected[0], ()))
    for day in selected[1:]:
        common &= set(slots_by_weekday.get(day, ()))
        if not common:
            break
    return sorted(common)


class AvailabilityService(BaseService):
    """Service for a teacher's weekly availability windows."""

    def __init__(self, db: Session, repository: Optional[AvailabilityRepository] = None):
        super().__init__(db)
        self.repository = repository or RepositoryFactory.create_availability_repository(db)

    @BaseService.measure_operation("list_available_weekdays")
    def list_available_weekdays(self, teacher_id: str) -> List[int]:
        """
        Distinct weekdays with at least one active window.

        Args:
            teacher_id: Teacher profile id

        Returns:
            Sorted weekday numbers (Sunday=0)
        """
        windows = self.repository.get_windows(teacher_id)
        return sorted({window.day_of_week for window in windows})

    @BaseService.measure_operation("windows_for_weekday")
    def windows_for_weekday(self, teacher_id: str, weekday: int) -> List[TimeSlot]:
        """All active windows on a weekday, each identified by its (start, end) pair."""
        windows = self.repository.get_windows(teacher_id, weekdays=[weekday])
        return sorted({_slot_of(window) for window in windows})

    def slots_by_weekday(self, teacher_id: str, weekdays: Optional[Iterable[int]] = None) -> Dict[int, List[TimeSlot]]:
        grouped: Dict[int, set] = defaultdict(set)
        for window in self.repository.get_windows(teacher_id, weekdays=weekdays):
            grouped[window.day_of_week].add(_slot_of(window))
        return {day: sorted(slots) for day, slots in grouped.items()}

    @BaseService.measure_operation("common_time_slots")
    def common_time_slots(self, teacher_id: str, weekdays: Iterable[int]) -> List[TimeSlot]:
        """
        Time slots that exist on every selected weekday.

        Args:
            teacher_id: Teacher profile id
            weekdays: Selected weekdays

        Returns:
            Sorted common slots; empty when the days share none (the caller
            must block proceeding)
        """
        selected = sorted(set(weekdays))
        if not selected:
            return []
        return intersect_weekday_slots(self.slots_by_weekday(teacher_id, selected), selected)

    def get_weekly_schedule(self, teacher_id: str, include_inactive: bool = False) -> Dict[int, List[Availability]]:
        """Windows grouped by weekday for the settings screen (every weekday present)."""
        schedule: Dict[int, List[Availability]] = {day: [] for day in WEEKDAY_LABELS}
        for window in self.repository.get_windows(teacher_id, active_only=not include_inactive):
            schedule[window.day_of_week].append(window)
        return schedule

    @BaseService.measure_operation("replace_availability")
    def replace_availability(self, teacher_id: str, windows: Sequence[AvailabilityWindowIn]) -> List[Availability]:
        """
        Replace the teacher's weekly windows with a new set.

        The latest saved set fully replaces the prior one in a single
        transaction. Overlapping windows on a day are accepted and logged.

        Args:
            teacher_id: Teacher profile id
            windows: Complete new set of windows

        Returns:
            The stored windows
        """
        by_day: Dict[int, List[TimeSlot]] = defaultdict(list)
        for window in windows:
            by_day[window.day_of_week].append(window.slot)

        for day, slots in by_day.items():
            ordered = sorted(slots)
            for previous, current in zip(ordered, ordered[1:]):
                if current.overlaps(previous.start_time, previous.end_time):
                    self.logger.warning(
                        f"Teacher {teacher_id} saved overlapping windows on {WEEKDAY_LABELS[day]}: "
                        f"{previous.key} and {current.key}"
                    )

        rows = [
            {
                "day_of_week": window.day_of_week,
                "start_time": window.start_time,
                "end_time": window.end_time,
                "is_available": window.is_available,
            }
            for window in windows
        ]

        with self.transaction():
            stored = self.repository.replace_windows(teacher_id, rows)

        self.log_operation("replace_availability", teacher_id=teacher_id, window_count=len(stored))
        return stored


def generate_bulk_windows(config: BulkAvailabilityConfig) -> List[AvailabilityWindowIn]:
    """
    Back-to-back windows of ``session_minutes`` between start and end on each weekday.

    A window that would run past ``end_time`` is not emitted.
    """
    if config.start_time >= config.end_time:
        raise ValidationException("Start time must be before end time", code="INVALID_TIME_RANGE")

    anchor = date(2000, 1, 1)
    step = timedelta(minutes=config.session_minutes)
    day_end = datetime.combine(anchor, config.end_time)

    windows: List[AvailabilityWindowIn] = []
    for day in sorted(set(config.weekdays)):
        if day not in WEEKDAY_LABELS:
            raise ValidationException(f"Invalid weekday: {day}", code="INVALID_WEEKDAY")
        cursor = datetime.combine(anchor, config.start_time)
        while cursor + step <= day_end:
            windows.append(
                AvailabilityWindowIn(
                    day_of_week=day,
                    start_time=cursor.time(),
                    end_time=(cursor + step).time(),
                )
            )
            cursor += step
    return windows


def window_contains(windows: Iterable[TimeSlot], start_time: time, end_time: time) -> bool:
    """True when (start, end) is exactly one of the declared windows."""
    return any(slot.start_time == start_time and slot.end_time == end_time for slot in windows)
