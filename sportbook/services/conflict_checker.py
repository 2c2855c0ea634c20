# sportbook/services/conflict_checker.py
"""
Conflict Checker Service for the Sportbook booking core

Handles booking conflict detection:
- Partitioning a recurring plan's dates into bookable and conflicting
- The authoritative single-slot re-check run right before a write

A date conflicts when the teacher already holds a pending or confirmed
booking on that date whose range intersects the requested slot. Ranges
are half-open: a session ending exactly when another starts is fine.
"""

from collections import defaultdict
from datetime import date, time
import logging
from typing import Dict, Iterable, List, Optional

from sqlalchemy.orm import Session

from ..models.booking import Booking
from ..repositories import RepositoryFactory
from ..repositories.booking_repository import BookingRepository
from ..schemas.availability import TimeSlot
from ..schemas.booking import DatePartition
from .base import BaseService

logger = logging.getLogger(__name__)


def ranges_overlap(start_a: time, end_a: time, start_b: time, end_b: time) -> bool:
    """Half-open interval overlap: [a_start, a_end) and [b_start, b_end) intersect."""
    return start_a < end_b and start_b < end_a


class ConflictChecker(BaseService):
    """
    Service for checking booking conflicts.

    Works entirely from the bookings' own date and time columns.
    """

    def __init__(self, db: Session, repository: Optional[BookingRepository] = None):
        """
        Initialize conflict checker service.

        Args:
            db: Database session
            repository: Optional BookingRepository instance
        """
        super().__init__(db)
        self.repository = repository or RepositoryFactory.create_booking_repository(db)

    def _bookings_by_date(
        self,
        teacher_id: str,
        dates: List[date],
        exclude_booking_id: Optional[str],
    ) -> Dict[date, List[Booking]]:
        grouped: Dict[date, List[Booking]] = defaultdict(list)
        for booking in self.repository.get_active_bookings_for_dates(teacher_id, dates, exclude_booking_id):
            grouped[booking.booking_date].append(booking)
        return grouped

    @BaseService.measure_operation("partition_dates")
    def partition_dates(
        self,
        teacher_id: str,
        dates: Iterable[date],
        slot: TimeSlot,
        exclude_booking_id: Optional[str] = None,
    ) -> DatePartition:
        """
        Split dates into bookable and conflicting subsets.

        Every input date lands in exactly one subset; input order is kept.

        Args:
            teacher_id: The teacher whose calendar is checked
            dates: Candidate dates (typically from the date expander)
            slot: The single slot requested on every date
            exclude_booking_id: Optional booking to ignore (reschedules)

        Returns:
            DatePartition with valid_dates and conflict_dates
        """
        date_list = list(dict.fromkeys(dates))
        if not date_list:
            return DatePartition()

        existing = self._bookings_by_date(teacher_id, date_list, exclude_booking_id)

        valid: List[date] = []
        conflicts: List[date] = []
        for candidate in date_list:
            if any(
                ranges_overlap(slot.start_time, slot.end_time, booking.start_time, booking.end_time)
                for booking in existing.get(candidate, ())
            ):
                conflicts.append(candidate)
            else:
                valid.append(candidate)

        if conflicts:
            self.logger.warning(
                f"Found {len(conflicts)} conflicting dates for teacher {teacher_id} in slot {slot.key}"
            )

        return DatePartition(valid_dates=valid, conflict_dates=conflicts)

    @BaseService.measure_operation("find_conflicting_dates")
    def find_conflicting_dates(
        self,
        teacher_id: str,
        dates: Iterable[date],
        slot: TimeSlot,
        exclude_booking_id: Optional[str] = None,
    ) -> List[date]:
        """
        Authoritative re-check for the exact slot on each date.

        Issued against the store with the overlap predicate in the query
        itself, immediately before a write.
        """
        return [
            candidate
            for candidate in dict.fromkeys(dates)
            if self.has_conflict(teacher_id, candidate, slot, exclude_booking_id)
        ]

    def has_conflict(
        self,
        teacher_id: str,
        booking_date: date,
        slot: TimeSlot,
        exclude_booking_id: Optional[str] = None,
    ) -> bool:
        """True when another slot-holding booking overlaps ``slot`` on ``booking_date``."""
        overlapping = self.repository.get_overlapping_bookings(
            teacher_id, booking_date, slot.start_time, slot.end_time, exclude_booking_id
        )
        return len(overlapping) > 0
