# sportbook/repositories/booking_repository.py
"""
Booking Repository for the Sportbook booking core

All conflict queries work on the booking's own date and time columns and
only consider statuses that hold a slot (pending, confirmed).
"""

from datetime import date, time
import logging
from typing import Iterable, List, Optional, Sequence

from sqlalchemy import or_
from sqlalchemy.orm import Session

from ..core.constants import ACTIVE_BOOKING_STATUSES, BookingStatus
from ..models.booking import Booking
from .base_repository import BaseRepository

logger = logging.getLogger(__name__)

_ACTIVE_VALUES = [status.value for status in ACTIVE_BOOKING_STATUSES]


class BookingRepository(BaseRepository[Booking]):
    def __init__(self, db: Session):
        super().__init__(db, Booking)

    # Conflict queries

    def get_active_bookings_for_dates(
        self,
        teacher_id: str,
        dates: Iterable[date],
        exclude_booking_id: Optional[str] = None,
    ) -> List[Booking]:
        """
        Get a teacher's slot-holding bookings on any of the given dates.

        Args:
            teacher_id: Teacher profile id
            dates: Calendar dates to look up (an "in-set" filter)
            exclude_booking_id: Optional booking to leave out (reschedules)

        Returns:
            Bookings ordered by date and start time
        """
        date_list = list(dates)
        if not date_list:
            return []

        query = self._build_query().filter(
            Booking.teacher_id == teacher_id,
            Booking.booking_date.in_(date_list),
            Booking.status.in_(_ACTIVE_VALUES),
        )
        if exclude_booking_id:
            query = query.filter(Booking.id != exclude_booking_id)
        return self._execute_query(query.order_by(Booking.booking_date, Booking.start_time))

    def get_active_bookings_in_range(
        self,
        teacher_id: str,
        from_date: date,
        to_date: date,
        exclude_booking_id: Optional[str] = None,
    ) -> List[Booking]:
        query = self._build_query().filter(
            Booking.teacher_id == teacher_id,
            Booking.booking_date >= from_date,
            Booking.booking_date <= to_date,
            Booking.status.in_(_ACTIVE_VALUES),
        )
        if exclude_booking_id:
            query = query.filter(Booking.id != exclude_booking_id)
        return self._execute_query(query.order_by(Booking.booking_date, Booking.start_time))

    def get_overlapping_bookings(
        self,
        teacher_id: str,
        booking_date: date,
        start_time: time,
        end_time: time,
        exclude_booking_id: Optional[str] = None,
    ) -> List[Booking]:
        """Authoritative single-slot lookup: existing.start < end AND existing.end > start."""
        query = self._build_query().filter(
            Booking.teacher_id == teacher_id,
            Booking.booking_date == booking_date,
            Booking.status.in_(_ACTIVE_VALUES),
            Booking.start_time < end_time,
            Booking.end_time > start_time,
        )
        if exclude_booking_id:
            query = query.filter(Booking.id != exclude_booking_id)
        return self._execute_query(query)

    # Listing

    def list_for_student(self, student_id: str, statuses: Optional[Sequence[str]] = None) -> List[Booking]:
        query = self._build_query().filter(Booking.student_id == student_id)
        if statuses:
            query = query.filter(Booking.status.in_(list(statuses)))
        return self._execute_query(query.order_by(Booking.booking_date.desc(), Booking.start_time.desc()))

    def list_for_teacher(self, teacher_id: str, statuses: Optional[Sequence[str]] = None) -> List[Booking]:
        query = self._build_query().filter(Booking.teacher_id == teacher_id)
        if statuses:
            query = query.filter(Booking.status.in_(list(statuses)))
        return self._execute_query(query.order_by(Booking.booking_date.desc(), Booking.start_time.desc()))

    def get_confirmed_on_or_before(self, last_date: date) -> List[Booking]:
        """Confirmed bookings that could have ended by ``last_date``."""
        query = self._build_query().filter(
            Booking.status == BookingStatus.CONFIRMED.value,
            Booking.booking_date <= last_date,
        )
        return self._execute_query(query)

    def get_active_on(self, booking_date: date) -> List[Booking]:
        """Every pending or confirmed booking on one calendar date, across teachers."""
        query = self._build_query().filter(
            Booking.booking_date == booking_date,
            Booking.status.in_(_ACTIVE_VALUES),
        )
        return self._execute_query(query.order_by(Booking.start_time, Booking.id))

    def get_completed_since(self, teacher_id: str, since: date) -> List[Booking]:
        query = self._build_query().filter(
            Booking.teacher_id == teacher_id,
            Booking.status == BookingStatus.COMPLETED.value,
            Booking.booking_date >= since,
        )
        return self._execute_query(query.order_by(Booking.booking_date))

    def mark_completed(self, booking_ids: Sequence[str]) -> int:
        if not booking_ids:
            return 0
        return (
            self._build_query()
            .filter(Booking.id.in_(list(booking_ids)))
            .update({"status": BookingStatus.COMPLETED.value}, synchronize_session="fetch")
        )

    def delete_for_profile(self, profile_id: str) -> int:
        return self._execute_delete(
            self._build_query().filter(or_(Booking.student_id == profile_id, Booking.teacher_id == profile_id))
        )
