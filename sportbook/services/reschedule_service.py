# sportbook/services/reschedule_service.py
"""
Reschedule Service for the Sportbook booking core

Moves exactly one existing booking to another (date, slot):
- Offering alternatives inside the teacher's weekly windows that no other
  slot-holding booking overlaps, never the booking's own current slot
- Re-checking the target slot immediately before the update; a conflict
  leaves the booking untouched

A student-initiated reschedule goes back to pending for the teacher to
accept again; a teacher-initiated one is confirmed directly.
"""

from datetime import date, timedelta
import logging
from typing import List, Optional

from sqlalchemy.orm import Session

from ..core.config import settings
from ..core.constants import ACTIVE_BOOKING_STATUSES, BookingStatus
from ..core.exceptions import (
    BookingConflictException,
    DomainException,
    ForbiddenException,
    NotFoundException,
    ValidationException,
)
from ..core.timezone_utils import get_platform_today
from ..integrations.notification_client import BookingEventType
from ..models.booking import Booking
from ..repositories import RepositoryFactory
from ..repositories.booking_repository import BookingRepository
from ..schemas.availability import TimeSlot
from ..schemas.booking import RescheduleInitiator, RescheduleOption, RescheduleResult
from .availability_service import AvailabilityService
from .base import BaseService
from .booking_dates import weekday_index
from .conflict_checker import ConflictChecker, ranges_overlap
from .notification_service import NotificationService

logger = logging.getLogger(__name__)

_STATUS_BY_INITIATOR = {
    "student": BookingStatus.PENDING,
    "teacher": BookingStatus.CONFIRMED,
}

_ACTIVE_VALUES = {status.value for status in ACTIVE_BOOKING_STATUSES}


def _current_slot(booking: Booking) -> TimeSlot:
    return TimeSlot(start_time=booking.start_time, end_time=booking.end_time)


def _initiator_of(booking: Booking, actor_profile_id: str) -> RescheduleInitiator:
    if actor_profile_id == booking.student_id:
        return "student"
    if actor_profile_id == booking.teacher_id:
        return "teacher"
    raise ForbiddenException(
        "Only a participant can reschedule this session",
        details={"booking_id": booking.id},
    )


class RescheduleService(BaseService):
    """Service for moving a single booking occurrence."""

    def __init__(
        self,
        db: Session,
        notifier: Optional[NotificationService] = None,
        conflict_checker: Optional[ConflictChecker] = None,
        availability_service: Optional[AvailabilityService] = None,
        repository: Optional[BookingRepository] = None,
        window_days: Optional[int] = None,
    ):
        super().__init__(db)
        self.repository = repository or RepositoryFactory.create_booking_repository(db)
        self.conflict_checker = conflict_checker or ConflictChecker(db, self.repository)
        self.availability_service = availability_service or AvailabilityService(db)
        self.notifications = notifier or NotificationService()
        self.window_days = settings.reschedule_window_days if window_days is None else window_days

    def _get_booking(self, booking_id: str) -> Booking:
        booking = self.repository.get_by_id(booking_id)
        if booking is None:
            raise NotFoundException("Booking not found", code="BOOKING_NOT_FOUND", details={"booking_id": booking_id})
        return booking

    @BaseService.measure_operation("get_reschedule_options")
    def get_reschedule_options(
        self,
        booking_id: str,
        today: Optional[date] = None,
        window_days: Optional[int] = None,
    ) -> List[RescheduleOption]:
        """
        Alternative (date, slot) pairs for one booking.

        Args:
            booking_id: The booking being moved
            today: Override of the platform's current date
            window_days: How many days ahead to look (defaults to configuration)

        Returns:
            Options ordered by date then start time; empty for a booking that
            is no longer pending or confirmed

        Raises:
            NotFoundException: Unknown booking
        """
        booking = self._get_booking(booking_id)
        if booking.status not in _ACTIVE_VALUES:
            return []

        today = today or get_platform_today()
        last_day = today + timedelta(days=self.window_days if window_days is None else window_days)

        slots_by_weekday = self.availability_service.slots_by_weekday(booking.teacher_id)
        if not slots_by_weekday:
            return []

        existing = self.repository.get_active_bookings_in_range(
            booking.teacher_id, today, last_day, exclude_booking_id=booking.id
        )
        current = _current_slot(booking)

        options: List[RescheduleOption] = []
        candidate = today
        while candidate <= last_day:
            for slot in slots_by_weekday.get(weekday_index(candidate), []):
                if candidate == booking.booking_date and slot == current:
                    continue
                taken = any(
                    other.booking_date == candidate
                    and ranges_overlap(slot.start_time, slot.end_time, other.start_time, other.end_time)
                    for other in existing
                )
                if not taken:
                    options.append(RescheduleOption(booking_date=candidate, slot=slot))
            candidate += timedelta(days=1)
        return options

    @BaseService.measure_operation("reschedule_booking")
    def reschedule_booking(
        self,
        booking_id: str,
        new_date: date,
        slot: TimeSlot,
        actor_profile_id: str,
        today: Optional[date] = None,
    ) -> RescheduleResult:
        """
        Move a pending or confirmed booking to a new date and slot.

        Args:
            booking_id: The booking being moved
            new_date: Target date
            slot: Target slot; must be one of the teacher's windows on that weekday
            actor_profile_id: Profile making the change; must be the booking's
                student or teacher, which also decides the resulting status
            today: Override of the platform's current date

        Returns:
            RescheduleResult; on a conflict ``error_kind`` is "conflict" and
            the booking is unchanged; ``error_kind`` "forbidden" when the
            actor is not a participant
        """
        today = today or get_platform_today()
        try:
            if new_date < today:
                raise ValidationException(
                    "The new date cannot be in the past",
                    code="DATE_IN_PAST",
                    details={"new_date": new_date.isoformat()},
                )

            with self.transaction():
                booking = self._get_booking(booking_id)
                initiated_by = _initiator_of(booking, actor_profile_id)
                new_status = _STATUS_BY_INITIATOR[initiated_by]
                if booking.status not in _ACTIVE_VALUES:
                    raise ValidationException(
                        f"Cannot reschedule a {booking.status} booking",
                        code="INVALID_STATUS_TRANSITION",
                        details={"status": booking.status},
                    )
                if booking.booking_date == new_date and _current_slot(booking) == slot:
                    raise ValidationException("This is already the booked time", code="SAME_SLOT")

                windows = self.availability_service.windows_for_weekday(booking.teacher_id, weekday_index(new_date))
                if slot not in windows:
                    raise ValidationException(
                        "The teacher does not offer this time slot on that day",
                        code="SLOT_NOT_OFFERED",
                        details={"slot": slot.key, "weekday": weekday_index(new_date)},
                    )

                if self.conflict_checker.has_conflict(
                    booking.teacher_id, new_date, slot, exclude_booking_id=booking.id
                ):
                    self.logger.warning(
                        f"Reschedule of {booking_id} to {new_date} {slot.key} lost the slot to another booking"
                    )
                    raise BookingConflictException(
                        "This time slot was just booked. Please choose another one.",
                        details={"booking_date": new_date.isoformat(), "slot": slot.key},
                    )

                booking.previous_date = booking.booking_date
                booking.previous_start_time = booking.start_time
                booking.previous_end_time = booking.end_time
                booking.booking_date = new_date
                booking.start_time = slot.start_time
                booking.end_time = slot.end_time
                booking.status = new_status.value
        except DomainException as exc:
            return RescheduleResult.failure_from(exc, booking_id=booking_id)

        self.log_operation(
            "reschedule_booking",
            booking_id=booking_id,
            new_date=new_date.isoformat(),
            initiated_by=initiated_by,
        )
        self.notifications.dispatch(booking_id, BookingEventType.RESCHEDULED)

        return RescheduleResult(
            success=True,
            booking_id=booking_id,
            booking_date=new_date,
            slot=slot,
            status=new_status.value,
            initiated_by=initiated_by,
        )
