# sportbook/services/booking_service.py
"""
Booking Service for the Sportbook booking core

Handles all booking-related business logic including:
- Previewing a recurring plan (dates, conflicts, price)
- Materializing a plan into one booking row per valid date
- Confirmation, cancellation and automatic completion
- Next-day session reminders
- Booking lists and the teacher's earnings summary

Creation re-checks every date against the exact slot immediately before
the insert, inside the same transaction as the insert. A plan is written
all-or-nothing.
"""

from datetime import date, datetime, timedelta
from decimal import Decimal
import logging
from typing import Dict, Iterable, List, Optional, Sequence

from sqlalchemy.orm import Session

from ..core.config import settings
from ..core.constants import ACTIVE_BOOKING_STATUSES, BookingStatus, CancelledBy, ProfileRole
from ..core.exceptions import (
    BookingConflictException,
    DomainException,
    ForbiddenException,
    NotFoundException,
    RepositoryException,
    ServiceException,
    ValidationException,
)
from ..core.timezone_utils import get_platform_now, get_platform_today
from ..integrations.notification_client import BookingEventType
from ..models.booking import Booking
from ..models.profile import Profile
from ..repositories import RepositoryFactory
from ..repositories.booking_repository import BookingRepository
from ..repositories.profile_repository import ProfileRepository
from ..schemas.base import ActionResult
from ..schemas.booking import (
    BookingCreationResult,
    BookingOut,
    BookingPreview,
    EarningsSummary,
    MonthlyEarnings,
    RecurringBookingRequest,
)
from .availability_service import AvailabilityService
from .base import BaseService
from .booking_dates import expand_booking_dates, resolve_duration_days, validate_selection
from .conflict_checker import ConflictChecker
from .notification_service import NotificationService
from .pricing_service import CENTS, PricingService

logger = logging.getLogger(__name__)


def _status_values(statuses: Optional[Iterable[object]]) -> Optional[List[str]]:
    if statuses is None:
        return None
    return [status.value if isinstance(status, BookingStatus) else str(status) for status in statuses]


def _month_start(today: date, months_back: int) -> date:
    """First day of the month ``months_back - 1`` months before ``today``'s month."""
    month_index = today.year * 12 + (today.month - 1) - (months_back - 1)
    return date(month_index // 12, month_index % 12 + 1, 1)


def _month_keys(since: date, today: date) -> List[str]:
    keys: List[str] = []
    year, month = since.year, since.month
    while (year, month) <= (today.year, today.month):
        keys.append(f"{year:04d}-{month:02d}")
        year, month = (year + 1, 1) if month == 12 else (year, month + 1)
    return keys


class BookingService(BaseService):
    """
    Service layer for booking operations.

    Centralizes all booking business logic and coordinates
    with other services.
    """

    def __init__(
        self,
        db: Session,
        notifier: Optional[NotificationService] = None,
        conflict_checker: Optional[ConflictChecker] = None,
        availability_service: Optional[AvailabilityService] = None,
        pricing_service: Optional[PricingService] = None,
        repository: Optional[BookingRepository] = None,
        profile_repository: Optional[ProfileRepository] = None,
        auto_complete_grace_hours: Optional[int] = None,
    ):
        """
        Initialize booking service.

        Args:
            db: Database session
            notifier: Optional notification service (log-only when omitted)
            conflict_checker: Optional conflict checker
            availability_service: Optional availability service
            pricing_service: Optional pricing service
            repository: Optional BookingRepository
            profile_repository: Optional ProfileRepository
            auto_complete_grace_hours: Override of the configured grace period
        """
        super().__init__(db)
        self.repository = repository or RepositoryFactory.create_booking_repository(db)
        self.profile_repository = profile_repository or RepositoryFactory.create_profile_repository(db)
        self.conflict_checker = conflict_checker or ConflictChecker(db, self.repository)
        self.availability_service = availability_service or AvailabilityService(db)
        self.pricing_service = pricing_service or PricingService(db, self.profile_repository)
        self.notifications = notifier or NotificationService()
        self.auto_complete_grace_hours = (
            settings.auto_complete_grace_hours if auto_complete_grace_hours is None else auto_complete_grace_hours
        )

    # Recurring plans

    def _get_teacher(self, teacher_id: str) -> Profile:
        teacher = self.profile_repository.get_by_id(teacher_id)
        if teacher is None or teacher.role != ProfileRole.TEACHER.value:
            raise NotFoundException("Teacher not found", code="TEACHER_NOT_FOUND", details={"teacher_id": teacher_id})
        return teacher

    def _validate_against_availability(self, request: RecurringBookingRequest) -> None:
        available = set(self.availability_service.list_available_weekdays(request.teacher_id))
        unavailable = [day for day in request.weekdays if day not in available]
        if unavailable:
            raise ValidationException(
                "The teacher is not available on some of the selected days",
                code="WEEKDAY_NOT_AVAILABLE",
                details={"weekdays": unavailable},
            )

        offered = self.availability_service.common_time_slots(request.teacher_id, request.weekdays)
        if request.slot not in offered:
            raise ValidationException(
                "This time slot is not offered on every selected day",
                code="SLOT_NOT_OFFERED",
                details={"slot": request.slot.key if request.slot else None, "offered": [s.key for s in offered]},
            )

    @BaseService.measure_operation("preview_recurring_booking")
    def preview_recurring_booking(
        self,
        request: RecurringBookingRequest,
        today: Optional[date] = None,
    ) -> BookingPreview:
        """
        Expand, partition and price a recurring plan without writing anything.

        Pure checks run before any data-store access.

        Args:
            request: The student's selection
            today: Override of the platform's current date

        Returns:
            BookingPreview with all candidate dates, the valid and conflicting
            subsets and the price quote for the valid dates

        Raises:
            ValidationException: Invalid selection
            NotFoundException: Unknown teacher
        """
        today = today or get_platform_today()
        validate_selection(request.start_date, request.weekdays, request.slot, today)
        duration_days = resolve_duration_days(request.duration)

        teacher = self._get_teacher(request.teacher_id)
        self._validate_against_availability(request)

        dates = expand_booking_dates(request.start_date, request.weekdays, duration_days)
        partition = self.conflict_checker.partition_dates(teacher.id, dates, request.slot)
        quote = self.pricing_service.quote(teacher, request.attendee_count, len(partition.valid_dates))

        return BookingPreview(
            teacher_id=teacher.id,
            slot=request.slot,
            dates=dates,
            valid_dates=partition.valid_dates,
            conflict_dates=partition.conflict_dates,
            quote=quote,
        )

    @BaseService.measure_operation("create_recurring_booking")
    def create_recurring_booking(
        self,
        request: RecurringBookingRequest,
        today: Optional[date] = None,
    ) -> BookingCreationResult:
        """
        Create one pending booking per valid date of a recurring plan.

        Args:
            request: The student's selection
            today: Override of the platform's current date

        Returns:
            BookingCreationResult. On failure ``error_kind`` tells the caller
            whether to fix the input (validation), pick another slot
            (conflict) or retry (backend).
        """
        preview: Optional[BookingPreview] = None
        try:
            preview = self.preview_recurring_booking(request, today=today)
            if not preview.can_submit:
                raise ValidationException(
                    "All selected dates conflict with existing bookings",
                    code="NO_VALID_DATES",
                    details={"conflict_dates": [d.isoformat() for d in preview.conflict_dates]},
                )
            if request.student_id == request.teacher_id:
                raise ValidationException("You cannot book your own sessions", code="SELF_BOOKING")
            student = self.profile_repository.get_by_id(request.student_id)
            if student is None:
                raise NotFoundException("Student not found", code="STUDENT_NOT_FOUND")

            bookings = self._insert_occurrences(request, preview)
        except BookingConflictException as exc:
            newly_conflicting = [date.fromisoformat(d) for d in exc.details.get("conflict_dates", [])]
            skipped = sorted(set(preview.conflict_dates if preview else []) | set(newly_conflicting))
            return BookingCreationResult.failure_from(exc, skipped_dates=skipped)
        except RepositoryException as exc:
            self.logger.error(f"Store failure while creating recurring booking: {str(exc)}")
            backend = ServiceException(f"Database operation failed: {str(exc)}", code="BACKEND_ERROR")
            return BookingCreationResult.failure_from(
                backend, failed_dates=preview.valid_dates if preview else []
            )
        except ServiceException as exc:
            return BookingCreationResult.failure_from(exc, failed_dates=preview.valid_dates if preview else [])
        except DomainException as exc:
            return BookingCreationResult.failure_from(
                exc, skipped_dates=preview.conflict_dates if preview else []
            )

        booking_ids = [booking.id for booking in bookings]
        self.log_operation(
            "create_recurring_booking",
            teacher_id=request.teacher_id,
            student_id=request.student_id,
            created_count=len(booking_ids),
            skipped_count=len(preview.conflict_dates),
        )
        self.notifications.dispatch_many(booking_ids, BookingEventType.CREATED)

        return BookingCreationResult(
            success=True,
            booking_ids=booking_ids,
            created_dates=[booking.booking_date for booking in bookings],
            skipped_dates=preview.conflict_dates,
            price_per_session=preview.quote.price_per_session,
            total_price=preview.quote.total_price,
        )

    def _insert_occurrences(self, request: RecurringBookingRequest, preview: BookingPreview) -> List[Booking]:
        slot = preview.slot
        with self.transaction():
            newly_conflicting = self.conflict_checker.find_conflicting_dates(
                request.teacher_id, preview.valid_dates, slot
            )
            if newly_conflicting:
                self.logger.warning(
                    f"Slot {slot.key} was taken on {len(newly_conflicting)} dates since preview "
                    f"for teacher {request.teacher_id}"
                )
                raise BookingConflictException(
                    "Some sessions were booked by someone else. Please choose another time slot.",
                    details={"conflict_dates": [d.isoformat() for d in newly_conflicting]},
                )

            rows = [
                {
                    "student_id": request.student_id,
                    "teacher_id": request.teacher_id,
                    "booking_date": booking_date,
                    "start_time": slot.start_time,
                    "end_time": slot.end_time,
                    "status": BookingStatus.PENDING.value,
                    "total_price": preview.quote.price_per_session,
                    "attendee_count": preview.quote.attendee_count,
                    "notes": request.notes,
                }
                for booking_date in preview.valid_dates
            ]
            bookings = self.repository.bulk_create(rows)
        return bookings

    # Lifecycle

    def _get_booking(self, booking_id: str) -> Booking:
        booking = self.repository.get_by_id(booking_id)
        if booking is None:
            raise NotFoundException("Booking not found", code="BOOKING_NOT_FOUND", details={"booking_id": booking_id})
        return booking

    @BaseService.measure_operation("confirm_booking")
    def confirm_booking(self, booking_id: str, teacher_id: str) -> ActionResult:
        """Teacher accepts a pending booking."""
        try:
            with self.transaction():
                booking = self._get_booking(booking_id)
                if booking.teacher_id != teacher_id:
                    raise ForbiddenException("Only the booked teacher can confirm this session")
                if booking.status != BookingStatus.PENDING.value:
                    raise ValidationException(
                        f"Cannot confirm a {booking.status} booking",
                        code="INVALID_STATUS_TRANSITION",
                        details={"status": booking.status},
                    )
                booking.status = BookingStatus.CONFIRMED.value
        except DomainException as exc:
            return ActionResult.failure_from(exc, entity_id=booking_id)

        self.notifications.dispatch(booking_id, BookingEventType.CONFIRMED)
        return ActionResult(success=True, entity_id=booking_id)

    @BaseService.measure_operation("cancel_booking")
    def cancel_booking(self, booking_id: str, actor_profile_id: str) -> ActionResult:
        """
        Cancel a pending or confirmed booking on behalf of either participant.

        Args:
            booking_id: Booking to cancel
            actor_profile_id: Profile of the student or teacher cancelling

        Returns:
            ActionResult
        """
        try:
            with self.transaction():
                booking = self._get_booking(booking_id)
                if actor_profile_id == booking.student_id:
                    cancelled_by = CancelledBy.STUDENT
                elif actor_profile_id == booking.teacher_id:
                    cancelled_by = CancelledBy.TEACHER
                else:
                    raise ForbiddenException("Only a participant can cancel this session")

                if booking.status not in {status.value for status in ACTIVE_BOOKING_STATUSES}:
                    raise ValidationException(
                        f"Cannot cancel a {booking.status} booking",
                        code="INVALID_STATUS_TRANSITION",
                        details={"status": booking.status},
                    )
                booking.status = BookingStatus.CANCELLED.value
                booking.cancelled_by = cancelled_by.value
        except DomainException as exc:
            return ActionResult.failure_from(exc, entity_id=booking_id)

        self.logger.info(f"Booking {booking_id} cancelled by {cancelled_by.value}")
        self.notifications.dispatch(booking_id, BookingEventType.CANCELLED)
        return ActionResult(success=True, entity_id=booking_id)

    @BaseService.measure_operation("auto_complete_bookings")
    def auto_complete_bookings(self, now: Optional[datetime] = None) -> List[str]:
        """
        Mark confirmed sessions as completed once they ended more than the
        grace period ago.

        Session end times are wall-clock values in the platform timezone.

        Args:
            now: Override of the current time (naive values are taken as
                platform wall-clock time)

        Returns:
            Ids of the bookings marked completed
        """
        current = now or get_platform_now()
        if current.tzinfo is not None:
            current = current.replace(tzinfo=None)
        grace = timedelta(hours=self.auto_complete_grace_hours)

        with self.transaction():
            candidates = self.repository.get_confirmed_on_or_before(current.date())
            due = [booking.id for booking in candidates if booking.ends_before(current, grace)]
            if due:
                self.repository.mark_completed(due)

        if due:
            self.logger.info(f"Auto-completed {len(due)} bookings")
        return due

    @BaseService.measure_operation("send_session_reminders")
    def send_session_reminders(self, today: Optional[date] = None) -> List[str]:
        """
        Queue a reminder for every pending or confirmed session tomorrow.

        The notification function resolves both participants from the
        booking id, so one event per booking reaches teacher and student.

        Args:
            today: Override of the platform's current date

        Returns:
            Ids of the bookings a reminder was queued for
        """
        target = (today or get_platform_today()) + timedelta(days=1)
        booking_ids = [booking.id for booking in self.repository.get_active_on(target)]

        self.logger.info(f"Queuing {len(booking_ids)} session reminders for {target.isoformat()}")
        self.notifications.dispatch_many(booking_ids, BookingEventType.REMINDER)
        return booking_ids

    # Listing

    def list_student_bookings(
        self, student_id: str, statuses: Optional[Sequence[object]] = None
    ) -> List[BookingOut]:
        bookings = self.repository.list_for_student(student_id, _status_values(statuses))
        return [BookingOut.model_validate(booking) for booking in bookings]

    def list_teacher_bookings(
        self, teacher_id: str, statuses: Optional[Sequence[object]] = None
    ) -> List[BookingOut]:
        bookings = self.repository.list_for_teacher(teacher_id, _status_values(statuses))
        return [BookingOut.model_validate(booking) for booking in bookings]

    # Earnings

    @BaseService.measure_operation("get_earnings_summary")
    def get_earnings_summary(
        self,
        teacher_id: str,
        months_back: int = 6,
        today: Optional[date] = None,
    ) -> EarningsSummary:
        """
        Completed-session earnings for the last ``months_back`` calendar months.

        Args:
            teacher_id: Teacher profile id
            months_back: Number of months including the current one
            today: Override of the platform's current date

        Returns:
            EarningsSummary with one bucket per month, oldest first
        """
        if months_back < 1:
            raise ValidationException("months_back must be at least 1", code="INVALID_RANGE")

        today = today or get_platform_today()
        since = _month_start(today, months_back)
        bookings = self.repository.get_completed_since(teacher_id, since)

        buckets: Dict[str, MonthlyEarnings] = {key: MonthlyEarnings(month=key) for key in _month_keys(since, today)}
        total = Decimal("0")
        students = set()
        for booking in bookings:
            price = Decimal(str(booking.total_price or 0))
            bucket = buckets.get(booking.booking_date.strftime("%Y-%m"))
            if bucket is not None:
                bucket.earnings = bucket.earnings + price
                bucket.bookings += 1
            total += price
            students.add(booking.student_id)

        months = list(buckets.values())
        growth_rate: Optional[float] = None
        if len(months) >= 2:
            last, previous = Decimal(months[-1].earnings), Decimal(months[-2].earnings)
            if previous > 0:
                growth_rate = round(float((last - previous) / previous * 100), 1)
            elif last > 0:
                growth_rate = 100.0
            else:
                growth_rate = 0.0

        count = len(bookings)
        return EarningsSummary(
            teacher_id=teacher_id,
            months=months,
            total_earnings=total.quantize(CENTS),
            total_bookings=count,
            unique_students=len(students),
            average_per_booking=(total / count).quantize(CENTS) if count else Decimal("0.00"),
            growth_rate=growth_rate,
        )
