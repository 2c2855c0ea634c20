"""Reschedule options and the guarded single-booking move."""

from datetime import date, time

import pytest

from sportbook.core.constants import BookingStatus
from sportbook.integrations.notification_client import BookingEventType
from sportbook.models import Booking
from sportbook.schemas.availability import TimeSlot
from sportbook.services.reschedule_service import RescheduleService
from tests.factories import create_booking, create_student

NINE_TO_TEN = TimeSlot(start_time=time(9, 0), end_time=time(10, 0))
TEN_TO_ELEVEN = TimeSlot(start_time=time(10, 0), end_time=time(11, 0))


@pytest.fixture
def service(db, notifier):
    return RescheduleService(db, notifier=notifier)


@pytest.fixture
def booking(db, mwf_morning, student):
    return create_booking(
        db,
        teacher=mwf_morning,
        student=student,
        booking_date=date(2024, 6, 3),
        start_time=time(9, 0),
        end_time=time(10, 0),
    )


@pytest.fixture
def wednesday_taken(db, mwf_morning):
    other = create_student(db, full_name="Someone Else")
    return create_booking(
        db,
        teacher=mwf_morning,
        student=other,
        booking_date=date(2024, 6, 5),
        start_time=time(9, 30),
        end_time=time(10, 30),
        status=BookingStatus.PENDING,
    )


class TestRescheduleOptions:
    def test_offers_free_windows_except_current_slot(self, service, booking, wednesday_taken, today):
        options = service.get_reschedule_options(booking.id, today=today, window_days=7)

        assert [(o.booking_date, o.slot) for o in options] == [
            (date(2024, 6, 3), TEN_TO_ELEVEN),
            (date(2024, 6, 7), NINE_TO_TEN),
        ]

    def test_current_slot_never_offered(self, service, booking, today):
        options = service.get_reschedule_options(booking.id, today=today, window_days=30)
        assert (booking.booking_date, NINE_TO_TEN) not in [(o.booking_date, o.slot) for o in options]
        assert (date(2024, 6, 10), NINE_TO_TEN) in [(o.booking_date, o.slot) for o in options]

    def test_default_window_comes_from_settings(self, db, notifier, booking, today):
        options = RescheduleService(db, notifier=notifier, window_days=2).get_reschedule_options(booking.id, today=today)
        assert [o.booking_date for o in options] == [date(2024, 6, 3)]

    def test_teacher_without_windows_has_no_options(self, db, service, teacher, student, today):
        lone = create_booking(
            db,
            teacher=teacher,
            student=student,
            booking_date=date(2024, 6, 4),
            start_time=time(9, 0),
            end_time=time(10, 0),
        )
        assert service.get_reschedule_options(lone.id, today=today) == []

    @pytest.mark.parametrize("status", [BookingStatus.CANCELLED, BookingStatus.COMPLETED])
    def test_inactive_booking_has_no_options(self, db, service, booking, status, today):
        booking.status = status.value
        db.commit()
        assert service.get_reschedule_options(booking.id, today=today, window_days=7) == []


class TestRescheduleBooking:
    def test_student_reschedule_goes_back_to_pending(self, db, service, booking, student, delivered_events, today):
        result = service.reschedule_booking(booking.id, date(2024, 6, 7), NINE_TO_TEN, student.id, today=today)

        assert result.success is True
        assert result.status == BookingStatus.PENDING.value
        assert result.initiated_by == "student"
        moved = db.get(Booking, booking.id)
        assert moved.booking_date == date(2024, 6, 7)
        assert moved.previous_date == date(2024, 6, 3)
        assert moved.previous_start_time == time(9, 0)
        assert moved.previous_end_time == time(10, 0)
        assert moved.was_rescheduled
        assert delivered_events() == [(booking.id, BookingEventType.RESCHEDULED)]

    def test_teacher_reschedule_is_confirmed(self, db, service, booking, mwf_morning, today):
        result = service.reschedule_booking(booking.id, date(2024, 6, 7), NINE_TO_TEN, mwf_morning.id, today=today)
        assert result.status == BookingStatus.CONFIRMED.value
        assert result.initiated_by == "teacher"
        assert db.get(Booking, booking.id).status == BookingStatus.CONFIRMED.value

    def test_student_cannot_self_confirm_a_pending_booking(self, db, service, mwf_morning, student, today):
        pending = create_booking(
            db,
            teacher=mwf_morning,
            student=student,
            booking_date=date(2024, 6, 3),
            start_time=time(9, 0),
            end_time=time(10, 0),
            status=BookingStatus.PENDING,
        )

        result = service.reschedule_booking(pending.id, date(2024, 6, 3), TEN_TO_ELEVEN, student.id, today=today)

        assert result.success is True
        assert result.status == BookingStatus.PENDING.value
        assert db.get(Booking, pending.id).status == BookingStatus.PENDING.value

    def test_outsider_is_forbidden(self, db, service, booking, delivered_events, today):
        outsider = create_student(db, full_name="Not Involved")

        result = service.reschedule_booking(booking.id, date(2024, 6, 7), NINE_TO_TEN, outsider.id, today=today)

        assert result.success is False
        assert result.error_kind == "forbidden"
        unchanged = db.query(Booking).filter(Booking.id == booking.id).one()
        assert unchanged.booking_date == date(2024, 6, 3)
        assert unchanged.previous_date is None
        assert delivered_events() == []

    def test_moving_to_adjacent_slot_same_day(self, db, service, booking, mwf_morning, today):
        result = service.reschedule_booking(booking.id, date(2024, 6, 3), TEN_TO_ELEVEN, mwf_morning.id, today=today)
        assert result.success is True
        assert db.get(Booking, booking.id).start_time == time(10, 0)

    def test_conflict_leaves_booking_untouched(
        self, db, service, booking, student, wednesday_taken, delivered_events, today
    ):
        result = service.reschedule_booking(booking.id, date(2024, 6, 5), NINE_TO_TEN, student.id, today=today)

        assert result.success is False
        assert result.error_code == "BOOKING_CONFLICT"
        assert result.error_kind == "conflict"

        unchanged = db.query(Booking).filter(Booking.id == booking.id).one()
        assert unchanged.booking_date == date(2024, 6, 3)
        assert unchanged.start_time == time(9, 0)
        assert unchanged.status == BookingStatus.CONFIRMED.value
        assert unchanged.previous_date is None
        assert delivered_events() == []

    @pytest.mark.parametrize(
        "new_date,slot,code",
        [
            (date(2024, 6, 3), NINE_TO_TEN, "SAME_SLOT"),
            (date(2024, 6, 4), NINE_TO_TEN, "SLOT_NOT_OFFERED"),
            (date(2024, 6, 5), TEN_TO_ELEVEN, "SLOT_NOT_OFFERED"),
            (date(2024, 5, 31), NINE_TO_TEN, "DATE_IN_PAST"),
        ],
    )
    def test_validation_failures(self, service, booking, student, today, new_date, slot, code):
        result = service.reschedule_booking(booking.id, new_date, slot, student.id, today=today)
        assert result.success is False
        assert result.error_code == code
        assert result.error_kind == "validation"

    def test_cancelled_booking_cannot_move(self, db, service, booking, student, today):
        booking.status = BookingStatus.CANCELLED.value
        db.commit()
        result = service.reschedule_booking(booking.id, date(2024, 6, 7), NINE_TO_TEN, student.id, today=today)
        assert result.error_code == "INVALID_STATUS_TRANSITION"

    def test_unknown_booking(self, service, student, today):
        result = service.reschedule_booking(
            "01HZZZZZZZZZZZZZZZZZZZZZZZ", date(2024, 6, 7), NINE_TO_TEN, student.id, today=today
        )
        assert result.error_kind == "not_found"
