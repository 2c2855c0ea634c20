"""Pricing rules: individual rate, flat group rate, clamping."""

from decimal import Decimal

import pytest

from sportbook.core.exceptions import NotFoundException, ValidationException
from sportbook.services.pricing_service import PricingService, clamp_attendee_count, price_per_session
from tests.factories import create_teacher


class TestPricePerSession:
    def test_single_attendee_pays_individual_rate(self, db):
        teacher = create_teacher(db, hourly_rate="30.00", group_hourly_rate="40.00", max_students_per_session=4)
        assert price_per_session(teacher, 1) == Decimal("30.00")

    def test_group_rate_is_flat_per_session(self, db):
        teacher = create_teacher(db, hourly_rate="30.00", group_hourly_rate="40.00", max_students_per_session=4)
        assert price_per_session(teacher, 2) == Decimal("40.00")
        assert price_per_session(teacher, 4) == Decimal("40.00")

    def test_group_without_group_rate_falls_back_to_individual(self, db):
        teacher = create_teacher(db, hourly_rate="30.00", group_hourly_rate=None, max_students_per_session=4)
        assert price_per_session(teacher, 2) == Decimal("30.00")

    def test_zero_group_rate_falls_back_to_individual(self, db):
        teacher = create_teacher(db, hourly_rate="30.00", group_hourly_rate="0", max_students_per_session=4)
        assert price_per_session(teacher, 3) == Decimal("30.00")


class TestClampAttendeeCount:
    @pytest.mark.parametrize(
        "count,maximum,expected",
        [(0, 4, 1), (-3, 4, 1), (3, 4, 3), (9, 4, 4), (2, None, 1), (2, 0, 1)],
    )
    def test_clamps_into_range(self, count, maximum, expected):
        assert clamp_attendee_count(count, maximum) == expected


class TestPricingService:
    def test_quote_totals_valid_sessions(self, db):
        teacher = create_teacher(db, hourly_rate="30.00", group_hourly_rate="40.00", max_students_per_session=4)
        quote = PricingService(db).quote(teacher, attendee_count=2, session_count=5)

        assert quote.price_per_session == Decimal("40.00")
        assert quote.total_price == Decimal("200.00")
        assert quote.is_group_rate is True

    def test_quote_clamps_attendees_to_teacher_maximum(self, db):
        teacher = create_teacher(db, hourly_rate="25.00", group_hourly_rate="35.00", max_students_per_session=2)
        quote = PricingService(db).quote(teacher, attendee_count=6, session_count=3)

        assert quote.attendee_count == 2
        assert quote.total_price == Decimal("105.00")

    def test_quote_for_zero_sessions(self, db):
        teacher = create_teacher(db, hourly_rate="30.00")
        quote = PricingService(db).quote(teacher, attendee_count=1, session_count=0)
        assert quote.total_price == Decimal("0.00")
        assert quote.is_group_rate is False

    def test_update_rates_persists(self, db):
        teacher = create_teacher(db, hourly_rate="30.00")
        service = PricingService(db)

        updated = service.update_rates(
            teacher.id,
            hourly_rate=Decimal("45"),
            group_hourly_rate=Decimal("60"),
            max_students_per_session=3,
            session_duration=90,
        )

        assert updated.hourly_rate == Decimal("45.00")
        assert updated.group_hourly_rate == Decimal("60.00")
        assert updated.max_students_per_session == 3
        assert updated.session_duration == 90

    def test_update_rates_rejects_negative_rate(self, db):
        teacher = create_teacher(db)
        with pytest.raises(ValidationException) as exc_info:
            PricingService(db).update_rates(teacher.id, hourly_rate=Decimal("-1"))
        assert exc_info.value.code == "INVALID_RATE"

    def test_update_rates_rejects_empty_group(self, db):
        teacher = create_teacher(db)
        with pytest.raises(ValidationException):
            PricingService(db).update_rates(teacher.id, hourly_rate=Decimal("10"), max_students_per_session=0)

    def test_update_rates_unknown_teacher(self, db):
        with pytest.raises(NotFoundException):
            PricingService(db).update_rates("01HZZZZZZZZZZZZZZZZZZZZZZZ", hourly_rate=Decimal("10"))
