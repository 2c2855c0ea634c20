# sportbook/services/pricing_service.py
"""
Pricing for recurring bookings.

One attendee pays the teacher's individual rate per session. Two or more
attendees pay the group rate when the teacher has set one above zero,
otherwise the individual rate. The group rate is a flat fee per session:
it does not scale with headcount.
"""

from decimal import ROUND_HALF_UP, Decimal
import logging
from typing import Optional

from sqlalchemy.orm import Session

from ..core.exceptions import NotFoundException, ValidationException
from ..models.profile import Profile
from ..repositories import RepositoryFactory
from ..repositories.profile_repository import ProfileRepository
from ..schemas.booking import PriceQuote
from .base import BaseService

logger = logging.getLogger(__name__)

CENTS = Decimal("0.01")


def _money(value: Optional[object]) -> Decimal:
    if value is None:
        return Decimal("0.00")
    return Decimal(str(value)).quantize(CENTS, rounding=ROUND_HALF_UP)


def clamp_attendee_count(count: int, max_students: Optional[int]) -> int:
    """Clamp to [1, max(1, max_students)]; out-of-range values are clamped, not rejected."""
    ceiling = max(1, max_students or 1)
    return min(max(1, count), ceiling)


def price_per_session(profile: Profile, attendee_count: int) -> Decimal:
    if attendee_count >= 2:
        group = _money(profile.group_hourly_rate)
        if group > 0:
            return group
    return _money(profile.hourly_rate)


class PricingService(BaseService):
    """Service for session pricing and the teacher's rate settings."""

    def __init__(self, db: Session, profile_repository: Optional[ProfileRepository] = None):
        super().__init__(db)
        self.profile_repository = profile_repository or RepositoryFactory.create_profile_repository(db)

    def quote(self, profile: Profile, attendee_count: int, session_count: int) -> PriceQuote:
        """
        Price a plan of ``session_count`` sessions.

        Args:
            profile: Teacher profile carrying the rates
            attendee_count: Requested headcount (clamped to the teacher's maximum)
            session_count: Number of sessions actually booked (valid dates only)

        Returns:
            PriceQuote with the per-session price and the plan total
        """
        attendees = clamp_attendee_count(attendee_count, profile.max_students_per_session)
        per_session = price_per_session(profile, attendees)
        uses_group_rate = attendees >= 2 and _money(profile.group_hourly_rate) > 0
        return PriceQuote(
            attendee_count=attendees,
            price_per_session=per_session,
            session_count=session_count,
            total_price=(per_session * session_count).quantize(CENTS),
            is_group_rate=uses_group_rate,
        )

    @BaseService.measure_operation("update_rates")
    def update_rates(
        self,
        teacher_id: str,
        *,
        hourly_rate: Decimal,
        group_hourly_rate: Optional[Decimal] = None,
        max_students_per_session: int = 1,
        session_duration: Optional[int] = None,
    ) -> Profile:
        """Save the teacher's pricing settings."""
        if _money(hourly_rate) < 0:
            raise ValidationException("Hourly rate cannot be negative", code="INVALID_RATE")
        if group_hourly_rate is not None and _money(group_hourly_rate) < 0:
            raise ValidationException("Group rate cannot be negative", code="INVALID_RATE")
        if max_students_per_session < 1:
            raise ValidationException("At least one student per session is required", code="INVALID_GROUP_SIZE")
        if session_duration is not None and session_duration <= 0:
            raise ValidationException("Session duration must be positive", code="INVALID_SESSION_DURATION")

        with self.transaction():
            profile = self.profile_repository.update(
                teacher_id,
                hourly_rate=_money(hourly_rate),
                group_hourly_rate=_money(group_hourly_rate) if group_hourly_rate is not None else None,
                max_students_per_session=max_students_per_session,
                session_duration=session_duration,
            )
            if profile is None:
                raise NotFoundException("Teacher not found", code="TEACHER_NOT_FOUND")

        return profile
