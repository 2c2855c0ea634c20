# sportbook/models/booking.py
"""
Booking model.

A recurring plan is never stored as a single entity: the booking flow
materializes one row per occurrence, so cancelling or rescheduling one
occurrence never touches the others. ``total_price`` holds the
per-session price. Reschedules keep the prior date/times in the
``previous_*`` columns for display.
"""

from datetime import datetime, timedelta, timezone

from sqlalchemy import CheckConstraint, Column, Date, DateTime, ForeignKey, Index, Integer, Numeric, String, Text, Time
from sqlalchemy.orm import relationship

from ..core.constants import BookingStatus
from ..core.ulid_helper import generate_ulid
from ..database import Base


class Booking(Base):
    __tablename__ = "bookings"

    id = Column(String(26), primary_key=True, index=True, default=generate_ulid)

    student_id = Column(String(26), ForeignKey("profiles.id", ondelete="CASCADE"), nullable=False, index=True)
    teacher_id = Column(String(26), ForeignKey("profiles.id", ondelete="CASCADE"), nullable=False)

    booking_date = Column(Date, nullable=False, index=True)
    start_time = Column(Time, nullable=False)
    end_time = Column(Time, nullable=False)

    status = Column(String(20), nullable=False, default=BookingStatus.PENDING.value, index=True)
    total_price = Column(Numeric(10, 2), nullable=False, default=0)
    attendee_count = Column(Integer, nullable=False, default=1)
    notes = Column(Text, nullable=True)

    # Reschedule audit
    previous_date = Column(Date, nullable=True)
    previous_start_time = Column(Time, nullable=True)
    previous_end_time = Column(Time, nullable=True)

    cancelled_by = Column(String(20), nullable=True)

    created_at = Column(DateTime(timezone=True), nullable=False, default=lambda: datetime.now(timezone.utc))
    updated_at = Column(
        DateTime(timezone=True),
        nullable=True,
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
    )

    student = relationship("Profile", foreign_keys=[student_id])
    teacher = relationship("Profile", foreign_keys=[teacher_id])
    review = relationship("Review", back_populates="booking", uselist=False, passive_deletes=True)

    __table_args__ = (
        CheckConstraint("start_time < end_time", name="ck_bookings_time_order"),
        CheckConstraint("attendee_count >= 1", name="ck_bookings_attendee_count"),
        CheckConstraint(
            "status IN ('pending', 'confirmed', 'cancelled', 'completed', 'rescheduled')",
            name="ck_bookings_status",
        ),
        Index("idx_bookings_teacher_date_status", "teacher_id", "booking_date", "status"),
    )

    @property
    def is_active(self) -> bool:
        return self.status in (BookingStatus.PENDING.value, BookingStatus.CONFIRMED.value)

    @property
    def was_rescheduled(self) -> bool:
        return self.previous_date is not None

    def ends_before(self, cutoff: datetime, grace: timedelta = timedelta(0)) -> bool:
        """True when the session's wall-clock end plus ``grace`` is before ``cutoff`` (naive)."""
        session_end = datetime.combine(self.booking_date, self.end_time)
        return session_end + grace < cutoff

    def __repr__(self) -> str:
        return f"<Booking {self.id} {self.booking_date} {self.start_time}-{self.end_time} {self.status}>"
