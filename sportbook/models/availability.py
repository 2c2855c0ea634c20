# sportbook/models/availability.py
"""
Weekly recurring availability windows declared by teachers.

Each row is one (day_of_week, start_time, end_time) window. The teacher's
settings screen replaces the whole set on save; there is no versioning.
Overlapping windows on the same day are not prevented here.
"""

from datetime import datetime, timezone

from sqlalchemy import Boolean, CheckConstraint, Column, DateTime, ForeignKey, Index, Integer, String, Time
from sqlalchemy.orm import relationship

from ..core.ulid_helper import generate_ulid
from ..database import Base


class Availability(Base):
    """One weekly window; day_of_week uses Sunday=0 numbering."""

    __tablename__ = "availability"

    id = Column(String(26), primary_key=True, default=generate_ulid)
    teacher_id = Column(String(26), ForeignKey("profiles.id", ondelete="CASCADE"), nullable=False)
    day_of_week = Column(Integer, nullable=False)
    start_time = Column(Time, nullable=False)
    end_time = Column(Time, nullable=False)
    is_available = Column(Boolean, nullable=False, default=True)
    created_at = Column(DateTime(timezone=True), nullable=False, default=lambda: datetime.now(timezone.utc))

    teacher = relationship("Profile", back_populates="availability")

    __table_args__ = (
        CheckConstraint("day_of_week >= 0 AND day_of_week <= 6", name="ck_availability_day_of_week"),
        CheckConstraint("start_time < end_time", name="ck_availability_time_order"),
        Index("idx_availability_teacher_day", "teacher_id", "day_of_week"),
    )

    def __repr__(self) -> str:
        return f"<Availability day={self.day_of_week} {self.start_time}-{self.end_time}>"
