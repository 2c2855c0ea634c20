# sportbook/models/profile.py
"""
Profile model shared by teachers and students.

A profile is keyed by its own ULID and linked to the identity provider
through ``user_id``. Teacher-only columns (rates, group size, session
length) stay NULL/defaulted for students.
"""

from datetime import datetime, timezone

from sqlalchemy import Boolean, CheckConstraint, Column, DateTime, Float, Integer, Numeric, String, Text
from sqlalchemy.orm import relationship

from ..core.constants import ProfileRole
from ..core.ulid_helper import generate_ulid
from ..database import Base


class Profile(Base):
    __tablename__ = "profiles"

    id = Column(String(26), primary_key=True, default=generate_ulid)
    user_id = Column(String(64), nullable=False, unique=True, index=True)
    role = Column(String(20), nullable=False, default=ProfileRole.STUDENT.value)

    full_name = Column(String(255), nullable=False)
    slug = Column(String(255), nullable=True, unique=True)
    bio = Column(Text, nullable=True)
    sport = Column(String(100), nullable=True)
    location = Column(String(255), nullable=True)
    avatar_url = Column(Text, nullable=True)
    is_onboarded = Column(Boolean, nullable=False, default=False)

    # Teacher pricing
    hourly_rate = Column(Numeric(10, 2), nullable=False, default=0)
    group_hourly_rate = Column(Numeric(10, 2), nullable=True)
    max_students_per_session = Column(Integer, nullable=True, default=1)
    session_duration = Column(Integer, nullable=True, comment="Minutes per session")

    # Denormalized review aggregate
    average_rating = Column(Float, nullable=False, default=0.0)
    total_reviews = Column(Integer, nullable=False, default=0)

    created_at = Column(DateTime(timezone=True), nullable=False, default=lambda: datetime.now(timezone.utc))
    updated_at = Column(
        DateTime(timezone=True),
        nullable=True,
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
    )

    availability = relationship(
        "Availability",
        back_populates="teacher",
        cascade="all, delete-orphan",
        order_by="Availability.day_of_week",
    )

    __table_args__ = (
        CheckConstraint("role IN ('teacher', 'student')", name="ck_profiles_role"),
        CheckConstraint("hourly_rate >= 0", name="ck_profiles_hourly_rate_non_negative"),
    )

    @property
    def is_teacher(self) -> bool:
        return self.role == ProfileRole.TEACHER.value

    def __repr__(self) -> str:
        return f"<Profile {self.id} {self.role} {self.full_name!r}>"
