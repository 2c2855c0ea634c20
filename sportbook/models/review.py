# sportbook/models/review.py
"""
Reviews left by students on completed bookings.

One review per booking, enforced by a unique constraint on ``booking_id``;
the service layer relies on the store rejecting the second insert.
"""

from datetime import datetime, timezone

from sqlalchemy import CheckConstraint, Column, DateTime, ForeignKey, Index, Integer, String, Text, UniqueConstraint
from sqlalchemy.orm import relationship

from ..core.ulid_helper import generate_ulid
from ..database import Base


class Review(Base):
    __tablename__ = "reviews"

    id = Column(String(26), primary_key=True, default=generate_ulid)
    booking_id = Column(String(26), ForeignKey("bookings.id", ondelete="CASCADE"), nullable=False)
    student_id = Column(String(26), ForeignKey("profiles.id", ondelete="CASCADE"), nullable=False, index=True)
    teacher_id = Column(String(26), ForeignKey("profiles.id", ondelete="CASCADE"), nullable=False)

    rating = Column(Integer, nullable=False)
    comment = Column(Text, nullable=True)

    created_at = Column(DateTime(timezone=True), nullable=False, default=lambda: datetime.now(timezone.utc))

    booking = relationship("Booking", back_populates="review")
    student = relationship("Profile", foreign_keys=[student_id])

    __table_args__ = (
        UniqueConstraint("booking_id", name="uq_reviews_booking"),
        CheckConstraint("rating >= 1 AND rating <= 5", name="ck_reviews_rating_range"),
        Index("idx_reviews_teacher", "teacher_id"),
    )

    def __repr__(self) -> str:
        return f"<Review {self.id} booking={self.booking_id} rating={self.rating}>"
