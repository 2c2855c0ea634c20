# sportbook/repositories/review_repository.py
"""Review data access, including the teacher rating aggregate."""

import logging
from typing import List, Tuple

from sqlalchemy import func, or_
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, joinedload

from ..core.exceptions import RepositoryException
from ..models.review import Review
from .base_repository import BaseRepository

logger = logging.getLogger(__name__)


class ReviewRepository(BaseRepository[Review]):
    def __init__(self, db: Session):
        super().__init__(db, Review)

    def create_review(self, **kwargs) -> Review:
        """Insert a review; a second review for the same booking fails on uq_reviews_booking."""
        return self.create(**kwargs)

    def list_for_teacher(self, teacher_id: str, limit: int = 50) -> List[Review]:
        query = (
            self._build_query()
            .options(joinedload(Review.student))
            .filter(Review.teacher_id == teacher_id)
            .order_by(Review.created_at.desc())
            .limit(limit)
        )
        return self._execute_query(query)

    def booking_ids_for_student(self, student_id: str) -> List[str]:
        try:
            rows = self.db.query(Review.booking_id).filter(Review.student_id == student_id).all()
            return [row[0] for row in rows]
        except SQLAlchemyError as e:
            self.logger.error(f"Error listing reviewed bookings: {str(e)}")
            raise RepositoryException(f"Failed to list reviewed bookings: {str(e)}") from e

    def rating_stats(self, teacher_id: str) -> Tuple[float, int]:
        """Return (average rating, review count) for a teacher."""
        try:
            avg, count = (
                self.db.query(func.avg(Review.rating), func.count(Review.id))
                .filter(Review.teacher_id == teacher_id)
                .one()
            )
            return float(avg or 0.0), int(count or 0)
        except SQLAlchemyError as e:
            self.logger.error(f"Error computing rating stats: {str(e)}")
            raise RepositoryException(f"Failed to compute rating stats: {str(e)}") from e

    def delete_for_profile(self, profile_id: str) -> int:
        return self._execute_delete(
            self._build_query().filter(or_(Review.student_id == profile_id, Review.teacher_id == profile_id))
        )
