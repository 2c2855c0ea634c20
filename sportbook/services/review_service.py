# sportbook/services/review_service.py
"""
Review Service for the Sportbook booking core

Students rate completed sessions from 1 to 5 with an optional comment.
The store allows one review per booking; a second submission surfaces as
a unique-constraint violation and is reported as "already reviewed".
Each accepted review refreshes the teacher's rating aggregate.
"""

import logging
from typing import List, Optional, Set

from sqlalchemy.orm import Session

from ..core.config import settings
from ..core.constants import MAX_RATING, MIN_RATING, BookingStatus
from ..core.exceptions import (
    AlreadyReviewedException,
    DomainException,
    ForbiddenException,
    NotFoundException,
    RepositoryException,
    ValidationException,
    is_unique_violation,
)
from ..models.review import Review
from ..repositories import RepositoryFactory
from ..schemas.review import ReviewOut, ReviewSubmissionResult
from .base import BaseService

logger = logging.getLogger(__name__)


def _review_out(review: Review) -> ReviewOut:
    out = ReviewOut.model_validate(review)
    if review.student is not None:
        out.student_name = review.student.full_name
    return out


class ReviewService(BaseService):
    def __init__(self, db: Session, comment_max_length: Optional[int] = None):
        super().__init__(db)
        self.review_repository = RepositoryFactory.create_review_repository(db)
        self.booking_repository = RepositoryFactory.create_booking_repository(db)
        self.profile_repository = RepositoryFactory.create_profile_repository(db)
        self.comment_max_length = comment_max_length or settings.review_comment_max_length

    def _clean_comment(self, comment: Optional[str]) -> Optional[str]:
        if comment is None:
            return None
        cleaned = comment.strip()
        if not cleaned:
            return None
        if len(cleaned) > self.comment_max_length:
            raise ValidationException(
                f"Comment cannot exceed {self.comment_max_length} characters",
                code="COMMENT_TOO_LONG",
            )
        return cleaned

    @BaseService.measure_operation("submit_review")
    def submit_review(
        self,
        booking_id: str,
        student_id: str,
        rating: int,
        comment: Optional[str] = None,
    ) -> ReviewSubmissionResult:
        """
        Submit the student's review for a completed booking.

        Args:
            booking_id: The reviewed booking
            student_id: Student profile submitting the review
            rating: Whole stars from 1 to 5
            comment: Optional free text (trimmed; blank becomes None)

        Returns:
            ReviewSubmissionResult; a duplicate submission fails with
            ``ALREADY_REVIEWED``
        """
        try:
            if isinstance(rating, bool) or not isinstance(rating, int) or not MIN_RATING <= rating <= MAX_RATING:
                raise ValidationException(
                    f"Rating must be between {MIN_RATING} and {MAX_RATING}",
                    code="INVALID_RATING",
                    details={"rating": rating},
                )
            cleaned_comment = self._clean_comment(comment)

            with self.transaction():
                booking = self.booking_repository.get_by_id(booking_id)
                if booking is None:
                    raise NotFoundException("Booking not found", code="BOOKING_NOT_FOUND")
                if booking.student_id != student_id:
                    raise ForbiddenException("You can only review your own sessions")
                if booking.status != BookingStatus.COMPLETED.value:
                    raise ValidationException(
                        "Only completed sessions can be reviewed",
                        code="BOOKING_NOT_COMPLETED",
                        details={"status": booking.status},
                    )

                try:
                    review = self.review_repository.create_review(
                        booking_id=booking.id,
                        student_id=student_id,
                        teacher_id=booking.teacher_id,
                        rating=rating,
                        comment=cleaned_comment,
                    )
                except RepositoryException as exc:
                    if exc.__cause__ is not None and is_unique_violation(exc.__cause__):
                        raise AlreadyReviewedException(booking_id) from exc
                    raise

                average, total = self.review_repository.rating_stats(booking.teacher_id)
                self.profile_repository.set_rating_aggregate(booking.teacher_id, round(average, 2), total)
        except DomainException as exc:
            return ReviewSubmissionResult.failure_from(exc, booking_id=booking_id)

        self.log_operation("submit_review", booking_id=booking_id, rating=rating)
        return ReviewSubmissionResult(success=True, booking_id=booking_id, review=_review_out(review))

    def list_teacher_reviews(self, teacher_id: str, limit: int = 50) -> List[ReviewOut]:
        """Newest first, with the reviewing student's name."""
        return [_review_out(review) for review in self.review_repository.list_for_teacher(teacher_id, limit=limit)]

    def reviewed_booking_ids(self, student_id: str) -> Set[str]:
        """Booking ids the student already reviewed (drives the review prompt)."""
        return set(self.review_repository.booking_ids_for_student(student_id))

    def pending_review_booking_ids(self, student_id: str) -> List[str]:
        """Completed bookings of the student that still lack a review."""
        reviewed = self.reviewed_booking_ids(student_id)
        completed = self.booking_repository.list_for_student(student_id, [BookingStatus.COMPLETED.value])
        return [booking.id for booking in completed if booking.id not in reviewed]
