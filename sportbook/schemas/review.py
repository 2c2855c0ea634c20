# sportbook/schemas/review.py
"""Review schemas."""

from datetime import datetime
from typing import Optional

from .base import OperationResult, StandardizedModel


class ReviewOut(StandardizedModel):
    id: str
    booking_id: str
    student_id: str
    teacher_id: str
    rating: int
    comment: Optional[str] = None
    created_at: datetime
    student_name: Optional[str] = None


class ReviewSubmissionResult(OperationResult):
    booking_id: str
    review: Optional[ReviewOut] = None
