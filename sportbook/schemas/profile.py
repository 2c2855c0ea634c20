# sportbook/schemas/profile.py
"""Public profile schemas used for teacher discovery."""

from datetime import datetime
from typing import Optional

from .base import Money, StandardizedModel


class ProfileOut(StandardizedModel):
    id: str
    role: str
    full_name: str
    slug: Optional[str] = None
    bio: Optional[str] = None
    sport: Optional[str] = None
    location: Optional[str] = None
    avatar_url: Optional[str] = None
    hourly_rate: Money
    group_hourly_rate: Optional[Money] = None
    max_students_per_session: Optional[int] = None
    session_duration: Optional[int] = None
    average_rating: float = 0.0
    total_reviews: int = 0
    created_at: datetime
