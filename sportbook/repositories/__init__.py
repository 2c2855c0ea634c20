"""
Repository layer for the Sportbook booking core.

Repositories own all table access; services own transactions.
"""

from .availability_repository import AvailabilityRepository
from .base_repository import BaseRepository
from .booking_repository import BookingRepository
from .chat_repository import ChatRepository
from .factory import RepositoryFactory
from .profile_repository import ProfileRepository
from .review_repository import ReviewRepository

__all__ = [
    "AvailabilityRepository",
    "BaseRepository",
    "BookingRepository",
    "ChatRepository",
    "ProfileRepository",
    "RepositoryFactory",
    "ReviewRepository",
]
