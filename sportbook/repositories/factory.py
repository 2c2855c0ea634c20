# sportbook/repositories/factory.py
"""
Repository Factory for the Sportbook booking core

Provides centralized creation of repository instances so services can be
handed alternative implementations in tests.
"""

from typing import TYPE_CHECKING

from sqlalchemy.orm import Session

# Avoid circular imports
if TYPE_CHECKING:
    from .availability_repository import AvailabilityRepository
    from .booking_repository import BookingRepository
    from .chat_repository import ChatRepository
    from .profile_repository import ProfileRepository
    from .review_repository import ReviewRepository


class RepositoryFactory:
    """Factory class for creating repository instances."""

    @staticmethod
    def create_profile_repository(db: Session) -> "ProfileRepository":
        from .profile_repository import ProfileRepository

        return ProfileRepository(db)

    @staticmethod
    def create_availability_repository(db: Session) -> "AvailabilityRepository":
        """Create repository for availability operations."""
        from .availability_repository import AvailabilityRepository

        return AvailabilityRepository(db)

    @staticmethod
    def create_booking_repository(db: Session) -> "BookingRepository":
        """Create repository for booking operations."""
        from .booking_repository import BookingRepository

        return BookingRepository(db)

    @staticmethod
    def create_review_repository(db: Session) -> "ReviewRepository":
        from .review_repository import ReviewRepository

        return ReviewRepository(db)

    @staticmethod
    def create_chat_repository(db: Session) -> "ChatRepository":
        from .chat_repository import ChatRepository

        return ChatRepository(db)
