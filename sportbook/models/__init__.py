"""
Database models for the Sportbook booking core.

Tables mirror the relational backend: profiles, availability, bookings,
reviews, chat_rooms and messages.
"""

from .availability import Availability
from .booking import Booking
from .chat import ChatRoom, Message
from .profile import Profile
from .review import Review

__all__ = [
    "Availability",
    "Booking",
    "ChatRoom",
    "Message",
    "Profile",
    "Review",
]
