# sportbook/schemas/chat.py
"""Messaging schemas."""

from datetime import datetime
from typing import Optional

from .base import StandardizedModel


class MessageOut(StandardizedModel):
    id: str
    chat_room_id: str
    sender_id: str
    content: str
    created_at: datetime


class ChatRoomSummary(StandardizedModel):
    id: str
    student_id: str
    teacher_id: str
    other_participant_id: str
    last_message: Optional[MessageOut] = None
