# sportbook/services/chat_service.py
"""
Chat Service for the Sportbook booking core

One room per teacher/student pair; messages are plain text. Delivery to
open clients happens over the store's change feed, outside this package.
"""

import logging
from typing import List, Optional

from sqlalchemy.orm import Session

from ..core.config import settings
from ..core.exceptions import ForbiddenException, NotFoundException, ValidationException
from ..models.chat import ChatRoom
from ..repositories import RepositoryFactory
from ..schemas.chat import ChatRoomSummary, MessageOut
from .base import BaseService

logger = logging.getLogger(__name__)


class ChatService(BaseService):
    def __init__(self, db: Session, message_max_length: Optional[int] = None):
        super().__init__(db)
        self.repository = RepositoryFactory.create_chat_repository(db)
        self.profile_repository = RepositoryFactory.create_profile_repository(db)
        self.message_max_length = message_max_length or settings.message_max_length

    def _get_room(self, room_id: str) -> ChatRoom:
        room = self.repository.get_by_id(room_id)
        if room is None:
            raise NotFoundException("Chat room not found", code="CHAT_ROOM_NOT_FOUND")
        return room

    @BaseService.measure_operation("get_or_create_room")
    def get_or_create_room(self, teacher_id: str, student_id: str) -> ChatRoom:
        """
        Return the pair's room, creating it on first contact.

        Raises:
            ValidationException: Teacher and student are the same profile
            NotFoundException: Either profile does not exist
        """
        if teacher_id == student_id:
            raise ValidationException("Cannot open a chat with yourself", code="INVALID_PARTICIPANTS")

        room = self.repository.get_room_for_pair(teacher_id, student_id)
        if room is not None:
            return room

        for profile_id in (teacher_id, student_id):
            if self.profile_repository.get_by_id(profile_id) is None:
                raise NotFoundException("Profile not found", code="PROFILE_NOT_FOUND", details={"id": profile_id})

        with self.transaction():
            room = self.repository.create(teacher_id=teacher_id, student_id=student_id)
        self.logger.info(f"Opened chat room {room.id} for teacher {teacher_id} and student {student_id}")
        return room

    def list_rooms(self, profile_id: str) -> List[ChatRoomSummary]:
        """Rooms the profile takes part in, each with its latest message."""
        summaries: List[ChatRoomSummary] = []
        for room in self.repository.list_rooms_for_profile(profile_id):
            last = self.repository.get_last_message(room.id)
            summaries.append(
                ChatRoomSummary(
                    id=room.id,
                    student_id=room.student_id,
                    teacher_id=room.teacher_id,
                    other_participant_id=room.other_participant(profile_id),
                    last_message=MessageOut.model_validate(last) if last is not None else None,
                )
            )
        return summaries

    def list_messages(self, room_id: str, profile_id: Optional[str] = None) -> List[MessageOut]:
        """Messages oldest first; when ``profile_id`` is given it must be a participant."""
        room = self._get_room(room_id)
        if profile_id is not None and not room.has_participant(profile_id):
            raise ForbiddenException("You are not part of this conversation")
        return [MessageOut.model_validate(message) for message in self.repository.list_messages(room.id)]

    @BaseService.measure_operation("send_message")
    def send_message(self, room_id: str, sender_id: str, content: str) -> MessageOut:
        """
        Post a message to a room.

        Args:
            room_id: Target room
            sender_id: Sending profile; must be one of the room's participants
            content: Message text (trimmed)

        Returns:
            The stored message
        """
        text = (content or "").strip()
        if not text:
            raise ValidationException("Message cannot be empty", code="EMPTY_MESSAGE")
        if len(text) > self.message_max_length:
            raise ValidationException(
                f"Message cannot exceed {self.message_max_length} characters",
                code="MESSAGE_TOO_LONG",
            )

        room = self._get_room(room_id)
        if not room.has_participant(sender_id):
            raise ForbiddenException("You are not part of this conversation")

        with self.transaction():
            message = self.repository.create_message(room.id, sender_id, text)
        return MessageOut.model_validate(message)
