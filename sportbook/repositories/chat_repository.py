# sportbook/repositories/chat_repository.py
"""Chat rooms and messages."""

import logging
from typing import List, Optional

from sqlalchemy import or_
from sqlalchemy.orm import Session

from ..models.chat import ChatRoom, Message
from .base_repository import BaseRepository

logger = logging.getLogger(__name__)


class ChatRepository(BaseRepository[ChatRoom]):
    def __init__(self, db: Session):
        super().__init__(db, ChatRoom)

    def get_room_for_pair(self, teacher_id: str, student_id: str) -> Optional[ChatRoom]:
        return self.find_one_by(teacher_id=teacher_id, student_id=student_id)

    def list_rooms_for_profile(self, profile_id: str) -> List[ChatRoom]:
        query = (
            self._build_query()
            .filter(or_(ChatRoom.student_id == profile_id, ChatRoom.teacher_id == profile_id))
            .order_by(ChatRoom.created_at.desc())
        )
        return self._execute_query(query)

    def list_messages(self, room_id: str) -> List[Message]:
        query = (
            self.db.query(Message)
            .filter(Message.chat_room_id == room_id)
            .order_by(Message.created_at.asc(), Message.id.asc())
        )
        return self._execute_query(query)

    def get_last_message(self, room_id: str) -> Optional[Message]:
        return (
            self.db.query(Message)
            .filter(Message.chat_room_id == room_id)
            .order_by(Message.created_at.desc(), Message.id.desc())
            .first()
        )

    def create_message(self, room_id: str, sender_id: str, content: str) -> Message:
        message = Message(chat_room_id=room_id, sender_id=sender_id, content=content)
        self.db.add(message)
        self.db.flush()
        return message

    def delete_messages_by_sender(self, profile_id: str) -> int:
        return self._execute_delete(self.db.query(Message).filter(Message.sender_id == profile_id))

    def delete_rooms_for_profile(self, profile_id: str) -> int:
        rooms = self.list_rooms_for_profile(profile_id)
        room_ids = [room.id for room in rooms]
        if not room_ids:
            return 0
        # Remaining messages from the other participant go with the room
        self._execute_delete(self.db.query(Message).filter(Message.chat_room_id.in_(room_ids)))
        return self._execute_delete(self._build_query().filter(ChatRoom.id.in_(room_ids)))
