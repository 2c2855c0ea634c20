# sportbook/models/chat.py
"""Chat rooms (one per teacher/student pair) and their messages."""

from datetime import datetime, timezone

from sqlalchemy import Column, DateTime, ForeignKey, Index, String, Text, UniqueConstraint
from sqlalchemy.orm import relationship

from ..core.ulid_helper import generate_ulid
from ..database import Base


class ChatRoom(Base):
    __tablename__ = "chat_rooms"

    id = Column(String(26), primary_key=True, default=generate_ulid)
    student_id = Column(String(26), ForeignKey("profiles.id", ondelete="CASCADE"), nullable=False)
    teacher_id = Column(String(26), ForeignKey("profiles.id", ondelete="CASCADE"), nullable=False)
    created_at = Column(DateTime(timezone=True), nullable=False, default=lambda: datetime.now(timezone.utc))

    messages = relationship(
        "Message",
        back_populates="chat_room",
        cascade="all, delete-orphan",
        order_by="Message.created_at",
    )

    __table_args__ = (UniqueConstraint("student_id", "teacher_id", name="uq_chat_rooms_pair"),)

    def has_participant(self, profile_id: str) -> bool:
        return profile_id in (self.student_id, self.teacher_id)

    def other_participant(self, profile_id: str) -> str:
        return self.teacher_id if profile_id == self.student_id else self.student_id


class Message(Base):
    __tablename__ = "messages"

    id = Column(String(26), primary_key=True, default=generate_ulid)
    chat_room_id = Column(String(26), ForeignKey("chat_rooms.id", ondelete="CASCADE"), nullable=False)
    sender_id = Column(String(26), ForeignKey("profiles.id", ondelete="CASCADE"), nullable=False)
    content = Column(Text, nullable=False)
    created_at = Column(DateTime(timezone=True), nullable=False, default=lambda: datetime.now(timezone.utc))

    chat_room = relationship("ChatRoom", back_populates="messages")

    __table_args__ = (Index("idx_messages_room_created", "chat_room_id", "created_at"),)
