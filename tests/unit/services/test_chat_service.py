"""Chat rooms and messages between a teacher and a student."""

import pytest

from sportbook.core.exceptions import ForbiddenException, NotFoundException, ValidationException
from sportbook.services.chat_service import ChatService
from tests.factories import create_student


@pytest.fixture
def service(db):
    return ChatService(db, message_max_length=20)


def test_room_is_created_once_per_pair(service, teacher, student):
    first = service.get_or_create_room(teacher.id, student.id)
    second = service.get_or_create_room(teacher.id, student.id)
    assert first.id == second.id


def test_cannot_chat_with_yourself(service, teacher):
    with pytest.raises(ValidationException):
        service.get_or_create_room(teacher.id, teacher.id)


def test_unknown_participant(service, teacher):
    with pytest.raises(NotFoundException):
        service.get_or_create_room(teacher.id, "01HZZZZZZZZZZZZZZZZZZZZZZZ")


def test_messages_are_trimmed_and_listed_in_order(service, teacher, student):
    room = service.get_or_create_room(teacher.id, student.id)

    service.send_message(room.id, student.id, "  Hi coach  ")
    service.send_message(room.id, teacher.id, "Hello!")

    messages = service.list_messages(room.id, profile_id=student.id)
    assert [m.content for m in messages] == ["Hi coach", "Hello!"]
    assert [m.sender_id for m in messages] == [student.id, teacher.id]


def test_room_list_shows_last_message_and_other_participant(service, teacher, student):
    room = service.get_or_create_room(teacher.id, student.id)
    service.send_message(room.id, student.id, "first")
    service.send_message(room.id, teacher.id, "second")

    summaries = service.list_rooms(student.id)

    assert len(summaries) == 1
    assert summaries[0].other_participant_id == teacher.id
    assert summaries[0].last_message.content == "second"


def test_empty_and_oversized_messages_rejected(service, teacher, student):
    room = service.get_or_create_room(teacher.id, student.id)

    with pytest.raises(ValidationException) as exc_info:
        service.send_message(room.id, student.id, "   ")
    assert exc_info.value.code == "EMPTY_MESSAGE"

    with pytest.raises(ValidationException) as exc_info:
        service.send_message(room.id, student.id, "x" * 21)
    assert exc_info.value.code == "MESSAGE_TOO_LONG"


def test_outsider_cannot_post_or_read(db, service, teacher, student):
    room = service.get_or_create_room(teacher.id, student.id)
    outsider = create_student(db)

    with pytest.raises(ForbiddenException):
        service.send_message(room.id, outsider.id, "hello")
    with pytest.raises(ForbiddenException):
        service.list_messages(room.id, profile_id=outsider.id)


def test_unknown_room(service, student):
    with pytest.raises(NotFoundException):
        service.send_message("01HZZZZZZZZZZZZZZZZZZZZZZZ", student.id, "hello")
