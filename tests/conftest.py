"""
Shared fixtures: a fresh in-memory SQLite database per test.

Services commit and roll back for real, so every test gets its own engine
instead of a savepoint-wrapped connection.
"""

from datetime import date, time
from typing import List, Tuple

import pytest
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from sportbook.database import Base, create_db_engine
from sportbook.integrations.notification_client import BookingEventType

# Import models so Base.metadata is populated for create_all.
import sportbook.models  # noqa: F401
from sportbook.services.notification_service import NotificationService
from tests.factories import add_windows, create_student, create_teacher


class RecordingDispatcher:
    """Notification dispatcher that keeps every event in memory."""

    def __init__(self) -> None:
        self.events: List[Tuple[str, BookingEventType]] = []

    def notify(self, booking_id: str, event_type: BookingEventType) -> None:
        self.events.append((booking_id, event_type))


@pytest.fixture
def engine():
    engine = create_db_engine("sqlite+pysqlite:///:memory:", poolclass=StaticPool)
    Base.metadata.create_all(engine)
    yield engine
    Base.metadata.drop_all(engine)
    engine.dispose()


@pytest.fixture
def db(engine) -> Session:
    SessionLocal = sessionmaker(bind=engine, autoflush=False, expire_on_commit=False)
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def dispatcher() -> RecordingDispatcher:
    return RecordingDispatcher()


@pytest.fixture
def notifier(dispatcher) -> NotificationService:
    return NotificationService(dispatcher=dispatcher, max_attempts=1)


@pytest.fixture
def delivered_events(notifier, dispatcher):
    """Events the dispatcher received once background delivery has drained."""

    def collect() -> List[Tuple[str, BookingEventType]]:
        assert notifier.wait_for_pending(timeout=5)
        return list(dispatcher.events)

    return collect


@pytest.fixture
def teacher(db):
    return create_teacher(db, hourly_rate="30.00", group_hourly_rate="40.00", max_students_per_session=4)


@pytest.fixture
def student(db):
    return create_student(db)


@pytest.fixture
def mwf_morning(db, teacher):
    """Mon/Wed/Fri 09:00-10:00 plus a Monday-only 10:00-11:00 window."""
    add_windows(db, teacher, [1, 3, 5], time(9, 0), time(10, 0))
    add_windows(db, teacher, [1], time(10, 0), time(11, 0))
    return teacher


@pytest.fixture
def plan_start() -> date:
    # Monday
    return date(2024, 6, 3)


@pytest.fixture
def today() -> date:
    return date(2024, 6, 1)
