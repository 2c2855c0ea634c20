# sportbook/database.py
"""
Database engine, session factory, and metadata shared across the package.

Services never reach for a global session: callers open one with
``SessionLocal()`` (or ``get_db()``) and pass it into service constructors.
"""

from datetime import datetime
import logging
from typing import Any, Dict, Generator, Optional

from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.orm import DeclarativeMeta, Session, declarative_base, sessionmaker

from .core.config import settings

logger = logging.getLogger(__name__)


Base: DeclarativeMeta = declarative_base()


def create_db_engine(database_url: Optional[str] = None, **overrides: Any) -> Engine:
    """
    Create an engine tuned for the configured dialect.

    Args:
        database_url: Optional URL override (defaults to settings.database_url)
        **overrides: Extra keyword arguments passed to ``create_engine``

    Returns:
        Configured SQLAlchemy engine
    """
    url = database_url or settings.database_url
    kwargs: Dict[str, Any] = {"pool_pre_ping": True}

    if url.startswith("sqlite"):
        kwargs["connect_args"] = {"check_same_thread": False}
    else:
        kwargs.update(
            pool_size=5,
            max_overflow=5,
            pool_timeout=10,
            pool_recycle=1800,
            connect_args={"connect_timeout": 5, "application_name": "sportbook"},
        )

    kwargs.update(overrides)
    new_engine = create_engine(url, **kwargs)

    @event.listens_for(new_engine, "connect")
    def receive_connect(dbapi_connection: Any, connection_record: Any) -> None:
        connection_record.info["connect_time"] = datetime.now()
        if url.startswith("sqlite"):
            # SQLite needs FK enforcement switched on per connection
            cursor = dbapi_connection.cursor()
            cursor.execute("PRAGMA foreign_keys=ON")
            cursor.close()
        logger.debug("Database connection established")

    return new_engine


engine: Engine = create_db_engine()

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine, expire_on_commit=False)


def get_db() -> Generator[Session, None, None]:
    """Get database session with proper cleanup."""
    db = SessionLocal()
    try:
        yield db
        db.commit()
    except Exception:
        db.rollback()
        raise
    finally:
        db.close()


def init_db(bind: Optional[Engine] = None) -> None:
    """Create all tables (development and tests; production uses migrations)."""
    from . import models  # noqa: F401

    Base.metadata.create_all(bind=bind or engine)
