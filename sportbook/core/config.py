# sportbook/core/config.py
import logging
import os
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv
from pydantic import Field, SecretStr, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict
import pytz


def is_running_tests() -> bool:
    """
    Detect if code is running under pytest.

    PYTEST_CURRENT_TEST is set automatically by pytest during test runs, and is
    not expected to be present in production environments.
    """
    return os.getenv("PYTEST_CURRENT_TEST") is not None


logger = logging.getLogger(__name__)

# Load .env file only if not in CI
if not os.getenv("CI"):
    env_path = Path(__file__).resolve().parents[2] / ".env"
    logger.debug(f"[CONFIG] Looking for .env at: {env_path}")
    load_dotenv(env_path)


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_prefix="SPORTBOOK_",
        extra="ignore",
        case_sensitive=False,
    )

    database_url: str = Field(
        default="sqlite+pysqlite:///./sportbook.db",
        description="SQLAlchemy URL of the relational backend",
    )
    platform_timezone: str = Field(
        default="UTC",
        description="Timezone used to resolve 'today' and 'now' for booking rules",
    )

    # Serverless notification function
    notification_function_url: Optional[str] = Field(
        default=None,
        description="Base URL of the functions endpoint; notifications are only logged when unset",
    )
    notification_api_key: Optional[SecretStr] = Field(
        default=None,
        description="Bearer token sent to the notification function",
    )
    notification_timeout_seconds: float = Field(default=10.0, gt=0)
    notification_max_workers: int = Field(
        default=4,
        ge=1,
        description="Threads delivering notifications off the booking path",
    )

    # Identity provider admin API (account deletion)
    identity_admin_url: Optional[str] = Field(
        default=None,
        description="Base URL of the auth admin API; auth users are left in place when unset",
    )
    identity_service_key: Optional[SecretStr] = Field(default=None)

    # Booking policy
    auto_complete_grace_hours: int = Field(
        default=2,
        ge=0,
        description="Hours after a session ends before it is marked completed",
    )
    reschedule_window_days: int = Field(
        default=30,
        ge=1,
        description="How far ahead reschedule alternatives are offered",
    )

    # Content limits
    review_comment_max_length: int = Field(default=500, ge=1)
    message_max_length: int = Field(default=2000, ge=1)

    log_level: str = Field(default="INFO")

    @field_validator("platform_timezone")
    @classmethod
    def _validate_timezone(cls, value: str) -> str:
        try:
            pytz.timezone(value)
        except pytz.UnknownTimeZoneError as exc:
            raise ValueError(f"Unknown timezone: {value}") from exc
        return value

    @field_validator("log_level")
    @classmethod
    def _normalize_log_level(cls, value: str) -> str:
        normalized = (value or "INFO").strip().upper()
        if normalized not in {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}:
            raise ValueError(f"Invalid log level: {value}")
        return normalized

    @field_validator("notification_function_url", "identity_admin_url")
    @classmethod
    def _strip_trailing_slash(cls, value: Optional[str]) -> Optional[str]:
        if value is None:
            return None
        cleaned = value.strip().rstrip("/")
        return cleaned or None

    @property
    def notifications_enabled(self) -> bool:
        return self.notification_function_url is not None


settings = Settings()
