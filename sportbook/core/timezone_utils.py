"""
Timezone utilities for the booking core.

"Today" and "now" are resolved in the platform timezone so that the
past-date rules and auto-completion agree with the teacher's calendar.
"""

from datetime import date, datetime
from typing import Optional

import pytz

from .config import settings


def get_platform_timezone(tz_name: Optional[str] = None) -> pytz.BaseTzInfo:
    return pytz.timezone(tz_name or settings.platform_timezone)


def get_platform_now(tz_name: Optional[str] = None) -> datetime:
    """
    Get the current timezone-aware time in the platform timezone.

    Args:
        tz_name: Optional timezone override

    Returns:
        Aware datetime
    """
    return datetime.now(get_platform_timezone(tz_name))


def get_platform_today(tz_name: Optional[str] = None) -> date:
    return get_platform_now(tz_name).date()


def localize(naive: datetime, tz_name: Optional[str] = None) -> datetime:
    """Attach the platform timezone to a naive wall-clock datetime."""
    return get_platform_timezone(tz_name).localize(naive)
