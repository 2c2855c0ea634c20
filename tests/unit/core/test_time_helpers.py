"""ULID and platform-time helpers."""

from datetime import datetime

import pytz

from sportbook.core.timezone_utils import get_platform_now, get_platform_today, localize
from sportbook.core.ulid_helper import generate_ulid, get_timestamp_from_ulid, is_valid_ulid, parse_ulid


def test_generated_ulids_are_valid_and_unique():
    ids = {generate_ulid() for _ in range(50)}
    assert len(ids) == 50
    assert all(len(value) == 26 and is_valid_ulid(value) for value in ids)


def test_invalid_ulid():
    assert parse_ulid("not-a-ulid") is None
    assert get_timestamp_from_ulid("not-a-ulid") is None


def test_platform_now_is_aware():
    now = get_platform_now("America/Bogota")
    assert now.tzinfo is not None
    assert get_platform_today("UTC") in {datetime.now(pytz.utc).date(), now.astimezone(pytz.utc).date()}


def test_localize_attaches_zone():
    aware = localize(datetime(2024, 6, 3, 9, 0), "Europe/Madrid")
    assert aware.utcoffset().total_seconds() == 2 * 3600
