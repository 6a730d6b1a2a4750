"""Wall-clock helpers pinned to the boarding house's local timezone."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone, tzinfo
from functools import lru_cache
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from kost_console.config import get_settings

WIB = timezone(timedelta(hours=7), "WIB")


@lru_cache(maxsize=1)
def get_app_timezone() -> tzinfo:
    """Return the zone named by ``APP_TIMEZONE``, or WIB when it is unknown."""

    name = (get_settings().app_timezone or "").strip()
    if not name:
        return WIB
    try:
        return ZoneInfo(name)
    except (ZoneInfoNotFoundError, ValueError):
        return WIB


def now_local() -> datetime:
    return datetime.now(tz=get_app_timezone())


def now_for_db() -> datetime:
    """Current local time as stored in ``DATETIME`` columns (no offset)."""

    return now_local().replace(tzinfo=None)


def to_local(value: datetime | None) -> datetime | None:
    """Attach or convert ``value`` to the app timezone.

    Naive values are read back from the database and are already local.
    """

    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=get_app_timezone())
    return value.astimezone(get_app_timezone())


def to_db(value: datetime | None) -> datetime | None:
    localized = to_local(value)
    return None if localized is None else localized.replace(tzinfo=None)
