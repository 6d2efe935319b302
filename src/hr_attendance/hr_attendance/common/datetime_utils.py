from __future__ import annotations

from datetime import date, datetime, tzinfo
from typing import Optional
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError


def now_local(tz: Optional[tzinfo] = None) -> datetime:
    """Current local time (naive, in ``tz`` when given).

    Note: Wrapped so tests can patch/mock easier.
    """
    if tz is None:
        return datetime.now()
    return datetime.now(tz).replace(tzinfo=None)


def load_timezone(name: Optional[str]) -> Optional[tzinfo]:
    if not name:
        return None
    try:
        return ZoneInfo(name)
    except ZoneInfoNotFoundError:
        raise ValueError(f"Unknown timezone: {name!r}")


def iso_or_none(value) -> Optional[str]:
    if value is None:
        return None
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    return str(value)


def round_hours(value: Optional[float]) -> Optional[float]:
    return None if value is None else round(float(value), 2)
