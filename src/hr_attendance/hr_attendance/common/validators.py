from __future__ import annotations

from datetime import date, datetime, tzinfo
from enum import Enum
from typing import Any, Optional, Type, TypeVar

from ..core.exceptions import ValidationError

E = TypeVar("E", bound=Enum)


def require_non_empty(value: str, field_name: str) -> str:
    if not isinstance(value, str) or not value.strip():
        raise ValidationError(f'"{field_name}" is required')
    return value.strip()


def optional_str(value: Any, field_name: str, *, max_len: int = 500) -> Optional[str]:
    if value is None:
        return None
    if not isinstance(value, str):
        raise ValidationError(f'"{field_name}" must be a string')
    if len(value) > max_len:
        raise ValidationError(f'"{field_name}" must be at most {max_len} characters')
    return value


def parse_datetime(value: Any, field_name: str, *, tz: Optional[tzinfo] = None) -> Optional[datetime]:
    """Parse an ISO-8601 timestamp ('Z' suffix accepted); empty means absent.

    Offset-carrying values are converted into ``tz`` (the server's local zone
    when not given) and returned naive, like every timestamp the store hands back.
    """
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, str):
        text = value.strip()
        if text.endswith("Z"):
            text = text[:-1] + "+00:00"
        try:
            parsed = datetime.fromisoformat(text)
        except ValueError:
            raise ValidationError(f'"{field_name}" must be a valid date')
    else:
        raise ValidationError(f'"{field_name}" must be a valid date')

    if parsed.tzinfo is not None:
        parsed = parsed.astimezone(tz).replace(tzinfo=None)
    return parsed


def parse_date(value: Any, field_name: str) -> Optional[date]:
    """Parse YYYY-MM-DD (a full timestamp is truncated to its date)."""
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if not isinstance(value, str):
        raise ValidationError(f'"{field_name}" must be a valid date')
    try:
        return datetime.strptime(value.strip()[:10], "%Y-%m-%d").date()
    except ValueError:
        raise ValidationError(f'"{field_name}" must be a valid date')


def parse_enum(value: Any, enum_cls: Type[E], field_name: str) -> Optional[E]:
    if value is None or value == "":
        return None
    try:
        return enum_cls(value)
    except ValueError:
        allowed = ", ".join(m.value for m in enum_cls)
        raise ValidationError(f'"{field_name}" must be one of [{allowed}]')


def parse_number(value: Any, field_name: str, *, minimum: Optional[float] = None) -> Optional[float]:
    if value is None or value == "":
        return None
    if isinstance(value, bool):
        raise ValidationError(f'"{field_name}" must be a number')
    try:
        number = float(value)
    except (TypeError, ValueError):
        raise ValidationError(f'"{field_name}" must be a number')
    if minimum is not None and number < minimum:
        raise ValidationError(f'"{field_name}" must be greater than or equal to {minimum:g}')
    return number


def parse_int(value: Any, field_name: str, *, minimum: Optional[int] = None) -> Optional[int]:
    if value is None or value == "":
        return None
    if isinstance(value, bool):
        raise ValidationError(f'"{field_name}" must be an integer')
    try:
        number = int(value)
    except (TypeError, ValueError):
        raise ValidationError(f'"{field_name}" must be an integer')
    if minimum is not None and number < minimum:
        raise ValidationError(f'"{field_name}" must be greater than or equal to {minimum}')
    return number


def parse_bool(value: Any, field_name: str, *, default: bool = False) -> bool:
    if value is None:
        return default
    if isinstance(value, bool):
        return value
    raise ValidationError(f'"{field_name}" must be a boolean')
