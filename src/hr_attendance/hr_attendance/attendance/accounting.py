"""Attendance time accounting.

Pure functions turning a check-in/check-out pair into the derived hour fields
stored on an attendance record, and the rule that overrides the requested
status with HALF_DAY for late check-ins.

Every call site (mark attendance, self check-in/out, HR update) goes through
this module so the rules live in one place. Nothing here performs I/O or
raises: callers validate their inputs first.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass
from datetime import datetime, tzinfo
from typing import Optional

from ..core.constants import BREAK_HOURS, BREAK_THRESHOLD_HOURS, HALF_DAY_CUTOFF, STANDARD_WORKING_HOURS
from ..core.enums import AttendanceState, AttendanceStatus


@dataclass(frozen=True)
class HoursBreakdown:
    """Derived hour fields of one attendance record (fractional hours)."""

    total_hours: Optional[float]
    regular_hours: Optional[float]
    overtime_hours: Optional[float]
    break_hours: Optional[float]

    @classmethod
    def empty(cls) -> "HoursBreakdown":
        return cls(total_hours=None, regular_hours=None, overtime_hours=None, break_hours=None)

    @property
    def is_empty(self) -> bool:
        return self.total_hours is None

    def as_dict(self) -> dict:
        return asdict(self)


def total_hours_between(check_in: Optional[datetime], check_out: Optional[datetime]) -> Optional[float]:
    """Plain span in hours, or None unless both timestamps are present."""
    if check_in is None or check_out is None:
        return None
    return (check_out - check_in).total_seconds() / 3600


def compute_hours(
    check_in: Optional[datetime],
    check_out: Optional[datetime],
    manual_overtime_hours: Optional[float] = None,
) -> HoursBreakdown:
    """Split the worked span into regular, overtime and break hours.

    - a span longer than 6 hours carries a fixed 1 hour break
    - regular hours are capped at the 8 hour standard day
    - anything beyond the cap is overtime, unless ``manual_overtime_hours`` is
      given (and positive), which replaces the computed overtime and is taken
      out of the regular hours instead

    Returns an empty breakdown when either timestamp is missing. Ordering of
    the timestamps is the caller's responsibility.
    """
    total_hours = total_hours_between(check_in, check_out)
    if total_hours is None:
        return HoursBreakdown.empty()

    break_hours = BREAK_HOURS if total_hours > BREAK_THRESHOLD_HOURS else 0.0
    actual_working_hours = total_hours - break_hours

    regular_hours = min(actual_working_hours, STANDARD_WORKING_HOURS)
    overtime_hours = max(actual_working_hours - STANDARD_WORKING_HOURS, 0.0)

    if manual_overtime_hours is not None and manual_overtime_hours > 0:
        overtime_hours = float(manual_overtime_hours)
        # Clamped: an override larger than the worked span leaves no regular time.
        regular_hours = max(min(actual_working_hours - overtime_hours, STANDARD_WORKING_HOURS), 0.0)

    return HoursBreakdown(
        total_hours=total_hours,
        regular_hours=regular_hours,
        overtime_hours=overtime_hours,
        break_hours=break_hours,
    )


def local_time_of(moment: datetime, tz: Optional[tzinfo] = None) -> datetime:
    """Naive datetimes are already local; aware ones are moved into ``tz``."""
    if tz is not None and moment.tzinfo is not None:
        return moment.astimezone(tz)
    return moment


def derive_status(
    requested_status: AttendanceStatus,
    check_in: Optional[datetime] = None,
    tz: Optional[tzinfo] = None,
) -> AttendanceStatus:
    """Return HALF_DAY for check-ins at 11:59 local time or later.

    Any other check-in (or no check-in at all) keeps the requested status.
    """
    if check_in is None:
        return requested_status

    local = local_time_of(check_in, tz)
    if local.time().replace(tzinfo=None) >= HALF_DAY_CUTOFF:
        return AttendanceStatus.HALF_DAY
    return requested_status


def state_of(record) -> AttendanceState:
    """Lifecycle state of an attendance record (``None`` means no record yet)."""
    if record is None:
        return AttendanceState.NO_RECORD
    # A day marked without a check-in (e.g. ABSENT) is closed as well.
    if record.check_out is not None or record.check_in is None:
        return AttendanceState.CHECKED_OUT
    return AttendanceState.CHECKED_IN
