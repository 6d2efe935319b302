from __future__ import annotations

from enum import Enum


class Role(str, Enum):
    """User roles used for authorization."""

    SUPER_ADMIN = "SUPER_ADMIN"
    HR_MANAGER = "HR_MANAGER"
    DEPARTMENT_MANAGER = "DEPARTMENT_MANAGER"
    EMPLOYEE = "EMPLOYEE"


HR_ROLES = frozenset({Role.SUPER_ADMIN, Role.HR_MANAGER})


class AttendanceStatus(str, Enum):
    """Attendance status stored on each daily record."""

    PRESENT = "PRESENT"
    ABSENT = "ABSENT"
    LATE = "LATE"
    EARLY_LEAVE = "EARLY_LEAVE"
    HALF_DAY = "HALF_DAY"


class AttendanceState(str, Enum):
    """Check-in/check-out lifecycle of one employee-day."""

    NO_RECORD = "NO_RECORD"
    CHECKED_IN = "CHECKED_IN"
    CHECKED_OUT = "CHECKED_OUT"


class LeaveType(str, Enum):
    SICK_LEAVE = "SICK_LEAVE"
    VACATION = "VACATION"
    PERSONAL_LEAVE = "PERSONAL_LEAVE"
    EMERGENCY_LEAVE = "EMERGENCY_LEAVE"
    MATERNITY_LEAVE = "MATERNITY_LEAVE"
    PATERNITY_LEAVE = "PATERNITY_LEAVE"


class LeaveStatus(str, Enum):
    """Approval workflow states for leave requests."""

    PENDING = "PENDING"
    APPROVED = "APPROVED"
    REJECTED = "REJECTED"
    CANCELLED = "CANCELLED"
