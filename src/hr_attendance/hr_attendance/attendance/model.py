from __future__ import annotations

from dataclasses import dataclass, replace
from datetime import date, datetime
from typing import Optional

from ..common.datetime_utils import iso_or_none, round_hours
from ..core.enums import AttendanceStatus
from .accounting import HoursBreakdown


@dataclass(frozen=True)
class GeoLocation:
    latitude: Optional[float] = None
    longitude: Optional[float] = None
    address: Optional[str] = None
    accuracy: Optional[float] = None

    @classmethod
    def from_dict(cls, data: Optional[dict]) -> Optional["GeoLocation"]:
        if not data:
            return None
        return cls(
            latitude=data.get("latitude"),
            longitude=data.get("longitude"),
            address=data.get("address"),
            accuracy=data.get("accuracy"),
        )

    def to_dict(self) -> dict:
        return {
            "latitude": self.latitude,
            "longitude": self.longitude,
            "address": self.address,
            "accuracy": self.accuracy,
        }


@dataclass(frozen=True)
class DeviceInfo:
    device_type: Optional[str] = None
    os: Optional[str] = None
    browser: Optional[str] = None
    user_agent: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Optional[dict]) -> Optional["DeviceInfo"]:
        if not data:
            return None
        return cls(
            device_type=data.get("deviceType"),
            os=data.get("os"),
            browser=data.get("browser"),
            user_agent=data.get("userAgent"),
        )

    def to_dict(self) -> dict:
        return {
            "deviceType": self.device_type,
            "os": self.os,
            "browser": self.browser,
            "userAgent": self.user_agent,
        }


@dataclass(frozen=True)
class AttendanceRecord:
    """Domain entity: one employee's attendance for one calendar day."""

    attendance_id: int
    employee_id: int
    work_date: date
    check_in: Optional[datetime]
    check_out: Optional[datetime]
    status: AttendanceStatus
    total_hours: Optional[float] = None
    regular_hours: Optional[float] = None
    overtime_hours: Optional[float] = None
    break_hours: Optional[float] = None
    notes: Optional[str] = None
    shift_id: Optional[int] = None
    is_remote: bool = False
    check_in_selfie: Optional[str] = None
    check_out_selfie: Optional[str] = None
    check_in_location: Optional[GeoLocation] = None
    check_out_location: Optional[GeoLocation] = None
    device_info: Optional[DeviceInfo] = None
    ip_address: Optional[str] = None
    created_by: Optional[int] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @property
    def hours(self) -> HoursBreakdown:
        return HoursBreakdown(
            total_hours=self.total_hours,
            regular_hours=self.regular_hours,
            overtime_hours=self.overtime_hours,
            break_hours=self.break_hours,
        )

    def with_hours(self, hours: HoursBreakdown) -> "AttendanceRecord":
        return replace(
            self,
            total_hours=hours.total_hours,
            regular_hours=hours.regular_hours,
            overtime_hours=hours.overtime_hours,
            break_hours=hours.break_hours,
        )

    def to_dict(self, *, include_selfies: bool = False) -> dict:
        out = {
            "id": self.attendance_id,
            "employeeId": self.employee_id,
            "date": self.work_date.isoformat(),
            "checkIn": iso_or_none(self.check_in),
            "checkOut": iso_or_none(self.check_out),
            "status": self.status.value,
            "totalHours": round_hours(self.total_hours),
            "regularHours": round_hours(self.regular_hours),
            "overtimeHours": round_hours(self.overtime_hours),
            "breakHours": round_hours(self.break_hours),
            "notes": self.notes,
            "shiftId": self.shift_id,
            "isRemote": self.is_remote,
            "checkInLocation": self.check_in_location.to_dict() if self.check_in_location else None,
            "checkOutLocation": self.check_out_location.to_dict() if self.check_out_location else None,
            "deviceInfo": self.device_info.to_dict() if self.device_info else None,
            "ipAddress": self.ip_address,
            "createdBy": self.created_by,
            "createdAt": iso_or_none(self.created_at),
            "updatedAt": iso_or_none(self.updated_at),
            "hasCheckInSelfie": bool(self.check_in_selfie),
            "hasCheckOutSelfie": bool(self.check_out_selfie),
        }
        if include_selfies:
            out["checkInSelfie"] = self.check_in_selfie
            out["checkOutSelfie"] = self.check_out_selfie
        return out


@dataclass(frozen=True)
class NewAttendance:
    """Insert payload; the store assigns id and timestamps."""

    employee_id: int
    work_date: date
    check_in: Optional[datetime]
    check_out: Optional[datetime]
    status: AttendanceStatus
    hours: HoursBreakdown
    notes: Optional[str] = None
    shift_id: Optional[int] = None
    is_remote: bool = False
    check_in_selfie: Optional[str] = None
    check_out_selfie: Optional[str] = None
    check_in_location: Optional[GeoLocation] = None
    check_out_location: Optional[GeoLocation] = None
    device_info: Optional[DeviceInfo] = None
    ip_address: Optional[str] = None
    created_by: Optional[int] = None


@dataclass(frozen=True)
class Page:
    items: list
    page: int
    limit: int
    total: int

    @property
    def pages(self) -> int:
        return (self.total + self.limit - 1) // self.limit if self.limit else 0

    def pagination(self) -> dict:
        return {"page": self.page, "limit": self.limit, "total": self.total, "pages": self.pages}


@dataclass(frozen=True)
class AttendanceStats:
    total_records: int
    present_count: int
    absent_count: int
    late_count: int
    half_day_count: int
    early_leave_count: int

    @property
    def attendance_rate(self) -> float:
        if self.total_records <= 0:
            return 0.0
        return self.present_count / self.total_records * 100

    def to_dict(self) -> dict:
        return {
            "totalRecords": self.total_records,
            "presentCount": self.present_count,
            "absentCount": self.absent_count,
            "lateCount": self.late_count,
            "halfDayCount": self.half_day_count,
            "earlyLeaveCount": self.early_leave_count,
            "attendanceRate": round(self.attendance_rate, 2),
        }


@dataclass(frozen=True)
class AttendanceReportRow:
    """Read-model for reports/exports (joined with the employee profile)."""

    employee_id: int
    employee_code: str
    full_name: str
    department: Optional[str]
    work_date: date
    check_in: Optional[datetime]
    check_out: Optional[datetime]
    status: AttendanceStatus
    total_hours: Optional[float] = None
    regular_hours: Optional[float] = None
    overtime_hours: Optional[float] = None
    break_hours: Optional[float] = None
