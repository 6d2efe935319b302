from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from datetime import date, datetime, tzinfo
from typing import Optional

from ..common.audit import log_user_action
from ..common.datetime_utils import now_local
from ..core.constants import SELF_CHECKIN_LATE_AFTER_HOUR
from ..core.enums import AttendanceState, AttendanceStatus
from ..core.exceptions import AuthorizationError, ConflictError, NotFoundError, ValidationError
from ..employees.model import Employee
from ..employees.repository import EmployeeRepository
from ..shifts.repository import ShiftRepository
from ..users.model import CurrentUser
from .accounting import HoursBreakdown, compute_hours, derive_status, state_of, total_hours_between
from .model import AttendanceRecord, AttendanceStats, NewAttendance, Page
from .repository import AttendanceRepository
from .schemas import (
    AttendanceQuery,
    MarkAttendanceInput,
    SelfCheckInInput,
    SelfCheckOutInput,
    UpdateAttendanceInput,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class MarkResult:
    record: AttendanceRecord
    created: bool


def _require_ordered(check_in: Optional[datetime], check_out: Optional[datetime]) -> None:
    if check_in is not None and check_out is not None and check_out < check_in:
        raise ValidationError('"checkOut" must not be earlier than "checkIn"', code="INVALID_TIME_RANGE")


class AttendanceService:
    """Use cases around daily attendance records.

    Every operation takes the caller as an explicit ``CurrentUser``; hour and
    status rules come from ``accounting`` only.
    """

    def __init__(
        self,
        attendance: AttendanceRepository,
        employees: EmployeeRepository,
        shifts: ShiftRepository,
        *,
        tz: Optional[tzinfo] = None,
    ):
        self._attendance = attendance
        self._employees = employees
        self._shifts = shifts
        self._tz = tz

    @property
    def tz(self) -> Optional[tzinfo]:
        """Zone that request timestamps are converted into before storage."""
        return self._tz

    # ----- helpers -----

    def _now(self, now: Optional[datetime]) -> datetime:
        return now or now_local(self._tz)

    def _own_employee(self, current_user: CurrentUser) -> Employee:
        employee = None
        if current_user.employee_id is not None:
            employee = self._employees.get_by_id(current_user.employee_id)
        if employee is None:
            employee = self._employees.get_by_user_id(current_user.user_id)
        if employee is None:
            raise NotFoundError("Employee profile not found", code="EMPLOYEE_NOT_FOUND")
        return employee

    def _check_shift(self, shift_id: Optional[int]) -> None:
        if shift_id is not None and self._shifts.get_by_id(shift_id) is None:
            raise ValidationError("Shift not found", code="SHIFT_NOT_FOUND")

    @staticmethod
    def _require_hr(current_user: CurrentUser) -> None:
        if not current_user.is_hr:
            raise AuthorizationError("HR access required", code="HR_ACCESS_REQUIRED")

    @staticmethod
    def _require_self_or_hr(current_user: CurrentUser, employee_id: int) -> None:
        if current_user.is_hr:
            return
        if current_user.employee_id is None or int(current_user.employee_id) != int(employee_id):
            raise AuthorizationError("You can only access your own attendance", code="FORBIDDEN")

    def _get_or_404(self, attendance_id: int) -> AttendanceRecord:
        record = self._attendance.get_by_id(attendance_id)
        if record is None:
            raise NotFoundError("Attendance record not found", code="ATTENDANCE_NOT_FOUND")
        return record

    # ----- mark (HR or the employee) -----

    def mark_attendance(
        self,
        data: MarkAttendanceInput,
        *,
        current_user: CurrentUser,
        ip_address: Optional[str] = None,
    ) -> MarkResult:
        self._require_self_or_hr(current_user, data.employee_id)

        if self._employees.get_by_id(data.employee_id) is None:
            raise NotFoundError("Employee not found", code="EMPLOYEE_NOT_FOUND")
        self._check_shift(data.shift_id)
        _require_ordered(data.check_in, data.check_out)

        existing = self._attendance.get_for_employee_and_date(data.employee_id, data.work_date)
        if existing is None:
            record = self._attendance.create(
                NewAttendance(
                    employee_id=data.employee_id,
                    work_date=data.work_date,
                    check_in=data.check_in,
                    check_out=data.check_out,
                    status=derive_status(data.status, data.check_in, self._tz),
                    hours=compute_hours(data.check_in, data.check_out, data.manual_overtime_hours),
                    notes=data.notes,
                    shift_id=data.shift_id,
                    is_remote=data.is_remote,
                    check_in_selfie=data.check_in_selfie,
                    check_out_selfie=data.check_out_selfie,
                    check_in_location=data.check_in_location,
                    check_out_location=data.check_out_location,
                    device_info=data.device_info,
                    ip_address=ip_address,
                    created_by=current_user.user_id,
                )
            )
            log_user_action(current_user.user_id, "MARK", "attendance", record.attendance_id, status=record.status.value)
            return MarkResult(record=record, created=True)

        adds_check_in = existing.check_in is None and data.check_in is not None
        adds_check_out = existing.check_out is None and data.check_out is not None
        if not adds_check_in and not adds_check_out:
            raise ConflictError("Attendance already marked for this date", code="ATTENDANCE_EXISTS")

        check_in = existing.check_in or data.check_in
        check_out = existing.check_out or data.check_out
        _require_ordered(check_in, check_out)

        updated = replace(
            existing,
            check_in=check_in,
            check_out=check_out,
            status=derive_status(data.status, check_in, self._tz),
            notes=data.notes or existing.notes,
            shift_id=existing.shift_id or data.shift_id,
            is_remote=existing.is_remote or data.is_remote,
            check_in_selfie=existing.check_in_selfie or data.check_in_selfie,
            check_out_selfie=existing.check_out_selfie or data.check_out_selfie,
            check_in_location=existing.check_in_location or data.check_in_location,
            check_out_location=existing.check_out_location or data.check_out_location,
        ).with_hours(compute_hours(check_in, check_out, data.manual_overtime_hours))

        self._attendance.save(updated)
        log_user_action(
            current_user.user_id,
            "MARK_UPDATE",
            "attendance",
            updated.attendance_id,
            added="check_in" if adds_check_in else "check_out",
        )
        return MarkResult(record=updated, created=False)

    # ----- self service -----

    def self_check_in(
        self,
        data: SelfCheckInInput,
        *,
        current_user: CurrentUser,
        now: Optional[datetime] = None,
        ip_address: Optional[str] = None,
    ) -> AttendanceRecord:
        employee = self._own_employee(current_user)
        now = self._now(now)
        today = now.date()

        existing = self._attendance.get_for_employee_and_date(employee.employee_id, today)
        state = state_of(existing)
        if state == AttendanceState.CHECKED_IN:
            raise ConflictError(
                "Attendance already marked for this date. You can only check out now.",
                code="ALREADY_CHECKED_IN",
                data={"canCheckOut": True, "canCheckIn": False},
            )
        if state == AttendanceState.CHECKED_OUT:
            raise ConflictError(
                "Attendance already completed for today",
                code="ATTENDANCE_COMPLETED",
                data={"canCheckOut": False, "canCheckIn": False},
            )

        self._check_shift(data.shift_id)

        requested = AttendanceStatus.LATE if now.hour > SELF_CHECKIN_LATE_AFTER_HOUR else AttendanceStatus.PRESENT
        record = self._attendance.create(
            NewAttendance(
                employee_id=employee.employee_id,
                work_date=today,
                check_in=now,
                check_out=None,
                status=derive_status(requested, now, self._tz),
                hours=HoursBreakdown.empty(),
                notes=data.notes,
                shift_id=data.shift_id,
                is_remote=data.is_remote,
                check_in_selfie=data.check_in_selfie,
                check_in_location=data.check_in_location,
                device_info=data.device_info,
                ip_address=ip_address,
                created_by=current_user.user_id,
            )
        )
        log_user_action(current_user.user_id, "CHECK_IN", "attendance", record.attendance_id, status=record.status.value)
        return record

    def self_check_out(
        self,
        data: SelfCheckOutInput,
        *,
        current_user: CurrentUser,
        now: Optional[datetime] = None,
    ) -> AttendanceRecord:
        employee = self._own_employee(current_user)
        now = self._now(now)

        existing = self._attendance.get_for_employee_and_date(employee.employee_id, now.date())
        if existing is None or existing.check_in is None:
            raise ConflictError("No active check-in for today", code="NO_CHECKIN")
        if state_of(existing) == AttendanceState.CHECKED_OUT:
            raise ConflictError("Already checked out today", code="ALREADY_CHECKED_OUT")
        _require_ordered(existing.check_in, now)

        updated = replace(
            existing,
            check_out=now,
            status=derive_status(existing.status, existing.check_in, self._tz),
            notes=data.notes or existing.notes,
            check_out_selfie=data.check_out_selfie,
            check_out_location=data.check_out_location,
        ).with_hours(compute_hours(existing.check_in, now))

        self._attendance.save(updated)
        log_user_action(
            current_user.user_id,
            "CHECK_OUT",
            "attendance",
            updated.attendance_id,
            total_hours=f"{updated.total_hours:.2f}",
        )
        return updated

    def self_status(self, *, current_user: CurrentUser, now: Optional[datetime] = None) -> dict:
        employee = self._own_employee(current_user)
        now = self._now(now)
        today = now.date()

        existing = self._attendance.get_for_employee_and_date(employee.employee_id, today)
        state = state_of(existing)
        return {
            "status": {
                "state": state.value,
                "canCheckIn": state == AttendanceState.NO_RECORD,
                "canCheckOut": state == AttendanceState.CHECKED_IN,
                "isCompleted": state == AttendanceState.CHECKED_OUT,
                "currentTime": now.isoformat(),
                "today": today.isoformat(),
            },
            "attendance": existing.to_dict() if existing else None,
        }

    # ----- HR maintenance -----

    def update_attendance(
        self,
        attendance_id: int,
        data: UpdateAttendanceInput,
        *,
        current_user: CurrentUser,
    ) -> AttendanceRecord:
        self._require_hr(current_user)
        record = self._get_or_404(attendance_id)

        if data.is_empty:
            raise ValidationError("Nothing to update")
        self._check_shift(data.shift_id)

        check_in = data.check_in if data.check_in is not None else record.check_in
        check_out = data.check_out if data.check_out is not None else record.check_out
        _require_ordered(check_in, check_out)

        # Only the plain span is refreshed on this path.
        updated = replace(
            record,
            check_in=check_in,
            check_out=check_out,
            status=data.status or record.status,
            notes=data.notes if data.notes is not None else record.notes,
            shift_id=data.shift_id if data.shift_id is not None else record.shift_id,
            is_remote=data.is_remote if data.is_remote is not None else record.is_remote,
            total_hours=total_hours_between(check_in, check_out),
        )

        self._attendance.save(updated)
        log_user_action(current_user.user_id, "UPDATE", "attendance", attendance_id)
        return updated

    def delete_attendance(self, attendance_id: int, *, current_user: CurrentUser) -> None:
        self._require_hr(current_user)
        if not self._attendance.delete(attendance_id):
            raise NotFoundError("Attendance record not found", code="ATTENDANCE_NOT_FOUND")
        log_user_action(current_user.user_id, "DELETE", "attendance", attendance_id)

    # ----- queries -----

    def get_attendance(self, attendance_id: int, *, current_user: CurrentUser) -> AttendanceRecord:
        record = self._get_or_404(attendance_id)
        self._require_self_or_hr(current_user, record.employee_id)
        return record

    def list_attendance(self, query: AttendanceQuery, *, current_user: CurrentUser) -> Page:
        if not current_user.is_hr:
            # Non-HR callers only ever see their own rows.
            own = self._own_employee(current_user)
            query = replace(query, employee_id=own.employee_id)
        return self._attendance.list(query)

    def employee_history(self, employee_id: int, query: AttendanceQuery, *, current_user: CurrentUser) -> Page:
        self._require_self_or_hr(current_user, employee_id)
        if self._employees.get_by_id(employee_id) is None:
            raise NotFoundError("Employee not found", code="EMPLOYEE_NOT_FOUND")
        return self._attendance.list(replace(query, employee_id=int(employee_id)))

    def stats_overview(
        self,
        *,
        current_user: CurrentUser,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
    ) -> AttendanceStats:
        self._require_hr(current_user)
        counts = self._attendance.status_counts(start_date=start_date, end_date=end_date)
        return AttendanceStats(
            total_records=sum(counts.values()),
            present_count=counts.get(AttendanceStatus.PRESENT, 0),
            absent_count=counts.get(AttendanceStatus.ABSENT, 0),
            late_count=counts.get(AttendanceStatus.LATE, 0),
            half_day_count=counts.get(AttendanceStatus.HALF_DAY, 0),
            early_leave_count=counts.get(AttendanceStatus.EARLY_LEAVE, 0),
        )
