from __future__ import annotations

from datetime import date
from typing import Mapping, Optional, Protocol, Sequence

from ..core.enums import AttendanceStatus
from .model import AttendanceRecord, AttendanceReportRow, NewAttendance, Page
from .schemas import AttendanceQuery


class AttendanceRepository(Protocol):
    """Persistence port for attendance records.

    Implementations must enforce one record per (employee_id, work_date) and
    raise ``ConflictError`` with code ``ATTENDANCE_EXISTS`` when ``create``
    hits an existing day.
    """

    def get_by_id(self, attendance_id: int) -> Optional[AttendanceRecord]:
        raise NotImplementedError

    def get_for_employee_and_date(self, employee_id: int, work_date: date) -> Optional[AttendanceRecord]:
        raise NotImplementedError

    def create(self, new: NewAttendance) -> AttendanceRecord:
        raise NotImplementedError

    def save(self, record: AttendanceRecord) -> bool:
        """Overwrite every mutable column of an existing record."""

        raise NotImplementedError

    def delete(self, attendance_id: int) -> bool:
        raise NotImplementedError

    def list(self, query: AttendanceQuery) -> Page:
        raise NotImplementedError

    def status_counts(self, *, start_date: Optional[date], end_date: Optional[date]) -> Mapping[AttendanceStatus, int]:
        raise NotImplementedError

    def get_report_rows(
        self,
        *,
        start_date: date,
        end_date: date,
        employee_id: Optional[int] = None,
    ) -> Sequence[AttendanceReportRow]:
        raise NotImplementedError
