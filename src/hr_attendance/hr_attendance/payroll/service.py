from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from typing import Optional

from ..attendance.repository import AttendanceRepository
from ..common.datetime_utils import round_hours
from ..core.exceptions import ValidationError
from .calculator.base import PayrollCalculator
from .calculator.standard_calculator import StandardPayrollCalculator

REPORT_FIELDS = [
    "work_date",
    "employee_id",
    "employee_code",
    "full_name",
    "department",
    "check_in",
    "check_out",
    "status",
    "total_hours",
    "regular_hours",
    "overtime_hours",
    "break_hours",
    "payable_hours",
]


@dataclass(frozen=True)
class ReportData:
    rows: list[dict]
    summary: list[dict]


class PayrollReportService:
    def __init__(
        self,
        attendance: AttendanceRepository,
        *,
        calculator: Optional[PayrollCalculator] = None,
    ):
        self._attendance = attendance
        self._calculator = calculator or StandardPayrollCalculator()

    def build_hours_report(
        self,
        *,
        start: date,
        end: date,
        employee_id: Optional[int] = None,
    ) -> ReportData:
        if end < start:
            raise ValidationError('"end" must be on or after "start"')

        query_rows = self._attendance.get_report_rows(start_date=start, end_date=end, employee_id=employee_id)

        summary_map: dict[int, dict] = {}
        out_rows: list[dict] = []

        for r in query_rows:
            payable = self._calculator.payable_hours(r)

            out_rows.append(
                {
                    "work_date": r.work_date.strftime("%Y-%m-%d"),
                    "employee_id": r.employee_id,
                    "employee_code": r.employee_code,
                    "full_name": r.full_name,
                    "department": r.department or "-",
                    "check_in": r.check_in.strftime("%H:%M") if r.check_in else "-",
                    "check_out": r.check_out.strftime("%H:%M") if r.check_out else "-",
                    "status": r.status.value,
                    "total_hours": round_hours(r.total_hours or 0),
                    "regular_hours": round_hours(r.regular_hours or 0),
                    "overtime_hours": round_hours(r.overtime_hours or 0),
                    "break_hours": round_hours(r.break_hours or 0),
                    "payable_hours": round_hours(payable),
                }
            )

            s = summary_map.get(r.employee_id)
            if not s:
                s = {
                    "employee_id": r.employee_id,
                    "employee_code": r.employee_code,
                    "full_name": r.full_name,
                    "days_worked": 0,
                    "regular_hours": 0.0,
                    "overtime_hours": 0.0,
                    "payable_hours": 0.0,
                }
                summary_map[r.employee_id] = s
            if r.check_out and r.total_hours is not None:
                s["days_worked"] += 1
            s["regular_hours"] += float(r.regular_hours or 0)
            s["overtime_hours"] += float(r.overtime_hours or 0)
            s["payable_hours"] += payable

        summary = []
        for s in summary_map.values():
            summary.append(
                {
                    **s,
                    "regular_hours": round_hours(s["regular_hours"]),
                    "overtime_hours": round_hours(s["overtime_hours"]),
                    "payable_hours": round_hours(s["payable_hours"]),
                }
            )

        summary.sort(key=lambda x: x["payable_hours"], reverse=True)
        return ReportData(rows=out_rows, summary=summary)
