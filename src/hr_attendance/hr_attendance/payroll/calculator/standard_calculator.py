from __future__ import annotations

from .base import PayrollCalculator
from ...attendance.model import AttendanceReportRow
from ...core.constants import OVERTIME_PAY_MULTIPLIER


class StandardPayrollCalculator(PayrollCalculator):
    """Standard rule: regular + overtime * multiplier; open records pay nothing."""

    def __init__(self, overtime_multiplier: float = OVERTIME_PAY_MULTIPLIER):
        self._overtime_multiplier = float(overtime_multiplier)

    def payable_hours(self, row: AttendanceReportRow) -> float:
        if not row.check_out or row.total_hours is None:
            return 0.0
        regular = float(row.regular_hours or 0)
        overtime = float(row.overtime_hours or 0)
        return max(regular, 0.0) + overtime * self._overtime_multiplier
