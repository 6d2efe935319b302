from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date, datetime, tzinfo
from typing import Any, Optional, Sequence

from ..common.audit import log_user_action
from ..common.datetime_utils import now_local
from ..common.validators import optional_str, parse_date, parse_enum, parse_int, require_non_empty
from ..core.enums import LeaveStatus, LeaveType
from ..core.exceptions import AuthorizationError, ConflictError, NotFoundError, ValidationError
from ..employees.repository import EmployeeRepository
from ..users.model import CurrentUser
from .model import LeaveRequest, NewLeaveRequest
from .repository import LeaveRepository

logger = logging.getLogger(__name__)

DECISION_STATUSES = frozenset({LeaveStatus.APPROVED, LeaveStatus.REJECTED})


def inclusive_days(start: date, end: date) -> int:
    return (end - start).days + 1


@dataclass(frozen=True)
class LeaveRequestInput:
    leave_type: LeaveType
    start_date: date
    end_date: date
    reason: str
    employee_id: Optional[int] = None

    @classmethod
    def from_json(cls, data: Any) -> "LeaveRequestInput":
        if not isinstance(data, dict):
            raise ValidationError("Request body must be a JSON object")

        leave_type = parse_enum(data.get("leaveType"), LeaveType, "leaveType")
        if leave_type is None:
            raise ValidationError('"leaveType" is required')
        start = parse_date(data.get("startDate"), "startDate")
        if start is None:
            raise ValidationError('"startDate" is required')
        end = parse_date(data.get("endDate"), "endDate")
        if end is None:
            raise ValidationError('"endDate" is required')

        return cls(
            leave_type=leave_type,
            start_date=start,
            end_date=end,
            reason=require_non_empty(data.get("reason"), "reason"),
            employee_id=parse_int(data.get("employeeId"), "employeeId", minimum=1),
        )


@dataclass(frozen=True)
class LeaveDecisionInput:
    status: LeaveStatus
    comments: Optional[str] = None

    @classmethod
    def from_json(cls, data: Any) -> "LeaveDecisionInput":
        if not isinstance(data, dict):
            raise ValidationError("Request body must be a JSON object")
        status = parse_enum(data.get("status"), LeaveStatus, "status")
        if status not in DECISION_STATUSES:
            raise ValidationError('"status" must be one of [APPROVED, REJECTED]')
        return cls(status=status, comments=optional_str(data.get("comments"), "comments"))


class LeaveService:
    def __init__(self, leaves: LeaveRepository, employees: EmployeeRepository, *, tz: Optional[tzinfo] = None):
        self._leaves = leaves
        self._employees = employees
        self._tz = tz

    def _get_or_404(self, request_id: int) -> LeaveRequest:
        leave = self._leaves.get_by_id(request_id)
        if leave is None:
            raise NotFoundError("Leave request not found", code="LEAVE_REQUEST_NOT_FOUND")
        return leave

    def _can_see(self, current_user: CurrentUser, leave: LeaveRequest) -> bool:
        return current_user.is_hr or current_user.employee_id == leave.employee_id

    def create_request(self, data: LeaveRequestInput, *, current_user: CurrentUser) -> LeaveRequest:
        employee_id = data.employee_id or current_user.employee_id
        if employee_id is None:
            raise NotFoundError("Employee profile not found", code="EMPLOYEE_NOT_FOUND")
        if not current_user.is_hr and employee_id != current_user.employee_id:
            raise AuthorizationError("You can only request leave for yourself", code="FORBIDDEN")
        if self._employees.get_by_id(employee_id) is None:
            raise NotFoundError("Employee not found", code="EMPLOYEE_NOT_FOUND")

        if data.end_date < data.start_date:
            raise ValidationError('"endDate" must be on or after "startDate"')

        if self._leaves.has_overlap(employee_id, data.start_date, data.end_date):
            raise ConflictError("You already have a leave request for this period", code="OVERLAPPING_LEAVE")

        leave = self._leaves.create(
            NewLeaveRequest(
                employee_id=employee_id,
                leave_type=data.leave_type,
                start_date=data.start_date,
                end_date=data.end_date,
                days=inclusive_days(data.start_date, data.end_date),
                reason=data.reason,
            )
        )
        log_user_action(current_user.user_id, "CREATE", "leave_request", leave.request_id, days=leave.days)
        return leave

    def get_request(self, request_id: int, *, current_user: CurrentUser) -> LeaveRequest:
        leave = self._get_or_404(request_id)
        if not self._can_see(current_user, leave):
            raise AuthorizationError("You can only access your own leave requests", code="FORBIDDEN")
        return leave

    def list_requests(
        self,
        *,
        current_user: CurrentUser,
        employee_id: Optional[int] = None,
        status: Optional[LeaveStatus] = None,
    ) -> Sequence[LeaveRequest]:
        if not current_user.is_hr:
            if current_user.employee_id is None:
                return []
            employee_id = current_user.employee_id
        return self._leaves.list_requests(employee_id=employee_id, status=status)

    def decide(
        self,
        request_id: int,
        data: LeaveDecisionInput,
        *,
        current_user: CurrentUser,
        now: Optional[datetime] = None,
    ) -> LeaveRequest:
        if not current_user.is_hr:
            raise AuthorizationError("HR access required", code="HR_ACCESS_REQUIRED")

        leave = self._get_or_404(request_id)
        if leave.status != LeaveStatus.PENDING:
            raise ConflictError("Leave request has already been processed", code="LEAVE_NOT_PENDING")

        moved = self._leaves.transition(
            request_id=request_id,
            status=data.status,
            decided_by=current_user.user_id,
            decided_at=now or now_local(self._tz),
            comments=(data.comments or "").strip() or None,
        )
        if not moved:
            raise ConflictError("Leave request has already been processed", code="LEAVE_NOT_PENDING")

        log_user_action(current_user.user_id, data.status.value, "leave_request", request_id)
        return self._get_or_404(request_id)

    def cancel(self, request_id: int, *, current_user: CurrentUser) -> LeaveRequest:
        leave = self._get_or_404(request_id)
        if current_user.employee_id != leave.employee_id:
            raise AuthorizationError("You can only cancel your own leave requests", code="FORBIDDEN")
        if leave.status != LeaveStatus.PENDING:
            raise ConflictError("Only pending leave requests can be cancelled", code="LEAVE_NOT_PENDING")

        if not self._leaves.transition(request_id=request_id, status=LeaveStatus.CANCELLED):
            raise ConflictError("Only pending leave requests can be cancelled", code="LEAVE_NOT_PENDING")

        log_user_action(current_user.user_id, "CANCEL", "leave_request", request_id)
        return self._get_or_404(request_id)
