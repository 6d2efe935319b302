from __future__ import annotations

from datetime import date, datetime
from typing import Optional, Protocol, Sequence

from ..core.enums import LeaveStatus
from .model import LeaveRequest, NewLeaveRequest


class LeaveRepository(Protocol):
    def create(self, new: NewLeaveRequest) -> LeaveRequest:
        raise NotImplementedError

    def get_by_id(self, request_id: int) -> Optional[LeaveRequest]:
        raise NotImplementedError

    def list_requests(
        self,
        *,
        employee_id: Optional[int] = None,
        status: Optional[LeaveStatus] = None,
        limit: int = 200,
    ) -> Sequence[LeaveRequest]:
        raise NotImplementedError

    def has_overlap(self, employee_id: int, start_date: date, end_date: date) -> bool:
        """True when a PENDING or APPROVED request intersects the given range."""

        raise NotImplementedError

    def transition(
        self,
        *,
        request_id: int,
        status: LeaveStatus,
        decided_by: Optional[int] = None,
        decided_at: Optional[datetime] = None,
        comments: Optional[str] = None,
    ) -> bool:
        """Move a PENDING request to ``status``; False when it is no longer pending."""

        raise NotImplementedError
