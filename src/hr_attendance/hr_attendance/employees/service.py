from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from typing import Any, Optional, Sequence

from ..common.audit import log_user_action
from ..common.validators import optional_str, parse_bool, parse_int, require_non_empty
from ..core.exceptions import AuthorizationError, ConflictError, NotFoundError, ValidationError
from ..users.model import CurrentUser
from ..users.repository import UserRepository
from .model import Employee, NewEmployee
from .repository import EmployeeRepository

logger = logging.getLogger(__name__)

MAX_CODE_LEN = 32
MAX_LABEL_LEN = 100


def _body(data: Any) -> dict:
    if not isinstance(data, dict):
        raise ValidationError("Request body must be a JSON object")
    return data


@dataclass(frozen=True)
class EmployeeInput:
    user_id: int
    employee_code: str
    department: Optional[str] = None
    position: Optional[str] = None

    @classmethod
    def from_json(cls, data: Any) -> "EmployeeInput":
        data = _body(data)
        user_id = parse_int(data.get("userId"), "userId", minimum=1)
        if user_id is None:
            raise ValidationError('"userId" is required')
        code = require_non_empty(data.get("employeeCode"), "employeeCode")
        if len(code) > MAX_CODE_LEN:
            raise ValidationError(f'"employeeCode" must be at most {MAX_CODE_LEN} characters')
        return cls(
            user_id=user_id,
            employee_code=code,
            department=optional_str(data.get("department"), "department", max_len=MAX_LABEL_LEN),
            position=optional_str(data.get("position"), "position", max_len=MAX_LABEL_LEN),
        )


@dataclass(frozen=True)
class EmployeeUpdateInput:
    """``None`` leaves the stored value untouched."""

    department: Optional[str] = None
    position: Optional[str] = None
    is_active: Optional[bool] = None

    @classmethod
    def from_json(cls, data: Any) -> "EmployeeUpdateInput":
        data = _body(data)
        is_active = data.get("isActive")
        return cls(
            department=optional_str(data.get("department"), "department", max_len=MAX_LABEL_LEN),
            position=optional_str(data.get("position"), "position", max_len=MAX_LABEL_LEN),
            is_active=None if is_active is None else parse_bool(is_active, "isActive"),
        )

    @property
    def is_empty(self) -> bool:
        return self.department is None and self.position is None and self.is_active is None


@dataclass(frozen=True)
class EmployeeStats:
    total: int
    active: int
    inactive: int

    def to_dict(self) -> dict:
        return {
            "totalEmployees": self.total,
            "activeEmployees": self.active,
            "inactiveEmployees": self.inactive,
        }


class EmployeeService:
    """HR maintenance of employee profiles.

    Removal only clears the active flag; attendance and leave rows keep
    pointing at the profile.
    """

    def __init__(self, employees: EmployeeRepository, users: UserRepository):
        self._employees = employees
        self._users = users

    def _require_hr(self, current_user: CurrentUser) -> None:
        if not current_user.is_hr:
            raise AuthorizationError("HR access required", code="HR_ACCESS_REQUIRED")

    def _get_or_404(self, employee_id: int) -> Employee:
        employee = self._employees.get_by_id(employee_id)
        if employee is None:
            raise NotFoundError("Employee not found", code="EMPLOYEE_NOT_FOUND")
        return employee

    def get_employee(self, employee_id: int, *, current_user: CurrentUser) -> Employee:
        if not current_user.is_hr and current_user.employee_id != employee_id:
            raise AuthorizationError("You can only view your own profile", code="FORBIDDEN")
        return self._get_or_404(employee_id)

    def list_employees(self, *, current_user: CurrentUser, include_inactive: bool = False) -> Sequence[Employee]:
        self._require_hr(current_user)
        return self._employees.list_all(active_only=not include_inactive)

    def create_employee(self, data: EmployeeInput, *, current_user: CurrentUser) -> Employee:
        self._require_hr(current_user)

        if self._users.get_by_id(data.user_id) is None:
            raise NotFoundError("User not found", code="USER_NOT_FOUND")
        if self._employees.get_by_user_id(data.user_id) is not None:
            raise ConflictError("User already has an employee profile", code="EMPLOYEE_PROFILE_EXISTS")
        if self._employees.get_by_code(data.employee_code) is not None:
            raise ConflictError("Employee ID already exists", code="EMPLOYEE_ID_EXISTS")

        employee = self._employees.create(
            NewEmployee(
                user_id=data.user_id,
                employee_code=data.employee_code,
                department=data.department,
                position=data.position,
            )
        )
        log_user_action(current_user.user_id, "CREATE", "employee", employee.employee_id, code=employee.employee_code)
        return employee

    def update_employee(
        self,
        employee_id: int,
        data: EmployeeUpdateInput,
        *,
        current_user: CurrentUser,
    ) -> Employee:
        self._require_hr(current_user)
        if data.is_empty:
            raise ValidationError("No fields to update")

        existing = self._get_or_404(employee_id)
        updated = replace(
            existing,
            department=existing.department if data.department is None else data.department,
            position=existing.position if data.position is None else data.position,
            is_active=existing.is_active if data.is_active is None else data.is_active,
        )
        if not self._employees.save(updated):
            raise NotFoundError("Employee not found", code="EMPLOYEE_NOT_FOUND")

        log_user_action(current_user.user_id, "UPDATE", "employee", employee_id, active=updated.is_active)
        return self._get_or_404(employee_id)

    def deactivate_employee(self, employee_id: int, *, current_user: CurrentUser) -> Employee:
        self._require_hr(current_user)
        existing = self._get_or_404(employee_id)
        if not existing.is_active:
            return existing

        if not self._employees.save(replace(existing, is_active=False)):
            raise NotFoundError("Employee not found", code="EMPLOYEE_NOT_FOUND")

        logger.info("Employee %s deactivated by user=%s", employee_id, current_user.user_id)
        log_user_action(current_user.user_id, "DEACTIVATE", "employee", employee_id)
        return self._get_or_404(employee_id)

    def stats_overview(self, *, current_user: CurrentUser) -> EmployeeStats:
        self._require_hr(current_user)
        everyone = self._employees.list_all(active_only=False)
        active = sum(1 for e in everyone if e.is_active)
        return EmployeeStats(total=len(everyone), active=active, inactive=len(everyone) - active)
