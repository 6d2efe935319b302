from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from werkzeug.security import check_password_hash

from ..common.audit import log_user_action
from ..common.validators import require_non_empty
from ..core.exceptions import AuthenticationError
from ..employees.repository import EmployeeRepository
from .model import CurrentUser, User
from .repository import UserRepository
from .tokens import TokenService

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class LoginResult:
    token: str
    user: User
    employee_id: Optional[int]

    def to_dict(self) -> dict:
        return {
            "user": {
                "id": self.user.user_id,
                "email": self.user.email,
                "firstName": self.user.first_name,
                "lastName": self.user.last_name,
                "role": self.user.role.value,
                "employeeId": self.employee_id,
            },
            "token": self.token,
        }


class AuthService:
    """Use case: authenticate users and resolve bearer tokens."""

    def __init__(self, users: UserRepository, employees: EmployeeRepository, tokens: TokenService):
        self._users = users
        self._employees = employees
        self._tokens = tokens

    def authenticate(self, email: str, password: str) -> User:
        email = require_non_empty(email, "email").lower()
        if not password:
            raise AuthenticationError("Invalid credentials")

        user = self._users.get_by_email(email)
        if not user or not user.is_active:
            raise AuthenticationError("Invalid credentials")

        try:
            ok = check_password_hash(user.password_hash, password)
        except ValueError:
            # e.g. placeholder hashes like 'CHANGE_ME' or corrupted values
            ok = False

        if not ok:
            raise AuthenticationError("Invalid credentials")
        return user

    def login(self, email: str, password: str, *, now: datetime | None = None) -> LoginResult:
        user = self.authenticate(email, password)
        self._users.touch_last_login(user.user_id, at=now or datetime.now())

        employee = self._employees.get_by_user_id(user.user_id)
        log_user_action(user.user_id, "LOGIN", "user", user.user_id)
        return LoginResult(
            token=self._tokens.issue(user),
            user=user,
            employee_id=employee.employee_id if employee else None,
        )

    def resolve_token(self, token: str) -> CurrentUser:
        if not token:
            raise AuthenticationError("Access token required", code="MISSING_TOKEN")

        payload = self._tokens.decode(token)
        user = self._users.get_by_id(int(payload["userId"]))
        if not user or not user.is_active:
            raise AuthenticationError("Invalid token", code="INVALID_TOKEN")

        employee = self._employees.get_by_user_id(user.user_id)
        return CurrentUser(
            user_id=user.user_id,
            email=user.email,
            role=user.role,
            employee_id=employee.employee_id if employee else None,
        )

    def profile(self, current_user: CurrentUser) -> dict:
        user = self._users.get_by_id(current_user.user_id)
        if not user:
            raise AuthenticationError("Invalid token", code="INVALID_TOKEN")
        employee = self._employees.get_by_user_id(user.user_id)
        return {
            "id": user.user_id,
            "email": user.email,
            "firstName": user.first_name,
            "lastName": user.last_name,
            "role": user.role.value,
            "lastLoginAt": user.last_login_at.isoformat() if user.last_login_at else None,
            "employee": employee.to_dict() if employee else None,
        }
