from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from ..core.enums import HR_ROLES, Role


@dataclass(frozen=True)
class User:
    """Domain entity: login account.

    Note: Plain data object (no DB access code).
    """

    user_id: int
    email: str
    first_name: str
    last_name: str
    password_hash: str
    role: Role
    is_active: bool = True
    last_login_at: Optional[datetime] = None

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}".strip()


@dataclass(frozen=True)
class CurrentUser:
    """Identity resolved from a bearer token, passed explicitly to services."""

    user_id: int
    email: str
    role: Role
    employee_id: Optional[int] = None

    @property
    def is_hr(self) -> bool:
        return self.role in HR_ROLES
