from __future__ import annotations

from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class Employee:
    """Domain entity: employee profile linked to one login account."""

    employee_id: int
    user_id: int
    employee_code: str
    first_name: str
    last_name: str
    email: str
    department: Optional[str] = None
    position: Optional[str] = None
    is_active: bool = True

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}".strip()

    def to_dict(self) -> dict:
        return {
            "id": self.employee_id,
            "userId": self.user_id,
            "employeeCode": self.employee_code,
            "firstName": self.first_name,
            "lastName": self.last_name,
            "email": self.email,
            "department": self.department,
            "position": self.position,
            "isActive": self.is_active,
        }


@dataclass(frozen=True)
class NewEmployee:
    user_id: int
    employee_code: str
    department: Optional[str] = None
    position: Optional[str] = None
