from __future__ import annotations

from typing import Optional, Protocol, Sequence

from .model import Employee, NewEmployee


class EmployeeRepository(Protocol):
    def get_by_id(self, employee_id: int) -> Optional[Employee]:
        raise NotImplementedError

    def get_by_user_id(self, user_id: int) -> Optional[Employee]:
        raise NotImplementedError

    def get_by_code(self, employee_code: str) -> Optional[Employee]:
        raise NotImplementedError

    def list_all(self, *, active_only: bool = True) -> Sequence[Employee]:
        raise NotImplementedError

    def create(self, new: NewEmployee) -> Employee:
        """Insert a profile; a duplicate user or code raises ``ConflictError``."""
        raise NotImplementedError

    def save(self, employee: Employee) -> bool:
        """Persist department, position and the active flag."""
        raise NotImplementedError
