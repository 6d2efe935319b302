from __future__ import annotations

import logging
from typing import Optional, Sequence

import mysql.connector

from ..core.exceptions import ConflictError
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone, is_duplicate_key
from .model import Employee, NewEmployee
from .repository import EmployeeRepository

logger = logging.getLogger(__name__)

_SELECT = """
    SELECT e.employee_id, e.user_id, e.employee_code, e.department, e.position, e.is_active,
           u.first_name, u.last_name, u.email
    FROM employees e
    JOIN users u ON u.user_id = e.user_id
"""


def _to_employee(r: dict) -> Employee:
    return Employee(
        employee_id=int(r["employee_id"]),
        user_id=int(r["user_id"]),
        employee_code=r["employee_code"],
        first_name=r["first_name"],
        last_name=r["last_name"],
        email=r["email"],
        department=r.get("department"),
        position=r.get("position"),
        is_active=bool(r.get("is_active", True)),
    )


class MySQLEmployeeRepository(EmployeeRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_by_id(self, employee_id: int) -> Optional[Employee]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(_SELECT + " WHERE e.employee_id=%s", (int(employee_id),))
            r = fetchone(cur)
            return _to_employee(r) if r else None

    def get_by_user_id(self, user_id: int) -> Optional[Employee]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(_SELECT + " WHERE e.user_id=%s", (int(user_id),))
            r = fetchone(cur)
            return _to_employee(r) if r else None

    def list_all(self, *, active_only: bool = True) -> Sequence[Employee]:
        where = " WHERE e.is_active=1" if active_only else ""
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(_SELECT + where + " ORDER BY e.employee_code")
            return [_to_employee(r) for r in fetchall(cur)]

    def get_by_code(self, employee_code: str) -> Optional[Employee]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(_SELECT + " WHERE e.employee_code=%s", (employee_code,))
            r = fetchone(cur)
            return _to_employee(r) if r else None

    def create(self, new: NewEmployee) -> Employee:
        try:
            with db_cursor(self._conn_factory) as (_, cur):
                cur.execute(
                    """
                    INSERT INTO employees(user_id, employee_code, department, position, is_active)
                    VALUES(%s,%s,%s,%s,1)
                    """,
                    (int(new.user_id), new.employee_code, new.department, new.position),
                )
                employee_id = int(cur.lastrowid)
        except mysql.connector.IntegrityError as e:
            if is_duplicate_key(e):
                logger.info("Duplicate employee profile user=%s code=%s", new.user_id, new.employee_code)
                raise ConflictError(
                    "Employee profile already exists", code="EMPLOYEE_ID_EXISTS", http_status=409
                )
            raise

        created = self.get_by_id(employee_id)
        if created is None:
            raise RuntimeError(f"Employee {employee_id} vanished after insert")
        return created

    def save(self, employee: Employee) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "UPDATE employees SET department=%s, position=%s, is_active=%s WHERE employee_id=%s",
                (employee.department, employee.position, int(employee.is_active), int(employee.employee_id)),
            )
            return cur.rowcount > 0
