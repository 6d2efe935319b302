from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from .attendance.mysql_attendance_repository import MySQLAttendanceRepository
from .attendance.repository import AttendanceRepository
from .attendance.service import AttendanceService
from .common.datetime_utils import load_timezone
from .core.constants import DEFAULT_TOKEN_HOURS
from .database.connection import DBConfig, DatabaseConnection
from .employees.mysql_employee_repository import MySQLEmployeeRepository
from .employees.repository import EmployeeRepository
from .employees.service import EmployeeService
from .leave.mysql_leave_repository import MySQLLeaveRepository
from .leave.repository import LeaveRepository
from .leave.service import LeaveService
from .payroll.service import PayrollReportService
from .shifts.mysql_shift_repository import MySQLShiftRepository
from .shifts.repository import ShiftRepository
from .users.mysql_user_repository import MySQLUserRepository
from .users.repository import UserRepository
from .users.service import AuthService
from .users.tokens import TokenService


@dataclass(frozen=True)
class Container:
    conn: Optional[DatabaseConnection]

    users_repo: UserRepository
    employees_repo: EmployeeRepository
    shifts_repo: ShiftRepository
    attendance_repo: AttendanceRepository
    leave_repo: LeaveRepository

    auth_service: AuthService
    employee_service: EmployeeService
    attendance_service: AttendanceService
    leave_service: LeaveService
    payroll_report_service: PayrollReportService


def wire(
    *,
    users_repo: UserRepository,
    employees_repo: EmployeeRepository,
    shifts_repo: ShiftRepository,
    attendance_repo: AttendanceRepository,
    leave_repo: LeaveRepository,
    tokens: TokenService,
    timezone: Optional[str] = None,
    conn: Optional[DatabaseConnection] = None,
) -> Container:
    """Build services on top of the given repositories (MySQL or in-memory)."""
    tz = load_timezone(timezone)

    return Container(
        conn=conn,
        users_repo=users_repo,
        employees_repo=employees_repo,
        shifts_repo=shifts_repo,
        attendance_repo=attendance_repo,
        leave_repo=leave_repo,
        auth_service=AuthService(users_repo, employees_repo, tokens),
        employee_service=EmployeeService(employees_repo, users_repo),
        attendance_service=AttendanceService(attendance_repo, employees_repo, shifts_repo, tz=tz),
        leave_service=LeaveService(leave_repo, employees_repo, tz=tz),
        payroll_report_service=PayrollReportService(attendance_repo),
    )


def build_container(
    *,
    db_config: dict,
    jwt_secret: str,
    jwt_algorithm: str = "HS256",
    jwt_expires_hours: int = DEFAULT_TOKEN_HOURS,
    timezone: Optional[str] = None,
) -> Container:
    conn = DatabaseConnection(DBConfig.from_dict(db_config))

    return wire(
        users_repo=MySQLUserRepository(conn),
        employees_repo=MySQLEmployeeRepository(conn),
        shifts_repo=MySQLShiftRepository(conn),
        attendance_repo=MySQLAttendanceRepository(conn),
        leave_repo=MySQLLeaveRepository(conn),
        tokens=TokenService(jwt_secret, algorithm=jwt_algorithm, expires_hours=jwt_expires_hours),
        timezone=timezone,
        conn=conn,
    )
