from __future__ import annotations

from dataclasses import replace
from datetime import date, datetime, time
from typing import Optional

import pytest
from werkzeug.security import generate_password_hash

from src.hr_attendance.hr_attendance.attendance.model import AttendanceRecord, AttendanceReportRow, NewAttendance, Page
from src.hr_attendance.hr_attendance.container import wire
from src.hr_attendance.hr_attendance.core.enums import AttendanceStatus, LeaveStatus, Role
from src.hr_attendance.hr_attendance.core.exceptions import ConflictError
from src.hr_attendance.hr_attendance.employees.model import Employee, NewEmployee
from src.hr_attendance.hr_attendance.leave.model import LeaveRequest, NewLeaveRequest
from src.hr_attendance.hr_attendance.shifts.model import Shift
from src.hr_attendance.hr_attendance.users.model import CurrentUser, User
from src.hr_attendance.hr_attendance.users.tokens import TokenService

PASSWORD = "secret123"
JWT_SECRET = "test-jwt-secret"


class InMemoryUsers:
    def __init__(self, users: list[User]):
        self.users_by_id = {u.user_id: u for u in users}

    def get_by_id(self, user_id: int) -> Optional[User]:
        return self.users_by_id.get(int(user_id))

    def get_by_email(self, email: str) -> Optional[User]:
        return next((u for u in self.users_by_id.values() if u.email == email), None)

    def touch_last_login(self, user_id: int, *, at: datetime) -> None:
        self.users_by_id[user_id] = replace(self.users_by_id[user_id], last_login_at=at)


class InMemoryEmployees:
    def __init__(self, employees: list[Employee], users: InMemoryUsers):
        self.by_id = {e.employee_id: e for e in employees}
        self.users = users

    def get_by_id(self, employee_id: int) -> Optional[Employee]:
        return self.by_id.get(int(employee_id))

    def get_by_user_id(self, user_id: int) -> Optional[Employee]:
        return next((e for e in self.by_id.values() if e.user_id == user_id), None)

    def get_by_code(self, employee_code: str) -> Optional[Employee]:
        return next((e for e in self.by_id.values() if e.employee_code == employee_code), None)

    def create(self, new: NewEmployee) -> Employee:
        if self.get_by_user_id(new.user_id) or self.get_by_code(new.employee_code):
            raise ConflictError("Employee profile already exists", code="EMPLOYEE_ID_EXISTS", http_status=409)
        user = self.users.get_by_id(new.user_id)
        employee = Employee(
            employee_id=max(self.by_id, default=0) + 10,
            user_id=new.user_id,
            employee_code=new.employee_code,
            first_name=user.first_name,
            last_name=user.last_name,
            email=user.email,
            department=new.department,
            position=new.position,
        )
        self.by_id[employee.employee_id] = employee
        return employee

    def save(self, employee: Employee) -> bool:
        if employee.employee_id not in self.by_id:
            return False
        self.by_id[employee.employee_id] = employee
        return True

    def list_all(self, *, active_only: bool = True):
        return [e for e in self.by_id.values() if e.is_active or not active_only]


class InMemoryShifts:
    def __init__(self, shifts: list[Shift]):
        self.by_id = {s.shift_id: s for s in shifts}

    def get_by_id(self, shift_id: int) -> Optional[Shift]:
        return self.by_id.get(int(shift_id))

    def list_all(self, *, active_only: bool = True):
        return [s for s in self.by_id.values() if s.is_active or not active_only]


class InMemoryAttendance:
    def __init__(self, employees: InMemoryEmployees):
        self._employees = employees
        self.by_id: dict[int, AttendanceRecord] = {}
        self._id = 0

    def get_by_id(self, attendance_id: int) -> Optional[AttendanceRecord]:
        return self.by_id.get(int(attendance_id))

    def get_for_employee_and_date(self, employee_id: int, work_date: date) -> Optional[AttendanceRecord]:
        return next(
            (r for r in self.by_id.values() if r.employee_id == employee_id and r.work_date == work_date),
            None,
        )

    def create(self, new: NewAttendance) -> AttendanceRecord:
        if self.get_for_employee_and_date(new.employee_id, new.work_date):
            raise ConflictError("Attendance already marked for this date", code="ATTENDANCE_EXISTS", http_status=409)
        self._id += 1
        rec = AttendanceRecord(
            attendance_id=self._id,
            employee_id=new.employee_id,
            work_date=new.work_date,
            check_in=new.check_in,
            check_out=new.check_out,
            status=new.status,
            notes=new.notes,
            shift_id=new.shift_id,
            is_remote=new.is_remote,
            check_in_selfie=new.check_in_selfie,
            check_out_selfie=new.check_out_selfie,
            check_in_location=new.check_in_location,
            check_out_location=new.check_out_location,
            device_info=new.device_info,
            ip_address=new.ip_address,
            created_by=new.created_by,
        ).with_hours(new.hours)
        self.by_id[rec.attendance_id] = rec
        return rec

    def save(self, record: AttendanceRecord) -> bool:
        if record.attendance_id not in self.by_id:
            return False
        self.by_id[record.attendance_id] = record
        return True

    def delete(self, attendance_id: int) -> bool:
        return self.by_id.pop(int(attendance_id), None) is not None

    def _filtered(self, *, employee_id=None, start_date=None, end_date=None, status=None):
        items = list(self.by_id.values())
        if employee_id is not None:
            items = [r for r in items if r.employee_id == employee_id]
        if start_date is not None and end_date is not None:
            items = [r for r in items if start_date <= r.work_date <= end_date]
        if status is not None:
            items = [r for r in items if r.status == status]
        items.sort(key=lambda r: (r.work_date, r.attendance_id), reverse=True)
        return items

    def list(self, query) -> Page:
        items = self._filtered(
            employee_id=query.employee_id,
            start_date=query.start_date,
            end_date=query.end_date,
            status=query.status,
        )
        return Page(
            items=items[query.offset : query.offset + query.limit],
            page=query.page,
            limit=query.limit,
            total=len(items),
        )

    def status_counts(self, *, start_date, end_date):
        counts: dict[AttendanceStatus, int] = {}
        for r in self._filtered(start_date=start_date, end_date=end_date):
            counts[r.status] = counts.get(r.status, 0) + 1
        return counts

    def get_report_rows(self, *, start_date, end_date, employee_id=None):
        rows = []
        for r in self._filtered(employee_id=employee_id, start_date=start_date, end_date=end_date):
            e = self._employees.get_by_id(r.employee_id)
            rows.append(
                AttendanceReportRow(
                    employee_id=r.employee_id,
                    employee_code=e.employee_code,
                    full_name=e.full_name,
                    department=e.department,
                    work_date=r.work_date,
                    check_in=r.check_in,
                    check_out=r.check_out,
                    status=r.status,
                    total_hours=r.total_hours,
                    regular_hours=r.regular_hours,
                    overtime_hours=r.overtime_hours,
                    break_hours=r.break_hours,
                )
            )
        return rows


class InMemoryLeaves:
    def __init__(self):
        self.by_id: dict[int, LeaveRequest] = {}
        self._id = 0

    def create(self, new: NewLeaveRequest) -> LeaveRequest:
        self._id += 1
        leave = LeaveRequest(
            request_id=self._id,
            employee_id=new.employee_id,
            leave_type=new.leave_type,
            start_date=new.start_date,
            end_date=new.end_date,
            days=new.days,
            reason=new.reason,
            status=LeaveStatus.PENDING,
        )
        self.by_id[leave.request_id] = leave
        return leave

    def get_by_id(self, request_id: int) -> Optional[LeaveRequest]:
        return self.by_id.get(int(request_id))

    def list_requests(self, *, employee_id=None, status=None, limit: int = 200):
        items = [
            x
            for x in self.by_id.values()
            if (employee_id is None or x.employee_id == employee_id) and (status is None or x.status == status)
        ]
        return sorted(items, key=lambda x: x.request_id, reverse=True)[:limit]

    def has_overlap(self, employee_id: int, start_date: date, end_date: date) -> bool:
        return any(
            x.employee_id == employee_id
            and x.status in {LeaveStatus.PENDING, LeaveStatus.APPROVED}
            and x.start_date <= end_date
            and x.end_date >= start_date
            for x in self.by_id.values()
        )

    def transition(self, *, request_id, status, decided_by=None, decided_at=None, comments=None) -> bool:
        leave = self.by_id.get(int(request_id))
        if leave is None or leave.status != LeaveStatus.PENDING:
            return False
        self.by_id[request_id] = replace(
            leave,
            status=status,
            decided_by=decided_by,
            decided_at=decided_at,
            comments=comments if comments is not None else leave.comments,
        )
        return True


@pytest.fixture
def fixed_now() -> datetime:
    return datetime(2025, 3, 10, 8, 30, 0)


@pytest.fixture(scope="session")
def password_hash() -> str:
    return generate_password_hash(PASSWORD)


@pytest.fixture
def users(password_hash) -> InMemoryUsers:
    return InMemoryUsers(
        [
            User(1, "hr@company.local", "Hannah", "Reyes", password_hash, Role.HR_MANAGER),
            User(2, "employee@company.local", "Elena", "Park", password_hash, Role.EMPLOYEE),
            User(3, "other@company.local", "Omar", "Khan", password_hash, Role.EMPLOYEE),
            User(4, "gone@company.local", "Gina", "Lopez", password_hash, Role.EMPLOYEE, is_active=False),
        ]
    )


@pytest.fixture
def employees(users) -> InMemoryEmployees:
    return InMemoryEmployees(
        [
            Employee(10, 1, "EMP-0010", "Hannah", "Reyes", "hr@company.local", "Human Resources", "HR Manager"),
            Employee(20, 2, "EMP-0020", "Elena", "Park", "employee@company.local", "Engineering", "Developer"),
            Employee(30, 3, "EMP-0030", "Omar", "Khan", "other@company.local", "Engineering", "Developer"),
        ],
        users,
    )


@pytest.fixture
def shifts() -> InMemoryShifts:
    return InMemoryShifts([Shift(shift_id=1, shift_name="General", start_time=time(9, 0), end_time=time(18, 0))])


@pytest.fixture
def attendance_repo(employees) -> InMemoryAttendance:
    return InMemoryAttendance(employees)


@pytest.fixture
def leave_repo() -> InMemoryLeaves:
    return InMemoryLeaves()


@pytest.fixture
def tokens() -> TokenService:
    return TokenService(JWT_SECRET, expires_hours=1)


@pytest.fixture
def container(users, employees, shifts, attendance_repo, leave_repo, tokens):
    return wire(
        users_repo=users,
        employees_repo=employees,
        shifts_repo=shifts,
        attendance_repo=attendance_repo,
        leave_repo=leave_repo,
        tokens=tokens,
    )


@pytest.fixture
def hr_user() -> CurrentUser:
    return CurrentUser(user_id=1, email="hr@company.local", role=Role.HR_MANAGER, employee_id=10)


@pytest.fixture
def employee_user() -> CurrentUser:
    return CurrentUser(user_id=2, email="employee@company.local", role=Role.EMPLOYEE, employee_id=20)


@pytest.fixture
def other_user() -> CurrentUser:
    return CurrentUser(user_id=3, email="other@company.local", role=Role.EMPLOYEE, employee_id=30)


@pytest.fixture
def app(monkeypatch, container):
    monkeypatch.setenv("APP_ENV", "testing")
    from src.hr_attendance.hr_attendance.main import create_app

    return create_app(container)


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def auth_headers(users, tokens):
    def _headers(user_id: int) -> dict:
        return {"Authorization": f"Bearer {tokens.issue(users.get_by_id(user_id))}"}

    return _headers
