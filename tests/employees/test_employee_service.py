from __future__ import annotations

from datetime import date

import pytest

from src.hr_attendance.hr_attendance.attendance.schemas import MarkAttendanceInput
from src.hr_attendance.hr_attendance.core.enums import AttendanceStatus
from src.hr_attendance.hr_attendance.core.exceptions import (
    AuthorizationError,
    ConflictError,
    NotFoundError,
    ValidationError,
)
from src.hr_attendance.hr_attendance.employees import service as employee_service
from src.hr_attendance.hr_attendance.employees.service import EmployeeInput, EmployeeUpdateInput

HR = 1
EMPLOYEE = 2


@pytest.fixture
def service(container):
    return container.employee_service


def test_create_profile_for_existing_user(service, hr_user, monkeypatch):
    actions = []
    monkeypatch.setattr(employee_service, "log_user_action", lambda *args, **kw: actions.append(args))

    employee = service.create_employee(
        EmployeeInput(user_id=4, employee_code="EMP-0040", department="Sales"),
        current_user=hr_user,
    )

    assert employee.user_id == 4
    assert employee.full_name == "Gina Lopez"
    assert employee.department == "Sales"
    assert employee.is_active
    assert actions == [(1, "CREATE", "employee", employee.employee_id)]


def test_create_rejects_duplicates_and_unknown_users(service, hr_user):
    with pytest.raises(NotFoundError) as exc:
        service.create_employee(EmployeeInput(user_id=99, employee_code="EMP-0099"), current_user=hr_user)
    assert exc.value.code == "USER_NOT_FOUND"

    with pytest.raises(ConflictError) as exc:
        service.create_employee(EmployeeInput(user_id=2, employee_code="EMP-9999"), current_user=hr_user)
    assert exc.value.code == "EMPLOYEE_PROFILE_EXISTS"

    with pytest.raises(ConflictError) as exc:
        service.create_employee(EmployeeInput(user_id=4, employee_code="EMP-0020"), current_user=hr_user)
    assert exc.value.code == "EMPLOYEE_ID_EXISTS"


def test_maintenance_requires_hr(service, employee_user):
    with pytest.raises(AuthorizationError):
        service.create_employee(EmployeeInput(user_id=4, employee_code="EMP-0040"), current_user=employee_user)
    with pytest.raises(AuthorizationError):
        service.deactivate_employee(30, current_user=employee_user)


def test_update_changes_only_given_fields(service, hr_user):
    employee = service.update_employee(20, EmployeeUpdateInput(position="Lead Developer"), current_user=hr_user)
    assert employee.position == "Lead Developer"
    assert employee.department == "Engineering"

    with pytest.raises(ValidationError):
        service.update_employee(20, EmployeeUpdateInput(), current_user=hr_user)
    with pytest.raises(NotFoundError):
        service.update_employee(999, EmployeeUpdateInput(position="x"), current_user=hr_user)


def test_deactivate_keeps_attendance_history(service, container, hr_user, attendance_repo):
    record = container.attendance_service.mark_attendance(
        MarkAttendanceInput(employee_id=30, work_date=date(2025, 3, 10), status=AttendanceStatus.ABSENT),
        current_user=hr_user,
    ).record

    employee = service.deactivate_employee(30, current_user=hr_user)
    assert not employee.is_active
    assert service.deactivate_employee(30, current_user=hr_user).is_active is False
    assert attendance_repo.get_by_id(record.attendance_id) is not None

    assert [e.employee_id for e in service.list_employees(current_user=hr_user)] == [10, 20]
    stats = service.stats_overview(current_user=hr_user)
    assert (stats.total, stats.active, stats.inactive) == (3, 2, 1)


def test_employee_sees_only_own_profile(service, employee_user):
    assert service.get_employee(20, current_user=employee_user).employee_code == "EMP-0020"
    with pytest.raises(AuthorizationError):
        service.get_employee(30, current_user=employee_user)


def test_input_parsing():
    data = EmployeeInput.from_json({"userId": "4", "employeeCode": " EMP-0040 ", "position": "Analyst"})
    assert (data.user_id, data.employee_code, data.position) == (4, "EMP-0040", "Analyst")

    with pytest.raises(ValidationError):
        EmployeeInput.from_json({"employeeCode": "EMP-0040"})
    with pytest.raises(ValidationError):
        EmployeeUpdateInput.from_json({"isActive": "no"})


def test_employee_endpoints(client, auth_headers):
    resp = client.post(
        "/api/employees",
        json={"userId": 4, "employeeCode": "EMP-0040", "department": "Sales"},
        headers=auth_headers(HR),
    )
    assert resp.status_code == 201
    employee_id = resp.get_json()["data"]["employee"]["id"]

    resp = client.put(f"/api/employees/{employee_id}", json={"position": "Account Manager"}, headers=auth_headers(HR))
    assert resp.status_code == 200
    assert resp.get_json()["data"]["employee"]["position"] == "Account Manager"

    resp = client.delete(f"/api/employees/{employee_id}", headers=auth_headers(HR))
    assert resp.status_code == 200
    assert resp.get_json()["data"]["employee"]["isActive"] is False

    resp = client.get("/api/employees/stats/overview", headers=auth_headers(HR))
    assert resp.get_json()["data"] == {"totalEmployees": 4, "activeEmployees": 3, "inactiveEmployees": 1}

    assert client.post("/api/employees", json={}, headers=auth_headers(EMPLOYEE)).status_code == 403
    assert client.get("/api/employees/30", headers=auth_headers(EMPLOYEE)).status_code == 403
    assert client.get("/api/employees/20", headers=auth_headers(EMPLOYEE)).status_code == 200
