from __future__ import annotations

from datetime import date

import pytest

from src.hr_attendance.hr_attendance.core.enums import LeaveStatus, LeaveType
from src.hr_attendance.hr_attendance.core.exceptions import AuthorizationError, ConflictError, ValidationError
from src.hr_attendance.hr_attendance.leave.service import LeaveDecisionInput, LeaveRequestInput


@pytest.fixture
def service(container):
    return container.leave_service


def request_for(start: date, end: date, **kwargs) -> LeaveRequestInput:
    return LeaveRequestInput(leave_type=LeaveType.VACATION, start_date=start, end_date=end, reason="Trip", **kwargs)


def test_create_counts_days_inclusively(service, employee_user):
    leave = service.create_request(request_for(date(2025, 4, 1), date(2025, 4, 3)), current_user=employee_user)
    assert leave.days == 3
    assert leave.employee_id == 20
    assert leave.status == LeaveStatus.PENDING


def test_single_day_leave(service, employee_user):
    leave = service.create_request(request_for(date(2025, 4, 1), date(2025, 4, 1)), current_user=employee_user)
    assert leave.days == 1


def test_end_before_start(service, employee_user):
    with pytest.raises(ValidationError):
        service.create_request(request_for(date(2025, 4, 3), date(2025, 4, 1)), current_user=employee_user)


def test_overlap_with_pending_request(service, employee_user):
    service.create_request(request_for(date(2025, 4, 1), date(2025, 4, 5)), current_user=employee_user)

    with pytest.raises(ConflictError) as exc:
        service.create_request(request_for(date(2025, 4, 5), date(2025, 4, 8)), current_user=employee_user)
    assert exc.value.code == "OVERLAPPING_LEAVE"


def test_cancelled_request_does_not_block(service, employee_user):
    leave = service.create_request(request_for(date(2025, 4, 1), date(2025, 4, 5)), current_user=employee_user)
    service.cancel(leave.request_id, current_user=employee_user)

    again = service.create_request(request_for(date(2025, 4, 2), date(2025, 4, 3)), current_user=employee_user)
    assert again.days == 2


def test_employee_cannot_file_for_others(service, employee_user):
    with pytest.raises(AuthorizationError):
        service.create_request(
            request_for(date(2025, 4, 1), date(2025, 4, 1), employee_id=30), current_user=employee_user
        )


def test_hr_decides_pending_only(service, employee_user, hr_user):
    leave = service.create_request(request_for(date(2025, 4, 1), date(2025, 4, 2)), current_user=employee_user)

    decided = service.decide(
        leave.request_id,
        LeaveDecisionInput(status=LeaveStatus.APPROVED, comments="Enjoy"),
        current_user=hr_user,
    )
    assert decided.status == LeaveStatus.APPROVED
    assert decided.decided_by == hr_user.user_id
    assert decided.comments == "Enjoy"

    with pytest.raises(ConflictError):
        service.decide(leave.request_id, LeaveDecisionInput(status=LeaveStatus.REJECTED), current_user=hr_user)
    with pytest.raises(ConflictError):
        service.cancel(leave.request_id, current_user=employee_user)


def test_decide_requires_hr(service, employee_user):
    leave = service.create_request(request_for(date(2025, 4, 1), date(2025, 4, 2)), current_user=employee_user)
    with pytest.raises(AuthorizationError):
        service.decide(leave.request_id, LeaveDecisionInput(status=LeaveStatus.APPROVED), current_user=employee_user)


def test_only_owner_cancels(service, employee_user, other_user):
    leave = service.create_request(request_for(date(2025, 4, 1), date(2025, 4, 2)), current_user=employee_user)
    with pytest.raises(AuthorizationError):
        service.cancel(leave.request_id, current_user=other_user)


def test_list_is_scoped(service, employee_user, other_user, hr_user):
    service.create_request(request_for(date(2025, 4, 1), date(2025, 4, 2)), current_user=employee_user)
    service.create_request(request_for(date(2025, 4, 1), date(2025, 4, 2)), current_user=other_user)

    assert len(service.list_requests(current_user=hr_user)) == 2
    mine = service.list_requests(current_user=employee_user, employee_id=30)
    assert [x.employee_id for x in mine] == [20]


def test_decision_input_rejects_non_decision_status():
    with pytest.raises(ValidationError):
        LeaveDecisionInput.from_json({"status": "CANCELLED"})
    with pytest.raises(ValidationError):
        LeaveDecisionInput.from_json({})


def test_leave_endpoints(client, auth_headers):
    resp = client.post(
        "/api/leave/request",
        json={"leaveType": "SICK_LEAVE", "startDate": "2025-04-01", "endDate": "2025-04-02", "reason": "Flu"},
        headers=auth_headers(2),
    )
    assert resp.status_code == 201
    leave_id = resp.get_json()["data"]["leaveRequest"]["id"]

    resp = client.put(f"/api/leave/{leave_id}/status", json={"status": "APPROVED"}, headers=auth_headers(2))
    assert resp.status_code == 403

    resp = client.put(f"/api/leave/{leave_id}/status", json={"status": "REJECTED"}, headers=auth_headers(1))
    assert resp.status_code == 200
    assert resp.get_json()["message"] == "Leave request rejected successfully"

    resp = client.get("/api/leave", headers=auth_headers(2))
    assert [x["status"] for x in resp.get_json()["data"]["leaveRequests"]] == ["REJECTED"]
