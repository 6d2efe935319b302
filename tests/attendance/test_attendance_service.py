from __future__ import annotations

from datetime import date, datetime

import pytest

from src.hr_attendance.hr_attendance.attendance.model import GeoLocation
from src.hr_attendance.hr_attendance.attendance.schemas import (
    AttendanceQuery,
    MarkAttendanceInput,
    SelfCheckInInput,
    SelfCheckOutInput,
    UpdateAttendanceInput,
)
from src.hr_attendance.hr_attendance.core.enums import AttendanceStatus
from src.hr_attendance.hr_attendance.core.exceptions import (
    AuthorizationError,
    ConflictError,
    NotFoundError,
    ValidationError,
)

DAY = date(2025, 3, 10)
OFFICE = GeoLocation(latitude=10.77, longitude=106.7, address="HQ")


def at(hour: int, minute: int = 0) -> datetime:
    return datetime(2025, 3, 10, hour, minute)


@pytest.fixture
def service(container):
    return container.attendance_service


def mark(employee_id=20, status=AttendanceStatus.PRESENT, **kwargs) -> MarkAttendanceInput:
    return MarkAttendanceInput(employee_id=employee_id, work_date=DAY, status=status, **kwargs)


def check_in_input(**kwargs) -> SelfCheckInInput:
    return SelfCheckInInput(check_in_selfie="selfie-in", check_in_location=OFFICE, **kwargs)


def check_out_input(**kwargs) -> SelfCheckOutInput:
    return SelfCheckOutInput(check_out_selfie="selfie-out", check_out_location=OFFICE, **kwargs)


# ----- mark -----


def test_mark_full_day_computes_hours(service, hr_user):
    result = service.mark_attendance(mark(check_in=at(9), check_out=at(18)), current_user=hr_user)

    assert result.created
    rec = result.record
    assert rec.status == AttendanceStatus.PRESENT
    assert (rec.total_hours, rec.regular_hours, rec.overtime_hours, rec.break_hours) == (9.0, 8.0, 0.0, 1.0)
    assert rec.created_by == hr_user.user_id


def test_mark_late_morning_check_in_becomes_half_day(service, hr_user):
    result = service.mark_attendance(mark(check_in=at(12, 30)), current_user=hr_user)
    assert result.record.status == AttendanceStatus.HALF_DAY
    assert result.record.total_hours is None


def test_mark_with_manual_overtime(service, hr_user):
    rec = service.mark_attendance(
        mark(check_in=at(8), check_out=at(19), manual_overtime_hours=3), current_user=hr_user
    ).record
    assert rec.overtime_hours == 3.0
    assert rec.regular_hours == 7.0


def test_mark_adds_check_out_to_open_record(service, hr_user, attendance_repo):
    first = service.mark_attendance(mark(check_in=at(8)), current_user=hr_user)
    second = service.mark_attendance(mark(check_out=at(19)), current_user=hr_user)

    assert not second.created
    assert second.record.attendance_id == first.record.attendance_id
    assert second.record.check_in == at(8)
    assert second.record.overtime_hours == 2.0

    stored = attendance_repo.get_by_id(first.record.attendance_id)
    assert stored.check_out == at(19)
    assert stored.total_hours == 11.0


def test_mark_adds_check_in_when_check_out_came_first(service, hr_user):
    service.mark_attendance(mark(check_out=at(17)), current_user=hr_user)
    rec = service.mark_attendance(mark(check_in=at(12)), current_user=hr_user).record

    assert rec.status == AttendanceStatus.HALF_DAY
    assert rec.total_hours == 5.0
    assert rec.break_hours == 0.0


def test_mark_twice_without_new_timestamps_conflicts(service, hr_user):
    service.mark_attendance(mark(check_in=at(9), check_out=at(18)), current_user=hr_user)

    with pytest.raises(ConflictError) as exc:
        service.mark_attendance(mark(check_in=at(9), check_out=at(18)), current_user=hr_user)
    assert exc.value.code == "ATTENDANCE_EXISTS"
    assert exc.value.http_status == 400


def test_mark_rejects_check_out_before_check_in(service, hr_user):
    with pytest.raises(ValidationError):
        service.mark_attendance(mark(check_in=at(18), check_out=at(9)), current_user=hr_user)


def test_mark_unknown_employee(service, hr_user):
    with pytest.raises(NotFoundError) as exc:
        service.mark_attendance(mark(employee_id=999, check_in=at(9)), current_user=hr_user)
    assert exc.value.code == "EMPLOYEE_NOT_FOUND"


def test_mark_unknown_shift(service, hr_user):
    with pytest.raises(ValidationError) as exc:
        service.mark_attendance(mark(check_in=at(9), shift_id=42), current_user=hr_user)
    assert exc.value.code == "SHIFT_NOT_FOUND"


def test_employee_can_mark_only_own_record(service, employee_user):
    service.mark_attendance(mark(employee_id=20, check_in=at(9)), current_user=employee_user)

    with pytest.raises(AuthorizationError):
        service.mark_attendance(mark(employee_id=30, check_in=at(9)), current_user=employee_user)


# ----- self service -----


@pytest.mark.parametrize(
    "now, expected",
    [
        (at(8, 30), AttendanceStatus.PRESENT),
        (at(9, 45), AttendanceStatus.PRESENT),
        (at(10, 5), AttendanceStatus.LATE),
        (at(12, 10), AttendanceStatus.HALF_DAY),
    ],
)
def test_self_check_in_status(service, employee_user, now, expected):
    rec = service.self_check_in(check_in_input(), current_user=employee_user, now=now, ip_address="10.0.0.1")

    assert rec.status == expected
    assert rec.employee_id == 20
    assert rec.check_in == now
    assert rec.check_out is None
    assert rec.total_hours is None
    assert rec.ip_address == "10.0.0.1"


def test_self_check_in_twice_is_rejected(service, employee_user, fixed_now):
    service.self_check_in(check_in_input(), current_user=employee_user, now=fixed_now)

    with pytest.raises(ConflictError) as exc:
        service.self_check_in(check_in_input(), current_user=employee_user, now=fixed_now)
    assert exc.value.code == "ALREADY_CHECKED_IN"
    assert exc.value.data == {"canCheckOut": True, "canCheckIn": False}


def test_self_check_out_computes_hours(service, employee_user):
    service.self_check_in(check_in_input(), current_user=employee_user, now=at(8, 30))
    rec = service.self_check_out(check_out_input(notes="done"), current_user=employee_user, now=at(18, 30))

    assert rec.check_out == at(18, 30)
    assert (rec.total_hours, rec.regular_hours, rec.overtime_hours, rec.break_hours) == (10.0, 8.0, 1.0, 1.0)
    assert rec.notes == "done"
    assert rec.check_out_selfie == "selfie-out"


def test_self_check_out_without_check_in(service, employee_user, fixed_now):
    with pytest.raises(ConflictError) as exc:
        service.self_check_out(check_out_input(), current_user=employee_user, now=fixed_now)
    assert exc.value.code == "NO_CHECKIN"


def test_day_is_closed_after_check_out(service, employee_user):
    service.self_check_in(check_in_input(), current_user=employee_user, now=at(9))
    service.self_check_out(check_out_input(), current_user=employee_user, now=at(17))

    with pytest.raises(ConflictError) as exc:
        service.self_check_out(check_out_input(), current_user=employee_user, now=at(18))
    assert exc.value.code == "ALREADY_CHECKED_OUT"

    with pytest.raises(ConflictError) as exc:
        service.self_check_in(check_in_input(), current_user=employee_user, now=at(18))
    assert exc.value.code == "ATTENDANCE_COMPLETED"


def test_self_status_follows_lifecycle(service, employee_user):
    status = service.self_status(current_user=employee_user, now=at(8))["status"]
    assert (status["state"], status["canCheckIn"], status["canCheckOut"]) == ("NO_RECORD", True, False)

    service.self_check_in(check_in_input(), current_user=employee_user, now=at(8))
    body = service.self_status(current_user=employee_user, now=at(9))
    assert body["status"]["state"] == "CHECKED_IN"
    assert body["status"]["canCheckOut"] is True
    assert body["attendance"]["checkIn"] == at(8).isoformat()

    service.self_check_out(check_out_input(), current_user=employee_user, now=at(17))
    status = service.self_status(current_user=employee_user, now=at(17, 5))["status"]
    assert status["isCompleted"] is True
    assert status["today"] == "2025-03-10"


def test_self_service_requires_employee_profile(service):
    from src.hr_attendance.hr_attendance.core.enums import Role
    from src.hr_attendance.hr_attendance.users.model import CurrentUser

    nobody = CurrentUser(user_id=99, email="x@company.local", role=Role.EMPLOYEE)
    with pytest.raises(NotFoundError):
        service.self_check_in(check_in_input(), current_user=nobody, now=at(9))


# ----- HR maintenance -----


def test_update_recomputes_total_only(service, hr_user):
    rec = service.mark_attendance(mark(check_in=at(9), check_out=at(18)), current_user=hr_user).record

    updated = service.update_attendance(
        rec.attendance_id,
        UpdateAttendanceInput(check_out=at(20), notes="stayed late"),
        current_user=hr_user,
    )

    assert updated.total_hours == 11.0
    assert updated.regular_hours == 8.0
    assert updated.overtime_hours == 0.0
    assert updated.notes == "stayed late"
    assert updated.status == AttendanceStatus.PRESENT


def test_update_requires_hr(service, hr_user, employee_user):
    rec = service.mark_attendance(mark(check_in=at(9)), current_user=hr_user).record
    with pytest.raises(AuthorizationError):
        service.update_attendance(rec.attendance_id, UpdateAttendanceInput(notes="x"), current_user=employee_user)


def test_update_rejects_empty_and_unknown(service, hr_user):
    rec = service.mark_attendance(mark(check_in=at(9)), current_user=hr_user).record
    with pytest.raises(ValidationError):
        service.update_attendance(rec.attendance_id, UpdateAttendanceInput(), current_user=hr_user)
    with pytest.raises(NotFoundError):
        service.update_attendance(999, UpdateAttendanceInput(notes="x"), current_user=hr_user)


def test_delete(service, hr_user, attendance_repo):
    rec = service.mark_attendance(mark(check_in=at(9)), current_user=hr_user).record
    service.delete_attendance(rec.attendance_id, current_user=hr_user)

    assert attendance_repo.get_by_id(rec.attendance_id) is None
    with pytest.raises(NotFoundError):
        service.delete_attendance(rec.attendance_id, current_user=hr_user)


# ----- queries -----


def test_list_is_scoped_for_employees(service, hr_user, employee_user):
    service.mark_attendance(mark(employee_id=20, check_in=at(9)), current_user=hr_user)
    service.mark_attendance(mark(employee_id=30, check_in=at(9)), current_user=hr_user)

    assert service.list_attendance(AttendanceQuery(), current_user=hr_user).total == 2

    page = service.list_attendance(AttendanceQuery(employee_id=30), current_user=employee_user)
    assert [r.employee_id for r in page.items] == [20]


def test_get_other_employees_record_is_forbidden(service, hr_user, employee_user):
    rec = service.mark_attendance(mark(employee_id=30, check_in=at(9)), current_user=hr_user).record
    with pytest.raises(AuthorizationError):
        service.get_attendance(rec.attendance_id, current_user=employee_user)
    with pytest.raises(AuthorizationError):
        service.employee_history(30, AttendanceQuery(), current_user=employee_user)


def test_stats_overview(service, hr_user):
    service.mark_attendance(mark(employee_id=20, check_in=at(9)), current_user=hr_user)
    service.mark_attendance(mark(employee_id=30, status=AttendanceStatus.ABSENT), current_user=hr_user)
    service.mark_attendance(mark(employee_id=10, check_in=at(12)), current_user=hr_user)

    stats = service.stats_overview(current_user=hr_user).to_dict()

    assert stats["totalRecords"] == 3
    assert stats["presentCount"] == 1
    assert stats["absentCount"] == 1
    assert stats["halfDayCount"] == 1
    assert stats["attendanceRate"] == pytest.approx(33.33)
