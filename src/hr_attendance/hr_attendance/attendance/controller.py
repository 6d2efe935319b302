from __future__ import annotations

from flask import Flask, request

from ..common.auth import AuthGuards, client_ip
from ..common.errors import ok
from ..common.validators import parse_date
from ..core.exceptions import ValidationError
from .schemas import (
    AttendanceQuery,
    MarkAttendanceInput,
    SelfCheckInInput,
    SelfCheckOutInput,
    UpdateAttendanceInput,
)


def register(app: Flask, container) -> None:
    guards = AuthGuards(container.auth_service.resolve_token)
    service = container.attendance_service

    # ===== self service =====

    @app.route("/api/attendance/self/check-in", methods=["POST"], endpoint="attendance_self_check_in")
    @guards.token_required
    def self_check_in(current_user):
        data = SelfCheckInInput.from_json(request.get_json(silent=True))
        record = service.self_check_in(data, current_user=current_user, ip_address=client_ip())
        return ok(
            {"attendance": record.to_dict()},
            message="Checked in successfully",
            status=201,
        )

    @app.route("/api/attendance/self/status", methods=["GET"], endpoint="attendance_self_status")
    @guards.token_required
    def self_status(current_user):
        return ok(service.self_status(current_user=current_user))

    @app.route("/api/attendance/self/check-out", methods=["POST"], endpoint="attendance_self_check_out")
    @guards.token_required
    def self_check_out(current_user):
        data = SelfCheckOutInput.from_json(request.get_json(silent=True))
        record = service.self_check_out(data, current_user=current_user)
        return ok({"attendance": record.to_dict()}, message="Checked out successfully")

    # ===== marking and queries =====

    @app.route("/api/attendance/mark", methods=["POST"], endpoint="attendance_mark")
    @guards.token_required
    def mark(current_user):
        data = MarkAttendanceInput.from_json(request.get_json(silent=True), tz=service.tz)
        result = service.mark_attendance(data, current_user=current_user, ip_address=client_ip())
        if result.created:
            return ok({"attendance": result.record.to_dict()}, message="Attendance marked successfully", status=201)
        return ok({"attendance": result.record.to_dict()}, message="Attendance updated successfully")

    @app.route("/api/attendance", methods=["GET"], endpoint="attendance_list")
    @guards.token_required
    def list_records(current_user):
        page = service.list_attendance(AttendanceQuery.from_args(request.args), current_user=current_user)
        return ok(
            {
                "attendance": [r.to_dict() for r in page.items],
                "pagination": page.pagination(),
            }
        )

    @app.route("/api/attendance/stats/overview", methods=["GET"], endpoint="attendance_stats_overview")
    @guards.hr_required
    def stats_overview(current_user):
        start = parse_date(request.args.get("startDate"), "startDate")
        end = parse_date(request.args.get("endDate"), "endDate")
        if start is None or end is None:
            start = end = None
        elif end < start:
            raise ValidationError('"endDate" must be on or after "startDate"')

        stats = service.stats_overview(current_user=current_user, start_date=start, end_date=end)
        return ok({"stats": stats.to_dict()})

    @app.route("/api/attendance/employee/<int:employee_id>", methods=["GET"], endpoint="attendance_employee_history")
    @guards.token_required
    def employee_history(employee_id: int, current_user):
        page = service.employee_history(employee_id, AttendanceQuery.from_args(request.args), current_user=current_user)
        return ok(
            {
                "attendance": [r.to_dict() for r in page.items],
                "pagination": page.pagination(),
            }
        )

    @app.route("/api/attendance/<int:attendance_id>", methods=["GET"], endpoint="attendance_get")
    @guards.token_required
    def get_record(attendance_id: int, current_user):
        record = service.get_attendance(attendance_id, current_user=current_user)
        include_selfies = (request.args.get("includeSelfies") or "").lower() in {"1", "true", "yes"}
        return ok({"attendance": record.to_dict(include_selfies=include_selfies)})

    # ===== HR maintenance =====

    @app.route("/api/attendance/<int:attendance_id>", methods=["PUT"], endpoint="attendance_update")
    @guards.hr_required
    def update_record(attendance_id: int, current_user):
        data = UpdateAttendanceInput.from_json(request.get_json(silent=True), tz=service.tz)
        record = service.update_attendance(attendance_id, data, current_user=current_user)
        return ok({"attendance": record.to_dict()}, message="Attendance updated successfully")

    @app.route("/api/attendance/<int:attendance_id>", methods=["DELETE"], endpoint="attendance_delete")
    @guards.hr_required
    def delete_record(attendance_id: int, current_user):
        service.delete_attendance(attendance_id, current_user=current_user)
        return ok(message="Attendance record deleted successfully")
