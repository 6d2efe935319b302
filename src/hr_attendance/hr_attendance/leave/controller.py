from __future__ import annotations

from flask import Flask, request

from ..common.auth import AuthGuards
from ..common.errors import ok
from ..common.validators import parse_enum, parse_int
from ..core.enums import LeaveStatus
from .service import LeaveDecisionInput, LeaveRequestInput


def register(app: Flask, container) -> None:
    guards = AuthGuards(container.auth_service.resolve_token)
    service = container.leave_service

    @app.route("/api/leave/request", methods=["POST"], endpoint="leave_create")
    @guards.token_required
    def create(current_user):
        data = LeaveRequestInput.from_json(request.get_json(silent=True))
        leave = service.create_request(data, current_user=current_user)
        return ok({"leaveRequest": leave.to_dict()}, message="Leave request submitted successfully", status=201)

    @app.route("/api/leave", methods=["GET"], endpoint="leave_list")
    @guards.token_required
    def list_requests(current_user):
        items = service.list_requests(
            current_user=current_user,
            employee_id=parse_int(request.args.get("employeeId"), "employeeId", minimum=1),
            status=parse_enum(request.args.get("status"), LeaveStatus, "status"),
        )
        return ok({"leaveRequests": [x.to_dict() for x in items]})

    @app.route("/api/leave/<int:request_id>", methods=["GET"], endpoint="leave_get")
    @guards.token_required
    def get_request(request_id: int, current_user):
        return ok({"leaveRequest": service.get_request(request_id, current_user=current_user).to_dict()})

    @app.route("/api/leave/<int:request_id>/status", methods=["PUT"], endpoint="leave_decide")
    @guards.hr_required
    def decide(request_id: int, current_user):
        data = LeaveDecisionInput.from_json(request.get_json(silent=True))
        leave = service.decide(request_id, data, current_user=current_user)
        return ok(
            {"leaveRequest": leave.to_dict()},
            message=f"Leave request {leave.status.value.lower()} successfully",
        )

    @app.route("/api/leave/<int:request_id>/cancel", methods=["PUT"], endpoint="leave_cancel")
    @guards.token_required
    def cancel(request_id: int, current_user):
        leave = service.cancel(request_id, current_user=current_user)
        return ok({"leaveRequest": leave.to_dict()}, message="Leave request cancelled successfully")
