from __future__ import annotations

from flask import Flask, request

from ..common.auth import AuthGuards
from ..common.errors import ok
from ..core.exceptions import NotFoundError
from .service import EmployeeInput, EmployeeUpdateInput


def register(app: Flask, container) -> None:
    guards = AuthGuards(container.auth_service.resolve_token)
    employees = container.employees_repo
    service = container.employee_service

    @app.route("/api/employees/me", methods=["GET"], endpoint="employees_me")
    @guards.token_required
    def me(current_user):
        employee = employees.get_by_user_id(current_user.user_id)
        if employee is None:
            raise NotFoundError("Employee profile not found", code="EMPLOYEE_NOT_FOUND")
        return ok({"employee": employee.to_dict()})

    @app.route("/api/employees", methods=["GET"], endpoint="employees_list")
    @guards.hr_required
    def list_employees(current_user):
        include_inactive = (request.args.get("includeInactive") or "").lower() in {"1", "true", "yes"}
        items = service.list_employees(current_user=current_user, include_inactive=include_inactive)
        return ok({"employees": [e.to_dict() for e in items]})

    @app.route("/api/employees/stats/overview", methods=["GET"], endpoint="employees_stats_overview")
    @guards.hr_required
    def stats_overview(current_user):
        return ok(service.stats_overview(current_user=current_user).to_dict())

    @app.route("/api/employees/<int:employee_id>", methods=["GET"], endpoint="employees_get")
    @guards.token_required
    def get_employee(employee_id: int, current_user):
        return ok({"employee": service.get_employee(employee_id, current_user=current_user).to_dict()})

    # ===== HR maintenance =====

    @app.route("/api/employees", methods=["POST"], endpoint="employees_create")
    @guards.hr_required
    def create_employee(current_user):
        data = EmployeeInput.from_json(request.get_json(silent=True))
        employee = service.create_employee(data, current_user=current_user)
        return ok({"employee": employee.to_dict()}, message="Employee created successfully", status=201)

    @app.route("/api/employees/<int:employee_id>", methods=["PUT"], endpoint="employees_update")
    @guards.hr_required
    def update_employee(employee_id: int, current_user):
        data = EmployeeUpdateInput.from_json(request.get_json(silent=True))
        employee = service.update_employee(employee_id, data, current_user=current_user)
        return ok({"employee": employee.to_dict()}, message="Employee updated successfully")

    @app.route("/api/employees/<int:employee_id>", methods=["DELETE"], endpoint="employees_deactivate")
    @guards.hr_required
    def deactivate_employee(employee_id: int, current_user):
        employee = service.deactivate_employee(employee_id, current_user=current_user)
        return ok({"employee": employee.to_dict()}, message="Employee deactivated successfully")
