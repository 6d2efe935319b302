from __future__ import annotations

from flask import Flask

from ..common.auth import AuthGuards
from ..common.errors import ok


def register(app: Flask, container) -> None:
    guards = AuthGuards(container.auth_service.resolve_token)

    @app.route("/api/shifts", methods=["GET"], endpoint="shifts_list")
    @guards.token_required
    def list_shifts(current_user):
        return ok({"shifts": [s.to_dict() for s in container.shifts_repo.list_all()]})
