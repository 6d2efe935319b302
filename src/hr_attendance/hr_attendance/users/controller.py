from __future__ import annotations

from flask import Flask, request

from ..common.auth import AuthGuards
from ..common.errors import ok


def register(app: Flask, container) -> None:
    guards = AuthGuards(container.auth_service.resolve_token)

    @app.route("/api/auth/login", methods=["POST"], endpoint="auth_login")
    def login():
        body = request.get_json(silent=True) or {}
        result = container.auth_service.login(str(body.get("email") or ""), str(body.get("password") or ""))
        return ok(result.to_dict(), message="Login successful")

    @app.route("/api/auth/me", methods=["GET"], endpoint="auth_me")
    @guards.token_required
    def me(current_user):
        return ok({"user": container.auth_service.profile(current_user)})
