from __future__ import annotations

from dataclasses import dataclass
from functools import wraps
from typing import Callable

from flask import request

from ..core.exceptions import AuthenticationError, AuthorizationError


def bearer_token() -> str:
    header = request.headers.get("Authorization", "")
    scheme, _, token = header.partition(" ")
    if scheme.lower() != "bearer" or not token.strip():
        raise AuthenticationError("Access token required", code="MISSING_TOKEN")
    return token.strip()


@dataclass(frozen=True)
class AuthGuards:
    """View decorators resolving the caller from the bearer token.

    The resolved ``CurrentUser`` is handed to the view as the ``current_user``
    keyword argument; nothing is stored on global request state.
    """

    resolve: Callable

    def token_required(self, view):
        @wraps(view)
        def wrapper(*args, **kwargs):
            kwargs["current_user"] = self.resolve(bearer_token())
            return view(*args, **kwargs)

        return wrapper

    def hr_required(self, view):
        @wraps(view)
        def wrapper(*args, **kwargs):
            current_user = self.resolve(bearer_token())
            if not current_user.is_hr:
                raise AuthorizationError("HR access required", code="HR_ACCESS_REQUIRED")
            kwargs["current_user"] = current_user
            return view(*args, **kwargs)

        return wrapper


def client_ip() -> str | None:
    forwarded = request.headers.get("X-Forwarded-For", "")
    if forwarded:
        return forwarded.split(",")[0].strip() or None
    return request.remote_addr
