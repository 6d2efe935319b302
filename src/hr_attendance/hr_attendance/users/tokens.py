from __future__ import annotations

import logging
from datetime import datetime, timedelta, timezone

import jwt

from ..core.constants import DEFAULT_TOKEN_HOURS
from ..core.enums import Role
from ..core.exceptions import AuthenticationError
from .model import User

logger = logging.getLogger(__name__)


class TokenService:
    """Issues and verifies HS256 bearer tokens (PyJWT)."""

    def __init__(self, secret: str, *, algorithm: str = "HS256", expires_hours: int = DEFAULT_TOKEN_HOURS):
        if not secret:
            raise ValueError("JWT secret must be configured")
        self._secret = secret
        self._algorithm = algorithm
        self._expires = timedelta(hours=int(expires_hours))

    def issue(self, user: User, *, now: datetime | None = None) -> str:
        now = now or datetime.now(timezone.utc)
        payload = {
            "userId": user.user_id,
            "email": user.email,
            "role": user.role.value,
            "iat": now,
            "exp": now + self._expires,
        }
        return jwt.encode(payload, self._secret, algorithm=self._algorithm)

    def decode(self, token: str) -> dict:
        try:
            payload = jwt.decode(token, self._secret, algorithms=[self._algorithm])
        except jwt.ExpiredSignatureError:
            raise AuthenticationError("Token expired", code="TOKEN_EXPIRED")
        except jwt.InvalidTokenError as e:
            logger.info("Rejected bearer token: %s", e)
            raise AuthenticationError("Invalid token", code="INVALID_TOKEN")

        if "userId" not in payload:
            raise AuthenticationError("Invalid token", code="INVALID_TOKEN")
        try:
            Role(payload.get("role"))
        except ValueError:
            raise AuthenticationError("Invalid token", code="INVALID_TOKEN")
        return payload
