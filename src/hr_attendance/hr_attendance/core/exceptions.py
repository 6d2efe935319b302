from __future__ import annotations


class DomainError(Exception):
    """Base exception for business rule violations.

    Each error carries the HTTP status and the machine-readable code that the
    JSON error envelope reports to API clients.
    """

    http_status = 400
    default_code = "DOMAIN_ERROR"

    def __init__(self, message: str, *, code: str | None = None):
        super().__init__(message)
        self.message = message
        self.code = code or self.default_code


class ValidationError(DomainError):
    """Raised when input data is invalid or violates domain rules."""

    default_code = "VALIDATION_ERROR"


class AuthenticationError(DomainError):
    """Raised when credentials or bearer tokens are invalid."""

    http_status = 401
    default_code = "INVALID_CREDENTIALS"


class AuthorizationError(DomainError):
    """Raised when a user lacks permission for an action."""

    http_status = 403
    default_code = "FORBIDDEN"


class NotFoundError(DomainError):
    http_status = 404
    default_code = "NOT_FOUND"


class ConflictError(DomainError):
    """Raised when an operation clashes with the current state of a record.

    Lifecycle conflicts (already checked in, already checked out, ...) are
    client errors reported as 400; store-level duplicates use 409.
    """

    default_code = "CONFLICT"

    def __init__(self, message: str, *, code: str | None = None, http_status: int = 400, data: dict | None = None):
        super().__init__(message, code=code)
        self.http_status = http_status
        self.data = data
