"""Service-layer exceptions mapped to HTTP responses.

Each class carries an HTTP ``status_code`` and a stable ``error_code``. The
``detail`` dict is merged into the JSON error body, so it must only hold
values that are safe to show to the caller.
"""


class ServiceError(Exception):
    """Base class for expected, caller-recoverable failures."""

    status_code: int = 400
    error_code: str = "validation_error"

    def __init__(self, message: str, *, detail: dict | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.detail = detail or {}


class ValidationFailed(ServiceError):
    """Request validation failed (400)."""

    status_code = 400
    error_code = "validation_error"


class AuthenticationRequired(ServiceError):
    """No session token was presented (401)."""

    status_code = 401
    error_code = "authentication_required"

    def __init__(self, message: str = "Authentication required: please log in") -> None:
        super().__init__(message)


class InvalidToken(ServiceError):
    """The presented token could not be verified (401)."""

    status_code = 401
    error_code = "invalid_token"

    def __init__(self, message: str = "Invalid or expired token") -> None:
        super().__init__(message)


class InvalidCredentials(ServiceError):
    """Unknown email or wrong password (401)."""

    status_code = 401
    error_code = "invalid_credentials"

    def __init__(self, remaining_attempts: int | None = None) -> None:
        message = "Invalid email or password"
        detail = {}
        if remaining_attempts is not None:
            message = f"{message}. {remaining_attempts} attempts remaining"
            detail["remaining_attempts"] = remaining_attempts
        super().__init__(message, detail=detail)
        self.remaining_attempts = remaining_attempts


class AccountBlocked(ServiceError):
    """Account disabled by an administrator (403)."""

    status_code = 403
    error_code = "account_blocked"

    def __init__(self, message: str = "Account is blocked by an administrator") -> None:
        super().__init__(message)


class Forbidden(ServiceError):
    """Role or ownership check failed (403)."""

    status_code = 403
    error_code = "forbidden"

    def __init__(self, message: str = "Access denied") -> None:
        super().__init__(message)


class NotFound(ServiceError):
    """Requested resource not found (404)."""

    status_code = 404
    error_code = "not_found"


class UniquenessConflict(ServiceError):
    """A unique constraint rejected the write (409)."""

    status_code = 409
    error_code = "conflict"

    def __init__(self, message: str, *, field: str | None = None) -> None:
        super().__init__(message, detail={"field": field} if field else None)
        self.field = field


class AccountLocked(ServiceError):
    """Too many failed logins; temporarily locked (423)."""

    status_code = 423
    error_code = "account_locked"

    def __init__(self, seconds_remaining: int) -> None:
        hours = max(1, -(-seconds_remaining // 3600))
        super().__init__(
            f"Account is temporarily blocked due to too many failed login attempts. "
            f"Try again in {hours} hours",
            detail={"retry_after_seconds": seconds_remaining},
        )
        self.seconds_remaining = seconds_remaining


class AllocationExhausted(ServiceError):
    """No free business number found within the retry budget (503)."""

    status_code = 503
    error_code = "allocation_exhausted"

    def __init__(self, attempts: int) -> None:
        super().__init__(f"Failed to generate a unique business number after {attempts} attempts")
        self.attempts = attempts
