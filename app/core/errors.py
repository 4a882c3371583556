"""Error taxonomy shared by the auth, scoping and quota layers.

Each error carries the HTTP status it maps to and a machine-readable code.
The exception handler in ``app.main`` renders them as
``{"detail": message, "code": code}``.
"""

from fastapi import status


class AppError(Exception):
    """Base class for errors surfaced to API clients with their kind intact."""

    status_code: int = status.HTTP_400_BAD_REQUEST
    code: str = "BAD_REQUEST"

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class Unauthenticated(AppError):
    """No credential, or an invalid / expired one, or the principal is gone."""

    status_code = status.HTTP_401_UNAUTHORIZED
    code = "UNAUTHENTICATED"


class Forbidden(AppError):
    """Authenticated, but the role or tenant ownership does not match."""

    status_code = status.HTTP_403_FORBIDDEN
    code = "FORBIDDEN"


class NotFound(AppError):
    """Missing, or outside the caller's tenant. The two are never distinguished."""

    status_code = status.HTTP_404_NOT_FOUND
    code = "NOT_FOUND"


class QuotaExceeded(AppError):
    status_code = status.HTTP_403_FORBIDDEN
    code = "NOTE_LIMIT_REACHED"


class PlanAlreadyActive(AppError):
    status_code = status.HTTP_400_BAD_REQUEST
    code = "PLAN_ALREADY_ACTIVE"


class Conflict(AppError):
    status_code = status.HTTP_409_CONFLICT
    code = "CONFLICT"
