"""Service-layer errors.

Each error is an ``HTTPException`` carrying its own status code, so services can
raise them directly and FastAPI renders ``{"detail": ...}`` without any
per-endpoint translation.
"""

from fastapi import HTTPException, status


class ServiceError(HTTPException):
    """Base class for errors raised by the service layer."""

    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_detail = "Internal server error"

    def __init__(self, detail: str | None = None, headers: dict[str, str] | None = None):
        super().__init__(
            status_code=self.status_code,
            detail=detail or self.default_detail,
            headers=headers,
        )


class InvalidInputError(ServiceError):
    """Malformed or missing required input."""

    status_code = status.HTTP_400_BAD_REQUEST
    default_detail = "Invalid input"


class InvalidTokenError(ServiceError):
    """Verification token is unknown, already used, or expired."""

    status_code = status.HTTP_400_BAD_REQUEST
    default_detail = "Invalid or expired verification token"


class UnauthenticatedError(ServiceError):
    """Missing, invalid or expired bearer token."""

    status_code = status.HTTP_401_UNAUTHORIZED
    default_detail = "Invalid authentication credentials"

    def __init__(self, detail: str | None = None):
        super().__init__(detail, headers={"WWW-Authenticate": "Bearer"})


class InvalidCredentialError(ServiceError):
    """Wrong e-mail or password."""

    status_code = status.HTTP_401_UNAUTHORIZED
    default_detail = "Incorrect email or password"


class NotVerifiedError(ServiceError):
    """Credentials are valid but the account e-mail is not verified yet."""

    status_code = status.HTTP_401_UNAUTHORIZED
    default_detail = "Account is not verified"


class ForbiddenError(ServiceError):
    status_code = status.HTTP_403_FORBIDDEN
    default_detail = "Access denied"


class NotFoundError(ServiceError):
    status_code = status.HTTP_404_NOT_FOUND
    default_detail = "Not found"


class ConflictError(ServiceError):
    """Duplicate unique key on create."""

    status_code = status.HTTP_409_CONFLICT
    default_detail = "Resource already exists"
