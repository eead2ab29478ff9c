"""Service error taxonomy.

Every failure a caller can see is a ``ServiceError`` carrying a stable
machine-readable ``code``, a human-readable ``message``, optional
``details`` and the HTTP status it maps to. The exception handlers in
``tenancy.main`` render them into the failure envelope.
"""

from typing import Any

from fastapi import status


class ServiceError(Exception):
    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR
    code: str = "UNEXPECTED_FAILURE"

    def __init__(
        self,
        message: str,
        *,
        code: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        if code is not None:
            self.code = code
        self.details = details or {}


class Unauthenticated(ServiceError):
    status_code = status.HTTP_401_UNAUTHORIZED
    code = "UNAUTHENTICATED"


class ValidationFailed(ServiceError):
    status_code = status.HTTP_400_BAD_REQUEST
    code = "VALIDATION_FAILED"


class Forbidden(ServiceError):
    status_code = status.HTTP_403_FORBIDDEN
    code = "FORBIDDEN"


class NotFound(ServiceError):
    status_code = status.HTTP_404_NOT_FOUND
    code = "NOT_FOUND"


class Conflict(ServiceError):
    status_code = status.HTTP_409_CONFLICT
    code = "CONFLICT"


class Gone(ServiceError):
    status_code = status.HTTP_410_GONE
    code = "GONE"


class StoreFailure(ServiceError):
    """A store write or read failed; ``step`` names the failing step."""

    code = "STORE_FAILURE"

    def __init__(self, step: str, cause: BaseException | None = None) -> None:
        # cause is logged by the 5xx handler, never rendered
        super().__init__(f"Store operation failed at step '{step}'", details={"step": step})
        self.step = step
        self.cause = cause


class ServerMisconfigured(ServiceError):
    code = "SERVER_MISCONFIGURED"


class UnexpectedFailure(ServiceError):
    code = "UNEXPECTED_FAILURE"


# ── Domain-specific codes ────────────────────────────────────

def slug_unavailable(slug: str) -> Conflict:
    return Conflict(
        "This slug is already in use", code="SLUG_UNAVAILABLE", details={"slug": slug}
    )


def profile_already_bound(tenant_id: Any) -> Conflict:
    return Conflict(
        "Profile already belongs to a tenant",
        code="PROFILE_ALREADY_BOUND",
        details={"tenant_id": str(tenant_id)},
    )
