from fastapi import HTTPException
from sqlalchemy.exc import DBAPIError
from typing import Any, Dict, Optional

class OneSyncException(HTTPException):
    """Base exception for OneSync API"""
    def __init__(
        self,
        status_code: int,
        detail: Any,
        headers: Optional[Dict[str, Any]] = None
    ):
        super().__init__(status_code=status_code, detail=detail, headers=headers)

class NotFoundException(OneSyncException):
    """Resource not found"""
    def __init__(self, resource: str, resource_id: str):
        super().__init__(
            status_code=404,
            detail=f"{resource} with id {resource_id} not found"
        )

class DuplicateError(OneSyncException):
    """Resource already exists"""
    def __init__(self, field: str, value: str):
        super().__init__(
            status_code=400,
            detail=f"{field} '{value}' already exists"
        )

class UnauthorizedError(OneSyncException):
    """User is not authorized"""
    def __init__(self, message: str = "Not authorized"):
        super().__init__(
            status_code=401,
            detail=message,
            headers={"WWW-Authenticate": "Bearer"}
        )

class ForbiddenError(OneSyncException):
    def __init__(self, message: str = "Not authorized to access this resource"):
        super().__init__(status_code=403, detail=message)

class ValidationFailed(OneSyncException):
    """Request data failed a business rule"""
    def __init__(self, message: str):
        super().__init__(status_code=400, detail=message)

class IntegrationNotConfigured(OneSyncException):
    """Credentials for a third-party integration are missing"""
    def __init__(self, integration: str):
        self.integration = integration
        super().__init__(status_code=500, detail="Server configuration error")

class UpstreamError(OneSyncException):
    """A third-party API call failed"""
    def __init__(self, service: str, status: int, detail: str = ""):
        self.service = service
        self.upstream_status = status
        super().__init__(
            status_code=502,
            detail={
                "error": f"{service} API error: {status}",
                "details": detail,
                "status": status,
            }
        )


# SQLSTATE codes surfaced to users with a fixed message
UNIQUE_VIOLATION = "23505"
INSUFFICIENT_PRIVILEGE = "42501"
FOREIGN_KEY_VIOLATION = "23503"


def _sqlstate(exc: Exception) -> Optional[str]:
    orig = getattr(exc, "orig", exc)
    for attr in ("sqlstate", "pgcode"):
        code = getattr(orig, attr, None)
        if code:
            return str(code)
    # asyncpg errors are wrapped one level deeper by the SQLAlchemy adapter
    cause = getattr(orig, "__cause__", None)
    code = getattr(cause, "sqlstate", None)
    if code:
        return str(code)

    message = str(orig)
    if "UNIQUE constraint failed" in message:
        return UNIQUE_VIOLATION
    if "FOREIGN KEY constraint failed" in message:
        return FOREIGN_KEY_VIOLATION
    return None


def database_error_message(exc: Exception, resource: str = "record") -> str:
    """Map a database constraint error to the message shown to the user."""
    code = _sqlstate(exc)
    if code == UNIQUE_VIOLATION:
        article = "An" if resource[:1].lower() in "aeiou" else "A"
        return f"{article} {resource} with this name already exists."
    if code == INSUFFICIENT_PRIVILEGE:
        return "Permission denied. Please check your account permissions."
    if code == FOREIGN_KEY_VIOLATION:
        return "Invalid user reference. Please try logging out and back in."
    orig = exc.orig if isinstance(exc, DBAPIError) else exc
    return f"Database error: {orig}"
