# =============================================================================
# app/exceptions.py - Custom Exception Handlers
# =============================================================================
# Centralized exception handling for the API.
# Errors should tell HOW to fix, not just WHAT failed.
#
# Every failure of an external call (store, storage, hashing) is converted
# to one of these at the service boundary. Nothing is retried.
# =============================================================================

from typing import Any

from fastapi import Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse


class DashboardException(Exception):
    """
    Base exception for the Impact Dashboard API.

    All custom exceptions inherit from this class.
    Provides structured error responses with actionable suggestions.
    """

    def __init__(
        self,
        message: str,
        code: str = "DASHBOARD_ERROR",
        status_code: int = 500,
        suggestion: str | None = None,
        details: dict[str, Any] | None = None,
    ):
        super().__init__(message)
        self.message = message
        self.code = code
        self.status_code = status_code
        self.suggestion = suggestion
        self.details = details or {}

    def to_dict(self) -> dict[str, Any]:
        """Convert exception to API response dict."""
        result = {
            "error": self.message,
            "code": self.code,
        }
        if self.suggestion:
            result["suggestion"] = self.suggestion
        if self.details:
            result["details"] = self.details
        return result


# =============================================================================
# Validation Exceptions
# =============================================================================

class RequestValidationFailed(DashboardException):
    """Raised when a request is missing fields or carries malformed values."""

    def __init__(self, message: str, errors: list[Any] | None = None):
        super().__init__(
            message=message,
            code="VALIDATION_ERROR",
            status_code=400,
            suggestion="Check that all required fields are present and well-formed",
            details={"errors": errors} if errors else None,
        )


class InvalidImageTypeError(DashboardException):
    """Raised when an uploaded image has a MIME type outside the allow-list."""

    def __init__(self, filename: str, content_type: str | None, allowed: list[str]):
        super().__init__(
            message=f"Invalid image type: {content_type or 'unknown'}",
            code="INVALID_IMAGE_TYPE",
            status_code=400,
            suggestion=f"Only these image types are supported: {', '.join(allowed)}",
            details={"filename": filename, "content_type": content_type, "allowed_types": allowed}
        )


class ImageTooLargeError(DashboardException):
    """Raised when an uploaded image exceeds the size limit."""

    def __init__(self, size_mb: float, max_mb: int):
        super().__init__(
            message=f"Image too large: {size_mb:.1f}MB (max: {max_mb}MB)",
            code="IMAGE_TOO_LARGE",
            status_code=400,
            suggestion=f"Upload an image smaller than {max_mb}MB",
            details={"size_mb": size_mb, "max_mb": max_mb}
        )


# =============================================================================
# Lookup Exceptions
# =============================================================================

class ProgramNotFoundError(DashboardException):
    """Raised when a program name doesn't resolve to a program."""

    def __init__(self, program_name: str):
        super().__init__(
            message="Invalid programName",
            code="PROGRAM_NOT_FOUND",
            status_code=400,
            suggestion="Program names are case-sensitive and must match exactly",
            details={"program_name": program_name}
        )


class InitiativeNotFoundError(DashboardException):
    """Raised when an initiative name doesn't exist under a program."""

    def __init__(self, program_name: str, initiative_name: str):
        super().__init__(
            message="Invalid initiativeName for given program",
            code="INITIATIVE_NOT_FOUND",
            status_code=400,
            suggestion="Check the initiative name; names are scoped to their program",
            details={"program_name": program_name, "initiative_name": initiative_name}
        )


class InitiativeExistsError(DashboardException):
    """Raised when creating an initiative whose name is taken within the program."""

    def __init__(self, program_name: str, initiative_name: str):
        super().__init__(
            message=f"Initiative already exists: {initiative_name}",
            code="INITIATIVE_EXISTS",
            status_code=400,
            suggestion="Use POST /edit-initiative to change an existing initiative",
            details={"program_name": program_name, "initiative_name": initiative_name}
        )


# =============================================================================
# External Service Exceptions
# =============================================================================

class ImageUploadError(DashboardException):
    """Raised when an image upload to storage fails."""

    def __init__(self, error: str):
        super().__init__(
            message=f"Failed to upload image: {error}",
            code="IMAGE_UPLOAD_ERROR",
            status_code=400,
            suggestion="Try again later or contact support if the issue persists",
            details={"error": error}
        )


class MetricSyncError(DashboardException):
    """Raised when replacing an initiative's metric rows fails."""

    def __init__(self, message: str, initiative_id: Any, error: str):
        super().__init__(
            message=message,
            code="METRIC_SYNC_ERROR",
            status_code=400,
            suggestion="Resubmit the full metrics set; the initiative may currently have no metrics",
            details={"initiative_id": initiative_id, "error": error}
        )


class MetricFetchError(DashboardException):
    """Raised when an initiative's metric rows cannot be read."""

    def __init__(self, initiative_id: Any, error: str):
        super().__init__(
            message="Failed to fetch metrics",
            code="METRIC_FETCH_ERROR",
            status_code=400,
            details={"initiative_id": initiative_id, "error": error}
        )


class InitiativeFetchError(DashboardException):
    """Raised when a program's initiatives cannot be listed."""

    def __init__(self, program_name: str, error: str):
        super().__init__(
            message="Failed to fetch initiatives",
            code="INITIATIVE_FETCH_ERROR",
            status_code=400,
            details={"program_name": program_name, "error": error}
        )


class InitiativeInsertError(DashboardException):
    """Raised when creating an initiative (row or its metrics) fails."""

    def __init__(self, message: str, error: str):
        super().__init__(
            message=message,
            code="INITIATIVE_INSERT_ERROR",
            status_code=400,
            suggestion="Nothing was saved; retry the request",
            details={"error": error}
        )


class InitiativeUpdateError(DashboardException):
    """Raised when updating an initiative row fails."""

    def __init__(self, initiative_id: Any, error: str):
        super().__init__(
            message="Failed to update initiative",
            code="INITIATIVE_UPDATE_ERROR",
            status_code=400,
            details={"initiative_id": initiative_id, "error": error}
        )


class InitiativeDeleteError(DashboardException):
    """Raised when deleting an initiative or its metrics fails."""

    def __init__(self, message: str, initiative_id: Any, error: str):
        super().__init__(
            message=message,
            code="INITIATIVE_DELETE_ERROR",
            status_code=400,
            details={"initiative_id": initiative_id, "error": error}
        )


# =============================================================================
# Auth Exceptions
# =============================================================================

class ProgramAuthError(DashboardException):
    """Raised when a program password doesn't verify."""

    def __init__(self):
        super().__init__(
            message="Invalid program or password",
            code="INVALID_CREDENTIALS",
            status_code=401,
        )


class PasswordStoreError(DashboardException):
    """Raised when a program password cannot be hashed or stored."""

    def __init__(self, error: str):
        super().__init__(
            message="Failed to set password",
            code="PASSWORD_STORE_ERROR",
            status_code=500,
            details={"error": error}
        )


# =============================================================================
# Exception Handlers
# =============================================================================

async def dashboard_exception_handler(
    request: Request,
    exc: DashboardException
) -> JSONResponse:
    """
    Convert DashboardException to JSON response.

    Returns structured error with:
    - error: Human-readable message
    - code: Machine-readable error code
    - suggestion: How to fix (if available)
    - details: Additional context
    """
    return JSONResponse(
        status_code=exc.status_code,
        content=exc.to_dict()
    )


async def validation_exception_handler(
    request: Request,
    exc: RequestValidationError
) -> JSONResponse:
    """
    Handle FastAPI request validation errors.

    Missing or malformed fields are a client error, reported as 400.
    """
    errors = [
        {"loc": list(err.get("loc", [])), "msg": err.get("msg")}
        for err in exc.errors()
    ]
    return JSONResponse(
        status_code=400,
        content={
            "error": "Validation error",
            "code": "VALIDATION_ERROR",
            "details": {"errors": errors},
        }
    )
