"""Back-office exceptions following RFC 9457 Problem Details for HTTP APIs."""

from typing import Any, Dict, Optional
from fastapi import HTTPException, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
import logging
import uuid
from datetime import datetime, timezone

logger = logging.getLogger(__name__)

PROBLEM_BASE_URI = "https://relaxarc.example/problems"


def _utc_timestamp() -> str:
    return datetime.now(timezone.utc).strftime("%Y-%m-%dT%H:%M:%S.%fZ")


class ProblemDetailsException(HTTPException):
    """
    Base exception class following RFC 9457 Problem Details for HTTP APIs.

    https://tools.ietf.org/rfc/rfc9457.txt

    ``message`` keeps the human-readable detail; it is what a failed
    back-office action shows to staff.
    """

    def __init__(
        self,
        status_code: int,
        title: str,
        detail: Optional[str] = None,
        type_uri: Optional[str] = None,
        instance: Optional[str] = None,
        extensions: Optional[Dict[str, Any]] = None,
        headers: Optional[Dict[str, str]] = None,
    ):
        """
        Initialize Problem Details exception.

        Args:
            status_code: HTTP status code
            title: Short, human-readable summary of the problem type
            detail: Human-readable explanation specific to this occurrence
            type_uri: URI reference that identifies the problem type
            instance: URI reference that identifies the specific occurrence
            extensions: Additional problem-specific information
            headers: HTTP headers to include in response
        """
        self.title = title
        self.message = detail or title
        self.type_uri = type_uri or f"about:blank#{status_code}"
        self.instance = instance
        self.extensions = extensions or {}

        self.problem_details = {
            "type": self.type_uri,
            "title": self.title,
            "status": status_code,
        }
        if detail:
            self.problem_details["detail"] = detail
        if self.instance:
            self.problem_details["instance"] = self.instance
        self.problem_details.update(self.extensions)

        super().__init__(
            status_code=status_code,
            detail=self.problem_details,
            headers=headers
        )

    def __str__(self) -> str:
        return self.message


class ValidationError(ProblemDetailsException):
    """Exception for request validation errors."""

    def __init__(
        self,
        detail: str = "The request data failed validation",
        errors: Optional[Dict[str, Any]] = None,
        instance: Optional[str] = None,
    ):
        extensions = {}
        if errors:
            extensions["errors"] = errors

        super().__init__(
            status_code=400,
            title="Validation Error",
            detail=detail,
            type_uri=f"{PROBLEM_BASE_URI}/validation-error",
            instance=instance,
            extensions=extensions,
        )


class AuthenticationError(ProblemDetailsException):
    """Exception for missing or invalid bearer credentials."""

    def __init__(self, detail: str = "Authentication credentials are required"):
        super().__init__(
            status_code=401,
            title="Authentication Required",
            detail=detail,
            type_uri=f"{PROBLEM_BASE_URI}/authentication-required",
            headers={"WWW-Authenticate": "Bearer"},
        )


class AuthorizationError(ProblemDetailsException):
    """Exception raised by the role gate."""

    def __init__(
        self,
        detail: str = "Insufficient permissions to access this resource",
        required_roles: Optional[list] = None,
    ):
        extensions = {}
        if required_roles:
            extensions["required_roles"] = list(required_roles)

        super().__init__(
            status_code=403,
            title="Access Forbidden",
            detail=detail,
            type_uri=f"{PROBLEM_BASE_URI}/access-forbidden",
            extensions=extensions,
        )


class NotFoundError(ProblemDetailsException):
    """Exception for lookups that matched zero rows."""

    def __init__(
        self,
        resource_type: str = "resource",
        resource_id: Optional[str] = None,
        detail: Optional[str] = None,
    ):
        if not detail:
            detail = f"The requested {resource_type}"
            if resource_id:
                detail += f" '{resource_id}'"
            detail += " could not be found"

        extensions = {"resource_type": resource_type}
        if resource_id:
            extensions["resource_id"] = resource_id

        super().__init__(
            status_code=404,
            title="Resource Not Found",
            detail=detail,
            type_uri=f"{PROBLEM_BASE_URI}/resource-not-found",
            extensions=extensions,
        )


class CapacityExceededError(ProblemDetailsException):
    """A travel package already holds the maximum number of gallery images."""

    def __init__(self, max_items: int, current_items: Optional[int] = None):
        extensions = {"max_items": max_items}
        if current_items is not None:
            extensions["current_items"] = current_items

        super().__init__(
            status_code=409,
            title="Capacity Exceeded",
            detail=f"The amount of travel galleries has exceeded capacity (max {max_items} items)",
            type_uri=f"{PROBLEM_BASE_URI}/capacity-exceeded",
            extensions=extensions,
        )


class PersistenceWriteFailedError(ProblemDetailsException):
    """An update/delete/restore/create call reported failure."""

    def __init__(self, detail: str, reason: Optional[str] = None):
        extensions = {}
        if reason:
            extensions["reason"] = reason
        self.reason = reason

        super().__init__(
            status_code=500,
            title="Persistence Write Failed",
            detail=detail,
            type_uri=f"{PROBLEM_BASE_URI}/persistence-write-failed",
            extensions=extensions,
        )


def error_message(exc: BaseException) -> str:
    """Single-line user-facing message for a failed action."""
    if isinstance(exc, ProblemDetailsException):
        return exc.message
    return str(exc) or exc.__class__.__name__


async def problem_details_handler(request: Request, exc: ProblemDetailsException) -> JSONResponse:
    """Render a Problem Details exception as ``application/problem+json``."""
    return JSONResponse(
        status_code=exc.status_code,
        content={**exc.problem_details, "instance": exc.instance or request.url.path},
        headers=exc.headers,
        media_type="application/problem+json",
    )


async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Convert FastAPI request validation errors to Problem Details with violations."""
    violations = [
        {
            "path": ".".join(str(part) for part in error.get("loc", ())),
            "message": error.get("msg", "Invalid value"),
        }
        for error in exc.errors()
    ]
    return JSONResponse(
        status_code=422,
        content={
            "type": f"{PROBLEM_BASE_URI}/validation-error",
            "title": "Validation Error",
            "status": 422,
            "detail": "The request data failed validation",
            "instance": request.url.path,
            "violations": violations,
        },
        media_type="application/problem+json",
    )


async def generic_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """
    Convert unhandled exceptions to a Problem Details document.

    The exception itself is logged with an error id that is echoed to the
    client for correlation.
    """
    error_id = str(uuid.uuid4())
    logger.error(
        "Unhandled exception",
        extra={"error_id": error_id, "path": request.url.path},
        exc_info=exc,
    )

    return JSONResponse(
        status_code=500,
        content={
            "type": f"{PROBLEM_BASE_URI}/internal-server-error",
            "title": "Internal Server Error",
            "status": 500,
            "detail": "An unexpected error occurred while processing the request",
            "instance": request.url.path,
            "error_id": error_id,
            "timestamp": _utc_timestamp(),
        },
        media_type="application/problem+json",
    )
