"""
PhotoShare Backend — Custom Exception Hierarchy
=================================================

What:  Application-specific exceptions for the different error scenarios.
Why:   Services raise these instead of building HTTP responses; global exception
       handlers (registered in main.py) map each type to a status code and a
       JSON body of the form {"error": "<message>", "requestId": "..."}.
How:   Each exception carries a user-facing message and an optional context dict
       that is logged server-side but never returned to the client.

Exception Hierarchy:
    PhotoShareError (base)
    ├── ValidationError          → 400 Bad Request
    ├── AuthenticationError      → 401 Unauthorized
    ├── PermissionDeniedError    → 403 Forbidden
    ├── NotFoundError            → 404 Not Found
    ├── ConflictError            → 409 Conflict
    ├── StorageError             → 500 Internal Server Error
    ├── DatabaseError            → 500 Internal Server Error
    ├── VisionServiceError       → 503 Service Unavailable
    └── CircuitBreakerOpenError  → 503 Service Unavailable

The vision errors are raised inside the queue worker, which logs and swallows
them; they only reach HTTP if a future route calls the vision service directly.
"""

from typing import Any, Dict, Optional


class PhotoShareError(Exception):
    """
    Base exception for all PhotoShare application errors.

    Attributes:
        message:  User-facing error description (safe to return in API response)
        context:  Additional debug info (logged but NOT returned to client)
    """

    status_code = 500

    def __init__(
        self,
        message: str = "Internal server error",
        context: Optional[Dict[str, Any]] = None,
    ):
        self.message = message
        self.context = context or {}
        super().__init__(self.message)


class ValidationError(PhotoShareError):
    """
    Raised when client input fails validation.

    When:    Missing required fields, rating out of range, unsupported file type.
    HTTP:    400 Bad Request
    """

    status_code = 400

    def __init__(
        self,
        message: str = "Validation failed",
        field: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        ctx = context or {}
        if field:
            ctx["field"] = field
        super().__init__(message=message, context=ctx)
        self.field = field


class AuthenticationError(PhotoShareError):
    """No bearer token, or login credentials that do not match. HTTP 401."""

    status_code = 401

    def __init__(
        self,
        message: str = "Authentication required",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class PermissionDeniedError(PhotoShareError):
    """
    Raised when the caller is authenticated but not allowed to act.

    When:    Deleting someone else's photo/comment, private collection,
             non-admin calling /api/admin, invalid or expired token.
    HTTP:    403 Forbidden
    """

    status_code = 403

    def __init__(
        self,
        message: str = "Insufficient permissions",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class NotFoundError(PhotoShareError):
    """
    Raised when a requested resource does not exist.

    SQLAlchemy returns None for missing rows; services convert that into this
    exception so the route never deals with HTTP status codes directly.
    The message reads "<Resource> not found", e.g. "Photo not found".
    """

    status_code = 404

    def __init__(
        self,
        resource: str = "Resource",
        resource_id: Optional[str] = None,
        message: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        ctx = context or {}
        ctx["resource"] = resource
        if resource_id:
            ctx["resource_id"] = resource_id
        super().__init__(message=message or f"{resource} not found", context=ctx)


class ConflictError(PhotoShareError):
    """Unique resource already exists (e.g. email already registered). HTTP 409."""

    status_code = 409

    def __init__(
        self,
        message: str = "Resource already exists",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class StorageError(PhotoShareError):
    """
    Raised when a blob store operation fails.

    When:    Disk full, permission denied, S3 credentials rejected.
    HTTP:    500 Internal Server Error
    """

    def __init__(
        self,
        message: str = "Failed to store image. Please try again.",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class DatabaseError(PhotoShareError):
    """
    Raised when database operations fail unexpectedly.

    The message returned to the client is always generic; query details are
    logged server-side only.
    """

    def __init__(
        self,
        message: str = "A database error occurred. Please try again later.",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class VisionServiceError(PhotoShareError):
    """
    Raised when the vision tagging service fails after all retries.

    HTTP:    503 Service Unavailable
    """

    status_code = 503

    def __init__(
        self,
        message: str = "Image tagging service is temporarily unavailable",
        retry_after: Optional[int] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        ctx = context or {}
        if retry_after:
            ctx["retry_after"] = retry_after
        super().__init__(message=message, context=ctx)
        self.retry_after = retry_after


class CircuitBreakerOpenError(PhotoShareError):
    """
    Raised when the vision circuit breaker is in OPEN state.

    How circuit breaker works:
        CLOSED (normal) → failures increment counter
        → After N failures → OPEN (reject all calls for recovery_time seconds)
        → After recovery_time → HALF-OPEN (allow one test call)
        → If test succeeds → CLOSED; if it fails → OPEN again
    """

    status_code = 503

    def __init__(
        self,
        recovery_time: int = 60,
        context: Optional[Dict[str, Any]] = None,
    ):
        message = (
            f"Image tagging is temporarily unavailable due to repeated failures. "
            f"Retrying in approximately {recovery_time} seconds."
        )
        ctx = context or {}
        ctx["recovery_time"] = recovery_time
        super().__init__(message=message, context=ctx)
        self.recovery_time = recovery_time
