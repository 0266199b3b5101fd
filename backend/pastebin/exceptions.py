"""
Pastebin Backend: Custom Exception Hierarchy
=============================================

What:  Application-specific exceptions for each error scenario.
How:   Each exception class carries a client-safe message and an optional
       context dict. Global exception handlers (registered in main.py) catch
       these and return JSON error bodies with the matching HTTP status.
Who:   Raised by the paste service; caught by the handlers in main.py.

Exception Hierarchy:
    PastebinError (base)
    ├── ValidationError  → 400 Bad Request (missing content)
    ├── NotFoundError    → 404 Not Found (unknown paste id)
    ├── ExpiredError     → 410 Gone (expired by time or by views)
    └── DatabaseError    → 500 Internal Server Error (storage failure)
"""

from typing import Any, Dict, Optional


class PastebinError(Exception):
    """
    Base exception for all Pastebin application errors.

    Attributes:
        message:  User-facing error description (safe to return in API response)
        context:  Additional debug info (logged but NOT returned to client)
    """

    status_code: int = 500

    def __init__(
        self,
        message: str = "Server error",
        context: Optional[Dict[str, Any]] = None,
    ):
        self.message = message
        self.context = context or {}
        super().__init__(self.message)


class ValidationError(PastebinError):
    """
    Raised when client input fails validation.

    When:    `content` missing or empty on POST /paste.
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


class NotFoundError(PastebinError):
    """
    Raised when no paste exists for the requested id.

    SQLAlchemy returns None for missing rows; the service converts that into
    this exception so routes stay free of status-code logic.
    HTTP:    404 Not Found
    """

    status_code = 404

    def __init__(
        self,
        resource: str = "Paste",
        resource_id: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        ctx = context or {}
        ctx["resource"] = resource
        if resource_id:
            ctx["resource_id"] = resource_id
        super().__init__(message=f"{resource} not found", context=ctx)


class ExpiredError(PastebinError):
    """
    Raised when a paste exists but its access policy denies the read.

    When:    expires_at is in the past, or view_count has reached max_views.
    HTTP:    410 Gone

    Attributes:
        reason: "time" or "views", logged only.
    """

    status_code = 410

    def __init__(
        self,
        reason: str,
        context: Optional[Dict[str, Any]] = None,
    ):
        ctx = context or {}
        ctx["reason"] = reason
        super().__init__(message="Paste expired", context=ctx)
        self.reason = reason


class DatabaseError(PastebinError):
    """
    Raised when a database operation fails.

    When:    Connection lost, missing table, primary key collision, etc.
    HTTP:    500 Internal Server Error

    The client always receives the generic "Server error" message; the
    original exception type and paste id are kept in `context` for the log.
    """

    status_code = 500

    def __init__(
        self,
        message: str = "Server error",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)
