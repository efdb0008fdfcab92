"""
Idea Hub Backend — Custom Exception Hierarchy
==============================================

What:  Application-specific exceptions, one per failure category.
How:   Each exception carries a user-facing message, an optional context dict
       (logged, never returned) and the HTTP status it maps to. Services raise
       them; the global handlers in main.py render them in the envelope of the
       entry point that received the request.

Exception Hierarchy:
    IdeaHubError (base)             → 500
    ├── ValidationError             → 400 Bad Request (missing/invalid input)
    ├── AuthenticationError         → 401 Unauthorized (no resolved caller)
    ├── PermissionDeniedError       → 403 Forbidden (caller lacks rights)
    ├── NotFoundError               → 404 Not Found
    ├── MethodNotAllowedError       → 405 Method Not Allowed
    └── DatabaseError               → 500 Internal Server Error
"""

from typing import Any, Dict, Iterable, Optional


class IdeaHubError(Exception):
    """
    Base exception for all Idea Hub application errors.

    Attributes:
        message:  User-facing error description (safe to return in API response)
        context:  Additional debug info (logged but NOT returned to client)
    """

    status_code: int = 500

    def __init__(
        self,
        message: str = "An unexpected error occurred",
        context: Optional[Dict[str, Any]] = None,
    ):
        self.message = message
        self.context = context or {}
        super().__init__(self.message)


class ValidationError(IdeaHubError):
    """
    Raised when client input fails validation.

    When:  Missing required fields, duplicate registration, collaborator cap
           reached, reply parent on another idea.
    HTTP:  400 Bad Request
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

    @classmethod
    def missing_fields(cls, fields: Iterable[str], message: Optional[str] = None) -> "ValidationError":
        """Builds the error raised by presence checks."""
        names = list(fields)
        return cls(
            message=message or f"Missing required fields: {', '.join(names)}",
            context={"missing": names},
        )


class AuthenticationError(IdeaHubError):
    """
    Raised when an operation needs a caller and none could be resolved,
    or when credentials do not match.

    HTTP:  401 Unauthorized
    """

    status_code = 401

    def __init__(
        self,
        message: str = "Authentication required",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class PermissionDeniedError(IdeaHubError):
    """
    Raised when the caller is known but may not act on the resource
    (editing someone else's comment, adding collaborators to another's idea).

    HTTP:  403 Forbidden
    """

    status_code = 403

    def __init__(
        self,
        message: str = "You do not have permission to perform this action",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class NotFoundError(IdeaHubError):
    """
    Raised when a requested resource does not exist.

    SQLAlchemy returns None for missing rows; services convert that into this
    exception so the handler can answer 404.
    """

    status_code = 404

    def __init__(
        self,
        resource: str = "resource",
        resource_id: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        message = f"{resource.capitalize()} not found"
        ctx = context or {}
        ctx["resource"] = resource
        if resource_id:
            ctx["resource_id"] = resource_id
        super().__init__(message=message, context=ctx)
        self.resource = resource


class MethodNotAllowedError(IdeaHubError):
    """Raised when a single-verb function is called with another verb. HTTP 405."""

    status_code = 405

    def __init__(
        self,
        allowed_methods: Optional[Iterable[str]] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        ctx = context or {}
        self.allowed_methods = sorted(allowed_methods or [])
        if self.allowed_methods:
            ctx["allowed_methods"] = self.allowed_methods
        super().__init__(message="Method not allowed", context=ctx)


class DatabaseError(IdeaHubError):
    """
    Raised when database operations fail unexpectedly.

    What:    A query, insert, or update failed (connection lost, constraint
             violation, deadlock).
    HTTP:    500 Internal Server Error

    The message is written for the API consumer; driver details stay in the
    server log via `context`.
    """

    status_code = 500

    def __init__(
        self,
        message: str = "A database error occurred. Please try again later.",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)
