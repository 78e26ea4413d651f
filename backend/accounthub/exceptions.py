"""
AccountHub Backend — Custom Exception Hierarchy
=================================================

What:  Defines application-specific exceptions for different error scenarios.
Why:   Custom exceptions enable targeted error handling with appropriate HTTP
       status codes and user-friendly messages.
How:   Each exception class carries a message and optional context dict.
       Global exception handlers (registered in main.py) catch these and
       return structured JSON error responses with correct HTTP status codes.
Who:   Raised by routes, services and managers; caught by global handlers.

Exception Hierarchy:
    AccountHubError (base)
    ├── ValidationError          → 400 Bad Request (client can fix)
    │   └── FormValidationError  → 400 Bad Request (per-field errors from a bound form)
    ├── NotFoundError            → 404 Not Found
    ├── DatabaseError            → 500 Internal Server Error
    └── RateLimitExceededError   → 429 Too Many Requests

Services that have more than one expected outcome (the group write pipeline)
return a tagged result instead; routes turn the failure variants into these
exceptions so every error reaches the client in the same shape.
"""

from typing import Any, Dict, List, Optional


class AccountHubError(Exception):
    """
    Base exception for all AccountHub application errors.

    Attributes:
        message:  User-facing error description (safe to return in API response)
        context:  Additional debug info
    """

    def __init__(
        self,
        message: str = "An unexpected error occurred",
        context: Optional[Dict[str, Any]] = None,
    ):
        self.message = message
        self.context = context or {}
        super().__init__(self.message)


class ValidationError(AccountHubError):
    """
    Raised when client input fails validation.

    When:    Malformed orderBy parameter, invalid form payload.
    HTTP:    400 Bad Request

    Example response:
        {
            "error": "validation_error",
            "message": "Invalid sort direction 'up' for 'name'. Use ASC or DESC.",
            "details": {"field": "orderBy"}
        }
    """

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


class FormValidationError(ValidationError):
    """
    Raised when a bound form is invalid.

    Carries the structured per-field failure set so the client can show
    every problem at once:
        {"details": {"errors": [{"field": "name", "message": "..."}]}}
    """

    def __init__(
        self,
        errors: List[Dict[str, str]],
        message: str = "Submitted data is invalid",
    ):
        super().__init__(message=message, context={"errors": errors})
        self.errors = errors


class NotFoundError(AccountHubError):
    """
    Raised when a requested resource does not exist.

    When:    GET /group/{id} with an unknown id, unknown confirmation token.
    HTTP:    404 Not Found

    Managers return None for missing records; services convert that into
    this exception so the same 404 is produced wherever an id is supplied.
    """

    def __init__(
        self,
        resource: str = "resource",
        resource_id: Optional[Any] = None,
        message: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        if message is None:
            message = f"The requested {resource} was not found"
            if resource_id is not None:
                message = f"{resource} with ID '{resource_id}' was not found"
        ctx = context or {}
        ctx["resource"] = resource
        if resource_id is not None:
            ctx["resource_id"] = str(resource_id)
        super().__init__(message=message, context=ctx)


class DatabaseError(AccountHubError):
    """
    Raised when database operations fail unexpectedly.

    HTTP:    500 Internal Server Error

    The message returned to the client is always generic; the context
    (operation, original error type) is logged server-side only.
    """

    def __init__(
        self,
        message: str = "A database error occurred. Please try again later.",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class RateLimitExceededError(AccountHubError):
    """
    Raised when a client exceeds the per-IP request rate limit.

    HTTP:    429 Too Many Requests (with Retry-After header)
    """

    def __init__(
        self,
        retry_after: int = 60,
        context: Optional[Dict[str, Any]] = None,
    ):
        message = (
            f"Rate limit exceeded. Please wait {retry_after} seconds before making more requests."
        )
        ctx = context or {}
        ctx["retry_after"] = retry_after
        super().__init__(message=message, context=ctx)
        self.retry_after = retry_after
