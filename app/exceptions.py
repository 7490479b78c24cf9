"""
Market Registry Backend — Custom Exception Hierarchy
======================================================

What:  Application-specific exceptions for the different error scenarios.
How:   Each exception carries a message and optional context dict. Global
       exception handlers (registered in main.py) turn them into structured
       JSON error responses with the right HTTP status code.
Who:   Raised by services and dependencies; caught by global handlers.

Exception Hierarchy:
    MarketRegistryError (base)
    ├── ValidationError          → 400 Bad Request
    ├── AuthenticationError      → 401 Unauthorized
    ├── PermissionDeniedError    → 403 Forbidden
    ├── NotFoundError            → 404 Not Found
    ├── InvalidTransitionError   → 409 Conflict
    └── DatabaseError            → 500 Internal Server Error
"""

from typing import Any, Dict, Optional


class MarketRegistryError(Exception):
    """
    Base exception for all application errors.

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


class ValidationError(MarketRegistryError):
    """
    Raised when client input fails a business rule.

    When:    Duplicate email, blank stall number on approval, unknown user or
             market referenced by a vendor application.
    HTTP:    400 Bad Request (schema-level problems stay FastAPI's 422)
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


class AuthenticationError(MarketRegistryError):
    """
    Raised when credentials are wrong or the acting user cannot be identified.

    HTTP:    401 Unauthorized
    """

    def __init__(
        self,
        message: str = "Invalid credentials",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class PermissionDeniedError(MarketRegistryError):
    """
    Raised when the actor's role may not perform a transition that exists
    for the record's current status.

    HTTP:    403 Forbidden
    """

    def __init__(
        self,
        role: str,
        action: str,
        context: Optional[Dict[str, Any]] = None,
    ):
        message = f"Role '{role}' is not allowed to {action}"
        ctx = context or {}
        ctx["role"] = role
        super().__init__(message=message, context=ctx)
        self.role = role


class NotFoundError(MarketRegistryError):
    """
    Raised when a requested resource does not exist.

    HTTP:    404 Not Found
    """

    def __init__(
        self,
        resource: str = "resource",
        resource_id: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        message = f"The requested {resource} was not found"
        if resource_id:
            message = f"{resource} with ID '{resource_id}' was not found"
        ctx = context or {}
        ctx["resource"] = resource
        if resource_id:
            ctx["resource_id"] = resource_id
        super().__init__(message=message, context=ctx)


class InvalidTransitionError(MarketRegistryError):
    """
    Raised when a status change is not part of the entity's workflow.

    What:    e.g. moving a pending market straight to approved.
    HTTP:    409 Conflict (the record's current state forbids the change)

    Context carries the statuses the actor could move the record to, so the
    client can render the right buttons after a stale view.
    """

    def __init__(
        self,
        entity: str,
        current_status: str,
        requested_status: str,
        allowed: Optional[list] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        message = (
            f"Cannot move {entity} from '{current_status}' to '{requested_status}'"
        )
        ctx = context or {}
        ctx.update(
            {
                "entity": entity,
                "current_status": current_status,
                "requested_status": requested_status,
                "allowed": allowed or [],
            }
        )
        super().__init__(message=message, context=ctx)
        self.current_status = current_status
        self.requested_status = requested_status


class DatabaseError(MarketRegistryError):
    """
    Raised when database operations fail unexpectedly.

    HTTP:    500 Internal Server Error

    The message returned to the client is fixed per operation; the original
    exception type is kept in context and logged server-side only.
    """

    def __init__(
        self,
        message: str = "A database error occurred. Please try again later.",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)
