"""
Pastebin Backend - Custom Exception Hierarchy
==============================================

What:  Application-specific exceptions for each failure the service can report.
How:   Each exception carries a client-safe message and an optional context
       dict. Global handlers registered in main.py turn them into JSON error
       responses with the matching HTTP status code.
Who:   Raised by the store, cache and service layers; caught by global handlers.

Exception Hierarchy:
    PastebinError (base)
    ├── ValidationError          → 400 Bad Request
    ├── UnauthenticatedError     → 403 Forbidden (no identity present)
    ├── ForbiddenError           → 403 Forbidden (identity is not the owner)
    ├── NotFoundError            → 404 Not Found
    ├── StoreUnavailableError    → 500 Internal Server Error
    ├── RequestTimeoutError      → 504 Gateway Timeout
    └── IdCollisionError         (internal: consumed by PasteService)
"""

from typing import Any, Dict, Optional


class PastebinError(Exception):
    """
    Base exception for all Pastebin application errors.

    Attributes:
        message:  User-facing error description (safe to return in API response)
        context:  Additional debug info (logged but NOT returned to client)
    """

    def __init__(
        self,
        message: str = "An unexpected error occurred",
        context: Optional[Dict[str, Any]] = None,
    ):
        self.message = message
        self.context = context or {}
        super().__init__(self.message)


class ValidationError(PastebinError):
    """
    Raised when client input fails validation.

    When:    Missing paste contents, oversized body, missing paste id in a path.
    HTTP:    400 Bad Request
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


class UnauthenticatedError(PastebinError):
    """
    Raised when an operation needs an acting identity and none was supplied.

    HTTP:    403 Forbidden (the pastebin has never answered 401 for this)
    """

    def __init__(
        self,
        message: str = "Login required",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class ForbiddenError(PastebinError):
    """
    Raised when the acting identity may not perform the action.

    When:    Deleting a paste created by someone else.
    HTTP:    403 Forbidden
    """

    def __init__(
        self,
        message: str = "Invalid deletion attempt... only paste owners can delete pastes",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class NotFoundError(PastebinError):
    """
    Raised when a requested resource does not exist.

    When:    GET /{id} or DELETE /update/{id} for an id with no stored paste.
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
        self.resource_id = resource_id


class StoreUnavailableError(PastebinError):
    """
    Raised when the paste store fails unexpectedly.

    When:    Connection lost mid-query, pool exhausted, unexpected constraint error.
    HTTP:    500 Internal Server Error

    The client always receives a generic message; the underlying driver
    error is logged server-side through `context`.
    """

    def __init__(
        self,
        message: str = "A storage error occurred. Please try again later.",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class RequestTimeoutError(PastebinError):
    """
    Raised when a service operation exceeds its deadline.

    HTTP:    504 Gateway Timeout
    """

    def __init__(
        self,
        operation: str = "request",
        timeout: Optional[float] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        ctx = context or {}
        ctx["operation"] = operation
        if timeout is not None:
            ctx["timeout_seconds"] = timeout
        super().__init__(
            message="The request took too long to complete. Please try again.",
            context=ctx,
        )
        self.operation = operation
        self.timeout = timeout


class IdCollisionError(PastebinError):
    """
    Raised by the store when a conditional insert finds the id already taken.

    Never reaches a client: PasteService catches it and generates a new id.
    """

    def __init__(
        self,
        paste_id: str,
        context: Optional[Dict[str, Any]] = None,
    ):
        ctx = context or {}
        ctx["paste_id"] = paste_id
        super().__init__(message=f"Paste id '{paste_id}' is already in use", context=ctx)
        self.paste_id = paste_id
