"""
Product API - Custom Exception Hierarchy
==========================================

What:  Application-specific exceptions for the failure modes of the product API.
How:   Each exception carries a message and an optional context dict.
       Global exception handlers (registered in main.py) catch these and
       return structured JSON error responses with the matching status code.
Who:   Raised by the store and the product service; caught by global handlers.

Exception Hierarchy:
    ProductApiError (base)
    ├── ValidationError   → 400 Bad Request
    ├── InvalidIdError    → 400 Bad Request ("Invalid ID")
    ├── NotFoundError     → 404 Not Found
    └── DatabaseError     → 500 Internal Server Error
"""

from typing import Any, Dict, Optional


class ProductApiError(Exception):
    """
    Base exception for all Product API errors.

    Attributes:
        message:  User-facing error description (safe to return in API response)
        context:  Additional debug info (logged, only returned for client errors)
    """

    code = "server_error"

    def __init__(
        self,
        message: str = "An unexpected error occurred",
        context: Optional[Dict[str, Any]] = None,
    ):
        self.message = message
        self.context = context or {}
        super().__init__(self.message)


class ValidationError(ProductApiError):
    """
    Raised when client input fails validation.

    When:    Missing required fields on create/replace, invalid values,
             or a write rejected by a store constraint.
    HTTP:    400 Bad Request

    Example response:
        {
            "error": "PUT requires full object: name, buyer, price, location",
            "code": "validation_error",
            "details": {"missing": ["price"]}
        }
    """

    code = "validation_error"

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


class InvalidIdError(ProductApiError):
    """
    Raised when a path identifier is not in the store's id format.

    HTTP:    400 Bad Request (never 404: a malformed id cannot name a record)
    """

    code = "invalid_id"

    def __init__(
        self,
        raw_id: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        ctx = context or {}
        if raw_id is not None:
            ctx["id"] = raw_id
        super().__init__(message="Invalid ID", context=ctx)
        self.raw_id = raw_id


class NotFoundError(ProductApiError):
    """
    Raised when a requested resource does not exist.

    When:    GET/HEAD/PUT/PATCH/DELETE /products/{id} with an unknown id.
    HTTP:    404 Not Found

    The store returns None for missing records; the service converts that
    None into this exception.
    """

    code = "not_found"

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


class DatabaseError(ProductApiError):
    """
    Raised when store operations fail unexpectedly.

    When:    Connection lost mid-query, driver error, timeout.
    HTTP:    500 Internal Server Error

    The message returned to the client is always generic; the driver error
    is logged server-side only.
    """

    code = "server_error"

    def __init__(
        self,
        message: str = "A database error occurred. Please try again later.",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)
