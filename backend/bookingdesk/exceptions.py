"""
BookingDesk Backend — Custom Exception Hierarchy
==================================================

What:  Application-specific exceptions for every error the core can produce.
How:   Each exception carries a message and optional context dict.
       Global exception handlers (registered in main.py) catch these and
       return `{"error": <message>}` with the matching HTTP status code.
Who:   Raised by repositories, the image manager and the auth gate.
When:  During request processing when an expected failure occurs.

Exception Hierarchy:
    BookingDeskError (base)
    ├── ValidationError            → 400 Bad Request
    ├── NotFoundError              → 404 Not Found
    ├── AuthenticationError        → 401 Unauthorized ("invalid credentials")
    │   ├── TokenExpiredError      → 401 ("token expired")
    │   └── EmailNotVerifiedError  → 401 ("email not verified")
    ├── MethodNotImplementedError  → 501 Not Implemented
    ├── StoreError                 → 500 Internal Server Error
    └── ObjectStoreError           → 500 Internal Server Error

Collaborator-level signals live next to the collaborator interfaces:
    DocumentNotFoundError, ObjectNotFoundError, InvalidCredentialsError.
Services translate those into the classes above; nothing matches errors by
message text or identity.
"""

from typing import Any, Dict, Optional


class BookingDeskError(Exception):
    """
    Base exception for all BookingDesk application errors.

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


class ValidationError(BookingDeskError):
    """
    Raised when client input fails a validation rule.

    The message names the violated rule, e.g. "name cannot be empty",
    "invalid category", "no image provided".
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


class NotFoundError(BookingDeskError):
    """
    Raised when a requested record or blob does not exist.

    Only read paths raise this. Deleting a missing record succeeds silently.
    """

    status_code = 404

    def __init__(
        self,
        resource: str = "resource",
        resource_id: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        ctx = context or {}
        ctx["resource"] = resource
        if resource_id is not None:
            ctx["resource_id"] = resource_id
        super().__init__(message=f"{resource} not found", context=ctx)
        self.resource = resource
        self.resource_id = resource_id


class AuthenticationError(BookingDeskError):
    """
    Raised by the auth gate when the bearer credential is rejected.

    Subclasses keep distinct messages for the log, all surface as 401.
    """

    status_code = 401

    def __init__(
        self,
        message: str = "invalid credentials",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class TokenExpiredError(AuthenticationError):
    """The credential verified but its expiry is at or before now."""

    def __init__(self, expires_at: Optional[int] = None):
        ctx = {"expires_at": expires_at} if expires_at is not None else None
        super().__init__(message="token expired", context=ctx)


class EmailNotVerifiedError(AuthenticationError):
    """The credential verified but the subject's email is not verified."""

    def __init__(self, subject: Optional[str] = None):
        ctx = {"subject": subject} if subject else None
        super().__init__(message="email not verified", context=ctx)


class MethodNotImplementedError(BookingDeskError):
    """Raised by a resource router for HTTP methods it does not dispatch."""

    status_code = 501

    def __init__(self, method: str):
        super().__init__(message=f"{method} not implemented", context={"method": method})
        self.method = method


class StoreError(BookingDeskError):
    """
    Raised when the document store fails for any reason other than absence.

    Security Note:
        The message returned to the client is always generic.
        The underlying cause is kept in `context` and logged server-side.
    """

    def __init__(
        self,
        message: str = "A storage error occurred. Please try again later.",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class ObjectStoreError(BookingDeskError):
    """
    Raised when the object store cannot write or read a blob.

    Like StoreError, the cause is logged and never returned to the client.
    """

    def __init__(
        self,
        message: str = "Image storage operation failed",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)
