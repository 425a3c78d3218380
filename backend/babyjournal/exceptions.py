"""
BabyJournal Backend — Custom Exception Hierarchy
=================================================

What:  Application-specific exceptions for each failure class.
How:   Each exception carries a user-facing message and an optional context
       dict. Global exception handlers (registered in main.py) map them to
       HTTP status codes and a consistent JSON error body.
Who:   Raised by services and dependencies; caught by global handlers.

Exception Hierarchy:
    BabyJournalError (base)
    ├── ValidationError          → 400 Bad Request (malformed/missing input)
    ├── UnauthenticatedError     → 401 Unauthorized (no session identity)
    ├── ForbiddenError           → 403 Forbidden (role insufficient)
    │   └── AccessDeniedError    → 403 Forbidden (no role on the journal)
    ├── NotFoundError            → 404 Not Found (absent or in another journal)
    ├── ConflictError            → 409 Conflict (unique constraint)
    ├── FileStorageError         → 500 Internal Server Error
    └── DatabaseError            → 500 Internal Server Error
"""

from typing import Any, Dict, Optional


class BabyJournalError(Exception):
    """
    Base exception for all BabyJournal application errors.

    Attributes:
        message:  User-facing error description (safe to return in API response)
        context:  Additional debug info (logged, only partially returned)
    """

    status_code = 500
    error_code = "server_error"

    def __init__(
        self,
        message: str = "An unexpected error occurred",
        context: Optional[Dict[str, Any]] = None,
    ):
        self.message = message
        self.context = context or {}
        super().__init__(self.message)


class ValidationError(BabyJournalError):
    """
    Raised when client input is malformed or a required value is missing.

    When:    Missing journal id, missing upload, unsupported file type,
             sharing a journal with yourself, bad credentials.
    HTTP:    400 Bad Request
    """

    status_code = 400
    error_code = "validation_error"

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


class UnauthenticatedError(BabyJournalError):
    """
    Raised when a request needs an identity and the session has none.

    HTTP:    401 Unauthorized
    """

    status_code = 401
    error_code = "unauthenticated"

    def __init__(
        self,
        message: str = "Authentication required. Please log in.",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class ForbiddenError(BabyJournalError):
    """
    Raised when the requester is known but their role is insufficient.

    When:    A reader tries to delete an event, an editor tries to export,
             a non-admin reads site settings, registrations are closed.
    HTTP:    403 Forbidden
    """

    status_code = 403
    error_code = "forbidden"

    def __init__(
        self,
        message: str = "You do not have permission to perform this action.",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class AccessDeniedError(ForbiddenError):
    """
    Raised by the access resolver when the requester holds no role at all
    on the requested journal.
    """

    error_code = "access_denied"

    def __init__(
        self,
        journal_id: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        ctx = context or {}
        if journal_id:
            ctx["journal_id"] = journal_id
        super().__init__(
            message="Access denied to the requested journal.",
            context=ctx,
        )


class NotFoundError(BabyJournalError):
    """
    Raised when a requested resource does not exist.

    Resources scoped to a journal (events, memories) that exist under a
    different journal are reported with this error too, so ids never leak
    across journals.
    HTTP:    404 Not Found
    """

    status_code = 404
    error_code = "not_found"

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


class ConflictError(BabyJournalError):
    """
    Raised when a write violates a uniqueness rule (e.g. duplicate email).

    HTTP:    409 Conflict
    """

    status_code = 409
    error_code = "conflict"

    def __init__(
        self,
        message: str = "The resource already exists.",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class FileStorageError(BabyJournalError):
    """
    Raised when file system operations fail.

    When:    Disk full, permission denied, media directory could not be
             removed, thumbnail or archive could not be written.
    HTTP:    500 Internal Server Error

    The response carries a generic message; paths and OS errors are
    logged server-side only.
    """

    def __init__(
        self,
        message: str = "File storage operation failed",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class DatabaseError(BabyJournalError):
    """
    Raised when database operations fail unexpectedly.

    When:    Connection lost mid-query, or a row vanished between the read
             and the delete of a multi-step mutation.
    HTTP:    500 Internal Server Error
    """

    def __init__(
        self,
        message: str = "A database error occurred. Please try again later.",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)
