"""Custom exception classes for the staff directory.

Every error carries the HTTP status it maps to; a single handler in
``main.py`` turns them into ``{"detail": ..., "error": ...}`` responses.
"""

from fastapi import status


class DirectoryError(Exception):
    """Base exception for the staff directory."""

    status_code: int = status.HTTP_400_BAD_REQUEST
    kind: str = "error"

    def __init__(self, message: str = "An error occurred"):
        self.message = message
        super().__init__(self.message)


class ValidationError(DirectoryError):
    """Raised when input is missing or malformed."""
    kind = "validation_error"


class ReservedNameError(DirectoryError):
    """Raised when a new column would reuse a protected column name."""
    kind = "reserved_name"


class ProtectedColumnError(DirectoryError):
    """Raised when a protected column is targeted for removal."""
    kind = "protected"


class ResourceConflictError(DirectoryError):
    """Raised when a resource already exists."""
    kind = "conflict"


class NoOpError(DirectoryError):
    """Raised when an update request carries nothing to change."""
    kind = "no_op"


class SelfModificationError(DirectoryError):
    """Raised when an administrator targets their own account."""
    kind = "self_modification"


class OwnerProtectedError(DirectoryError):
    """Raised when an owner account is targeted for deletion."""
    kind = "owner_protected"


class ResourceNotFoundError(DirectoryError):
    """Raised when a requested resource is not found."""
    status_code = status.HTTP_404_NOT_FOUND
    kind = "not_found"


class AuthenticationError(DirectoryError):
    """Raised when the caller is not authenticated."""
    status_code = status.HTTP_401_UNAUTHORIZED
    kind = "unauthorized"

    def __init__(self, message: str = "Not authenticated"):
        super().__init__(message)


class AuthorizationError(DirectoryError):
    """Raised when the caller lacks the required role."""
    status_code = status.HTTP_403_FORBIDDEN
    kind = "forbidden"

    def __init__(self, message: str = "Owner access required"):
        super().__init__(message)


class SchemaAlterationError(DirectoryError):
    """Raised when the database rejects a column alteration.

    The storage engine's message is passed through to the caller.
    """
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    kind = "schema_alteration_failed"
