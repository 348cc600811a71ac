"""Exceptions for files app.

Every error raised by the file service carries the HTTP status the
views answer with, and a message safe to show to the caller.
"""

from typing import ClassVar


class FileServiceError(Exception):
    """Base class for file service failures."""

    status_code: ClassVar[int] = 500
    default_message: ClassVar[str] = 'File operation failed'
    retryable: ClassVar[bool] = False

    def __init__(self, message: str | None = None) -> None:
        """Initialize the error.

        Args:
            message: Caller-facing message, defaults to the class message.
        """
        super().__init__(message or self.default_message)


class FileRecordNotFoundError(FileServiceError):
    """Raised when a file is absent or soft-deleted."""

    status_code = 404
    default_message = 'File not found'


class FileAccessDeniedError(FileServiceError):
    """Raised when the access policy denies the caller."""

    status_code = 403
    default_message = 'You do not have permission to access this file'


class AuthenticationRequiredError(FileServiceError):
    """Raised when an anonymous caller requests a non-public file."""

    status_code = 401
    default_message = 'Authentication required'


class InvalidInputError(FileServiceError):
    """Raised for request values outside the accepted sets."""

    status_code = 400
    default_message = 'Invalid request'


class InvalidUploadError(InvalidInputError):
    """Raised for disallowed MIME types, sizes or file contents."""

    default_message = 'Invalid upload'


class StorageFailureError(FileServiceError):
    """Raised when the blob store cannot be read or written."""

    status_code = 500
    default_message = 'File storage is unavailable'


class StorageConflictError(FileServiceError):
    """Raised when a storage key collides with an existing one.

    The caller may retry the upload: a fresh key is generated each time.
    """

    status_code = 409
    default_message = 'Storage key conflict, please retry the upload'
    retryable = True


class UploadRateLimitedError(FileServiceError):
    """Raised when a user exceeds the upload rate limit."""

    status_code = 429
    default_message = 'Too many uploads, please try again later'
