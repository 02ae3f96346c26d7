"""
Error Handling Module

Defines domain exceptions and the client-facing error categories.
Domain exceptions are pure and have no external dependencies. Client-facing
messages are deliberately generic: backend detail belongs in the server log,
never in a response body.
"""

from enum import Enum
from typing import Dict, Tuple


class ErrorCategory(Enum):
    """Error category enumeration for upload responses."""

    MISSING_FILE = "missing_file"
    UNSUPPORTED_FILE_TYPE = "unsupported_file_type"
    FILE_TOO_LARGE = "file_too_large"
    UPLOAD_FAILED = "upload_failed"


# Client-facing messages and HTTP status codes
ERROR_MESSAGES: Dict[ErrorCategory, Dict[str, object]] = {
    ErrorCategory.MISSING_FILE: {
        "message": "No file",
        "status_code": 400,
    },
    ErrorCategory.UNSUPPORTED_FILE_TYPE: {
        "message": "Unsupported file type",
        "status_code": 400,
    },
    ErrorCategory.FILE_TOO_LARGE: {
        "message": "File too large",
        "status_code": 413,
    },
    ErrorCategory.UPLOAD_FAILED: {
        "message": "Upload failed",
        "status_code": 500,
    },
}


# ============================================================================
# Domain Exceptions (Pure - No External Dependencies)
# ============================================================================

class DomainError(Exception):
    """
    Base exception for all domain errors.

    Domain exceptions can optionally wrap the original error for context
    (logged server-side only).
    """

    def __init__(self, message: str, original_error: Exception = None):
        """
        Initialize domain error.

        Args:
            message: Error message
            original_error: Optional original exception that caused this error
        """
        super().__init__(message)
        self.original_error = original_error


# --- Upload validation ------------------------------------------------------

class UploadRejectedError(DomainError):
    """Base class for uploads rejected before anything is written to storage."""

    category = ErrorCategory.UPLOAD_FAILED


class MissingFileError(UploadRejectedError):
    """Raised when the upload request carries no file."""

    category = ErrorCategory.MISSING_FILE


class UnsupportedFileTypeError(UploadRejectedError):
    """Raised when the declared MIME type is not image/, audio/ or video/."""

    category = ErrorCategory.UNSUPPORTED_FILE_TYPE


class FileTooLargeError(UploadRejectedError):
    """Raised when the upload exceeds the configured size limit."""

    category = ErrorCategory.FILE_TOO_LARGE


# --- Blob store --------------------------------------------------------------

class BlobStoreError(DomainError):
    """Base exception for object storage failures."""
    pass


class StorageWriteError(BlobStoreError):
    """Raised when the backend fails while storing an object."""
    pass


class ObjectAlreadyExistsError(BlobStoreError):
    """Raised when a put would overwrite an existing object without upsert."""
    pass


class ObjectNotFoundError(BlobStoreError):
    """Raised when the requested object does not exist."""
    pass


class StorageError(BlobStoreError):
    """Raised on transient backend failures (signing, deleting, listing)."""
    pass


# --- Link registry -----------------------------------------------------------

class LinkRegistryError(DomainError):
    """Raised when the link registry backend cannot complete a write."""
    pass


class DuplicateIdError(LinkRegistryError):
    """
    Raised by LinkRegistry.insert when the id is already taken.

    Only ever seen inside the registry's own retry loop.
    """
    pass


# --- Signed tokens -----------------------------------------------------------

class TokenError(DomainError):
    """Base exception for self-contained token decoding failures."""
    pass


class MalformedTokenError(TokenError):
    """Raised when a token is structurally invalid or its payload unreadable."""
    pass


class InvalidSignatureError(TokenError):
    """Raised when a token's authentication tag does not match its payload."""
    pass


def create_error_response(category: ErrorCategory) -> Tuple[Dict[str, object], int]:
    """
    Create the JSON error body for the upload endpoint.

    Args:
        category: Error category

    Returns:
        Tuple of (error_dict, status_code)
    """
    error_info = ERROR_MESSAGES.get(category, ERROR_MESSAGES[ErrorCategory.UPLOAD_FAILED])
    return {"success": False, "message": error_info["message"]}, error_info["status_code"]
