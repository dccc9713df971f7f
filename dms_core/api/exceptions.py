"""
Custom exceptions for the backend contract.
Both backends raise the same classes so callers stay backend-agnostic.
"""
from typing import Optional

GENERIC_ERROR_MESSAGE = "Something went wrong. Please try again."


class DMSError(Exception):
    """Base class for every error raised by the client core."""

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationError(DMSError):
    """Raised for local input problems (file type, size, mobile number, OTP)."""
    pass


class NotFoundError(DMSError):
    """Raised when a document, file or id does not exist."""
    pass


class DocumentNotFoundError(NotFoundError):
    """Raised when a document id is unknown to the backend."""

    def __init__(self, message: str = "Document not found"):
        super().__init__(message)


class FileOperationError(DMSError):
    """Raised when a filesystem copy/move/stat/mkdir fails."""
    pass


class NetworkError(DMSError):
    """Raised on connection failures and non-2xx responses from the remote service."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code


class NetworkTimeoutError(NetworkError):
    """Raised when a request exceeds its timeout."""
    pass


class ApiResponseError(DMSError):
    """Raised when the remote service answers 2xx but reports failure in its body."""
    pass


class ModeError(DMSError):
    """Raised when the active backend does not support the requested operation."""
    pass


def user_message(e: Exception) -> str:
    """
    Convert an exception into a message that can be shown to the user.
    This keeps screens free of error-class checks.
    """
    if isinstance(e, (ValidationError, NotFoundError, ModeError, ApiResponseError)):
        return e.message
    elif isinstance(e, NetworkTimeoutError):
        return "The request timed out. Please check your internet connection and try again."
    elif isinstance(e, NetworkError):
        return "Network error. Please check your internet connection and try again."
    elif isinstance(e, FileOperationError):
        return f"{e.message}. Please try again."
    else:
        return GENERIC_ERROR_MESSAGE
