"""
Exceptions raised by the reporter.

API-facing errors carry an HTTP status code so the handlers in main.py can
render them without knowing every subclass.
"""

from typing import Iterable, List, Optional


class APIException(Exception):
    """Base class for errors that map onto an HTTP response."""

    def __init__(self, message: str, status_code: int = 400):
        self.message = message
        self.status_code = status_code
        super().__init__(self.message)


class InvalidImageError(APIException):
    """Uploaded file is not an image we can accept."""

    def __init__(self, message: str = "Invalid image format"):
        super().__init__(message, 400)


class FileSizeError(APIException):
    """Uploaded file exceeds MAX_UPLOAD_BYTES."""

    def __init__(self, message: str = "File size too large"):
        super().__init__(message, 413)


class ReportValidationError(APIException):
    """
    Report is missing required data (image, infraction type, license plate)
    or references an unknown infraction type.
    """

    def __init__(self, missing_fields: Iterable[str] = (), message: Optional[str] = None):
        self.missing_fields: List[str] = list(missing_fields)
        if message is None:
            message = f"Report is incomplete. Missing required fields: {', '.join(self.missing_fields)}"
        super().__init__(message, 422)


class InvalidTransitionError(ValueError):
    """Raised when a pipeline event is not allowed in the current step."""

    def __init__(self, from_step: str, to_step: str, allowed: List[str]):
        self.from_step = from_step
        self.to_step = to_step
        self.allowed = allowed
        super().__init__(
            f"Invalid step transition: {from_step} → {to_step}. "
            f"Allowed transitions from {from_step}: {allowed}"
        )
