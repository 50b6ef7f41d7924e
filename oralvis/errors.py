"""
Exception types shared by the client, session and upload layers.
"""

from typing import List, Optional


class ApiError(Exception):
    """A backend call failed (network error or non-2xx response)."""

    def __init__(self, status: Optional[int], message: Optional[str] = None, detail: str = ""):
        self.status = status
        self.message = message       # human-readable text from the backend, if any
        self.detail = detail
        super().__init__(message or detail or f"HTTP {status}")


class UploadError(ValueError):
    """Local validation failure, raised before any network call."""


class InvalidFormat(UploadError):
    pass


class TooLarge(UploadError):
    pass


class MissingFile(UploadError):
    pass


class MissingField(UploadError):
    def __init__(self, field: str, message: str):
        self.field = field
        self.message = message
        super().__init__(message)


class DraftInvalid(UploadError):
    """One or more metadata fields failed validation."""

    def __init__(self, errors: List[MissingField]):
        self.errors = errors
        super().__init__("; ".join(e.message for e in errors))

    def as_dict(self):
        return {e.field: e.message for e in self.errors}
