"""Error kinds raised by services and converted to JSON responses by the app."""

from typing import Any


class ContentOpsError(Exception):
    """Base error. ``status_code`` and ``extra`` shape the JSON error body."""

    status_code = 500

    def __init__(self, message: str, **extra: Any):
        super().__init__(message)
        self.message = message
        self.extra = extra

    def to_dict(self) -> dict[str, Any]:
        return {"error": self.message, **self.extra}


class ValidationError(ContentOpsError):
    status_code = 400


class AuthenticationError(ContentOpsError):
    status_code = 401


class PermissionDenied(ContentOpsError):
    status_code = 403


class NotFoundError(ContentOpsError):
    status_code = 404


class ConflictError(ContentOpsError):
    status_code = 400


class InvalidTransition(ConflictError):
    """Raised when a job status change is not allowed from the current state."""


class ConfigurationError(ContentOpsError):
    status_code = 500


class UpstreamError(ContentOpsError):
    """WordPress or n8n answered with an error or could not be reached."""

    status_code = 502


class UniqueConstraintViolation(Exception):
    """Raised by the storage layer when an insert or update hits a unique constraint."""

    def __init__(self, constraint: str):
        super().__init__(f"Unique constraint violated: {constraint}")
        self.constraint = constraint
