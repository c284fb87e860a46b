"""
Base exception classes for the EcoLearn backend.

Each module should define its own exceptions that inherit from these bases.
Every exception carries an HTTP status and a stable machine-readable code so
the API error boundary can translate it without per-route formatting.
"""

from typing import Optional, Any


class EcoLearnError(Exception):
    """
    Base exception for all EcoLearn errors.

    All custom exceptions should inherit from this class.
    """

    status_code: int = 500

    def __init__(
        self,
        message: str,
        code: Optional[str] = None,
        details: Optional[dict[str, Any]] = None,
    ):
        super().__init__(message)
        self.message = message
        self.code = code or self.__class__.__name__
        self.details = details or {}

    def to_dict(self) -> dict[str, Any]:
        """Convert exception to the error envelope used in API responses."""
        body: dict[str, Any] = {
            "success": False,
            "error": self.message,
            "code": self.code,
        }
        if self.details:
            body["details"] = self.details
        return body


class ValidationError(EcoLearnError):
    """Input validation failed."""

    status_code = 400


class AuthenticationError(EcoLearnError):
    """Authentication failed (invalid or missing credentials)."""

    status_code = 401


class AuthorizationError(EcoLearnError):
    """Authorization failed (insufficient permissions)."""

    status_code = 403


class NotFoundError(EcoLearnError):
    """Resource not found."""

    status_code = 404


class ConflictError(EcoLearnError):
    """Resource already exists or violates a uniqueness constraint."""

    status_code = 409


class ConfigurationError(EcoLearnError):
    """
    Required configuration is missing or unsafe.

    Raised during startup; the process must not serve requests after this.
    """

    status_code = 500
