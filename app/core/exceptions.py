"""Custom exception hierarchy.

Every error carries the HTTP status the API layer answers with, so the
exception handler in ``app.main`` can render any of them as
``{"error": message}`` without a lookup table.
"""

from typing import Optional


class AppError(Exception):
    """Base exception for application errors."""

    status_code: int = 500

    def __init__(self, message: str, original_error: Optional[Exception] = None):
        super().__init__(message)
        self.message = message
        self.original_error = original_error


class ValidationError(AppError):
    """Raised when input validation fails."""

    status_code = 400


class NotFoundError(AppError):
    """Raised when a requested record does not exist."""

    status_code = 404


class ConfigurationError(AppError):
    """Raised when configuration is invalid or missing."""
    pass


class DatabaseError(AppError):
    """Raised when a database operation fails."""
    pass


class StorageError(AppError):
    """Raised when an object storage call fails."""
    pass


class AIGatewayError(AppError):
    """Raised when the AI gateway answers with an unexpected status."""

    def __init__(
        self,
        message: str,
        gateway_status: Optional[int] = None,
        original_error: Optional[Exception] = None,
    ):
        super().__init__(message, original_error=original_error)
        self.gateway_status = gateway_status


class RateLimitExceededError(AIGatewayError):
    """The AI gateway rejected the call with HTTP 429."""

    status_code = 429


class CreditsExhaustedError(AIGatewayError):
    """The AI gateway rejected the call with HTTP 402."""

    status_code = 402


class ExtractionError(AppError):
    """The AI answered but produced no usable structured result."""
    pass
