"""
Centralized exception hierarchy for domain-specific errors.

Coverage-tracking errors are raised synchronously by the call that
detected them and are never retried inside the core. Provider failures
surface as ``ExternalServiceError`` from the HTTP clients.
"""


class StreetSweepError(Exception):
    """Base exception for all application-specific errors."""

    def __init__(self, message: str, details: dict | None = None) -> None:
        self.message = message
        self.details = details or {}
        super().__init__(self.message)


class ValidationError(StreetSweepError):
    """Exception raised when data validation fails."""


class InvalidGeometry(ValidationError):
    """A street segment does not describe a line (fewer than 2 coordinates)."""


class InvalidPosition(ValidationError):
    """A position sample has non-finite or out-of-range coordinates."""


class ExternalServiceError(StreetSweepError):
    """Exception raised when service calls fail."""


class RateLimitError(ExternalServiceError):
    """Exception raised when rate limits are exceeded."""


class ResourceNotFoundError(StreetSweepError):
    """Exception raised when a requested resource is not found."""


class ServiceUnavailableError(ExternalServiceError):
    """A provider could not be reached (connection failure or timeout)."""
