"""Typed exceptions for the lead intake pipeline."""


class FusionCallerError(Exception):
    """Base class for pipeline errors. Carries the HTTP status it maps to."""

    status_code: int = 500

    def __init__(self, message: str):
        self.message = message
        super().__init__(message)


class ValidationError(FusionCallerError):
    """Missing or malformed input. Raised before any side effect."""

    status_code = 400


class AuthenticationError(ValidationError):
    """Webhook secret mismatch."""

    status_code = 401


class NotFoundError(FusionCallerError):
    """
    Organization or lead absent.

    Also raised when a lead exists but belongs to another organization;
    callers cannot tell the two cases apart.
    """

    status_code = 404


class DownstreamError(FusionCallerError):
    """Classification or dialer service failure. Absorbed at the call site."""

    status_code = 502


class PersistenceError(FusionCallerError):
    """Database write failed."""

    status_code = 500
