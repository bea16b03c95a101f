"""Core module - Configuration, errors and resolution helpers."""

from fusioncaller.core.config import get_settings, Settings
from fusioncaller.core.exceptions import (
    FusionCallerError,
    ValidationError,
    AuthenticationError,
    NotFoundError,
    DownstreamError,
    PersistenceError,
)
from fusioncaller.core.resolvers import first_non_empty, secrets_match

__all__ = [
    "get_settings",
    "Settings",
    "FusionCallerError",
    "ValidationError",
    "AuthenticationError",
    "NotFoundError",
    "DownstreamError",
    "PersistenceError",
    "first_non_empty",
    "secrets_match",
]
