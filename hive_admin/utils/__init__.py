"""Utility functions and configurations."""

from .logging_config import setup_logging
from .exceptions import (
    HiveAdminError,
    ConfigurationError,
    MissingClientCredentials,
    ApiError,
    AuthenticationRejected,
    AuthorizationExpired,
    MalformedTokenResponse,
    UnexpectedResponse,
    TransportError,
    StorageError,
)

__all__ = [
    "setup_logging",
    "HiveAdminError",
    "ConfigurationError",
    "MissingClientCredentials",
    "ApiError",
    "AuthenticationRejected",
    "AuthorizationExpired",
    "MalformedTokenResponse",
    "UnexpectedResponse",
    "TransportError",
    "StorageError",
]
