"""Custom exceptions for the Hive admin client."""

from typing import Optional


class HiveAdminError(Exception):
    """Base exception for admin client errors."""

    pass


class ConfigurationError(HiveAdminError):
    """Raised when required settings (base URL, client credentials) are missing."""

    pass


class MissingClientCredentials(ConfigurationError):
    """Raised when OAuth login is selected without a client id and secret."""

    pass


class ApiError(HiveAdminError):
    """Raised when the backend answers with a non-2xx status."""

    def __init__(self, message: str = "", status_code: Optional[int] = None, detail=None):
        super().__init__(message)
        self.status_code = status_code
        self.detail = detail


class AuthenticationRejected(ApiError):
    """Raised when the backend declines the login credentials."""

    pass


class AuthorizationExpired(ApiError):
    """Raised when a request stays unauthorized after the refresh attempt."""

    pass


class MalformedTokenResponse(HiveAdminError):
    """Raised when a token response carries no access token."""

    pass


class UnexpectedResponse(HiveAdminError):
    """Raised when a response body does not have the expected shape."""

    pass


class TransportError(HiveAdminError):
    """Raised on network, DNS or timeout failures."""

    pass


class StorageError(HiveAdminError):
    """Raised when the local store cannot be written."""

    pass
