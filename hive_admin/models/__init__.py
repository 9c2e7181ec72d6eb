"""Data models for credentials, requests and identity resources."""

from .credentials import AuthMode, CredentialSet, TokenResponse
from .request import RequestContext
from .user import UserRead, CompanyRead, SecurityStats, Paginated

__all__ = [
    "AuthMode",
    "CredentialSet",
    "TokenResponse",
    "RequestContext",
    "UserRead",
    "CompanyRead",
    "SecurityStats",
    "Paginated",
]
