"""Resource wrappers over the admin API."""

from .endpoints import (
    HiveClient,
    AuthApi,
    UsersApi,
    CompaniesApi,
    RolesApi,
    PermissionsApi,
    AdminApi,
    OAuthClientsApi,
    IntegrationApi,
)

__all__ = [
    "HiveClient",
    "AuthApi",
    "UsersApi",
    "CompaniesApi",
    "RolesApi",
    "PermissionsApi",
    "AdminApi",
    "OAuthClientsApi",
    "IntegrationApi",
]
