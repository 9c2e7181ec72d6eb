"""Credential and token data models."""

from enum import Enum
from typing import Optional
from pydantic import BaseModel, ConfigDict, Field


class AuthMode(str, Enum):
    """Grant flow used to exchange operator credentials for tokens."""

    PASSWORD_GRANT = "password_grant"
    OAUTH_CLIENT_GRANT = "oauth_client_grant"


class TokenResponse(BaseModel):
    """Token payload returned by the login, OAuth token and refresh endpoints."""

    model_config = ConfigDict(extra="allow")

    access_token: Optional[str] = Field(default=None, description="Bearer access token")
    token_type: Optional[str] = Field(default=None, description="Token type, usually 'bearer'")
    expires_in: Optional[int] = Field(default=None, description="Access token lifetime in seconds")
    refresh_token: Optional[str] = Field(default=None, description="Refresh token if issued")
    scope: Optional[str] = Field(default=None, description="Granted scope")
    id_token: Optional[str] = Field(default=None, description="OpenID Connect ID token")


class CredentialSet(BaseModel):
    """Credentials held by a session."""

    access_token: Optional[str] = None
    refresh_token: Optional[str] = None
    client_id: Optional[str] = None
    client_secret: Optional[str] = None
    mode: AuthMode = AuthMode.OAUTH_CLIENT_GRANT

    @property
    def has_client_credentials(self) -> bool:
        return bool(self.client_id and self.client_secret)

    @property
    def is_authenticated(self) -> bool:
        return bool(self.access_token)

    def __repr__(self) -> str:
        # Token values stay out of reprs and tracebacks
        return (
            f"CredentialSet(mode={self.mode.value}, "
            f"access_token={'set' if self.access_token else None}, "
            f"refresh_token={'set' if self.refresh_token else None}, "
            f"client_id={self.client_id!r})"
        )

    __str__ = __repr__
