"""Read models for identity resources."""

from datetime import datetime
from typing import Any, Dict, List, Optional
from pydantic import BaseModel, ConfigDict, Field


class UserRead(BaseModel):
    """User as returned by the users endpoints."""

    model_config = ConfigDict(extra="allow")

    id: str
    email: Optional[str] = None
    phone: Optional[str] = None
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    username: Optional[str] = None
    is_active: bool = True
    is_verified: bool = False
    permissions: Optional[List[str]] = None
    memberships: Optional[List[Dict[str, Any]]] = None

    @property
    def display_name(self) -> str:
        full = " ".join(p for p in (self.first_name, self.last_name) if p)
        return full or self.username or self.email or self.phone or self.id


class CompanyRead(BaseModel):
    """Company record."""

    model_config = ConfigDict(extra="allow")

    id: str
    name: str
    description: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class SecurityStats(BaseModel):
    """Security dashboard counters."""

    model_config = ConfigDict(extra="allow")

    total_users: int = 0
    active_users_24h: int = 0
    active_users_7d: int = 0
    active_users_30d: int = 0
    failed_logins_24h: int = 0
    total_tokens: int = 0
    users_with_tokens: int = 0
    average_tokens_per_user: float = 0.0
    users_blocked: int = 0
    suspicious_activities: int = 0


class Paginated(BaseModel):
    """One page of a paginated listing."""

    items: List[Dict[str, Any]] = Field(default_factory=list)
    page: int = 1
    pages: int = 1
    size: int = 0
    total: int = 0
    has_next: bool = False
    has_prev: bool = False
