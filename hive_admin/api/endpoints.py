"""Endpoint wrappers for the identity service admin API.

Each group is a thin layer over :class:`SessionManager`: it builds paths and
payloads and leaves authentication, refresh and error mapping to the session.
"""

from typing import Any, Dict, List, Optional, Type, TypeVar

from pydantic import BaseModel, ValidationError

from ..auth.session_manager import SessionManager
from ..models.credentials import TokenResponse
from ..models.user import CompanyRead, Paginated, SecurityStats, UserRead
from ..utils.exceptions import UnexpectedResponse

ADMIN_PREFIX = "/api/v1/admin"

ModelT = TypeVar("ModelT", bound=BaseModel)


class _ApiGroup:
    def __init__(self, session: SessionManager):
        self.session = session

    def _fetch(
        self, model: Type[ModelT], path: str, params: Optional[Dict[str, Any]] = None
    ) -> ModelT:
        """GET a path and parse the body into model.

        Raises:
            UnexpectedResponse: If the body does not match the model
        """
        payload = self.session.get(path, params=params)
        try:
            return model.model_validate(payload)
        except ValidationError as e:
            raise UnexpectedResponse(
                f"GET {path} returned an unexpected {model.__name__} body: {e}"
            ) from e

    def _fetch_list(self, model: Type[ModelT], path: str) -> List[ModelT]:
        payload = self.session.get(path) or []
        if not isinstance(payload, list):
            raise UnexpectedResponse(
                f"GET {path} returned {type(payload).__name__}, expected a list"
            )
        try:
            return [model.model_validate(item) for item in payload]
        except ValidationError as e:
            raise UnexpectedResponse(
                f"GET {path} returned an unexpected {model.__name__} item: {e}"
            ) from e


class AuthApi(_ApiGroup):
    """Login, logout and current-user lookups."""

    def login(self, username: str, password: str) -> TokenResponse:
        return self.session.authenticate(username, password)

    def logout(self) -> None:
        self.session.logout()

    def me(self) -> UserRead:
        return self._fetch(UserRead, self.session.api_config.me_path)

    def companies(self) -> List[CompanyRead]:
        return self._fetch_list(CompanyRead, "/users/companies")


class UsersApi(_ApiGroup):
    """User management."""

    def list(self) -> List[Dict[str, Any]]:
        return self.session.get("/users")

    def list_paginated(self, params: Optional[Dict[str, Any]] = None) -> Paginated:
        return self._fetch(Paginated, "/users", params=params)

    def get(self, user_id: str) -> Dict[str, Any]:
        return self.session.get(f"/users/{user_id}")

    def update(self, user_id: str, payload: Dict[str, Any]) -> Any:
        return self.session.patch(f"/users/{user_id}", payload)

    def reset_password(self, user_id: str, new_password: str) -> Any:
        return self.session.patch(f"/users/{user_id}/reset-password", {"new_password": new_password})

    def add_role(self, user_id: str, role_id: int) -> Any:
        return self.session.patch(f"/users/{user_id}/add-role/{role_id}")

    def delete(self, user_id: str) -> Any:
        return self.session.delete(f"/users/{user_id}")

    def search_suggestions(self, query: str, limit: int = 5) -> List[Dict[str, Any]]:
        return self.session.get("/users/search/suggestions", params={"query": query, "limit": limit})


class CompaniesApi(_ApiGroup):
    """Companies and their memberships."""

    def list(self) -> List[CompanyRead]:
        return self._fetch_list(CompanyRead, "/users/companies")

    def list_paginated(self, params: Optional[Dict[str, Any]] = None) -> Paginated:
        return self._fetch(Paginated, "/users/companies", params=params)

    def get(self, company_id: str) -> CompanyRead:
        return self._fetch(CompanyRead, f"/users/companies/{company_id}")

    def create(self, name: str, description: Optional[str] = None) -> Any:
        return self.session.post("/users/companies", {"name": name, "description": description})

    def update(self, company_id: str, payload: Dict[str, Any]) -> Any:
        return self.session.patch(f"/users/companies/{company_id}", payload)

    def delete(self, company_id: str) -> Any:
        return self.session.delete(f"/users/companies/{company_id}")

    def memberships(self, company_id: str) -> Any:
        return self.session.get(f"/users/companies/{company_id}/memberships")

    def approve_membership(self, company_id: str, membership_id: str) -> Any:
        return self.session.patch(
            f"/users/companies/{company_id}/memberships/{membership_id}/approve"
        )

    def dismiss_membership(self, company_id: str, membership_id: str) -> Any:
        return self.session.patch(
            f"/users/companies/{company_id}/memberships/{membership_id}/dismiss"
        )


class RolesApi(_ApiGroup):
    """Roles and the permissions attached to them."""

    def list(self) -> Any:
        return self.session.get("/roles")

    def get(self, role_id: int) -> Any:
        return self.session.get(f"/roles/{role_id}")

    def create(self, name: str, description: Optional[str] = None) -> Any:
        return self.session.post("/roles", {"name": name, "description": description})

    def patch(self, role_id: int, payload: Dict[str, Any]) -> Any:
        return self.session.patch(f"/roles/{role_id}", payload)

    def delete(self, role_id: int) -> Any:
        return self.session.delete(f"/roles/{role_id}")

    def get_permissions(self, role_id: int) -> Any:
        return self.session.get(f"/roles/{role_id}/permissions")

    def add_permission(self, role_id: int, permission_id: int) -> Any:
        return self.session.post(f"/roles/{role_id}/add-permission/{permission_id}")

    def remove_permission(self, role_id: int, permission_id: int) -> Any:
        return self.session.delete(f"/roles/{role_id}/remove-permission/{permission_id}")


class PermissionsApi(_ApiGroup):
    def list(self) -> Any:
        return self.session.get("/permissions")

    def create(self, code: str, name: Optional[str] = None, description: Optional[str] = None) -> Any:
        return self.session.post(
            "/permissions", {"name": name, "code": code, "description": description}
        )

    def patch(self, permission_id: int, payload: Dict[str, Any]) -> Any:
        return self.session.patch(f"/permissions/{permission_id}", payload)

    def delete(self, permission_id: int) -> Any:
        return self.session.delete(f"/permissions/{permission_id}")


class AdminApi(_ApiGroup):
    """Security dashboard, suspicious activity and token administration."""

    SECURITY = f"{ADMIN_PREFIX}/admin/security"
    TOKENS = f"{ADMIN_PREFIX}/admin/tokens"

    def security_stats(self) -> SecurityStats:
        return self._fetch(SecurityStats, f"{self.SECURITY}/dashboard")

    def user_activities(
        self, skip: int = 0, limit: int = 50, search: Optional[str] = None
    ) -> Any:
        return self.session.get(
            f"{self.SECURITY}/users", params={"skip": skip, "limit": limit, "search": search}
        )

    def suspicious_activities(self, skip: int = 0, limit: int = 50) -> Any:
        return self.session.get(
            f"{self.SECURITY}/suspicious-activities", params={"skip": skip, "limit": limit}
        )

    def block_user(self, user_id: str, reason: str) -> Any:
        return self.session.post(f"{self.SECURITY}/block-user/{user_id}", params={"reason": reason})

    def unblock_user(self, user_id: str) -> Any:
        return self.session.post(f"{self.SECURITY}/unblock-user/{user_id}")

    def delete_suspicious(self, activity_id: str) -> Any:
        return self.session.delete(f"{self.SECURITY}/suspicious-activity/{activity_id}")

    def token_stats(self) -> Any:
        return self.session.get(f"{self.TOKENS}/stats")

    def user_tokens(self, user_id: str) -> Any:
        return self.session.get(f"{self.TOKENS}/users/{user_id}")

    def revoke_user_tokens(self, user_id: str, reason: str) -> Any:
        return self.session.post(f"{self.TOKENS}/users/{user_id}/revoke", params={"reason": reason})

    def revoke_all_tokens(self, reason: str) -> Any:
        return self.session.post(f"{self.TOKENS}/revoke-all", params={"reason": reason})


class OAuthClientsApi(_ApiGroup):
    """OAuth client registry."""

    BASE = f"{ADMIN_PREFIX}/oauth/clients"

    def list(self) -> Any:
        return self.session.get(self.BASE)

    def create(self, client_name: str, redirect_uris: str, scope: Optional[str] = None) -> Any:
        return self.session.post(
            self.BASE, {"client_name": client_name, "redirect_uris": redirect_uris, "scope": scope}
        )

    def get(self, id_or_key: str) -> Any:
        return self.session.get(f"{self.BASE}/{id_or_key}")

    def patch(self, id_or_key: str, payload: Dict[str, Any]) -> Any:
        return self.session.patch(f"{self.BASE}/{id_or_key}", payload)

    def delete(self, id_or_key: str) -> Any:
        return self.session.delete(f"{self.BASE}/{id_or_key}")


class IntegrationApi(_ApiGroup):
    def register_service(
        self,
        service_name: str,
        redirect_uris: List[str],
        service_description: Optional[str] = None,
        api_url: Optional[str] = None,
        webhook_url: Optional[str] = None,
    ) -> Any:
        return self.session.post(
            f"{ADMIN_PREFIX}/integration/services",
            {
                "service_name": service_name,
                "service_description": service_description,
                "redirect_uris": redirect_uris,
                "api_url": api_url,
                "webhook_url": webhook_url,
            },
        )


class HiveClient:
    """All resource groups over one shared session."""

    def __init__(self, session: SessionManager):
        self.session = session
        self.auth = AuthApi(session)
        self.users = UsersApi(session)
        self.companies = CompaniesApi(session)
        self.roles = RolesApi(session)
        self.permissions = PermissionsApi(session)
        self.admin = AdminApi(session)
        self.oauth_clients = OAuthClientsApi(session)
        self.integration = IntegrationApi(session)
