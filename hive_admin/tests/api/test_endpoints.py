"""Tests for the API endpoint wrappers."""

from unittest.mock import Mock

import pytest

from hive_admin.api.endpoints import (
    AdminApi,
    AuthApi,
    CompaniesApi,
    HiveClient,
    IntegrationApi,
    OAuthClientsApi,
    PermissionsApi,
    RolesApi,
    UsersApi,
)
from hive_admin.auth.session_manager import SessionManager
from hive_admin.config import ApiConfig
from hive_admin.models.user import CompanyRead, Paginated, SecurityStats, UserRead
from hive_admin.utils.exceptions import UnexpectedResponse


@pytest.fixture
def session():
    """Mock SessionManager recording calls."""
    session = Mock(spec=SessionManager)
    session.api_config = ApiConfig(base_url="https://api.example.com")
    return session


class TestHiveClient:
    """Tests for the client facade."""

    def test_groups_share_session(self, session):
        """Test every group uses the same session."""
        client = HiveClient(session)
        groups = [
            client.auth,
            client.users,
            client.companies,
            client.roles,
            client.permissions,
            client.admin,
            client.oauth_clients,
            client.integration,
        ]
        assert all(g.session is session for g in groups)


class TestAuthApi:
    """Tests for AuthApi."""

    def test_login_delegates_to_authenticate(self, session):
        """Test login uses the session's grant flow."""
        AuthApi(session).login("a@b.com", "secret123")
        session.authenticate.assert_called_once_with("a@b.com", "secret123")

    def test_logout_delegates(self, session):
        """Test logout clears through the session."""
        AuthApi(session).logout()
        session.logout.assert_called_once()

    def test_me_returns_user(self, session, sample_user):
        """Test /users/me is parsed into UserRead."""
        session.get.return_value = sample_user
        user = AuthApi(session).me()
        session.get.assert_called_once_with("/users/me", params=None)
        assert isinstance(user, UserRead)
        assert user.display_name == "Ada Lovelace"

    def test_companies(self, session, sample_companies):
        """Test the user's companies are parsed."""
        session.get.return_value = sample_companies
        companies = AuthApi(session).companies()
        assert [c.name for c in companies] == ["Acme", "Globex"]


class TestUsersApi:
    """Tests for UsersApi."""

    def test_list_paginated(self, session):
        """Test paginated listing passes params and parses the page."""
        session.get.return_value = {
            "items": [{"id": "u-1"}],
            "page": 2,
            "pages": 3,
            "size": 1,
            "total": 3,
            "has_next": True,
            "has_prev": True,
        }
        page = UsersApi(session).list_paginated({"page": 2, "size": 1})

        session.get.assert_called_once_with("/users", params={"page": 2, "size": 1})
        assert isinstance(page, Paginated)
        assert page.total == 3
        assert page.items == [{"id": "u-1"}]

    def test_reset_password(self, session):
        """Test password reset payload."""
        UsersApi(session).reset_password("u-1", "n3w")
        session.patch.assert_called_once_with("/users/u-1/reset-password", {"new_password": "n3w"})

    def test_add_role(self, session):
        """Test role assignment path."""
        UsersApi(session).add_role("u-1", 7)
        session.patch.assert_called_once_with("/users/u-1/add-role/7")

    def test_delete(self, session):
        """Test user deletion path."""
        UsersApi(session).delete("u-1")
        session.delete.assert_called_once_with("/users/u-1")

    def test_search_suggestions(self, session):
        """Test search query and default limit."""
        UsersApi(session).search_suggestions("ada")
        session.get.assert_called_once_with(
            "/users/search/suggestions", params={"query": "ada", "limit": 5}
        )


class TestCompaniesApi:
    """Tests for CompaniesApi."""

    def test_list(self, session, sample_companies):
        """Test companies are parsed into CompanyRead."""
        session.get.return_value = sample_companies
        companies = CompaniesApi(session).list()
        assert all(isinstance(c, CompanyRead) for c in companies)

    def test_list_handles_empty_body(self, session):
        """Test an empty body yields an empty list."""
        session.get.return_value = None
        assert CompaniesApi(session).list() == []

    def test_create(self, session):
        """Test company creation payload."""
        CompaniesApi(session).create("Acme", "Widgets")
        session.post.assert_called_once_with(
            "/users/companies", {"name": "Acme", "description": "Widgets"}
        )

    def test_membership_actions(self, session):
        """Test membership approve and dismiss paths."""
        api = CompaniesApi(session)
        api.approve_membership("c-1", "m-1")
        api.dismiss_membership("c-1", "m-2")
        assert [c.args[0] for c in session.patch.call_args_list] == [
            "/users/companies/c-1/memberships/m-1/approve",
            "/users/companies/c-1/memberships/m-2/dismiss",
        ]


class TestRolesAndPermissions:
    """Tests for RolesApi and PermissionsApi."""

    def test_role_permission_links(self, session):
        """Test adding and removing a permission from a role."""
        api = RolesApi(session)
        api.add_permission(3, 9)
        api.remove_permission(3, 9)
        session.post.assert_called_once_with("/roles/3/add-permission/9")
        session.delete.assert_called_once_with("/roles/3/remove-permission/9")

    def test_permission_create(self, session):
        """Test permission creation payload."""
        PermissionsApi(session).create("users:read", name="Read users")
        session.post.assert_called_once_with(
            "/permissions", {"name": "Read users", "code": "users:read", "description": None}
        )


class TestAdminApi:
    """Tests for AdminApi."""

    def test_security_stats(self, session):
        """Test dashboard counters are parsed."""
        session.get.return_value = {"total_users": 10, "users_blocked": 1}
        stats = AdminApi(session).security_stats()

        session.get.assert_called_once_with("/api/v1/admin/admin/security/dashboard", params=None)
        assert isinstance(stats, SecurityStats)
        assert stats.total_users == 10
        assert stats.failed_logins_24h == 0

    def test_user_activities_params(self, session):
        """Test paging and search params."""
        AdminApi(session).user_activities(skip=10, limit=5, search="ada")
        session.get.assert_called_once_with(
            "/api/v1/admin/admin/security/users",
            params={"skip": 10, "limit": 5, "search": "ada"},
        )

    def test_block_user_reason_in_query(self, session):
        """Test block reason is sent as a query parameter."""
        AdminApi(session).block_user("u-1", "spam")
        session.post.assert_called_once_with(
            "/api/v1/admin/admin/security/block-user/u-1", params={"reason": "spam"}
        )

    def test_revoke_all_tokens(self, session):
        """Test global revocation path."""
        AdminApi(session).revoke_all_tokens("rotation")
        session.post.assert_called_once_with(
            "/api/v1/admin/admin/tokens/revoke-all", params={"reason": "rotation"}
        )


class TestOAuthClientsAndIntegration:
    """Tests for OAuthClientsApi and IntegrationApi."""

    def test_client_patch(self, session):
        """Test client update path."""
        OAuthClientsApi(session).patch("key-1", {"is_active": False})
        session.patch.assert_called_once_with(
            "/api/v1/admin/oauth/clients/key-1", {"is_active": False}
        )

    def test_register_service(self, session):
        """Test integration service registration payload."""
        IntegrationApi(session).register_service(
            "billing", ["https://billing.example.com/cb"], api_url="https://billing.example.com"
        )
        path, payload = session.post.call_args.args
        assert path == "/api/v1/admin/integration/services"
        assert payload["service_name"] == "billing"
        assert payload["redirect_uris"] == ["https://billing.example.com/cb"]
        assert payload["webhook_url"] is None


class TestThroughSessionManager:
    """End-to-end through a real SessionManager and fake backend."""

    def test_users_list_carries_bearer(self, authenticated_manager, fake_backend):
        """Test wrappers inherit bearer attachment from the session."""
        fake_backend.route("GET", "/users", json_data=[{"id": "u-1"}])

        users = HiveClient(authenticated_manager).users.list()

        assert users == [{"id": "u-1"}]
        assert fake_backend.calls[0]["headers"]["Authorization"] == "Bearer T1"


class TestUnexpectedResponses:
    """Tests for bodies that do not match their models."""

    def test_me_without_id(self, session):
        """Test a user body missing its id is reported, not leaked as ValidationError."""
        session.get.return_value = {"email": "x"}
        with pytest.raises(UnexpectedResponse, match="UserRead"):
            AuthApi(session).me()

    def test_paginated_users_given_plain_list(self, session):
        """Test a list where a page object is expected."""
        session.get.return_value = [{"id": "u-1"}]
        with pytest.raises(UnexpectedResponse, match="Paginated"):
            UsersApi(session).list_paginated()

    def test_companies_given_object(self, session):
        """Test an object where a list is expected."""
        session.get.return_value = {"items": []}
        with pytest.raises(UnexpectedResponse, match="expected a list"):
            CompaniesApi(session).list()

    def test_company_item_missing_name(self, session):
        """Test a malformed item inside a list."""
        session.get.return_value = [{"id": "c-1"}]
        with pytest.raises(UnexpectedResponse):
            CompaniesApi(session).list()
