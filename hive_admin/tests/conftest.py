"""Shared fixtures for Hive admin client tests."""

import json
import threading
from unittest.mock import MagicMock, Mock

import pytest
import requests

from hive_admin.auth.session_manager import SessionManager
from hive_admin.config import AdminConfig, ApiConfig, AuthConfig, StorageConfig
from hive_admin.storage.local_store import LocalStore, StorageKeys

BASE_URL = "https://api.example.com"


# --- HTTP Mocking Fixtures ---


def _create_response(status_code=200, json_data=None, text=""):
    response = MagicMock()
    response.status_code = status_code
    response.reason = "Test Reason"
    response.headers = {}
    if json_data is not None:
        body = json.dumps(json_data)
        response.json.return_value = json_data
        response.text = body
        response.content = body.encode()
    else:
        response.json.side_effect = ValueError("No JSON object could be decoded")
        response.text = text
        response.content = text.encode()
    return response


@pytest.fixture
def mock_response_factory():
    """Factory for creating mock HTTP responses."""
    return _create_response


class FakeBackend:
    """Routes requests.Session.request calls to canned or computed responses.

    Handlers receive the recorded call dict and return a response. Unknown
    routes answer 404.
    """

    def __init__(self, base_url: str = BASE_URL):
        self.base_url = base_url
        self.routes = {}
        self.calls = []
        self._lock = threading.Lock()

    def route(self, method, path, status=200, json_data=None, handler=None):
        if handler is None:
            handler = lambda call: _create_response(status, json_data)
        self.routes[(method.upper(), path)] = handler

    def __call__(self, method, url, params=None, json=None, data=None, headers=None, timeout=None):
        path = url[len(self.base_url):] if url.startswith(self.base_url) else url
        call = {
            "method": method,
            "url": url,
            "path": path,
            "params": params,
            "json": json,
            "data": data,
            "headers": dict(headers or {}),
            "timeout": timeout,
        }
        with self._lock:
            self.calls.append(call)

        handler = self.routes.get((method.upper(), path))
        if handler is None:
            return _create_response(404, {"detail": "Not Found"})
        return handler(call)

    def calls_to(self, path):
        return [c for c in self.calls if c["path"] == path]


@pytest.fixture
def fake_backend():
    """Fake API backend at https://api.example.com."""
    return FakeBackend()


@pytest.fixture
def mock_session(fake_backend):
    """Create a mock requests.Session served by the fake backend."""
    session = Mock(spec=requests.Session)
    session.headers = {}
    session.request.side_effect = fake_backend
    return session


# --- Configuration Fixtures ---


@pytest.fixture
def api_config():
    """ApiConfig pointing at the fake backend."""
    return ApiConfig(base_url=BASE_URL, timeout=5)


@pytest.fixture
def auth_config():
    """AuthConfig with password-grant login and no client credentials."""
    return AuthConfig(use_oauth=False, client_id=None, client_secret=None)


@pytest.fixture
def mock_config(tmp_path, api_config, auth_config):
    """Create an AdminConfig with a temp state file."""
    config = AdminConfig(
        api=api_config,
        auth=auth_config,
        storage=StorageConfig(state_file=tmp_path / "hive" / "state", encryption_key=""),
    )
    config.log_file = None
    return config


# --- Session Fixtures ---


@pytest.fixture
def store(tmp_path):
    """Empty unencrypted local store."""
    return LocalStore(tmp_path / "state")


@pytest.fixture
def manager(store, api_config, auth_config, mock_session):
    """SessionManager over the fake backend."""
    return SessionManager(
        store, api_config=api_config, auth_config=auth_config, session=mock_session
    )


@pytest.fixture
def authenticated_manager(manager, store):
    """SessionManager holding access token T1 and refresh token R1."""
    store.update({StorageKeys.ACCESS_TOKEN: "T1", StorageKeys.REFRESH_TOKEN: "R1"})
    return manager


# --- Model Fixtures ---


@pytest.fixture
def sample_user():
    """User payload as returned by /users/me."""
    return {
        "id": "u-1",
        "email": "a@b.com",
        "phone": None,
        "first_name": "Ada",
        "last_name": "Lovelace",
        "username": "ada",
        "is_active": True,
        "is_verified": True,
        "permissions": ["users:read", "users:write"],
        "memberships": [],
    }


@pytest.fixture
def sample_companies():
    """Company list payload."""
    return [
        {
            "id": "c-1",
            "name": "Acme",
            "description": "Widgets",
            "created_at": "2024-01-01T00:00:00",
            "updated_at": "2024-01-02T00:00:00",
        },
        {
            "id": "c-2",
            "name": "Globex",
            "description": None,
            "created_at": "2024-02-01T00:00:00",
            "updated_at": "2024-02-01T00:00:00",
        },
    ]
