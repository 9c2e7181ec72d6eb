"""Authenticated API session: token storage, bearer attachment and silent refresh."""

import threading
from concurrent.futures import Future
from enum import Enum
from typing import Any, Dict, Optional

import requests
from pydantic import ValidationError

from ..config import ApiConfig, AuthConfig
from ..models.credentials import AuthMode, CredentialSet, TokenResponse
from ..models.request import RequestContext
from ..models.user import UserRead
from ..storage.local_store import LocalStore, StorageKeys
from ..utils.logging_config import get_logger
from ..utils.exceptions import (
    HiveAdminError,
    ConfigurationError,
    MissingClientCredentials,
    ApiError,
    AuthenticationRejected,
    AuthorizationExpired,
    MalformedTokenResponse,
    TransportError,
)

logger = get_logger()

USER_AGENT = "hive-admin/1.0.0"


class SessionState(str, Enum):
    """Lifecycle of a session's credentials."""

    UNAUTHENTICATED = "unauthenticated"
    AUTHENTICATING = "authenticating"
    AUTHENTICATED = "authenticated"
    REFRESHING = "refreshing"


def _error_detail(response: requests.Response) -> Any:
    try:
        payload = response.json()
    except ValueError:
        return (response.text or "").strip() or response.reason
    if isinstance(payload, dict) and payload.get("detail") is not None:
        return payload["detail"]
    return payload


class SessionManager:
    """Owns the credential set and mediates every call to the backend API."""

    # Statuses meaning the backend declined the login credentials
    REJECTED_LOGIN_STATUSES = (400, 401, 403)

    def __init__(
        self,
        store: LocalStore,
        api_config: Optional[ApiConfig] = None,
        auth_config: Optional[AuthConfig] = None,
        session: Optional[requests.Session] = None,
    ):
        """
        Initialize session manager.

        Args:
            store: Local store holding credentials and settings
            api_config: Backend API configuration
            auth_config: Defaults for login mode and client credentials
            session: requests.Session to send through (created if omitted)
        """
        self.store = store
        self.api_config = api_config or ApiConfig()
        self.auth_config = auth_config or AuthConfig()
        self.session = session or self._create_session()
        self.user: Optional[UserRead] = None

        self._lock = threading.Lock()
        self._pending_refresh: Optional[Future] = None
        # Bumped whenever credentials are discarded
        self._generation = 0
        self._state = SessionState.UNAUTHENTICATED

    @staticmethod
    def _create_session() -> requests.Session:
        session = requests.Session()
        session.headers.update(
            {
                "User-Agent": USER_AGENT,
                "Accept": "application/json",
            }
        )
        return session

    # --- Settings ---

    @property
    def base_url(self) -> str:
        return self.store.get(StorageKeys.BASE_URL) or self.api_config.base_url

    @property
    def access_token(self) -> Optional[str]:
        return self.store.get(StorageKeys.ACCESS_TOKEN)

    @property
    def company_id(self) -> Optional[str]:
        return self.store.get(StorageKeys.COMPANY_ID)

    @property
    def state(self) -> SessionState:
        if self._state in (SessionState.AUTHENTICATING, SessionState.REFRESHING):
            return self._state
        # Tokens may have been stored or wiped through the store directly
        return SessionState.AUTHENTICATED if self.access_token else SessionState.UNAUTHENTICATED

    @property
    def is_authenticated(self) -> bool:
        return bool(self.access_token)

    @property
    def credentials(self) -> CredentialSet:
        """Current credential set, falling back to configured defaults."""
        use_oauth = self.store.get(StorageKeys.USE_OAUTH)
        oauth = self.auth_config.use_oauth if use_oauth is None else use_oauth == "1"
        return CredentialSet(
            access_token=self.access_token,
            refresh_token=self.store.get(StorageKeys.REFRESH_TOKEN),
            client_id=self.store.get(StorageKeys.CLIENT_ID) or self.auth_config.client_id,
            client_secret=self.store.get(StorageKeys.CLIENT_SECRET) or self.auth_config.client_secret,
            mode=AuthMode.OAUTH_CLIENT_GRANT if oauth else AuthMode.PASSWORD_GRANT,
        )

    def configure(self, base_url: str) -> None:
        """
        Set the API root used to resolve relative paths.

        Args:
            base_url: API base URL

        Raises:
            ConfigurationError: If base_url is empty
        """
        base_url = (base_url or "").strip()
        if not base_url:
            raise ConfigurationError("API base URL must not be empty")
        self.store.set(StorageKeys.BASE_URL, base_url)
        logger.info(f"API base URL set to {base_url}")

    def set_client_credentials(self, client_id: Optional[str], client_secret: Optional[str]) -> None:
        """Store OAuth client credentials. None clears a value."""
        self.store.update(
            {StorageKeys.CLIENT_ID: client_id, StorageKeys.CLIENT_SECRET: client_secret}
        )

    def set_auth_mode(self, mode: AuthMode) -> None:
        self.store.set(StorageKeys.USE_OAUTH, "1" if mode is AuthMode.OAUTH_CLIENT_GRANT else "0")

    def select_company(self, company_id: Optional[str]) -> None:
        self.store.set(StorageKeys.COMPANY_ID, company_id)

    def build_url(self, path: str) -> str:
        """
        Resolve a path against the current base URL.

        Raises:
            ConfigurationError: If no base URL is configured
        """
        if path.startswith(("http://", "https://")):
            return path
        base = self.base_url
        if not base:
            raise ConfigurationError("API base URL is not configured")
        return base.rstrip("/") + "/" + path.lstrip("/")

    # --- Login / logout ---

    def authenticate(self, username: str, password: str) -> TokenResponse:
        """
        Exchange operator credentials for a token set.

        Uses the OAuth password grant when OAuth mode is selected, otherwise
        the plain login endpoint. Loading the current user afterwards is
        best-effort and never fails the login.

        Args:
            username: Operator username or email
            password: Operator password

        Returns:
            Parsed token response

        Raises:
            ConfigurationError: If no base URL is configured
            MissingClientCredentials: If OAuth mode lacks client id/secret
            AuthenticationRejected: If the backend declines the credentials
            MalformedTokenResponse: If the response has no access token
            TransportError: On network failure
        """
        if not self.base_url:
            raise ConfigurationError("API base URL is not configured")

        creds = self.credentials
        if creds.mode is AuthMode.OAUTH_CLIENT_GRANT:
            if not creds.has_client_credentials:
                raise MissingClientCredentials(
                    "client_id and client_secret are required for OAuth login; "
                    "set them or disable OAuth mode"
                )
            path = self.api_config.oauth_token_path
            form = {
                "grant_type": "password",
                "client_id": creds.client_id,
                "client_secret": creds.client_secret,
                "username": username,
                "password": password,
            }
        else:
            path = self.api_config.login_path
            form = {"username": username, "password": password}

        request = RequestContext(
            "POST",
            path,
            data=form,
            headers={"Content-Type": "application/x-www-form-urlencoded"},
        )

        logger.info(f"Logging in as {username} ({creds.mode.value})")
        self._state = SessionState.AUTHENTICATING
        try:
            response = self._send(request)
            if response.status_code in self.REJECTED_LOGIN_STATUSES:
                raise self._api_error(AuthenticationRejected, response, request)
            if response.status_code >= 400:
                raise self._api_error(ApiError, response, request)
            token = self._parse_token_response(response)
        except HiveAdminError:
            self._state = SessionState.UNAUTHENTICATED
            raise

        with self._lock:
            self._generation += 1
            self._store_tokens(token.access_token, token.refresh_token)
        self._state = SessionState.AUTHENTICATED
        logger.info("Login successful")

        # No refresh here: a rejected refresh would discard the tokens just stored
        self.load_me(refresh=False)
        return token

    def load_me(self, refresh: bool = True) -> Optional[UserRead]:
        """
        Fetch the current user. Failures are logged and yield None.

        Args:
            refresh: Whether a 401 may trigger a token refresh
        """
        request = RequestContext("GET", self.api_config.me_path, retried=not refresh)
        try:
            payload = self._decode(self.dispatch(request))
            self.user = UserRead.model_validate(payload)
        except (HiveAdminError, ValidationError) as e:
            logger.warning(f"Could not load current user: {e}")
            self.user = None
        return self.user

    def logout(self) -> None:
        """Tell the backend (best-effort) and discard local credentials."""
        if self.access_token:
            try:
                self.post(self.api_config.logout_path)
            except HiveAdminError as e:
                logger.warning(f"Backend logout failed, clearing local session anyway: {e}")
        self.clear_session()

    def clear_session(self) -> None:
        """Discard stored tokens and the cached user."""
        with self._lock:
            self._generation += 1
            self._store_tokens(None, None)
            self.user = None
            self._state = SessionState.UNAUTHENTICATED
        logger.info("Session cleared")

    def reset_local_data(self) -> None:
        """Wipe every stored setting and credential."""
        with self._lock:
            self._generation += 1
            self.store.clear()
            self.user = None
            self._state = SessionState.UNAUTHENTICATED

    # --- Requests ---

    def attach_credentials(self, request: RequestContext) -> RequestContext:
        """Set the bearer header from the stored access token, if any."""
        for name in [h for h in request.headers if h.lower() == "authorization"]:
            del request.headers[name]

        token = self.access_token
        if token:
            request.headers["Authorization"] = f"Bearer {token}"
        request.sent_token = token
        return request

    def dispatch(self, request: RequestContext) -> requests.Response:
        """
        Send a request, refreshing the access token once on a 401.

        Args:
            request: Request to send

        Returns:
            Successful response

        Raises:
            AuthorizationExpired: If the request is still unauthorized
            ApiError: On any other non-2xx status
            TransportError: On network failure
        """
        self.attach_credentials(request)
        response = self._send(request)

        if response.status_code == 401:
            if request.retried:
                raise self._api_error(AuthorizationExpired, response, request)
            try:
                self._refresh_access_token(request.sent_token)
            except HiveAdminError as e:
                logger.warning(f"Token refresh failed for {request.method} {request.path}: {e}")
                raise self._api_error(AuthorizationExpired, response, request) from e
            request.retried = True
            return self.dispatch(request)

        if response.status_code >= 400:
            raise self._api_error(ApiError, response, request)

        return response

    def request(
        self,
        method: str,
        path: str,
        params: Optional[Dict[str, Any]] = None,
        json: Any = None,
        data: Any = None,
    ) -> Any:
        """Dispatch a request and decode its JSON body (None when empty)."""
        response = self.dispatch(RequestContext(method, path, params=params, json=json, data=data))
        return self._decode(response)

    @staticmethod
    def _decode(response: requests.Response) -> Any:
        if response.status_code == 204 or not response.content:
            return None
        try:
            return response.json()
        except ValueError:
            return response.text

    def get(self, path: str, params: Optional[Dict[str, Any]] = None) -> Any:
        return self.request("GET", path, params=params)

    def post(self, path: str, json: Any = None, params: Optional[Dict[str, Any]] = None) -> Any:
        return self.request("POST", path, params=params, json=json)

    def patch(self, path: str, json: Any = None) -> Any:
        return self.request("PATCH", path, json=json)

    def delete(self, path: str) -> Any:
        return self.request("DELETE", path)

    def _send(self, request: RequestContext) -> requests.Response:
        url = self.build_url(request.path)
        try:
            return self.session.request(
                request.method,
                url,
                params=request.params,
                json=request.json,
                data=request.data,
                headers=request.headers,
                timeout=self.api_config.timeout,
            )
        except requests.RequestException as e:
            logger.error(f"{request.method} {request.path} failed: {e}")
            raise TransportError(f"Request to {url} failed: {e}") from e

    # --- Refresh ---

    def _refresh_access_token(self, stale_token: Optional[str]) -> str:
        """
        Obtain a fresh access token, sharing one in-flight refresh.

        Args:
            stale_token: Token the failed request was sent with

        Returns:
            Access token to retry with
        """
        with self._lock:
            pending = self._pending_refresh
            owner = pending is None
            if owner:
                current = self.access_token
                if current and current != stale_token:
                    logger.debug("Access token already replaced, reusing it")
                    return current

                refresh_token = self.store.get(StorageKeys.REFRESH_TOKEN)
                if not refresh_token:
                    self._state = SessionState.UNAUTHENTICATED
                    raise AuthorizationExpired("No refresh token stored", status_code=401)

                pending = Future()
                self._pending_refresh = pending
                self._state = SessionState.REFRESHING
                generation = self._generation

        if not owner:
            logger.debug("Waiting for in-flight token refresh")
            return pending.result()

        try:
            token = self._request_refresh(refresh_token, generation)
        except Exception as e:
            with self._lock:
                self._pending_refresh = None
                self._state = SessionState.UNAUTHENTICATED
            pending.set_exception(e)
            raise

        with self._lock:
            self._pending_refresh = None
            self._state = SessionState.AUTHENTICATED
        pending.set_result(token)
        return token

    def _request_refresh(self, refresh_token: str, generation: int) -> str:
        """
        Exchange the refresh token for a new access token.

        Tokens are only written while the session is still the one the
        refresh started from. A clear_session or login in the meantime wins.
        """
        logger.info("Access token rejected, refreshing")
        request = RequestContext(
            "POST", self.api_config.refresh_path, json={"refresh_token": refresh_token}
        )
        response = self._send(request)

        if response.status_code >= 400:
            # Refresh token no longer accepted
            with self._lock:
                if generation == self._generation:
                    self._store_tokens(None, None)
                    self.user = None
            raise self._api_error(AuthorizationExpired, response, request)

        token = self._parse_token_response(response)
        with self._lock:
            if generation != self._generation:
                logger.info("Session cleared during token refresh, discarding new tokens")
                raise AuthorizationExpired(
                    "Session was cleared during token refresh", status_code=401
                )
            self._store_tokens(token.access_token, token.refresh_token or refresh_token)
        logger.info("Access token refreshed")
        return token.access_token

    # --- Helpers ---

    def _store_tokens(self, access_token: Optional[str], refresh_token: Optional[str]) -> None:
        self.store.update(
            {
                StorageKeys.ACCESS_TOKEN: access_token,
                StorageKeys.REFRESH_TOKEN: refresh_token,
            }
        )

    @staticmethod
    def _parse_token_response(response: requests.Response) -> TokenResponse:
        try:
            payload = response.json()
        except ValueError as e:
            raise MalformedTokenResponse(f"Token endpoint returned a non-JSON body: {e}") from e

        if not isinstance(payload, dict) or not payload.get("access_token"):
            raise MalformedTokenResponse("Server did not return an access_token")

        try:
            return TokenResponse.model_validate(payload)
        except ValidationError as e:
            raise MalformedTokenResponse(f"Invalid token response: {e}") from e

    @staticmethod
    def _api_error(error_cls, response: requests.Response, request: RequestContext) -> ApiError:
        detail = _error_detail(response)
        return error_cls(
            f"{request.method} {request.path} returned {response.status_code}: {detail}",
            status_code=response.status_code,
            detail=detail,
        )
