"""Low-level HTTP client for Keycloak.

Handles password-grant authentication, token management, and HTTP operations.
"""
from __future__ import annotations
import logging
from typing import Optional, Dict, Any, NoReturn
from datetime import datetime, timedelta

import jwt
import requests

from .exceptions import KeycloakError, KeycloakAPIError, KeycloakAuthError

logger = logging.getLogger(__name__)

REQUEST_TIMEOUT = 10
DEFAULT_TOKEN_LIFETIME = 60


class KeycloakClient:
    """HTTP client for Keycloak with password-grant token management.

    Each instance owns its credentials and current token, so several clients
    (admin realm, application realm) can be used side by side.

    Features:
    - Password grant against /realms/{realm}/protocol/openid-connect/token
    - Re-authentication when the token is missing or about to expire
    - Centralized error handling

    Usage:
        client = KeycloakClient("https://keycloak.example.com", "master", "admin-cli", "admin", "secret")
        client.authenticate()
        response = client.get("/admin/realms/demo/users")
    """

    def __init__(
        self,
        base_url: str,
        realm: str = "master",
        client_id: str = "admin-cli",
        username: str = "",
        password: str = "",
        timeout: float = REQUEST_TIMEOUT,
    ):
        """Initialize Keycloak client.

        Args:
            base_url: Keycloak base URL (e.g. https://keycloak-cloud.logipad.net)
            realm: Realm used for authentication
            client_id: OAuth2 client used for the password grant
            username: User to authenticate as
            password: Password of that user
            timeout: Per-request timeout in seconds
        """
        self.base_url = base_url.rstrip("/")
        self.realm = realm
        self.client_id = client_id
        self.timeout = timeout
        self._username = username
        self._password = password
        self._token: Optional[str] = None
        self._token_expires_at: Optional[datetime] = None
        self._last_error = ""

    @property
    def access_token(self) -> str:
        """Current access token, empty when not authenticated."""
        return self._token or ""

    @property
    def is_authenticated(self) -> bool:
        return bool(self._token)

    @property
    def last_error(self) -> str:
        """Message of the most recent failure, empty after a success."""
        return self._last_error

    @property
    def token_url(self) -> str:
        return f"{self.base_url}/realms/{self.realm}/protocol/openid-connect/token"

    def set_credentials(self, username: str, password: str) -> None:
        """Replace the credentials and drop the current token."""
        self._username = username
        self._password = password
        self._token = None
        self._token_expires_at = None

    def authenticate(self) -> str:
        """Obtain an access token via the password grant.

        Returns:
            Access token

        Raises:
            KeycloakAuthError: Missing credentials, rejected grant or unusable response
        """
        self._last_error = ""
        self._token = None
        self._token_expires_at = None

        if not self._username or not self._password:
            self._fail(KeycloakAuthError(0, "Username or password not set", self.token_url))

        data = {
            "client_id": self.client_id,
            "grant_type": "password",
            "username": self._username,
            "password": self._password,
        }
        try:
            resp = requests.post(self.token_url, data=data, timeout=self.timeout)
        except requests.RequestException as exc:
            self._fail(KeycloakAuthError(0, f"Authentication request failed: {exc}", self.token_url))

        if resp.status_code != 200:
            self._fail(KeycloakAuthError(resp.status_code, resp.text, self.token_url))

        try:
            payload = resp.json()
        except ValueError as exc:
            self._fail(KeycloakAuthError(resp.status_code, f"Failed to parse JSON response: {exc}", self.token_url))

        token = payload.get("access_token") if isinstance(payload, dict) else None
        if not token:
            self._fail(KeycloakAuthError(resp.status_code, "Access token not found in response", self.token_url))

        expires_in = payload.get("expires_in") or DEFAULT_TOKEN_LIFETIME
        try:
            expires_in = int(expires_in)
        except (TypeError, ValueError):
            logger.warning("Ignoring unusable expires_in %r, assuming %ss", expires_in, DEFAULT_TOKEN_LIFETIME)
            expires_in = DEFAULT_TOKEN_LIFETIME
        self._token = token
        self._token_expires_at = datetime.now() + timedelta(seconds=expires_in)
        logger.info("Authenticated '%s' against realm '%s' (expires in %ss)", self._username, self.realm, expires_in)
        return token

    def ensure_authenticated(self) -> str:
        """Return a usable token, authenticating when missing or expiring within 10 seconds."""
        if not self._token or not self._token_expires_at:
            return self.authenticate()
        if datetime.now() >= self._token_expires_at - timedelta(seconds=10):
            logger.debug("Access token for realm '%s' expiring, re-authenticating", self.realm)
            return self.authenticate()
        return self._token

    def auth_headers(self) -> Dict[str, str]:
        """Headers for authenticated JSON requests (Authorization omitted without a token)."""
        headers = {
            "Content-Type": "application/json",
            "Accept": "application/json",
        }
        if self._token:
            headers["Authorization"] = f"Bearer {self._token}"
        return headers

    def token_claims(self) -> Dict[str, Any]:
        """Decode the current access token without verifying its signature.

        Only meant for display (subject, username, expiry). Never use the result
        for authorization decisions.

        Raises:
            KeycloakError: If not authenticated or the token is not a JWT
        """
        if not self._token:
            raise KeycloakError("Not authenticated - call authenticate() first")
        try:
            return jwt.decode(self._token, options={"verify_signature": False})
        except jwt.InvalidTokenError as exc:
            raise KeycloakError(f"Access token is not a decodable JWT: {exc}") from exc

    def get(self, path: str, params: Optional[Dict] = None, **kwargs) -> requests.Response:
        """Execute GET request with automatic authentication.

        Args:
            path: API endpoint path (e.g., "/admin/realms/demo/users")
            params: Query parameters
            **kwargs: Additional arguments for requests.get

        Returns:
            Response object

        Raises:
            KeycloakAPIError: On HTTP or transport error
        """
        self.ensure_authenticated()
        url = f"{self.base_url}{path}"
        headers = {**self.auth_headers(), **kwargs.pop("headers", {})}

        try:
            resp = requests.get(url, params=params, headers=headers, timeout=self.timeout, **kwargs)
        except requests.RequestException as exc:
            self._fail(KeycloakAPIError(0, f"Request failed: {exc}", url))
        self._handle_error(resp, url)
        return resp

    def post(self, path: str, json: Optional[Any] = None, data: Optional[Dict] = None, **kwargs) -> requests.Response:
        """Execute POST request with automatic authentication.

        Args:
            path: API endpoint path
            json: JSON payload
            data: Form data payload
            **kwargs: Additional arguments for requests.post

        Returns:
            Response object

        Raises:
            KeycloakAPIError: On HTTP or transport error
        """
        self.ensure_authenticated()
        url = f"{self.base_url}{path}"
        headers = {**self.auth_headers(), **kwargs.pop("headers", {})}

        try:
            resp = requests.post(url, json=json, data=data, headers=headers, timeout=self.timeout, **kwargs)
        except requests.RequestException as exc:
            self._fail(KeycloakAPIError(0, f"Request failed: {exc}", url))
        self._handle_error(resp, url)
        return resp

    def _handle_error(self, resp: requests.Response, url: str) -> None:
        """Centralized error handling for HTTP responses.

        Keycloak reports failures as ``{"errorMessage": "..."}``; that message is
        preferred over the raw body when present.

        Raises:
            KeycloakAPIError: If response status indicates error
        """
        if resp.status_code < 400:
            self._last_error = ""
            return
        message = resp.text
        try:
            body = resp.json()
        except ValueError:
            body = None
        if isinstance(body, dict) and body.get("errorMessage"):
            message = body["errorMessage"]
        self._fail(KeycloakAPIError(resp.status_code, message, url))

    def _fail(self, error: KeycloakError) -> NoReturn:
        self._last_error = str(error)
        logger.warning("Keycloak request failed: %s", error)
        raise error


# ─────────────────────────────────────────────────────────────────────────────
# Standalone functions
# ─────────────────────────────────────────────────────────────────────────────
def get_access_token(
    kc_url: str,
    realm: str,
    client_id: str,
    username: str,
    password: str,
    timeout: float = REQUEST_TIMEOUT,
) -> str:
    """Obtain an access token via the password grant on the specified realm."""
    client = KeycloakClient(kc_url, realm, client_id, username, password, timeout=timeout)
    return client.authenticate()


def create_client_with_token(kc_url: str, token: str, realm: str = "master", expires_in: int = 3600) -> KeycloakClient:
    """Create a KeycloakClient around a pre-obtained access token.

    Args:
        kc_url: Keycloak base URL
        token: Pre-obtained access token
        realm: Realm the token was issued by
        expires_in: Token validity in seconds (default: 1 hour)

    Returns:
        KeycloakClient instance with token pre-set
    """
    client = KeycloakClient(kc_url, realm)
    client._token = token
    client._token_expires_at = datetime.now() + timedelta(seconds=expires_in)
    return client
