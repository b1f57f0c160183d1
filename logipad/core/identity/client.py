"""HTTP client for the Logipad identity API.

Tokens come from the Logipad realm in Keycloak; the user list is fetched from
a separate API host and mapped with ``logipad.core.user_mapper``.
"""
from __future__ import annotations
import logging
from typing import List, Optional

import requests

from ..keycloak.client import KeycloakClient, REQUEST_TIMEOUT
from ..keycloak.exceptions import KeycloakAPIError
from ..user_mapper import MappingResult, UserRecord, map_payload
from .exceptions import LogipadAPIError, UserListMappingError

logger = logging.getLogger(__name__)


class LogipadClient:
    """Authenticated access to the Logipad ``/users`` endpoint."""

    def __init__(
        self,
        keycloak_url: str,
        api_url: str,
        realm: str = "Logipad",
        client_id: str = "lpclient",
        username: str = "",
        password: str = "",
        timeout: float = REQUEST_TIMEOUT,
        keycloak: Optional[KeycloakClient] = None,
    ):
        """Initialize the identity API client.

        Args:
            keycloak_url: Keycloak base URL issuing tokens for the realm
            api_url: Identity API base URL (e.g. https://identity.demo.prod.logipad.net)
            realm: Keycloak realm of the API users
            client_id: OAuth2 client for the password grant
            username: API user
            password: API user password
            timeout: Per-request timeout in seconds
            keycloak: Pre-built Keycloak client (overrides the connection arguments)
        """
        self.api_url = api_url.rstrip("/")
        self.timeout = timeout
        self.keycloak = keycloak or KeycloakClient(
            keycloak_url, realm, client_id, username, password, timeout=timeout
        )

    @property
    def access_token(self) -> str:
        return self.keycloak.access_token

    @property
    def is_authenticated(self) -> bool:
        return self.keycloak.is_authenticated

    def authenticate(self) -> str:
        """Obtain an access token for the identity API."""
        return self.keycloak.authenticate()

    def fetch_users_result(self) -> MappingResult:
        """Fetch ``/users`` and return the raw mapping outcome.

        Raises:
            KeycloakAPIError: If not authenticated
            LogipadAPIError: If the request fails or does not return 200
        """
        url = f"{self.api_url}/users"
        if not self.is_authenticated:
            raise KeycloakAPIError(401, "Not authenticated - call authenticate() first", url)
        token = self.keycloak.ensure_authenticated()

        headers = {
            "Authorization": f"Bearer {token}",
            "Accept": "application/json",
        }
        try:
            resp = requests.get(url, headers=headers, timeout=self.timeout)
        except requests.RequestException as exc:
            raise LogipadAPIError(0, f"Request failed: {exc}", url) from exc

        if resp.status_code != 200:
            logger.warning("User list request returned %s", resp.status_code)
            raise LogipadAPIError(resp.status_code, resp.text, url)

        return map_payload(resp.text)

    def get_all_users(self) -> List[UserRecord]:
        """Retrieve every user visible to the authenticated account.

        Returns:
            A new list of records in response order

        Raises:
            KeycloakAPIError: If not authenticated
            LogipadAPIError: If the request fails or does not return 200
            UserListMappingError: If the response body cannot be mapped
        """
        result = self.fetch_users_result()
        if not result.ok:
            logger.warning("User list response rejected: %s", result.error)
            raise UserListMappingError(result.error)
        logger.info("Retrieved %d users from %s", len(result.records), self.api_url)
        return result.records
