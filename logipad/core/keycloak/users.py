"""Keycloak user management operations."""
from __future__ import annotations
import logging
from dataclasses import dataclass, field, replace
from typing import Any, Dict

from .client import KeycloakClient, create_client_with_token
from .exceptions import KeycloakAPIError, UserAlreadyExistsError
from ..validators import require_username, validate_email, validate_name

logger = logging.getLogger(__name__)


@dataclass
class UserInfo:
    """Attributes of a user to create in Keycloak.

    ``password`` is set as a temporary credential; the user must change it on
    first login.
    """
    username: str
    email: str
    first_name: str = ""
    last_name: str = ""
    password: str = field(default="", repr=False)
    enabled: bool = True
    email_verified: bool = True

    def to_representation(self) -> Dict[str, Any]:
        """Keycloak UserRepresentation for the Admin REST API."""
        payload: Dict[str, Any] = {
            "username": self.username,
            "email": self.email,
            "firstName": self.first_name,
            "lastName": self.last_name,
            "enabled": self.enabled,
            "emailVerified": self.email_verified,
        }
        if self.password:
            payload["credentials"] = [
                {"type": "password", "value": self.password, "temporary": True}
            ]
        return payload


class UserService:
    """Service for managing Keycloak users."""

    def __init__(self, client: KeycloakClient):
        """Initialize user service.

        Args:
            client: Keycloak client (authenticated on demand)
        """
        self.client = client

    def create_user(self, user_info: UserInfo, realm: str) -> None:
        """Create a new user in the given realm.

        Args:
            user_info: User attributes and initial password
            realm: Realm in which to create the user

        Raises:
            ValueError: If username, email or a name field is missing or malformed
            UserAlreadyExistsError: If Keycloak reports a conflict (409)
            KeycloakAPIError: On any other HTTP error
        """
        user_info = replace(
            user_info,
            username=require_username(user_info.username),
            email=validate_email(user_info.email),
            first_name=validate_name(user_info.first_name, "First name"),
            last_name=validate_name(user_info.last_name, "Last name"),
        )

        try:
            resp = self.client.post(f"/admin/realms/{realm}/users", json=user_info.to_representation())
        except KeycloakAPIError as exc:
            if exc.status_code == 409:
                raise UserAlreadyExistsError(
                    f"User with username '{user_info.username}' already exists"
                ) from exc
            raise

        if resp.status_code != 201:
            raise KeycloakAPIError(resp.status_code, f"Unexpected status creating user: {resp.text}", resp.url)
        logger.info("User '%s' created in realm '%s'", user_info.username, realm)


# ─────────────────────────────────────────────────────────────────────────────
# Standalone functions
# ─────────────────────────────────────────────────────────────────────────────

def create_user(kc_url: str, token: str, realm: str, user_info: UserInfo) -> None:
    """Create a new user with a pre-obtained admin token."""
    service = UserService(create_client_with_token(kc_url, token))
    service.create_user(user_info, realm)
