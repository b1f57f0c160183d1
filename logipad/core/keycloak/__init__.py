"""Keycloak client library.

Architecture:
- client.py: HTTP client with password-grant authentication and token refresh
- users.py: User creation through the Admin REST API
- exceptions.py: Typed exceptions for error handling

Usage:
    from logipad.core.keycloak import KeycloakClient, UserInfo, UserService

    client = KeycloakClient("https://keycloak-cloud.logipad.net", "master", "admin-cli", "admin", "secret")
    client.authenticate()

    UserService(client).create_user(UserInfo("alice", "alice@example.com", "Alice", "Smith", "Temp123!"), "Logipad")
"""
from .client import (
    KeycloakClient,
    get_access_token,
    create_client_with_token,
    REQUEST_TIMEOUT,
)
from .exceptions import (
    KeycloakError,
    KeycloakAPIError,
    KeycloakAuthError,
    UserAlreadyExistsError,
)
from .users import (
    UserInfo,
    UserService,
    create_user,
)

__all__ = [
    # Client
    "KeycloakClient",
    "get_access_token",
    "create_client_with_token",
    "REQUEST_TIMEOUT",

    # Exceptions
    "KeycloakError",
    "KeycloakAPIError",
    "KeycloakAuthError",
    "UserAlreadyExistsError",

    # Users
    "UserInfo",
    "UserService",
    "create_user",
]
