"""Client for the Logipad identity API.

Usage:
    from logipad.core.identity import LogipadClient

    client = LogipadClient(
        "https://keycloak-cloud.logipad.net",
        "https://identity.demo.prod.logipad.net",
        username="sysadm",
        password="secret",
    )
    client.authenticate()
    for user in client.get_all_users():
        print(user.display_line())
"""
from .client import LogipadClient
from .exceptions import LogipadError, LogipadAPIError, UserListMappingError

__all__ = [
    "LogipadClient",
    "LogipadError",
    "LogipadAPIError",
    "UserListMappingError",
]
