"""Settings loader with environment variable and Docker secrets integration."""
from __future__ import annotations
import logging
import os
from dataclasses import dataclass
from pathlib import Path

logger = logging.getLogger(__name__)

DEFAULT_KEYCLOAK_URL = "https://keycloak-cloud.logipad.net"
DEFAULT_IDENTITY_API_URL = "https://identity.demo.prod.logipad.net"


def _load_secret_from_file(secret_name: str, env_var: str | None = None) -> str | None:
    """
    Load secret from /run/secrets (Docker secrets pattern).

    Priority:
    1. /run/secrets/{secret_name} (Docker secrets mount)
    2. Environment variable (fallback)

    Args:
        secret_name: Name of the secret file in /run/secrets
        env_var: Optional environment variable name to check as fallback

    Returns:
        Secret value or None if not found
    """
    secret_file = Path("/run/secrets") / secret_name

    if secret_file.exists() and secret_file.is_file():
        try:
            secret_value = secret_file.read_text().strip()
            if secret_value:
                logger.debug("Loaded %s from /run/secrets", secret_name)
                return secret_value
        except OSError as e:
            logger.warning("Failed to read /run/secrets/%s: %s", secret_name, e)

    if env_var:
        secret_value = os.getenv(env_var)
        if secret_value:
            logger.debug("Loaded %s from environment", env_var)
            return secret_value

    return None


def _env_float(var_name: str, default: float) -> float:
    raw = os.environ.get(var_name, "").strip()
    if not raw:
        return default
    try:
        value = float(raw)
    except ValueError as exc:
        raise RuntimeError(f"Environment variable {var_name} must be a number, got {raw!r}") from exc
    if value <= 0:
        raise RuntimeError(f"Environment variable {var_name} must be positive, got {raw!r}")
    return value


@dataclass
class AppConfig:
    """Application configuration container."""
    # Keycloak
    keycloak_url: str = DEFAULT_KEYCLOAK_URL

    # Admin account (token for user creation)
    admin_realm: str = "master"
    admin_client_id: str = "admin-cli"
    admin_username: str = ""
    admin_password: str = ""

    # Realm in which new users are created
    target_realm: str = "Logipad"

    # Logipad identity API
    identity_api_url: str = DEFAULT_IDENTITY_API_URL
    logipad_realm: str = "Logipad"
    logipad_client_id: str = "lpclient"
    logipad_username: str = ""
    logipad_password: str = ""

    # Runtime
    request_timeout: float = 10.0
    log_level: str = "WARNING"


def load_settings() -> AppConfig:
    """Load settings from environment variables and /run/secrets.

    Credentials are optional here; commands that need them check for them.
    """
    keycloak_url = os.environ.get("KEYCLOAK_URL", DEFAULT_KEYCLOAK_URL).rstrip("/")
    identity_api_url = os.environ.get("LOGIPAD_API_URL", DEFAULT_IDENTITY_API_URL).rstrip("/")

    admin_username = os.environ.get("KEYCLOAK_ADMIN", "")
    admin_password = _load_secret_from_file("keycloak_admin_password", "KEYCLOAK_ADMIN_PASSWORD") or ""

    logipad_username = os.environ.get("LOGIPAD_USERNAME", "")
    logipad_password = _load_secret_from_file("logipad_password", "LOGIPAD_PASSWORD") or ""

    log_level = os.environ.get("LOG_LEVEL", "WARNING").strip().upper() or "WARNING"

    config = AppConfig(
        keycloak_url=keycloak_url,
        admin_realm=os.environ.get("KEYCLOAK_ADMIN_REALM", "master"),
        admin_client_id=os.environ.get("KEYCLOAK_ADMIN_CLIENT_ID", "admin-cli"),
        admin_username=admin_username,
        admin_password=admin_password,
        target_realm=os.environ.get("KEYCLOAK_TARGET_REALM", "Logipad"),
        identity_api_url=identity_api_url,
        logipad_realm=os.environ.get("LOGIPAD_REALM", "Logipad"),
        logipad_client_id=os.environ.get("LOGIPAD_CLIENT_ID", "lpclient"),
        logipad_username=logipad_username,
        logipad_password=logipad_password,
        request_timeout=_env_float("REQUEST_TIMEOUT", 10.0),
        log_level=log_level,
    )

    logger.debug(
        "Settings loaded: keycloak=%s; api=%s; target_realm=%s",
        config.keycloak_url, config.identity_api_url, config.target_realm,
    )
    return config
