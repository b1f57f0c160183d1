"""Input validation helpers for user data."""
from __future__ import annotations


def require_username(raw: str) -> str:
    """Validate a username for user creation.

    Keycloak lowercases usernames itself; this only rejects values it would refuse.

    Args:
        raw: Raw username input

    Returns:
        Trimmed username

    Raises:
        ValueError: If username is missing or invalid
    """
    username = (raw or "").strip()
    if not username:
        raise ValueError("Username is required")
    if len(username) > 255:
        raise ValueError("Username must not exceed 255 characters")
    if any(char.isspace() for char in username):
        raise ValueError("Username cannot contain whitespace")
    return username


def validate_email(email: str) -> str:
    """Validate email address.

    Args:
        email: Email address to validate

    Returns:
        Normalized email address

    Raises:
        ValueError: If email is missing or invalid
    """
    email = (email or "").strip().lower()
    if not email:
        raise ValueError("Email is required")
    if "@" not in email:
        raise ValueError("Invalid email format")

    local, domain = email.rsplit("@", 1)
    if not local or not domain or "." not in domain:
        raise ValueError("Invalid email format")
    if len(email) > 254:
        raise ValueError("Email exceeds maximum length")

    return email


def validate_name(name: str, field: str) -> str:
    """Validate an optional first/last name field.

    Args:
        name: Name to validate (empty is allowed)
        field: Field name for error messages (e.g., "First name")

    Returns:
        Trimmed name

    Raises:
        ValueError: If name is too long or contains invalid characters
    """
    name = (name or "").strip()
    if len(name) > 128:
        raise ValueError(f"{field} exceeds maximum length")
    if any(char in name for char in "<>\"'`;&|$"):
        raise ValueError(f"{field} contains invalid characters")
    return name
