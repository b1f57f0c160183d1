"""Pytest shared fixtures."""
import json
import pathlib
import sys
import time
from typing import Any, Optional

# Add project root to Python path
ROOT = pathlib.Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

import jwt
import pytest
import requests


KEYCLOAK_URL = "https://kc.test"
API_URL = "https://identity.test"


class StubResponse:
    """Minimal stand-in for requests.Response."""

    def __init__(self, payload: Any = None, status_code: int = 200, text: Optional[str] = None, url: str = ""):
        self.status_code = status_code
        self.text = text if text is not None else json.dumps(payload)
        self.url = url

    def json(self):
        return json.loads(self.text)

    def raise_for_status(self):
        if self.status_code >= 400:
            raise requests.HTTPError(response=self)


class HttpStub:
    """Routes requests.get/post calls to canned responses and records them."""

    def __init__(self):
        self.routes = {}
        self.calls = []

    def add(self, method: str, url: str, response):
        """Register a StubResponse (or an exception instance to raise) for METHOD url."""
        self.routes[(method.upper(), url)] = response

    def _dispatch(self, method: str, url: str, **kwargs):
        self.calls.append({"method": method, "url": url, **kwargs})
        try:
            response = self.routes[(method, url)]
        except KeyError:
            raise RuntimeError(f"Unexpected HTTP {method} in unit test: {url}") from None
        if isinstance(response, Exception):
            raise response
        response.url = response.url or url
        return response

    def get(self, url, *args, **kwargs):
        return self._dispatch("GET", url, **kwargs)

    def post(self, url, *args, **kwargs):
        return self._dispatch("POST", url, **kwargs)

    def calls_to(self, method: str, url: str) -> list:
        return [c for c in self.calls if c["method"] == method.upper() and c["url"] == url]


# ─────────────────────────────────────────────────────────────────────────────
# Network Guard Rails
# ─────────────────────────────────────────────────────────────────────────────
@pytest.fixture(autouse=True)
def _block_network(monkeypatch):
    """Prevent unit tests from reaching a real Keycloak or identity API."""

    def _unexpected(url, *args, **kwargs):
        raise RuntimeError(f"Unexpected HTTP request in unit test: {url}")

    monkeypatch.setattr(requests, "post", _unexpected)
    monkeypatch.setattr(requests, "get", _unexpected)


@pytest.fixture()
def http(monkeypatch):
    """Installable HTTP stub; register routes with http.add(...)."""
    stub = HttpStub()
    monkeypatch.setattr(requests, "post", stub.post)
    monkeypatch.setattr(requests, "get", stub.get)
    return stub


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch):
    """Keep settings deterministic regardless of the developer's shell."""
    for var in (
        "KEYCLOAK_URL",
        "KEYCLOAK_ADMIN",
        "KEYCLOAK_ADMIN_PASSWORD",
        "KEYCLOAK_ADMIN_REALM",
        "KEYCLOAK_ADMIN_CLIENT_ID",
        "KEYCLOAK_TARGET_REALM",
        "LOGIPAD_API_URL",
        "LOGIPAD_REALM",
        "LOGIPAD_CLIENT_ID",
        "LOGIPAD_USERNAME",
        "LOGIPAD_PASSWORD",
        "REQUEST_TIMEOUT",
        "LOG_LEVEL",
    ):
        monkeypatch.delenv(var, raising=False)


# ─────────────────────────────────────────────────────────────────────────────
# Token Helpers
# ─────────────────────────────────────────────────────────────────────────────
def token_url(realm: str, base_url: str = KEYCLOAK_URL) -> str:
    return f"{base_url}/realms/{realm}/protocol/openid-connect/token"


def make_jwt(username: str = "sysadm", exp_offset: int = 300, **claims) -> str:
    """HS256 token with Keycloak-like claims; signature is never checked by the client."""
    now = int(time.time())
    payload = {
        "sub": "user-123",
        "preferred_username": username,
        "iat": now,
        "exp": now + exp_offset,
        **claims,
    }
    return jwt.encode(payload, "test-signing-key-with-enough-length-32b", algorithm="HS256")


def token_response(token: str = "test-token", expires_in: int = 300) -> StubResponse:
    return StubResponse({"access_token": token, "expires_in": expires_in, "token_type": "Bearer"})
