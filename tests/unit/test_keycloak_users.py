import pytest

from logipad.core.keycloak import KeycloakClient, UserInfo, UserService, create_user
from logipad.core.keycloak.exceptions import KeycloakAPIError, KeycloakAuthError, UserAlreadyExistsError
from tests.conftest import KEYCLOAK_URL, StubResponse, token_response, token_url

USERS_URL = f"{KEYCLOAK_URL}/admin/realms/Logipad/users"


@pytest.fixture()
def service():
    return UserService(KeycloakClient(KEYCLOAK_URL, "master", "admin-cli", "admin", "pw"))


@pytest.fixture()
def user_info():
    return UserInfo("testuser", "testuser@test.com", "Test", "User", "Temp123!")


def test_representation_includes_temporary_password(user_info):
    assert user_info.to_representation() == {
        "username": "testuser",
        "email": "testuser@test.com",
        "firstName": "Test",
        "lastName": "User",
        "enabled": True,
        "emailVerified": True,
        "credentials": [{"type": "password", "value": "Temp123!", "temporary": True}],
    }


def test_representation_without_password():
    rep = UserInfo("bob", "bob@example.com").to_representation()
    assert "credentials" not in rep


def test_password_hidden_from_repr(user_info):
    assert "Temp123!" not in repr(user_info)


def test_create_user_authenticates_then_posts(http, service, user_info):
    http.add("POST", token_url("master"), token_response("admin-token"))
    http.add("POST", USERS_URL, StubResponse(text="", status_code=201))

    service.create_user(user_info, "Logipad")

    assert [c["url"] for c in http.calls] == [token_url("master"), USERS_URL]
    create_call = http.calls[1]
    assert create_call["json"]["username"] == "testuser"
    assert create_call["headers"]["Authorization"] == "Bearer admin-token"


def test_create_user_conflict(http, service, user_info):
    http.add("POST", token_url("master"), token_response())
    http.add("POST", USERS_URL, StubResponse({"errorMessage": "User exists with same username"}, status_code=409))

    with pytest.raises(UserAlreadyExistsError, match="'testuser' already exists"):
        service.create_user(user_info, "Logipad")


def test_create_user_other_error_carries_message(http, service, user_info):
    http.add("POST", token_url("master"), token_response())
    http.add("POST", USERS_URL, StubResponse({"errorMessage": "invalidPasswordMinLengthMessage"}, status_code=400))

    with pytest.raises(KeycloakAPIError) as excinfo:
        service.create_user(user_info, "Logipad")
    assert excinfo.value.status_code == 400
    assert excinfo.value.message == "invalidPasswordMinLengthMessage"


def test_create_user_unexpected_success_status(http, service, user_info):
    http.add("POST", token_url("master"), token_response())
    http.add("POST", USERS_URL, StubResponse({}, status_code=200))

    with pytest.raises(KeycloakAPIError, match="Unexpected status"):
        service.create_user(user_info, "Logipad")


@pytest.mark.parametrize(
    "username, email, message",
    [
        ("", "a@b.com", "Username is required"),
        ("alice", "", "Email is required"),
        ("alice", "not-an-email", "Invalid email format"),
    ],
)
def test_create_user_validates_before_any_request(http, service, username, email, message):
    with pytest.raises(ValueError, match=message):
        service.create_user(UserInfo(username, email), "Logipad")
    assert http.calls == []


def test_create_user_sends_normalized_values(http, service):
    http.add("POST", token_url("master"), token_response())
    http.add("POST", USERS_URL, StubResponse(text="", status_code=201))

    service.create_user(UserInfo("  alice  ", " Alice@Example.COM ", " Alice ", "Smith "), "Logipad")

    payload = http.calls_to("POST", USERS_URL)[0]["json"]
    assert payload["username"] == "alice"
    assert payload["email"] == "alice@example.com"
    assert payload["firstName"] == "Alice"
    assert payload["lastName"] == "Smith"


def test_create_user_rejects_invalid_name(http, service):
    with pytest.raises(ValueError, match="First name contains invalid characters"):
        service.create_user(UserInfo("alice", "a@b.com", "<b>Alice</b>"), "Logipad")
    assert http.calls == []


def test_create_user_fails_when_authentication_fails(http, service, user_info):
    http.add("POST", token_url("master"), StubResponse({"error": "invalid_grant"}, status_code=401))
    with pytest.raises(KeycloakAuthError):
        service.create_user(user_info, "Logipad")
    assert http.calls_to("POST", USERS_URL) == []


def test_standalone_create_user_uses_given_token(http, user_info):
    http.add("POST", USERS_URL, StubResponse(text="", status_code=201))
    create_user(KEYCLOAK_URL, "given-token", "Logipad", user_info)
    assert http.calls[0]["headers"]["Authorization"] == "Bearer given-token"
