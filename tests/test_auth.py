import pytest

from auth import SessionManager, validate_credentials
from errors import InvalidCredentials, ProfileCreationFailed, RemoteServiceError, ValidationError
from tests.fakes import FakeBackendError, FakeUpload


@pytest.mark.parametrize("email", ["", "plain", "no@tld", "two words@example.com", "a@b."])
def test_rejects_malformed_email(email):
    with pytest.raises(ValidationError, match="valid email"):
        validate_credentials(email, "secret1")


def test_rejects_short_password():
    with pytest.raises(ValidationError, match="at least 6"):
        validate_credentials("ada@example.com", "12345")
    validate_credentials("ada@example.com", "123456")


def test_sign_up_creates_identity_and_profile(client):
    manager = SessionManager(client)
    user = manager.sign_up("ada@example.com", "secret1", "Ada", "female")

    assert "ada@example.com" in client.auth.users
    assert manager.load_profile(user.id) == {
        "id": user.id,
        "name": "Ada",
        "email": "ada@example.com",
        "gender": "female",
        "avatar_url": None,
    }


def test_sign_up_validates_before_calling_backend(client):
    with pytest.raises(ValidationError):
        SessionManager(client).sign_up("bad-email", "secret1", "Ada")
    assert client.auth.users == {}


def test_sign_up_surfaces_backend_message(client):
    manager = SessionManager(client)
    manager.sign_up("ada@example.com", "secret1", "Ada")
    with pytest.raises(RemoteServiceError) as excinfo:
        manager.sign_up("ada@example.com", "secret1", "Ada")
    assert excinfo.value.user_message == "User already registered"


def test_failed_profile_insert_removes_orphaned_identity(client):
    client.fail("users", "insert")
    with pytest.raises(ProfileCreationFailed):
        SessionManager(client).sign_up("ada@example.com", "secret1", "Ada")

    assert client.auth.deleted_users == ["user-1"]
    assert client.auth.users == {}


def test_failed_identity_cleanup_is_logged(client, caplog):
    client.fail("users", "insert")

    def refuse(user_id):
        raise FakeBackendError("not allowed")

    client.auth.admin.delete_user = refuse
    with pytest.raises(ProfileCreationFailed):
        SessionManager(client).sign_up("ada@example.com", "secret1", "Ada")
    assert "Could not delete orphaned auth identity user-1" in caplog.text


def test_sign_in_with_wrong_password(client):
    manager = SessionManager(client)
    manager.sign_up("ada@example.com", "secret1", "Ada")
    with pytest.raises(InvalidCredentials) as excinfo:
        manager.sign_in("ada@example.com", "wrong-pass")
    assert excinfo.value.user_message == "Invalid email or password. Please try again."


def test_sign_in_other_backend_error(client):
    def broken(credentials):
        raise FakeBackendError("Email not confirmed")

    client.auth.sign_in_with_password = broken
    with pytest.raises(RemoteServiceError) as excinfo:
        SessionManager(client).sign_in("ada@example.com", "secret1")
    assert not isinstance(excinfo.value, InvalidCredentials)
    assert excinfo.value.user_message == "An error occurred during login."


def test_sign_in_and_out(client):
    manager = SessionManager(client)
    registered = manager.sign_up("ada@example.com", "secret1", "Ada")
    user = manager.sign_in("ada@example.com", "secret1")
    assert user.id == registered.id

    manager.sign_out()
    assert client.auth.signed_out


def test_save_profile_never_touches_email(client):
    manager = SessionManager(client)
    user = manager.sign_up("ada@example.com", "secret1", "Ada")
    manager.save_profile(user.id, "  Ada Lovelace ", "other")

    profile = manager.load_profile(user.id)
    assert profile["name"] == "Ada Lovelace"
    assert profile["gender"] == "other"
    assert profile["email"] == "ada@example.com"


def test_save_profile_rejects_blank_name(client):
    with pytest.raises(ValidationError):
        SessionManager(client).save_profile("user-1", "  ", "male")


def test_change_avatar_stores_public_url_on_profile(client):
    manager = SessionManager(client)
    user = manager.sign_up("ada@example.com", "secret1", "Ada")
    url = manager.change_avatar(user.id, FakeUpload("me.png", content_type="image/png"))

    assert url.endswith(f"/avatars/{user.id}/avatar.png")
    assert manager.load_profile(user.id)["avatar_url"] == url


def test_open_session_returns_user_and_profile(client):
    manager = SessionManager(client)
    registered = manager.sign_up("ada@example.com", "secret1", "Ada")
    user, profile = manager.open_session("ada@example.com", "secret1")
    assert user.id == registered.id
    assert profile["name"] == "Ada"
    assert not client.auth.signed_out


def test_open_session_signs_out_when_profile_cannot_load(client):
    manager = SessionManager(client)
    manager.sign_up("ada@example.com", "secret1", "Ada")
    client.fail("users", "select")

    with pytest.raises(RemoteServiceError):
        manager.open_session("ada@example.com", "secret1")
    assert client.auth.signed_out
    assert client.auth.current_user is None
