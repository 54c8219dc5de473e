"""Sign-up, sign-in and profile management on top of Supabase auth."""

import logging
import re

from database import GENDERS, ProfileStore
from errors import (
    InvalidCredentials,
    ProfileCreationFailed,
    RemoteServiceError,
    ValidationError,
)
from storage import StorageGateway


logger = logging.getLogger(__name__)

EMAIL_PATTERN = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")
MIN_PASSWORD_LENGTH = 6
INVALID_LOGIN_MESSAGE = "Invalid login credentials"


def validate_credentials(email, password):
    if not EMAIL_PATTERN.match(email or ""):
        raise ValidationError("Please enter a valid email address")
    if len(password or "") < MIN_PASSWORD_LENGTH:
        raise ValidationError("Password must be at least 6 characters long")


def _error_message(exc):
    return getattr(exc, "message", None) or str(exc)


class SessionManager:
    """Wraps the auth service and the ``users`` profile table."""

    def __init__(self, client, admin_client=None):
        self.client = client
        self.admin_client = admin_client or client
        self.profiles = ProfileStore(client)
        self.storage = StorageGateway(client)

    # -----------------------------
    # Session
    # -----------------------------
    def sign_up(self, email, password, name, gender="male"):
        """Create the auth identity and its profile row.

        When the profile insert fails the new identity is deleted again so no
        account is left without a profile.
        """
        email = (email or "").strip()
        name = (name or "").strip()
        validate_credentials(email, password)
        if not name:
            raise ValidationError("Please enter your name")
        if gender not in GENDERS:
            raise ValidationError(f"Unknown gender {gender!r}")

        try:
            response = self.client.auth.sign_up({"email": email, "password": password})
        except Exception as exc:
            logger.error("Sign-up failed for %s: %s", email, exc)
            raise RemoteServiceError(_error_message(exc), user_message=_error_message(exc)) from exc

        user = getattr(response, "user", None)
        if user is None:
            raise RemoteServiceError("Sign-up returned no user")

        try:
            self.profiles.insert_profile(user.id, name, email, gender)
        except RemoteServiceError as exc:
            self._delete_identity(user.id)
            raise ProfileCreationFailed(str(exc)) from exc
        logger.info("Registered user %s", user.id)
        return user

    def _delete_identity(self, user_id):
        try:
            self.admin_client.auth.admin.delete_user(user_id)
            logger.info("Deleted orphaned auth identity %s", user_id)
        except Exception as exc:
            logger.warning("Could not delete orphaned auth identity %s: %s", user_id, exc)

    def sign_in(self, email, password):
        email = (email or "").strip()
        validate_credentials(email, password)
        try:
            response = self.client.auth.sign_in_with_password({"email": email, "password": password})
        except Exception as exc:
            message = _error_message(exc)
            logger.warning("Sign-in failed for %s: %s", email, message)
            if message == INVALID_LOGIN_MESSAGE:
                raise InvalidCredentials(message) from exc
            raise RemoteServiceError(message, user_message="An error occurred during login.") from exc
        return response.user

    def open_session(self, email, password):
        """Sign in and load the profile. Returns ``(user, profile)``.

        If the profile cannot be loaded the backend session is closed again,
        so the client is never left signed in behind a signed-out app.
        """
        user = self.sign_in(email, password)
        try:
            profile = self.load_profile(user.id)
        except RemoteServiceError:
            self.sign_out()
            raise
        return user, profile

    def sign_out(self):
        try:
            self.client.auth.sign_out()
        except Exception as exc:
            # The local session is dropped either way.
            logger.warning("Sign-out failed: %s", exc)

    # -----------------------------
    # Profile
    # -----------------------------
    def load_profile(self, user_id):
        return self.profiles.get_profile(user_id)

    def save_profile(self, user_id, name, gender):
        name = (name or "").strip()
        if not name:
            raise ValidationError("Name cannot be empty")
        if gender not in GENDERS:
            raise ValidationError(f"Unknown gender {gender!r}")
        self.profiles.update_profile(user_id, name, gender)

    def change_avatar(self, user_id, uploaded_file):
        avatar_url = self.storage.upload_avatar(uploaded_file, user_id)
        self.profiles.set_avatar_url(user_id, avatar_url)
        return avatar_url
