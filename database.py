"""Supabase-backed storage for QR code records and user profiles."""

import logging
import uuid

from errors import RemoteServiceError
from expiry import compute_expiry, to_iso, utcnow


logger = logging.getLogger(__name__)

QR_TABLE = "qr_codes"
USERS_TABLE = "users"
QR_TYPES = ("text", "url", "image", "video", "audio", "document")
GENDERS = ("male", "female", "other")


def _execute(query, action):
    try:
        response = query.execute()
    except Exception as exc:
        logger.error("Error %s: %s", action, exc)
        raise RemoteServiceError(f"Error {action}: {exc}") from exc
    return response.data or []


def new_record(owner_id, content, qr_type, qr_url, files=None, notes="", created_at=None):
    """Build a ``qr_codes`` row. Expiry is fixed here from a single clock read."""
    files = list(files or [])
    created_at = created_at or utcnow()
    return {
        "id": str(uuid.uuid4()),
        "user_id": owner_id,
        "content": content,
        "type": qr_type,
        "file_url": files[0] if files else None,
        "files": files,
        "qr_url": qr_url,
        "created_at": to_iso(created_at),
        "expiry_time": to_iso(compute_expiry(created_at)),
        "notes": notes or None,
    }


# -----------------------------
# QR Code Records
# -----------------------------
class QRCodeStore:
    def __init__(self, client):
        self.client = client

    def _table(self):
        return self.client.table(QR_TABLE)

    def insert(self, record):
        rows = _execute(self._table().insert(record), "saving QR code")
        return rows[0] if rows else record

    def get(self, record_id):
        rows = _execute(
            self._table().select("*").eq("id", record_id).limit(1),
            "loading QR code",
        )
        return rows[0] if rows else None

    def list_by_owner(self, owner_id):
        return _execute(
            self._table().select("*").eq("user_id", owner_id).order("created_at", desc=True),
            "loading QR codes",
        )

    def update_note(self, record_id, note, owner_id):
        rows = _execute(
            self._table().update({"notes": note or None}).eq("id", record_id).eq("user_id", owner_id),
            "saving notes",
        )
        return rows[0] if rows else None

    def delete(self, record_id, owner_id):
        # Deleting a row that is already gone is not an error.
        rows = _execute(
            self._table().delete().eq("id", record_id).eq("user_id", owner_id),
            "deleting QR code",
        )
        return len(rows)

    def delete_where_expiry_before(self, moment):
        rows = _execute(
            self._table().delete().lt("expiry_time", to_iso(moment)),
            "cleaning up expired QR codes",
        )
        return len(rows)


# -----------------------------
# User Profiles
# -----------------------------
class ProfileStore:
    def __init__(self, client):
        self.client = client

    def _table(self):
        return self.client.table(USERS_TABLE)

    def insert_profile(self, user_id, name, email, gender):
        row = {"id": user_id, "name": name, "email": email, "gender": gender}
        rows = _execute(self._table().insert(row), "creating profile")
        return rows[0] if rows else row

    def get_profile(self, user_id):
        rows = _execute(
            self._table().select("id, name, email, gender, avatar_url").eq("id", user_id).limit(1),
            "loading user profile",
        )
        return rows[0] if rows else None

    def update_profile(self, user_id, name, gender):
        # Email is owned by the auth service and never written from here.
        _execute(
            self._table().update({"name": name, "gender": gender}).eq("id", user_id),
            "updating profile",
        )

    def set_avatar_url(self, user_id, avatar_url):
        _execute(
            self._table().update({"avatar_url": avatar_url}).eq("id", user_id),
            "updating avatar",
        )
