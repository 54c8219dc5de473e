from datetime import timedelta

import pytest

from database import ProfileStore, QRCodeStore, new_record
from errors import RemoteServiceError
from expiry import parse_timestamp


def test_new_record_sets_expiry_two_hours_after_creation(now):
    record = new_record("owner", "hello", "text", "payload", created_at=now)
    created = parse_timestamp(record["created_at"])
    assert parse_timestamp(record["expiry_time"]) - created == timedelta(hours=2)
    assert record["file_url"] is None
    assert record["files"] == []
    assert record["notes"] is None


def test_new_record_without_clock_still_keeps_invariant():
    record = new_record("owner", "hello", "text", "payload")
    delta = parse_timestamp(record["expiry_time"]) - parse_timestamp(record["created_at"])
    assert delta == timedelta(hours=2)


def test_new_record_uses_first_file_as_primary_url():
    record = new_record("owner", "a\nb", "image", "payload", files=["a", "b"])
    assert record["file_url"] == "a"
    assert record["files"] == ["a", "b"]


def test_list_by_owner_returns_newest_first(client, now):
    store = QRCodeStore(client)
    for minutes, label in ((0, "t1"), (5, "t2"), (10, "t3")):
        store.insert(new_record("owner", label, "text", "payload", created_at=now + timedelta(minutes=minutes)))

    assert [r["content"] for r in store.list_by_owner("owner")] == ["t3", "t2", "t1"]


def test_list_by_owner_is_scoped_to_owner(client, now):
    store = QRCodeStore(client)
    store.insert(new_record("alice", "mine", "text", "payload", created_at=now))
    store.insert(new_record("bob", "theirs", "text", "payload", created_at=now))

    assert [r["content"] for r in store.list_by_owner("alice")] == ["mine"]


def test_update_note_is_keyed_by_record_id(client, now):
    store = QRCodeStore(client)
    first = store.insert(new_record("owner", "one", "text", "same-payload", created_at=now))
    second = store.insert(new_record("owner", "two", "text", "same-payload", created_at=now))

    updated = store.update_note(first["id"], "remember this", "owner")

    assert updated["notes"] == "remember this"
    assert store.get(second["id"])["notes"] is None


def test_update_note_ignores_other_owners(client, now):
    store = QRCodeStore(client)
    record = store.insert(new_record("alice", "one", "text", "payload", created_at=now))
    assert store.update_note(record["id"], "hijack", "bob") is None
    assert store.get(record["id"])["notes"] is None


def test_empty_note_is_stored_as_null(client, now):
    store = QRCodeStore(client)
    record = store.insert(new_record("owner", "one", "text", "payload", notes="old", created_at=now))
    assert store.update_note(record["id"], "", "owner")["notes"] is None


def test_delete_is_idempotent(client, now):
    store = QRCodeStore(client)
    record = store.insert(new_record("owner", "one", "text", "payload", created_at=now))
    assert store.delete(record["id"], "owner") == 1
    assert store.delete(record["id"], "owner") == 0
    assert store.get(record["id"]) is None


def test_backend_failure_becomes_remote_service_error(client):
    client.fail("qr_codes", "select", "connection reset")
    with pytest.raises(RemoteServiceError) as excinfo:
        QRCodeStore(client).list_by_owner("owner")
    assert "connection reset" in str(excinfo.value)


def test_profile_round_trip(client):
    profiles = ProfileStore(client)
    profiles.insert_profile("user-1", "Ada", "ada@example.com", "female")
    profiles.update_profile("user-1", "Ada L.", "other")
    profiles.set_avatar_url("user-1", "https://cdn/avatar.png")

    assert profiles.get_profile("user-1") == {
        "id": "user-1",
        "name": "Ada L.",
        "email": "ada@example.com",
        "gender": "other",
        "avatar_url": "https://cdn/avatar.png",
    }


def test_missing_profile_is_none(client):
    assert ProfileStore(client).get_profile("nobody") is None
