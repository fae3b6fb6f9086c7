"""
Document store tests

Covers id generation, collection scoping, ordering by creation time and the
write path of update/delete.
"""

from datetime import datetime, timedelta, timezone

import pytest

from apps.shared.documents import (
    Document,
    DocumentStore,
    is_valid_id,
    new_document_id,
)


def test_new_document_id_format():
    """Ids are 24 lowercase hex characters and unique"""
    ids = {new_document_id() for _ in range(1000)}

    assert len(ids) == 1000, "Duplicate ids generated"
    for document_id in ids:
        assert is_valid_id(document_id), f"Generated id {document_id} is not valid"
        assert document_id == document_id.lower()


@pytest.mark.parametrize(
    "value",
    ["123", "", "g" * 24, "a" * 23, "a" * 25, None, 123, "65a1f0c2e4b0a1b2c3d4e5f6 ", "65a1f0c2e4b0a1b2c3d4e5f6\n"],
)
def test_is_valid_id_rejects_malformed(value):
    assert not is_valid_id(value)


def test_is_valid_id_accepts_uppercase_hex():
    assert is_valid_id("65A1F0C2E4B0A1B2C3D4E5F6")


def test_insert_sets_timestamps(db):
    store = DocumentStore(db, "notes")
    document = store.insert({"text": "hello"})

    assert is_valid_id(document.id)
    assert document.collection == "notes"
    assert document.data == {"text": "hello"}
    assert document.created_at is not None
    assert document.updated_at == document.created_at


def test_find_is_scoped_to_collection(db):
    DocumentStore(db, "notes").insert({"text": "a"})
    other = DocumentStore(db, "other").insert({"text": "b"})

    notes = DocumentStore(db, "notes")
    assert [d.data["text"] for d in notes.find()] == ["a"]
    assert notes.find_by_id(other.id) is None, "Lookup crossed collections"


def test_find_orders_by_created_at(db):
    store = DocumentStore(db, "notes")
    first = store.insert({"n": 1})
    second = store.insert({"n": 2})
    third = store.insert({"n": 3})

    # Pin creation times so ordering does not depend on clock resolution
    base = datetime(2024, 1, 1, tzinfo=timezone.utc)
    for offset, document in enumerate([first, second, third]):
        document.created_at = base + timedelta(minutes=offset)
    db.commit()

    assert [d.data["n"] for d in store.find()] == [3, 2, 1]
    assert [d.data["n"] for d in store.find(newest_first=False)] == [1, 2, 3]


def test_update_merges_and_refreshes_updated_at(db):
    store = DocumentStore(db, "notes")
    document = store.insert({"text": "old", "keep": True})
    created_at = document.created_at

    updated = store.update_by_id(document.id, {"text": "new"})

    assert updated.id == document.id
    assert updated.data == {"text": "new", "keep": True}
    assert updated.created_at == created_at
    assert updated.updated_at >= created_at


def test_update_applies_schema(db):
    store = DocumentStore(db, "notes")
    document = store.insert({"text": "old"})

    updated = store.update_by_id(
        document.id,
        {"text": "  padded  "},
        schema=lambda data: {"text": data["text"].strip()},
    )

    assert updated.data == {"text": "padded"}


def test_update_schema_failure_writes_nothing(db):
    store = DocumentStore(db, "notes")
    document = store.insert({"text": "old"})

    def reject(data):
        raise ValueError("bad document")

    with pytest.raises(ValueError):
        store.update_by_id(document.id, {"text": ""}, schema=reject)

    db.expire_all()
    assert store.find_by_id(document.id).data == {"text": "old"}


def test_update_missing_document_returns_none(db):
    store = DocumentStore(db, "notes")
    assert store.update_by_id(new_document_id(), {"text": "x"}) is None


def test_delete_returns_snapshot(db):
    store = DocumentStore(db, "notes")
    document = store.insert({"text": "bye"})
    document_id = document.id

    deleted = store.delete_by_id(document_id)

    assert deleted["id"] == document_id
    assert deleted["text"] == "bye"
    assert store.find_by_id(document_id) is None
    assert store.delete_by_id(document_id) is None, "Second delete should find nothing"


def test_failed_commit_rolls_back(db, monkeypatch):
    store = DocumentStore(db, "notes")

    def broken_commit():
        raise RuntimeError("connection lost")

    rolled_back = []
    monkeypatch.setattr(db, "commit", broken_commit)
    monkeypatch.setattr(db, "rollback", lambda: rolled_back.append(True))

    with pytest.raises(RuntimeError):
        store.insert({"text": "never"})

    assert rolled_back, "Session was not rolled back"


def test_to_dict_spreads_data():
    document = Document(
        id="65a1f0c2e4b0a1b2c3d4e5f6",
        collection="notes",
        data={"text": "hi"},
        created_at=datetime(2024, 1, 1, tzinfo=timezone.utc),
        updated_at=datetime(2024, 1, 2, tzinfo=timezone.utc),
    )

    assert document.to_dict() == {
        "id": "65a1f0c2e4b0a1b2c3d4e5f6",
        "text": "hi",
        "createdAt": "2024-01-01T00:00:00+00:00",
        "updatedAt": "2024-01-02T00:00:00+00:00",
    }
