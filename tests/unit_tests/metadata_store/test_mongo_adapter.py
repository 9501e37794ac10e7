"""
Unit tests for MongoAdapter with the driver mocked out.
"""

from datetime import datetime, timezone
from unittest.mock import MagicMock, patch

import pytest
from pymongo import DESCENDING, ASCENDING, ReturnDocument

from metadata_store import FILES_COLLECTION, MongoAdapter

CREATED_AT = datetime(2024, 6, 1, 12, 0, tzinfo=timezone.utc)


def stored_document(**overrides):
    document = {
        "_id": "abc",
        "key": "1717243200000-notes.txt",
        "size": 5,
        "contentType": "text/plain",
        "url": "https://bucket.s3.us-east-1.amazonaws.com/1717243200000-notes.txt",
        "isFavorite": False,
        "isTrash": False,
        "createdAt": CREATED_AT,
    }
    document.update(overrides)
    return document


@pytest.fixture
def mongo():
    """Yield (adapter, files collection mock)."""
    with patch("metadata_store.mongo_adapter.MongoClient") as client_cls:
        client = MagicMock()
        client_cls.return_value = client
        adapter = MongoAdapter("mongodb://localhost:27017/cloudbox_test")
        yield adapter, adapter.db[FILES_COLLECTION]


def test_connects_to_database_named_in_uri(mongo):
    adapter, _ = mongo
    adapter.client.__getitem__.assert_called_with("cloudbox_test")
    adapter.client.admin.command.assert_called_with("ping")


def test_requires_connection_string():
    with pytest.raises(ValueError):
        MongoAdapter("")


def test_create_document_stores_native_datetime(mongo):
    adapter, collection = mongo
    document = stored_document(createdAt="2024-06-01T12:00:00.000000+00:00")

    assert adapter.create_document(FILES_COLLECTION, document) == "abc"

    inserted = collection.insert_one.call_args[0][0]
    assert inserted["createdAt"] == CREATED_AT
    # the caller's document is left as it was
    assert document["createdAt"] == "2024-06-01T12:00:00.000000+00:00"


def test_documents_come_back_with_iso_timestamps(mongo):
    adapter, collection = mongo
    collection.find_one.return_value = stored_document()

    document = adapter.get_document(FILES_COLLECTION, "abc")

    collection.find_one.assert_called_with({"_id": "abc"})
    assert document["createdAt"] == "2024-06-01T12:00:00.000000+00:00"


def test_update_document_fields_sets_only_given_fields(mongo):
    adapter, collection = mongo
    collection.find_one.return_value = stored_document()
    collection.find_one_and_update.return_value = stored_document(isTrash=True)

    updated = adapter.update_document_fields(FILES_COLLECTION, "abc", {"isTrash": True})

    collection.find_one_and_update.assert_called_with(
        {"_id": "abc"},
        {"$set": {"isTrash": True}},
        return_document=ReturnDocument.AFTER,
    )
    assert updated["isTrash"] is True
    assert updated["isFavorite"] is False


def test_update_of_missing_document_returns_none(mongo):
    adapter, collection = mongo
    collection.find_one.return_value = None

    assert adapter.update_document_fields(FILES_COLLECTION, "nope", {"isTrash": True}) is None
    collection.find_one_and_update.assert_not_called()


def test_delete_document(mongo):
    adapter, collection = mongo
    collection.find_one_and_delete.side_effect = [stored_document(), None]

    assert adapter.delete_document(FILES_COLLECTION, "abc")["_id"] == "abc"
    assert adapter.delete_document(FILES_COLLECTION, "abc") is None


def test_query_documents_applies_sort(mongo):
    adapter, collection = mongo
    cursor = MagicMock()
    cursor.sort.return_value = cursor
    cursor.__iter__.return_value = iter([stored_document()])
    collection.find.return_value = cursor

    documents = adapter.query_documents(FILES_COLLECTION, sort=[("createdAt", -1), ("_id", 1)])

    collection.find.assert_called_with({})
    cursor.sort.assert_called_with([("createdAt", DESCENDING), ("_id", ASCENDING)])
    assert [d["_id"] for d in documents] == ["abc"]


def test_init_collections_creates_indexes(mongo):
    adapter, collection = mongo
    adapter.init_collections()
    collection.create_index.assert_any_call([("key", 1)], unique=True)
    collection.create_index.assert_any_call([("createdAt", -1)], unique=False)
