from datetime import datetime
from unittest.mock import MagicMock

import pytest
from bson import ObjectId
from pymongo.errors import ServerSelectionTimeoutError

from database import MongoRecordStore, StoreError

OID = ObjectId("65a1b2c3d4e5f60718293a4b")


def make_store():
    return MongoRecordStore(users=MagicMock(), todos=MagicMock(), user_memories=MagicMock())


def todo_doc(**overrides):
    doc = {
        "_id": ObjectId(),
        "userId": "u1",
        "title": "Write report",
        "completed": True,
        "createdAt": datetime(2025, 1, 13, 9, 0),
        "dueDate": None,
        "priority": "high",
        "isAIGenerated": True,
    }
    doc.update(overrides)
    return doc


def test_todo_documents_become_models():
    store = make_store()
    doc = todo_doc()
    store.todos.find.return_value = [doc]

    (todo,) = store.fetch_todos_by_user("u1")

    store.todos.find.assert_called_once_with({"userId": "u1"})
    assert todo.id == str(doc["_id"])
    assert todo.is_completed and todo.is_ai
    assert todo.priority == "high"


def test_object_id_strings_match_both_forms():
    store = make_store()
    store.users.find_one.return_value = None

    assert store.fetch_user_by_id(str(OID)) is None
    store.users.find_one.assert_called_once_with({"_id": {"$in": [str(OID), OID]}})


def test_user_memory_lookup_by_owner():
    store = make_store()
    store.user_memories.find_one.return_value = {
        "_id": OID, "userId": OID, "updatedAt": datetime(2025, 1, 1), "userPersona": {"tone": "brief"},
    }

    memory = store.fetch_user_memory_by_user_id("u1")

    assert memory.user_id == str(OID)
    assert memory.user_persona == {"tone": "brief"}
    assert memory.task_preferences is None


def test_date_range_queries_are_inclusive():
    store = make_store()
    store.todos.find.return_value = []
    start, end = datetime(2025, 1, 1), datetime(2025, 1, 31)

    store.fetch_todos_by_user_and_date_range("u1", start, end)

    store.todos.find.assert_called_once_with({
        "userId": "u1",
        "createdAt": {"$gte": start, "$lte": end},
    })


def test_completion_counts_by_user():
    store = make_store()
    store.todos.aggregate.return_value = [
        {"_id": "u1", "completed": 2, "total": 3},
        {"_id": OID, "completed": 0, "total": 1},
    ]

    assert store.fetch_completion_counts_by_user() == [("u1", 2, 3), (str(OID), 0, 1)]


def test_user_counts():
    store = make_store()
    store.users.count_documents.return_value = 7

    assert store.count_users() == 7
    store.users.count_documents.assert_called_with({})


def test_driver_errors_become_store_errors():
    store = make_store()
    store.todos.find.side_effect = ServerSelectionTimeoutError("no servers")

    with pytest.raises(StoreError, match="fetch_todos_by_user"):
        store.fetch_todos_by_user("u1")


def test_malformed_documents_become_store_errors():
    store = make_store()
    store.todos.find.return_value = [{"_id": "x", "userId": "u1", "completed": True}]

    with pytest.raises(StoreError, match="fetch_todos_by_user"):
        store.fetch_todos_by_user("u1")


def test_malformed_user_becomes_store_error():
    store = make_store()
    store.users.find.return_value = [{"_id": OID, "createdAt": "not a date"}]

    with pytest.raises(StoreError, match="fetch_all_users"):
        store.fetch_all_users()
