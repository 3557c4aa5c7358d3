import logging
from contextlib import contextmanager
from unittest.mock import MagicMock

import mongomock
import pymongo
import pytest
from fastapi.testclient import TestClient
from pymongo.errors import ServerSelectionTimeoutError

from bookstore import storage
from bookstore.config import Settings
from bookstore.main import create_app
from bookstore.storage import (
    EXAMPLE_BOOKS,
    StartupError,
    prepare_database,
    seed_books,
)


def test_prepare_database_creates_missing_collection():
    client = mongomock.MongoClient()
    assert "books" not in client["shop"].list_collection_names()

    coll = prepare_database(client, "shop", "books")

    assert "books" in client["shop"].list_collection_names()
    assert coll.name == "books"


def test_prepare_database_keeps_existing_collection():
    client = mongomock.MongoClient()
    client["shop"]["books"].insert_one({"ID": "kept"})

    coll = prepare_database(client, "shop", "books")

    assert coll.count_documents({"ID": "kept"}) == 1


def test_prepare_database_unreachable_is_fatal():
    client = MagicMock()
    client.__getitem__.return_value.list_collection_names.side_effect = (
        ServerSelectionTimeoutError("no servers available")
    )
    with pytest.raises(StartupError):
        prepare_database(client, "shop", "books")


def test_seed_inserts_examples_once(collection):
    assert seed_books(collection) == 3
    assert seed_books(collection) == 0
    assert seed_books(collection) == 0

    assert collection.count_documents({}) == 3
    for book in EXAMPLE_BOOKS:
        assert collection.count_documents(book.to_document()) == 1


def test_seed_keeps_unrelated_documents(collection):
    collection.insert_one({"ID": "mine", "BookName": "Dune", "BookAuthor": "Frank Herbert"})

    seed_books(collection)

    assert collection.count_documents({}) == 4


def test_seed_with_duplicated_example_is_fatal(collection):
    duplicated = EXAMPLE_BOOKS[1].to_document()
    collection.insert_one(dict(duplicated))
    collection.insert_one(dict(duplicated))

    with pytest.raises(StartupError):
        seed_books(collection)


def test_startup_seeds_collection(client, collection):
    assert collection.count_documents({}) == 3


def test_restart_against_same_storage_is_idempotent(settings, mongo_client, collection):
    for _ in range(2):
        with TestClient(create_app(settings, client=mongo_client)):
            pass
    assert collection.count_documents({}) == 3


def test_startup_failure_aborts_app(settings):
    broken = MagicMock()
    broken.__getitem__.return_value.list_collection_names.side_effect = (
        ServerSelectionTimeoutError("no servers available")
    )
    app = create_app(settings, client=broken)

    with pytest.raises(StartupError):
        with TestClient(app):
            pass
    broken.close.assert_called_once()


def test_bootstrap_uses_connect_timeout(mongo_client, monkeypatch):
    settings = Settings(
        database_name="bookstore-test",
        collection_name="books",
        connect_timeout_ms=10_000,
        operation_timeout_ms=5_000,
    )
    active = []
    budgets = []
    real_timeout = pymongo.timeout
    real_prepare = storage.prepare_database

    @contextmanager
    def recording_timeout(seconds):
        with real_timeout(seconds):
            active.append(seconds)
            try:
                yield
            finally:
                active.pop()

    def recording_prepare(*args):
        budgets.append(list(active))
        return real_prepare(*args)

    monkeypatch.setattr(pymongo, "timeout", recording_timeout)
    monkeypatch.setattr(storage, "prepare_database", recording_prepare)

    with TestClient(create_app(settings, client=mongo_client)):
        pass

    assert budgets == [[10.0]]


def test_startup_logs_seeding_at_info(settings, mongo_client, caplog):
    app = create_app(settings, client=mongo_client)

    with TestClient(app):
        pass

    assert logging.getLogger("bookstore").getEffectiveLevel() == logging.INFO
    messages = [r.getMessage() for r in caplog.records if r.name == "bookstore.storage"]
    assert any("Inserted example book example1" in m for m in messages)
