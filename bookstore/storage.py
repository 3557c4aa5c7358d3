"""
MongoDB connection and startup bootstrap.

``connect()`` opens the client, ``prepare_database()`` makes sure the
book collection exists and ``seed_books()`` inserts the example records
the first time the service starts against an empty volume. Any failure
here is fatal: it is raised as ``StartupError`` and aborts startup.
"""

from __future__ import annotations

import logging
from typing import List

from pymongo import MongoClient
from pymongo.collection import Collection
from pymongo.errors import PyMongoError
from pymongo.uri_parser import parse_uri

from .catalog.schemas import Book
from .config import Settings

logger = logging.getLogger(__name__)


EXAMPLE_BOOKS: List[Book] = [
    Book(
        id="example1",
        title="The Vortex",
        author="José Eustasio Rivera",
        edition="958-30-0804-4",
        pages="292",
        year="1924",
    ),
    Book(
        id="example2",
        title="Frankenstein",
        author="Mary Shelley",
        edition="978-3-649-64609-9",
        pages="280",
        year="1818",
    ),
    Book(
        id="example3",
        title="The Black Cat",
        author="Edgar Allan Poe",
        edition="978-3-99168-238-7",
        pages="280",
        year="1843",
    ),
]


class StartupError(RuntimeError):
    """The service cannot start: storage is unreachable or inconsistent."""


def _describe(uri: str) -> str:
    # Log host:port only; the URI may carry credentials.
    try:
        nodes = parse_uri(uri)["nodelist"]
    except (PyMongoError, ValueError):
        return "<unparseable uri>"
    return ",".join(f"{host}:{port}" for host, port in nodes)


def connect(settings: Settings) -> MongoClient:
    """Create the shared MongoDB client.

    The driver connects lazily. Operations default to
    ``operation_timeout_ms``; the startup bootstrap widens that to
    ``connect_timeout_ms`` with ``pymongo.timeout``.
    """
    logger.info("Connecting to MongoDB at %s", _describe(settings.database_uri))
    try:
        return MongoClient(
            settings.database_uri,
            serverSelectionTimeoutMS=settings.connect_timeout_ms,
            connectTimeoutMS=settings.connect_timeout_ms,
            timeoutMS=settings.operation_timeout_ms,
        )
    except PyMongoError as exc:
        raise StartupError(f"could not create MongoDB client: {exc}") from exc


def prepare_database(client: MongoClient, db_name: str, collection_name: str) -> Collection:
    """Ensure ``collection_name`` exists in ``db_name`` and return it."""
    db = client[db_name]
    try:
        names = db.list_collection_names()
        if collection_name not in names:
            db.create_collection(collection_name)
            logger.info("Created collection %s.%s", db_name, collection_name)
    except PyMongoError as exc:
        raise StartupError(
            f"could not prepare collection {db_name}.{collection_name}: {exc}"
        ) from exc
    return db[collection_name]


def seed_books(collection: Collection, books: List[Book] = EXAMPLE_BOOKS) -> int:
    """Insert each example book unless an identical document already exists.

    Returns the number of documents inserted. Finding more than one
    identical copy of an example means the collection is inconsistent
    and startup is aborted.
    """
    inserted = 0
    for book in books:
        document = book.to_document()
        try:
            matches = list(collection.find(document))
            if len(matches) > 1:
                raise StartupError(
                    f"found {len(matches)} copies of example book {book.id!r}"
                )
            if matches:
                logger.info("Example book %s already present", book.id)
                continue
            result = collection.insert_one(document)
        except PyMongoError as exc:
            raise StartupError(f"could not seed example book {book.id!r}: {exc}") from exc
        logger.info("Inserted example book %s (%s)", book.id, result.inserted_id)
        inserted += 1
    return inserted
