"""
Data access for the catalogue.

Each function performs a single MongoDB call against the collection it
is given. Driver errors (``PyMongoError``) propagate to the caller,
which decides what HTTP status they map to.
"""

from __future__ import annotations

from typing import Iterable, List

from pymongo.collection import Collection

from .schemas import Book, BookUpdate


def find_all_books(collection: Collection) -> List[Book]:
    """Return every book in storage order. No filter, no limit."""
    return [Book.from_document(doc) for doc in collection.find({})]


def unique_values(books: Iterable[Book], field: str) -> List[str]:
    """Return the distinct values of ``field`` in first-seen order."""
    seen = set()
    values: List[str] = []
    for book in books:
        value = getattr(book, field)
        if value not in seen:
            seen.add(value)
            values.append(value)
    return values


def book_exists(collection: Collection, book: Book) -> bool:
    """True when a document matches ``book`` on all six fields."""
    return collection.find_one(book.to_document()) is not None


def insert_book(collection: Collection, book: Book) -> None:
    collection.insert_one(book.to_document())


def update_book(collection: Collection, book_id: str, update: BookUpdate) -> int:
    """Apply ``update`` to the book with external id ``book_id``.

    Returns the number of matched documents (0 or 1).
    """
    result = collection.update_one({"ID": book_id}, {"$set": update.to_set_document()})
    return result.matched_count


def delete_book(collection: Collection, book_id: str) -> int:
    """Delete the book with external id ``book_id``; returns the deleted count."""
    result = collection.delete_one({"ID": book_id})
    return result.deleted_count
