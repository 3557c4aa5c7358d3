"""
Pydantic schema definitions for the catalog module.

The ``Book`` model is the single record type of the catalogue. It is
used both as the JSON representation returned by the API and as the
source of the documents persisted in MongoDB. Persisted documents use
the field names ``ID``, ``BookName``, ``BookAuthor``, ``BookEdition``,
``BookPages`` and ``BookYear``; ``DOCUMENT_FIELDS`` maps between the
two naming schemes. The storage-assigned ``_id`` is never exposed.
"""

from typing import Any, Dict, Mapping, Optional

from pydantic import BaseModel, ConfigDict, StrictStr

# API field name -> persisted document field name
DOCUMENT_FIELDS: Dict[str, str] = {
    "id": "ID",
    "title": "BookName",
    "author": "BookAuthor",
    "edition": "BookEdition",
    "pages": "BookPages",
    "year": "BookYear",
}

# Fields that PUT /api/books/{id} may change. The external id is not one of them.
UPDATABLE_FIELDS = ("title", "author", "edition", "pages", "year")


class Book(BaseModel):
    """A single book entry.

    ``id`` is the caller-assigned external identifier used by the update
    and delete routes. ``pages`` and ``year`` are kept as text, exactly
    as supplied. Optional fields default to an empty string and are left
    out of JSON responses when empty (routes serialise with
    ``response_model_exclude_defaults``).
    """

    model_config = ConfigDict(extra="ignore")

    id: StrictStr
    title: StrictStr
    author: StrictStr
    edition: StrictStr = ""
    pages: StrictStr = ""
    year: StrictStr = ""

    @classmethod
    def from_document(cls, document: Mapping[str, Any]) -> "Book":
        """Build a ``Book`` from a stored document (or a form using the same names).

        Missing and null fields read as empty strings, so documents written
        by older clients that skipped empty optional fields still load.
        """
        return cls(**{field: document.get(key) or "" for field, key in DOCUMENT_FIELDS.items()})

    def to_document(self) -> Dict[str, str]:
        """Return the persisted representation.

        Every field is written, empty ones included, so the same
        mapping doubles as the exact-match filter used for duplicate
        detection.
        """
        return {key: getattr(self, field) for field, key in DOCUMENT_FIELDS.items()}


class BookUpdate(BaseModel):
    """Partial update for an existing book; ``None`` means "leave unchanged"."""

    title: Optional[str] = None
    author: Optional[str] = None
    edition: Optional[str] = None
    pages: Optional[str] = None
    year: Optional[str] = None

    @classmethod
    def from_payload(cls, payload: Mapping[str, Any]) -> "BookUpdate":
        # Unknown keys and non-string values are dropped, not rejected.
        return cls(
            **{
                key: value
                for key, value in payload.items()
                if key in UPDATABLE_FIELDS and isinstance(value, str)
            }
        )

    def is_empty(self) -> bool:
        return not self.model_dump(exclude_none=True)

    def to_set_document(self) -> Dict[str, str]:
        """Return the body of the ``$set`` operator for this update."""
        return {
            DOCUMENT_FIELDS[field]: value
            for field, value in self.model_dump(exclude_none=True).items()
        }


class StatusMessage(BaseModel):
    status: str


class ErrorMessage(BaseModel):
    error: str
