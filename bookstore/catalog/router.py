"""
Route definitions for the books REST API.

Endpoints under /api:
- GET    /books       : list every book
- POST   /books       : create a book (JSON or form body)
- PUT    /books/{id}  : partial update by external id
- DELETE /books/{id}  : delete by external id

Error responses are ``{"error": "<message>"}`` (see the exception
handlers in ``bookstore.main``); success responses for writes are
``{"status": "<message>"}``.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, List

from fastapi import APIRouter, Depends, HTTPException, Request, status
from pydantic import ValidationError
from pymongo.errors import PyMongoError
from starlette.concurrency import run_in_threadpool

from ..dependencies import CatalogContext, get_context
from . import store
from .schemas import DOCUMENT_FIELDS, Book, BookUpdate, ErrorMessage, StatusMessage

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["books"])

FORM_CONTENT_TYPES = ("application/x-www-form-urlencoded", "multipart/form-data")


def _is_form(request: Request) -> bool:
    content_type = request.headers.get("content-type", "").split(";")[0].strip().lower()
    return content_type in FORM_CONTENT_TYPES


async def _read_payload(request: Request) -> Dict[str, Any]:
    """Decode the request body into a key/value mapping.

    JSON bodies must be an object; form bodies keep the last value per
    key. Anything else raises ``ValueError``.
    """
    if _is_form(request):
        form = await request.form()
        return {key: value for key, value in form.items() if isinstance(value, str)}
    payload = await request.json()
    if not isinstance(payload, dict):
        raise ValueError("expected a JSON object")
    return payload


def _parse_new_book(payload: Dict[str, Any], from_form: bool) -> Book:
    # The HTML create form posts the persisted field names (ID, BookName, ...).
    if from_form:
        return Book.model_validate(
            {field: payload[key] for field, key in DOCUMENT_FIELDS.items() if key in payload}
        )
    return Book.model_validate(payload)


@router.get("/books", response_model=List[Book], response_model_exclude_defaults=True)
def list_books(ctx: CatalogContext = Depends(get_context)) -> List[Book]:
    return store.find_all_books(ctx.collection)


@router.post(
    "/books",
    status_code=status.HTTP_201_CREATED,
    response_model=StatusMessage,
    responses={400: {"model": ErrorMessage}, 409: {"model": ErrorMessage}},
)
async def create_book(request: Request, ctx: CatalogContext = Depends(get_context)) -> StatusMessage:
    """Create a book unless an identical record (all six fields) already exists."""
    try:
        payload = await _read_payload(request)
        book = _parse_new_book(payload, from_form=_is_form(request))
    except (ValueError, ValidationError):
        raise HTTPException(status_code=400, detail="Invalid request body")

    if await run_in_threadpool(store.book_exists, ctx.collection, book):
        raise HTTPException(status_code=409, detail="Book already exists")

    try:
        await run_in_threadpool(store.insert_book, ctx.collection, book)
    except PyMongoError:
        logger.exception("Could not insert book %s", book.id)
        raise HTTPException(status_code=500, detail="Could not insert book")
    return StatusMessage(status="Book created")


@router.put(
    "/books/{book_id}",
    response_model=StatusMessage,
    responses={400: {"model": ErrorMessage}, 404: {"model": ErrorMessage}},
)
async def update_book(
    book_id: str, request: Request, ctx: CatalogContext = Depends(get_context)
) -> StatusMessage:
    """Set only the recognised string fields present in the body."""
    try:
        payload = await _read_payload(request)
    except ValueError:
        raise HTTPException(status_code=400, detail="Invalid update data")

    update = BookUpdate.from_payload(payload)
    if update.is_empty():
        raise HTTPException(status_code=400, detail="No valid fields to update")

    try:
        matched = await run_in_threadpool(store.update_book, ctx.collection, book_id, update)
    except PyMongoError:
        logger.exception("Could not update book %s", book_id)
        raise HTTPException(status_code=500, detail="Could not update book")
    if matched == 0:
        raise HTTPException(status_code=404, detail="Book not found")
    return StatusMessage(status="Book updated")


@router.delete(
    "/books/{book_id}",
    response_model=StatusMessage,
    responses={404: {"model": ErrorMessage}},
)
def delete_book(book_id: str, ctx: CatalogContext = Depends(get_context)) -> StatusMessage:
    # A storage error and "nothing matched" are reported the same way.
    try:
        deleted = store.delete_book(ctx.collection, book_id)
    except PyMongoError:
        logger.exception("Could not delete book %s", book_id)
        deleted = 0
    if deleted == 0:
        raise HTTPException(status_code=404, detail="Book not found or already deleted")
    return StatusMessage(status="Book deleted")
