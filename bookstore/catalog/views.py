"""
Server-rendered HTML pages.

Every page is a Jinja2 template from ``bookstore/templates``. A missing
template or a rendering error is not caught here and surfaces as a 500.
"""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, HTTPException, Request
from fastapi.responses import HTMLResponse
from pydantic import ValidationError
from pymongo.errors import PyMongoError

from ..dependencies import CatalogContext, get_context
from . import store

logger = logging.getLogger(__name__)

router = APIRouter(tags=["pages"], default_response_class=HTMLResponse)


def _render(ctx: CatalogContext, request: Request, name: str, **data):
    return ctx.templates.TemplateResponse(request, f"{name}.html", data)


def _distinct_field_page(ctx: CatalogContext, request: Request, field: str, template: str):
    try:
        books = store.find_all_books(ctx.collection)
    except (PyMongoError, ValidationError):
        logger.exception("Could not list books for /%s", template)
        raise HTTPException(status_code=500, detail="Database error")
    return _render(ctx, request, template, values=store.unique_values(books, field))


@router.get("/")
def index(request: Request, ctx: CatalogContext = Depends(get_context)):
    return _render(ctx, request, "index")


@router.get("/books")
def books_table(request: Request, ctx: CatalogContext = Depends(get_context)):
    return _render(ctx, request, "book-table", books=store.find_all_books(ctx.collection))


@router.get("/authors")
def authors(request: Request, ctx: CatalogContext = Depends(get_context)):
    return _distinct_field_page(ctx, request, "author", "authors")


@router.get("/years")
def years(request: Request, ctx: CatalogContext = Depends(get_context)):
    return _distinct_field_page(ctx, request, "year", "years")


@router.get("/search")
def search(request: Request, ctx: CatalogContext = Depends(get_context)):
    return _render(ctx, request, "search-bar")


@router.get("/create")
def create_form(request: Request, ctx: CatalogContext = Depends(get_context)):
    return _render(ctx, request, "create-form")
