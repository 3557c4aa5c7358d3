"""
FastAPI dependencies for the shared catalogue handles.
"""

from dataclasses import dataclass

from fastapi import Request
from fastapi.templating import Jinja2Templates
from pymongo import MongoClient
from pymongo.collection import Collection


@dataclass(frozen=True)
class CatalogContext:
    """Handles built once at startup and shared read-only by every request."""

    client: MongoClient
    collection: Collection
    templates: Jinja2Templates


def get_context(request: Request) -> CatalogContext:
    """
    Dependency to get the process-wide CatalogContext.
    """
    return request.app.state.catalog
