"""
FastAPI application for the bookstore catalogue.

``create_app()`` wires logging, storage, templates and routes together;
the module-level ``app`` lets ``uvicorn bookstore.main:app`` serve it
directly, and ``main()`` is the console entry point.
"""

import logging
import time
from contextlib import asynccontextmanager
from typing import Optional

import pymongo
import uvicorn
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles
from fastapi.templating import Jinja2Templates
from pydantic import ValidationError
from pymongo import MongoClient
from pymongo.errors import PyMongoError
from starlette.exceptions import HTTPException as StarletteHTTPException

from . import storage
from .catalog import catalog_router, pages_router
from .config import Settings, get_settings
from .dependencies import CatalogContext

logger = logging.getLogger(__name__)


def configure_logging(settings: Settings) -> None:
    """Send package log records at ``log_level`` to a root stream handler."""
    logging.basicConfig(format="%(asctime)s %(levelname)s %(name)s: %(message)s")
    logging.getLogger("bookstore").setLevel(settings.log_level.upper())


def load_templates(settings: Settings) -> Jinja2Templates:
    """Load the template set once; it does not change while the process runs."""
    templates = Jinja2Templates(directory=str(settings.templates_dir))
    templates.env.auto_reload = False
    return templates


def create_app(settings: Optional[Settings] = None, client: Optional[MongoClient] = None) -> FastAPI:
    """Build the application.

    ``client`` replaces the MongoDB client created from ``settings``;
    tests use it to run against an in-memory database.
    """
    settings = settings or get_settings()
    configure_logging(settings)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        mongo = client if client is not None else storage.connect(settings)
        try:
            try:
                # Bootstrap gets the connect timeout instead of the per-operation one.
                with pymongo.timeout(settings.connect_timeout_ms / 1000):
                    collection = storage.prepare_database(
                        mongo, settings.database_name, settings.collection_name
                    )
                    storage.seed_books(collection)
            except storage.StartupError:
                logger.critical("Startup failed", exc_info=True)
                raise
            app.state.catalog = CatalogContext(
                client=mongo,
                collection=collection,
                templates=load_templates(settings),
            )
            yield
        finally:
            mongo.close()
            logger.info("MongoDB connection closed")

    app = FastAPI(
        title="Bookstore",
        description="Book catalogue with HTML views and a JSON CRUD API, backed by MongoDB.",
        version="1.0.0",
        lifespan=lifespan,
    )

    @app.middleware("http")
    async def log_requests(request: Request, call_next):
        started = time.perf_counter()
        response = await call_next(request)
        logger.info(
            "%s %s -> %s (%.1f ms)",
            request.method,
            request.url.path,
            response.status_code,
            (time.perf_counter() - started) * 1000,
        )
        return response

    @app.exception_handler(StarletteHTTPException)
    async def http_error_handler(request: Request, exc: StarletteHTTPException):
        return JSONResponse(
            status_code=exc.status_code,
            content={"error": exc.detail},
            headers=getattr(exc, "headers", None),
        )

    @app.exception_handler(PyMongoError)
    async def storage_error_handler(request: Request, exc: PyMongoError):
        logger.error("Unhandled storage error on %s %s: %s", request.method, request.url.path, exc)
        return JSONResponse(status_code=500, content={"error": "Database error"})

    @app.exception_handler(ValidationError)
    async def stored_document_error_handler(request: Request, exc: ValidationError):
        # Request bodies are validated inside the routes, so this is a stored document
        # that does not decode into a Book.
        logger.error("Undecodable book document on %s %s: %s", request.method, request.url.path, exc)
        return JSONResponse(status_code=500, content={"error": "Database error"})

    app.mount("/css", StaticFiles(directory=str(settings.static_dir / "css")), name="css")
    app.include_router(pages_router)
    app.include_router(catalog_router)
    return app


app = create_app()


def main() -> None:
    settings = get_settings()
    # lifespan="on" makes a failed bootstrap abort the process with a non-zero status.
    uvicorn.run(app, host=settings.host, port=settings.port, lifespan="on", access_log=False)


if __name__ == "__main__":
    main()
