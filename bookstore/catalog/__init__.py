"""
Catalog package for the bookstore service.

``router`` exposes the JSON CRUD API under ``/api/books``; ``views``
serves the HTML pages (book table, authors, years, search and create
forms). Both reach MongoDB only through ``store`` and receive their
handles through ``bookstore.dependencies.get_context``.
"""

from .router import router as catalog_router  # noqa: F401
from .views import router as pages_router  # noqa: F401
