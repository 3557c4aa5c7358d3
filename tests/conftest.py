import mongomock
import pytest
from fastapi.testclient import TestClient

from bookstore.config import Settings
from bookstore.main import create_app


@pytest.fixture
def settings():
    return Settings(database_name="bookstore-test", collection_name="books")


@pytest.fixture
def mongo_client():
    """In-memory MongoDB client shared by the app and the assertions."""
    return mongomock.MongoClient()


@pytest.fixture
def collection(mongo_client, settings):
    return mongo_client[settings.database_name][settings.collection_name]


@pytest.fixture
def app(settings, mongo_client):
    return create_app(settings, client=mongo_client)


@pytest.fixture
def client(app):
    """TestClient with the lifespan run, so the example books are seeded."""
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides = {}
