"""
Asseta - Test Configuration and Fixtures
"""
import mongomock
import pytest
from fastapi.testclient import TestClient

from main import create_app
from settings import Settings


@pytest.fixture
def database():
    """Fresh in-memory database for each test"""
    return mongomock.MongoClient().db


@pytest.fixture
def app(database):
    return create_app(Settings(), database=database)


@pytest.fixture
def ctx(app):
    return app.state.ctx


@pytest.fixture
def client(app):
    with TestClient(app) as c:
        yield c


@pytest.fixture
def vendor_data():
    return {
        "name": "Acme Supplies",
        "email": "sales@acme.io",
        "phone": "555-0100",
        "company": "Acme Inc",
    }


@pytest.fixture
def ticket_data():
    return {
        "name": "A",
        "email": "a@x.com",
        "subject": "Broken login",
        "message": "Cannot log in",
    }


@pytest.fixture
def user_data():
    return {
        "username": "alice",
        "email": "alice@acme.io",
        "password": "s3cret-pass",
    }


@pytest.fixture
def notification_titles(client):
    """Titles of all notifications, newest first"""
    def _titles():
        return [n["title"] for n in client.get("/api/notifications").json()]
    return _titles
