"""
Test configuration: a throwaway SQLite database recreated for every test.
"""
import os

# Must be set before the app (and its settings) are imported
os.environ["TESTING"] = "1"
os.environ["TEST_DATABASE_URL"] = "sqlite:///./test.db"
os.environ["BCRYPT_ROUNDS"] = "4"

import pytest
from fastapi.testclient import TestClient

from app.main import app
from app.core.database import Base, SessionLocal, engine
from app.core.security import get_token_service


@pytest.fixture(scope="function")
def test_db():
    # Create tables
    Base.metadata.create_all(bind=engine)
    yield
    Base.metadata.drop_all(bind=engine)


@pytest.fixture
def db(test_db):
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def client(test_db):
    with TestClient(app, base_url="http://testserver") as test_client:
        yield test_client


@pytest.fixture
def token_service():
    return get_token_service()


def signup_payload(**overrides):
    payload = {
        "email": "patient@example.com",
        "password": "password123",
        "name": "Test Patient",
        "userType": "patient",
    }
    payload.update(overrides)
    return payload


@pytest.fixture
def signup(client):
    """Register an account through the API and return the response body."""
    def _signup(**overrides):
        response = client.post("/api/auth/signup", json=signup_payload(**overrides))
        assert response.status_code == 201, response.json()
        return response.json()["data"]
    return _signup


def bearer(token):
    return {"Authorization": f"Bearer {token}"}
