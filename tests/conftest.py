"""Pytest configuration and fixtures."""

import os

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

from bizcards import models  # noqa: F401
from bizcards.database import Base, get_db
from bizcards.main import app
from bizcards.models.user import User

DEFAULT_PASSWORD = "testpass123"  # noqa: S105

CARD_PAYLOAD = {
    "title": "Acme Plumbing",
    "subtitle": "Pipes and more",
    "description": "Round the clock plumbing services",
    "phone": "050-1234567",
    "email": "info@acme.example.com",
    "web": "https://acme.example.com",
    "address": {
        "country": "Israel",
        "city": "Haifa",
        "street": "Herzl",
        "house_number": 12,
        "zip": 3100000,
    },
}


class AuthHeaders(dict):
    """Dict subclass that also stores the user's id and email."""

    def __init__(self, *args, user_id: int | None = None, email: str | None = None, **kwargs):
        super().__init__(*args, **kwargs)
        self.user_id = user_id
        self.email = email


# Use test database - PostgreSQL in Docker, SQLite locally
if os.getenv("DATABASE_URL"):
    # Running in Docker - use PostgreSQL test database next to the app database
    SQLALCHEMY_DATABASE_URL = os.getenv("DATABASE_URL").rsplit("/", 1)[0] + "/bizcards_test"
    # psycopg2 is the declared driver; a bare scheme would pick psycopg 3
    SQLALCHEMY_DATABASE_URL = SQLALCHEMY_DATABASE_URL.replace(
        "postgresql://", "postgresql+psycopg2://", 1
    )
else:
    # Running locally - use SQLite
    SQLALCHEMY_DATABASE_URL = "sqlite:///./test.db"

connect_args = {"check_same_thread": False} if "sqlite" in SQLALCHEMY_DATABASE_URL else {}
engine = create_engine(SQLALCHEMY_DATABASE_URL, connect_args=connect_args)
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture(scope="session", autouse=True)
def setup_test_database():
    """Create test database schema once at the start of the test session."""
    if "postgresql" in SQLALCHEMY_DATABASE_URL:
        from sqlalchemy_utils import create_database, database_exists

        if not database_exists(SQLALCHEMY_DATABASE_URL):
            create_database(SQLALCHEMY_DATABASE_URL)

    Base.metadata.create_all(bind=engine)
    yield
    # Each test cleans up after itself


@pytest.fixture(scope="function", autouse=True)
def db():
    """Create a fresh database session for each test with cleanup."""
    session = TestingSessionLocal()

    yield session

    # Clean up all data after test
    session.rollback()
    for table in reversed(Base.metadata.sorted_tables):
        session.execute(table.delete())
    session.commit()
    session.close()


@pytest.fixture(scope="function")
def client(db):
    """Create a test client with database override."""

    def override_get_db():
        try:
            yield db
        finally:
            pass

    app.dependency_overrides[get_db] = override_get_db
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


def register(client, email: str, password: str = DEFAULT_PASSWORD, **extra) -> dict:
    """Register a user through the API and return the created user."""
    response = client.post(
        "/api/v1/users", json={"email": email, "password": password, "name": "Test User", **extra}
    )
    assert response.status_code == 201, response.text
    return response.json()


def login(client, email: str, password: str = DEFAULT_PASSWORD) -> AuthHeaders:
    """Log in and return bearer auth headers."""
    response = client.post("/api/v1/users/login", json={"email": email, "password": password})
    assert response.status_code == 200, response.text
    token = response.json()["access_token"]
    me = client.get("/api/v1/users/me", headers={"Authorization": f"Bearer {token}"}).json()
    return AuthHeaders({"Authorization": f"Bearer {token}"}, user_id=me["id"], email=email)


@pytest.fixture
def auth_headers(client):
    """Regular user auth headers."""
    register(client, "test@example.com")
    return login(client, "test@example.com")


@pytest.fixture
def business_headers(client):
    """Business user auth headers."""
    register(client, "owner@example.com", is_business=True)
    return login(client, "owner@example.com")


@pytest.fixture
def other_business_headers(client):
    """A second, unrelated business user."""
    register(client, "rival@example.com", is_business=True)
    return login(client, "rival@example.com")


@pytest.fixture
def admin_headers(client, db):
    """Admin auth headers. Admin rights are granted directly in the database."""
    register(client, "admin@example.com")
    db.query(User).filter(User.email == "admin@example.com").update({"is_admin": True})
    db.commit()
    return login(client, "admin@example.com")


@pytest.fixture
def card(client, business_headers):
    """A card owned by the business user."""
    response = client.post("/api/v1/cards", headers=business_headers, json=CARD_PAYLOAD)
    assert response.status_code == 201, response.text
    return response.json()
