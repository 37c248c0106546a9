"""Shared in-memory database and API client wiring for tests."""

import unittest

from fastapi.testclient import TestClient
from sqlalchemy.orm import Session, sessionmaker

from newsboard.core.database import build_engine, get_db
from newsboard.main import app
from newsboard.models import Base

# One shared in-memory SQLite connection so the app and the test see the same data.
# Foreign keys are enforced, as on PostgreSQL.
engine = build_engine("sqlite://")
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

PASSWORD = "password1"


def override_get_db():
    """Override database dependency for testing."""
    db = TestingSessionLocal()
    try:
        yield db
    finally:
        db.close()


class DatabaseTestCase(unittest.TestCase):
    """Fresh schema for every test; self.db is a session on it."""

    def setUp(self) -> None:
        Base.metadata.create_all(bind=engine)
        self.db: Session = TestingSessionLocal()

    def tearDown(self) -> None:
        self.db.close()
        Base.metadata.drop_all(bind=engine)


class ApiTestCase(DatabaseTestCase):
    """DatabaseTestCase plus the app wired to the test database and fresh rate limits."""

    def setUp(self) -> None:
        super().setUp()
        app.dependency_overrides[get_db] = override_get_db
        app.state.auth_limiter.reset()
        app.state.api_limiter.reset()
        self.client = self.new_client()

    def tearDown(self) -> None:
        app.dependency_overrides.pop(get_db, None)
        super().tearDown()

    def new_client(self) -> TestClient:
        """A client with its own cookie jar (one browser session)."""
        return TestClient(app)

    def register(self, client: TestClient, username: str, password: str = PASSWORD):
        return client.post(
            "/api/auth/register",
            json={"username": username, "password": password},
        )

    def login(self, client: TestClient, username: str, password: str = PASSWORD):
        return client.post(
            "/api/auth/login",
            json={"username": username, "password": password},
        )

    def submit(self, client: TestClient, title: str, url: str = "https://example.com"):
        return client.post("/api/articles", json={"title": title, "url": url})
