"""Shared pytest fixtures for all test suites."""

from collections.abc import Callable, Iterator

import pytest
from fastapi.testclient import TestClient
from httpx import Response

from backend.app.access.pins import hash_pin
from backend.app.config import Settings, get_settings
from backend.app.db.engine import create_engine_from_url, create_session_factory, get_record_store
from backend.app.db.inmemory import InMemorySessionStore, create_inmemory_store
from backend.app.db.models import Base
from backend.app.db.repositories import RecordStore, UserRecord
from backend.app.db.sql_repositories import create_sql_store
from backend.app.main import app
from backend.app.middleware.ratelimit import build_rate_limit_middleware, get_rate_limit_middleware
from backend.app.sessions import get_session_store

TEST_PIN = "1234"


@pytest.fixture(scope="session")
def test_pin_hash() -> str:
    """One scrypt hash of TEST_PIN shared across tests."""
    return hash_pin(TEST_PIN)


@pytest.fixture
def settings() -> Settings:
    """Settings isolated from any .env file."""
    return Settings(_env_file=None, database_url=None, redis_url=None)


@pytest.fixture(params=["memory", "sql"])
def any_store(request: pytest.FixtureRequest) -> Iterator[RecordStore]:
    """Record store parametrized over the in-memory and SQLite implementations."""
    if request.param == "memory":
        yield create_inmemory_store()
        return

    engine = create_engine_from_url("sqlite:///:memory:")
    Base.metadata.create_all(engine)
    yield create_sql_store(create_session_factory(engine))
    engine.dispose()


@pytest.fixture
def store() -> RecordStore:
    return create_inmemory_store()


@pytest.fixture
def sessions() -> InMemorySessionStore:
    return InMemorySessionStore()


@pytest.fixture
def make_user(store: RecordStore, test_pin_hash: str) -> Callable[[str], UserRecord]:
    """Create a user with TEST_PIN directly in the store."""

    def _make(email: str) -> UserRecord:
        return store.users.create_user(email, test_pin_hash)

    return _make


@pytest.fixture
def client(
    store: RecordStore, sessions: InMemorySessionStore, settings: Settings
) -> Iterator[TestClient]:
    """Test client wired to fresh in-memory stores."""
    rate_limits = build_rate_limit_middleware(settings)

    app.dependency_overrides[get_record_store] = lambda: store
    app.dependency_overrides[get_session_store] = lambda: sessions
    app.dependency_overrides[get_settings] = lambda: settings
    app.dependency_overrides[get_rate_limit_middleware] = lambda: rate_limits

    with TestClient(app) as test_client:
        yield test_client

    app.dependency_overrides.clear()


@pytest.fixture
def client_factory(client: TestClient) -> Iterator[Callable[[], TestClient]]:
    """Extra clients sharing the same stores, each with its own cookie jar."""
    extra: list[TestClient] = []

    def _make() -> TestClient:
        new_client = TestClient(app)
        extra.append(new_client)
        return new_client

    yield _make

    for extra_client in extra:
        extra_client.close()


@pytest.fixture
def login() -> Callable[..., None]:
    """Log a client in, asserting success."""

    def _login(test_client: TestClient, email: str, pin: str = TEST_PIN) -> None:
        response = test_client.post("/api/login", json={"email": email, "pin": pin})
        assert response.status_code == 200, response.text

    return _login


@pytest.fixture
def upload() -> Callable[..., Response]:
    """Upload a document through the API as the client's logged-in owner."""

    def _upload(
        test_client: TestClient,
        name: str,
        content: bytes = b"%PDF-1.4 test",
        content_type: str = "application/pdf",
    ) -> Response:
        return test_client.post(
            "/api/documents",
            data={"name": name},
            files={"file": (name, content, content_type)},
        )

    return _upload
