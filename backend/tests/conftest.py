"""Shared test fixtures for backend tests."""

from unittest.mock import patch

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.pool import StaticPool
from sqlmodel import SQLModel, create_engine

from chat_api.services.identity import get_identity_verifier
from chat_api.services.identity.base import AuthenticationError, Identity, IdentityVerifier
from chat_api.services.llm import get_provider_factory
from chat_api.services.llm.base import BaseLLMProvider, ProviderError
from chat_api.services.persistence import get_persistence_store
from chat_api.services.persistence.base import PersistenceError
from chat_api.services.persistence.sql import SQLPersistenceStore

# In-memory SQLite with StaticPool so all connections (including threads) share one DB
test_engine = create_engine(
    "sqlite://",
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)

TOKENS = {
    "token-alice": "alice",
    "token-bob": "bob",
}


class FakeProvider(BaseLLMProvider):
    """Deterministic provider that records how it was called."""

    def __init__(self, fragments=None):
        self.fragments = fragments if fragments is not None else ["Hello", " from", " Grok"]
        self.fail_on_open = False
        self.fail_after: int | None = None
        self.complete_calls = 0
        self.stream_calls = 0
        self.last_model: str | None = None
        self.last_messages = None

    @property
    def calls(self) -> int:
        return self.complete_calls + self.stream_calls

    async def complete(self, messages, model, temperature, max_tokens):
        self.complete_calls += 1
        self.last_model = model
        self.last_messages = messages
        if self.fail_on_open:
            raise ProviderError("upstream unavailable")
        return "".join(self.fragments)

    async def stream(self, messages, model, temperature, max_tokens):
        self.stream_calls += 1
        self.last_model = model
        self.last_messages = messages
        if self.fail_on_open:
            raise ProviderError("upstream unavailable")
        return self._fragments()

    async def _fragments(self):
        for i, fragment in enumerate(self.fragments):
            if self.fail_after is not None and i >= self.fail_after:
                raise ProviderError("connection reset")
            yield fragment


class FakeVerifier(IdentityVerifier):
    async def verify(self, token: str) -> Identity:
        uid = TOKENS.get(token)
        if uid is None:
            raise AuthenticationError("unknown token")
        return Identity(uid=uid, email=f"{uid}@example.com", email_verified=True, display_name=uid.title())


class FailingStore(SQLPersistenceStore):
    """Store whose writes always fail."""

    async def create_session(self, user_id, title):
        raise PersistenceError("database is down")

    async def insert_messages(self, session_id, messages):
        raise PersistenceError("database is down")


@pytest.fixture(autouse=True)
def setup_test_db():
    """Create all tables before each test, drop after."""
    import chat_api.models.chat  # noqa: F401 - register models
    SQLModel.metadata.create_all(test_engine)
    yield
    SQLModel.metadata.drop_all(test_engine)


@pytest.fixture
def engine():
    return test_engine


@pytest.fixture
def provider():
    return FakeProvider()


@pytest.fixture
def provider_names():
    """Provider names the relay asked the factory for."""
    return []


@pytest.fixture
def store():
    return SQLPersistenceStore(test_engine)


@pytest.fixture
def failing_store():
    return FailingStore(test_engine)


def _make_client(provider, provider_names, store):
    def factory(name):
        provider_names.append(name)
        return provider

    from chat_api.main import app

    app.dependency_overrides[get_provider_factory] = lambda: factory
    app.dependency_overrides[get_identity_verifier] = lambda: FakeVerifier()
    app.dependency_overrides[get_persistence_store] = lambda: store
    return app


@pytest.fixture
def client(provider, provider_names, store):
    """FastAPI TestClient with all external deps replaced by fakes."""
    with patch("chat_api.core.database.engine", test_engine):
        app = _make_client(provider, provider_names, store)
        with TestClient(app) as c:
            yield c
        app.dependency_overrides.clear()


@pytest.fixture
def failing_client(provider, provider_names, failing_store):
    """TestClient whose persistence store rejects every write."""
    with patch("chat_api.core.database.engine", test_engine):
        app = _make_client(provider, provider_names, failing_store)
        with TestClient(app) as c:
            yield c
        app.dependency_overrides.clear()


@pytest.fixture
def unguarded_client(provider, provider_names, store):
    """TestClient that returns 500 responses instead of re-raising server errors."""
    with patch("chat_api.core.database.engine", test_engine):
        app = _make_client(provider, provider_names, store)
        with TestClient(app, raise_server_exceptions=False) as c:
            yield c
        app.dependency_overrides.clear()


def auth(token: str = "token-alice") -> dict:
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def auth_headers():
    return auth
