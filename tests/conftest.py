"""Test configuration and fixtures.

Every test gets a freshly seeded in-memory database, a frozen clock and an
engine wired to both, so tests never share state or depend on wall time.
"""

from collections.abc import Iterator
from typing import Any

import pytest

from oauth_core.core.config import Settings, clear_settings_cache
from oauth_core.models import Client
from oauth_core.oauth2 import GrantEngine, GrantTypeCatalog
from tests.fixtures.clock import FrozenClock
from tests.fixtures.in_memory_database import SEED_REDIRECT_URI, InMemoryDatabase

SEED_CLIENT_ID = "abcd1234"
SEED_CLIENT_SECRET = "abcd1234"


class StubUserAuthenticator:
    """Accepts exactly the users it was given."""

    def __init__(self, users: dict[str, tuple[str, int]]) -> None:
        self._users = users
        self.calls: list[str] = []

    async def authenticate(self, username: str, password: str) -> int | None:
        self.calls.append(username)
        entry = self._users.get(username)
        if entry is None or entry[0] != password:
            return None
        return entry[1]


@pytest.fixture(autouse=True)
def _reset_settings_cache() -> Iterator[None]:
    clear_settings_cache()
    yield
    clear_settings_cache()


@pytest.fixture
def settings() -> Settings:
    """Settings with the default lifetimes and every grant enabled."""
    return Settings(database_url="postgresql://localhost:5432/oauth_test")


@pytest.fixture
def clock() -> FrozenClock:
    return FrozenClock()


@pytest.fixture
def db() -> InMemoryDatabase:
    return InMemoryDatabase().seed()


@pytest.fixture
def user_authenticator() -> StubUserAuthenticator:
    return StubUserAuthenticator({"alice": ("wonderland", 42)})


@pytest.fixture
async def catalog(db: InMemoryDatabase, settings: Settings) -> GrantTypeCatalog:
    return await GrantTypeCatalog.load(db, settings)


@pytest.fixture
def engine(
    db: InMemoryDatabase,
    catalog: GrantTypeCatalog,
    settings: Settings,
    clock: FrozenClock,
    user_authenticator: StubUserAuthenticator,
) -> GrantEngine:
    return GrantEngine(
        db,  # type: ignore[arg-type]
        catalog,
        settings,
        user_authenticator=user_authenticator,
        clock=clock,
    )


@pytest.fixture
async def seed_client(engine: GrantEngine) -> Client:
    client = await engine.clients.lookup_by_identifier(SEED_CLIENT_ID)
    assert client is not None
    return client


@pytest.fixture
async def implicit_client(engine: GrantEngine) -> Client:
    client = await engine.clients.lookup_by_identifier("implicit-app")
    assert client is not None
    return client


@pytest.fixture
def token_params() -> dict[str, Any]:
    """Credentials of the seeded client, ready to merge into a token request."""
    return {"client_id": SEED_CLIENT_ID, "client_secret": SEED_CLIENT_SECRET}


@pytest.fixture
def redirect_uri() -> str:
    return SEED_REDIRECT_URI
