"""Root conftest — shared fixtures for unit and API tests.

Provides:
- In-memory persistence and a fixed clock
- Star state, fetcher and service wired to those stubs
- Autouse reset of the shared GitHub HTTP client
"""

from __future__ import annotations

import pytest

from ghstars.services.github.star_fetcher import StarCountFetcher
from ghstars.services.stars_service import StarsService
from tests.helpers.mock_factories import FakeClock, InMemoryPersistence, make_state


@pytest.fixture
def anyio_backend() -> str:
    return "asyncio"


@pytest.fixture
def persistence() -> InMemoryPersistence:
    return InMemoryPersistence()


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def state(persistence):
    return make_state(persistence)


@pytest.fixture
def fetcher(state, clock) -> StarCountFetcher:
    return StarCountFetcher(
        state,
        base_url="https://api.github.com",
        user_agent="ghstars-tests",
        clock=clock,
    )


@pytest.fixture
def stars_service(state, fetcher) -> StarsService:
    return StarsService(state, fetcher)


@pytest.fixture(autouse=True)
def _reset_github_client():
    """Never let a test leak a real AsyncClient into the next one."""
    import ghstars.services.github.http_client as mod

    original = mod._client
    mod._client = None
    yield
    mod._client = original
