"""API test fixtures — HTTP client wired to the in-memory StarsService."""

from __future__ import annotations

import pytest
from httpx import ASGITransport, AsyncClient


@pytest.fixture
async def api_client(stars_service):
    """HTTP client that bypasses the lifespan and uses the stubbed StarsService.

    Overrides: get_stars_service
    """
    from ghstars.api.deps import get_stars_service
    from ghstars.main import app

    app.dependency_overrides[get_stars_service] = lambda: stars_service

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client

    app.dependency_overrides.clear()
