"""
API Tests for rate limiting
"""
import pytest
from httpx import AsyncClient

from synexa.core.config import settings
from synexa.core.rate_limiter import limiter


@pytest.fixture
def rate_limiting(monkeypatch):
    """Turn the limiter on for one test, with clean counters"""
    monkeypatch.setattr(limiter, "enabled", True)
    limiter.reset()
    yield limiter
    limiter.reset()


class TestDefaultLimit:

    @pytest.mark.asyncio
    async def test_default_limit_returns_429(self, client: AsyncClient, rate_limiting):
        for _ in range(settings.RATE_LIMIT_PER_MINUTE):
            assert (await client.get("/")).status_code == 200

        response = await client.get("/")

        assert response.status_code == 429
        assert response.json()["error"]["code"] == "RATE_LIMITED"
        assert response.headers["Retry-After"] == "60"

    @pytest.mark.asyncio
    async def test_health_is_exempt(self, client: AsyncClient, rate_limiting):
        for _ in range(settings.RATE_LIMIT_PER_MINUTE + 1):
            response = await client.get("/health")

        assert response.status_code == 200

    @pytest.mark.asyncio
    async def test_disabled_limiter_never_blocks(self, client: AsyncClient):
        for _ in range(settings.RATE_LIMIT_PER_MINUTE + 1):
            response = await client.get("/")

        assert response.status_code == 200
