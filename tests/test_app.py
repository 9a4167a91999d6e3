import httpx
import pytest

from whatsapp_dispatch.core import events
from whatsapp_dispatch.core.redis import redis_manager
from whatsapp_dispatch.main import app, lifespan


@pytest.mark.asyncio
async def test_lifespan_opens_and_closes_connections(fake_redis, monkeypatch):
    """Test startup reuses the Redis client and shutdown closes both clients."""
    http_client = httpx.AsyncClient()
    monkeypatch.setattr(events, "HTTP_CLIENT", http_client)

    async with lifespan(app):
        assert redis_manager.redis_client is fake_redis
        assert not http_client.is_closed

    assert http_client.is_closed
    assert redis_manager.redis_client is None
