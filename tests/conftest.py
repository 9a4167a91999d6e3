import json
import os
from typing import Dict, List, Optional

import httpx
import pytest

# -------------------------------------------------------------------
# Settings are read at import time, so the environment must be in
# place before anything from whatsapp_dispatch is imported.
# -------------------------------------------------------------------
os.environ["REDIS_HOST"] = "localhost"
os.environ["REDIS_PORT"] = "6379"
os.environ["WHATSAPP_API_KEY"] = "test-api-key"
os.environ["ENVIRONMENT"] = "development"
os.environ["LOG_LEVEL"] = "ERROR"  # Reduce noise in tests

from whatsapp_dispatch.core.circuit_breaker import reset_all_breakers  # noqa: E402
from whatsapp_dispatch.core.redis import redis_manager  # noqa: E402
from whatsapp_dispatch.main import app  # noqa: E402
from whatsapp_dispatch.services.gateway_client import gateway_client  # noqa: E402


class FakeRedis:
    """In-memory stand-in for the subset of redis.asyncio.Redis the services use."""

    def __init__(self):
        self.values: Dict[str, str] = {}
        self.hashes: Dict[str, Dict[str, str]] = {}
        self.ttls: Dict[str, int] = {}

    async def ping(self):
        return True

    async def get(self, key):
        return self.values.get(key)

    async def setex(self, key, ttl, value):
        self.values[key] = value
        self.ttls[key] = ttl
        return True

    async def hgetall(self, key):
        return dict(self.hashes.get(key, {}))

    async def hset(self, key, field, value):
        self.hashes.setdefault(key, {})[field] = value
        return 1

    async def aclose(self):
        return None


class GatewayStub:
    """Records gateway requests and answers them with a canned response."""

    def __init__(self):
        self.requests: List[httpx.Request] = []
        self.status_code = 200
        self.json_body: Optional[dict] = {"status": "success", "messageId": "wamid.TEST123"}
        self.exc: Optional[Exception] = None
        self.responses: List[httpx.Response] = []

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if self.exc is not None:
            raise self.exc
        if self.responses:
            return self.responses.pop(0)
        return httpx.Response(self.status_code, json=self.json_body)

    @property
    def bodies(self) -> List[dict]:
        return [json.loads(r.content) for r in self.requests]


@pytest.fixture(autouse=True)
def fake_redis():
    """Every test gets a fresh in-memory Redis."""
    client = FakeRedis()
    redis_manager.redis_client = client
    yield client
    redis_manager.redis_client = None


@pytest.fixture(autouse=True)
def closed_breakers():
    reset_all_breakers()
    yield
    reset_all_breakers()


@pytest.fixture
def gateway(monkeypatch):
    """Route gateway traffic to an in-process stub."""
    stub = GatewayStub()
    monkeypatch.setattr(
        gateway_client,
        "http_client",
        httpx.AsyncClient(transport=httpx.MockTransport(stub.handler)),
    )
    return stub


def api_client() -> httpx.AsyncClient:
    transport = httpx.ASGITransport(app=app)
    return httpx.AsyncClient(transport=transport, base_url="http://test")


@pytest.fixture
def wallet_topup_payload():
    """Sample event payload for the wallet_topup event."""
    return {
        "phone": "9876543210",
        "customer_name": "Rahul Sharma",
        "partner_name": "One Club",
        "action_type": "TOPUP",
        "wallet_balance": 5000,
        "date_time": "2026-10-18T14:30:00Z",
    }


@pytest.fixture
def api():
    """Factory for an HTTP client bound to the ASGI app: `async with api() as client`."""
    return api_client
