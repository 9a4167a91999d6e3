import json

import httpx
import pytest

from whatsapp_dispatch.core.config import settings
from whatsapp_dispatch.core.redis import redis_manager
from whatsapp_dispatch.services.approval_service import approval_service
from whatsapp_dispatch.services.gateway_client import gateway_client

HEALTH_URL = "/api/v1/whatsapp/health"


def store_approvals(fake_redis, records):
    for template_id, record in records.items():
        fake_redis.hashes.setdefault(settings.TEMPLATE_APPROVALS_KEY, {})[template_id] = (
            json.dumps(record) if isinstance(record, dict) else record
        )


@pytest.mark.asyncio
async def test_liveness_endpoint(api):
    """Test liveness endpoint."""
    async with api() as client:
        response = await client.get("/api/v1/live")
        assert response.status_code == 200
        data = response.json()
        assert data["alive"] is True
        assert data["service"] == settings.PROJECT_NAME


@pytest.mark.asyncio
async def test_health_without_probe(api, gateway):
    """Test the default report never calls the gateway."""
    async with api() as client:
        response = await client.get(HEALTH_URL)

    data = response.json()
    assert response.status_code == 200
    assert data["status"] == "ok"
    assert data["whatsapp"] == {
        "configured": True,
        "endpoint": settings.WHATSAPP_ENDPOINT,
        "connectionStatus": "unknown",
    }
    assert data["templates"] == {
        "total": 0,
        "approved": 0,
        "pending": 0,
        "rejected": 0,
        "lastSync": None,
    }
    assert "refund_confirmation" in data["requiredTemplates"]
    assert data["circuitBreakers"]["gateway"]["state"] == "closed"
    assert gateway.requests == []


@pytest.mark.asyncio
async def test_template_stats(api, gateway, fake_redis):
    store_approvals(
        fake_redis,
        {
            "wallet_created": {"status": "APPROVED", "last_synced_at": "2026-10-17T08:00:00"},
            "otp_auth": {"status": "approved", "last_synced_at": "2026-10-18T09:30:00+00:00"},
            "signup_bonus": {"status": "approved", "is_active": False},
            "parcel_received": {"status": "pending"},
            "visitor_checkin": {"status": "rejected"},
            "broken": "{not json",
        },
    )

    async with api() as client:
        response = await client.get(HEALTH_URL)

    templates = response.json()["templates"]
    assert templates["total"] == 5
    assert templates["approved"] == 2
    assert templates["pending"] == 1
    assert templates["rejected"] == 1
    assert templates["lastSync"] == "2026-10-18T09:30:00+00:00"


@pytest.mark.asyncio
async def test_stats_zeroed_when_store_unavailable(api, gateway):
    redis_manager.redis_client = None

    async with api() as client:
        response = await client.get(HEALTH_URL)

    assert response.status_code == 200
    assert response.json()["templates"]["total"] == 0
    assert response.json()["templates"]["lastSync"] is None


@pytest.mark.asyncio
async def test_probe_connected(api, gateway):
    async with api() as client:
        response = await client.get(HEALTH_URL, params={"test": "true"})

    whatsapp = response.json()["whatsapp"]
    assert whatsapp["connectionStatus"] == "connected"
    assert whatsapp["testResponse"] == {"status": "success", "messageId": "wamid.TEST123"}

    assert len(gateway.requests) == 1
    body = gateway.bodies[0]
    assert body["templateId"] == settings.WHATSAPP_PROBE_TEMPLATE_ID
    assert body["sender_phone"] == settings.WHATSAPP_PROBE_PHONE
    assert body["templateArgs"] == ["Test User", "TEST123", "12:00 PM", "Test Venue"]


@pytest.mark.asyncio
async def test_probe_rejected(api, gateway):
    gateway.status_code = 401
    gateway.json_body = {"error": "unauthorized"}

    async with api() as client:
        response = await client.get(HEALTH_URL, params={"test": "true"})

    whatsapp = response.json()["whatsapp"]
    assert response.status_code == 200
    assert whatsapp["connectionStatus"] == "disconnected"
    assert whatsapp["testResponse"] == {"error": "unauthorized"}


@pytest.mark.asyncio
async def test_probe_unreachable(api, gateway):
    gateway.exc = httpx.ConnectTimeout("timed out")

    async with api() as client:
        response = await client.get(HEALTH_URL, params={"test": "true"})

    whatsapp = response.json()["whatsapp"]
    assert response.status_code == 200
    assert whatsapp["connectionStatus"] == "disconnected"
    assert "testResponse" not in whatsapp


@pytest.mark.asyncio
async def test_probe_skipped_when_not_configured(api, gateway, monkeypatch):
    monkeypatch.setattr(gateway_client, "api_key", None)

    async with api() as client:
        response = await client.get(HEALTH_URL, params={"test": "true"})

    whatsapp = response.json()["whatsapp"]
    assert whatsapp["configured"] is False
    assert whatsapp["connectionStatus"] == "unknown"
    assert gateway.requests == []


@pytest.mark.asyncio
async def test_health_report_failure_returns_500(api, monkeypatch):
    def explode():
        raise RuntimeError("resolver unavailable")

    from whatsapp_dispatch.services.health_service import health_service

    monkeypatch.setattr(health_service.resolver, "required_template_ids", explode)

    async with api() as client:
        response = await client.get(HEALTH_URL)

    data = response.json()
    assert response.status_code == 500
    assert data["status"] == "error"
    assert data["error"] == "Failed to check health"
    assert data["details"] == "resolver unavailable"


@pytest.mark.asyncio
async def test_approval_records_skip_malformed(fake_redis):
    store_approvals(
        fake_redis,
        {
            "otp_auth": {"status": " Approved "},
            "bad": "[1, 2]",
            "worse": "{not json",
            "paused": '{"status": "PAUSED"}',
        },
    )

    records = await approval_service.list_records()

    statuses = {r.template_id: r.status for r in records}
    assert statuses == {"otp_auth": "approved", "paused": "paused"}


@pytest.mark.asyncio
async def test_unlisted_statuses_count_towards_total(api, gateway, fake_redis):
    """Test records in gateway states like PAUSED still count and sync."""
    store_approvals(
        fake_redis,
        {
            "otp_auth": {"status": "approved"},
            "signup_bonus": {"status": "PAUSED", "last_synced_at": "2026-10-18T10:00:00"},
            "parcel_received": {"status": "disabled"},
        },
    )

    async with api() as client:
        response = await client.get(HEALTH_URL)

    templates = response.json()["templates"]
    assert templates["total"] == 3
    assert templates["approved"] == 1
    assert templates["pending"] == 0
    assert templates["rejected"] == 0
    assert templates["lastSync"] == "2026-10-18T10:00:00"
