import httpx
import pytest

from whatsapp_dispatch.core.circuit_breaker import gateway_breaker
from whatsapp_dispatch.services.gateway_client import extract_message_id, gateway_client

ARGS = ["Rahul Sharma", "MH01AB1234", "12:00 PM", "One Club"]


@pytest.mark.asyncio
async def test_send_builds_gateway_request(gateway):
    result = await gateway_client.send_template("vehicle_checkin", "919876543210", ARGS)

    assert result.success is True
    assert result.message_id == "wamid.TEST123"
    assert result.status_code == 200

    request = gateway.requests[0]
    assert request.method == "POST"
    assert str(request.url) == gateway_client.endpoint
    assert request.headers["Authorization"] == "Bearer test-api-key"
    assert gateway.bodies[0] == {
        "type": "buttonTemplate",
        "templateId": "vehicle_checkin",
        "templateLanguage": "en",
        "sender_phone": "919876543210",
        "templateArgs": ARGS,
    }


@pytest.mark.asyncio
async def test_image_url_forwarded(gateway):
    await gateway_client.send_template(
        "wallet_created", "919876543210", ["A", "B", "C"], image_url="https://cdn.test/qr.png"
    )
    assert gateway.bodies[0]["imageUrl"] == "https://cdn.test/qr.png"


@pytest.mark.parametrize(
    "data, expected",
    [
        ({"messageId": "m1"}, "m1"),
        ({"message_id": "m2"}, "m2"),
        ({"data": {"id": "m3"}}, "m3"),
        ({"status": "queued"}, None),
        (None, None),
    ],
)
def test_extract_message_id(data, expected):
    assert extract_message_id(data) == expected


@pytest.mark.asyncio
async def test_gateway_server_error_is_failed_result(gateway):
    gateway.status_code = 500
    gateway.json_body = {"error": "upstream down"}

    result = await gateway_client.send_template("vehicle_checkin", "919876543210", ARGS)

    assert result.success is False
    assert result.status_code == 500
    assert "HTTP 500" in result.error
    assert result.response == {"error": "upstream down"}
    assert gateway_breaker.fail_counter == 1


@pytest.mark.asyncio
async def test_gateway_client_error_does_not_trip_breaker(gateway):
    gateway.status_code = 401
    gateway.json_body = {"error": "invalid api key"}

    result = await gateway_client.send_template("vehicle_checkin", "919876543210", ARGS)

    assert result.success is False
    assert result.status_code == 401
    assert "invalid api key" in result.error
    assert gateway_breaker.fail_counter == 0


@pytest.mark.asyncio
async def test_connection_error_is_failed_result(gateway):
    gateway.exc = httpx.ConnectError("connection refused")

    result = await gateway_client.send_template("vehicle_checkin", "919876543210", ARGS)

    assert result.success is False
    assert "connection refused" in result.error
    assert result.status_code is None


@pytest.mark.asyncio
async def test_timeout_is_failed_result(gateway):
    gateway.exc = httpx.ReadTimeout("read timed out")

    result = await gateway_client.send_template(
        "vehicle_checkin", "919876543210", ARGS, timeout=2.5
    )

    assert result.success is False
    assert result.error == "WhatsApp gateway timed out after 2.5s"


@pytest.mark.asyncio
async def test_unconfigured_gateway_makes_no_request(gateway, monkeypatch):
    monkeypatch.setattr(gateway_client, "api_key", None)

    result = await gateway_client.send_template("vehicle_checkin", "919876543210", ARGS)

    assert result.success is False
    assert "not configured" in result.error
    assert gateway.requests == []


@pytest.mark.asyncio
async def test_retry_recovers_from_transient_failure(gateway):
    gateway.responses = [
        httpx.Response(503, json={"error": "busy"}),
        httpx.Response(200, json={"messageId": "wamid.RETRIED"}),
    ]

    result = await gateway_client.send_template(
        "vehicle_checkin", "919876543210", ARGS, max_attempts=3, retry_base_delay=0
    )

    assert result.success is True
    assert result.message_id == "wamid.RETRIED"
    assert len(gateway.requests) == 2


@pytest.mark.asyncio
async def test_client_errors_are_not_retried(gateway):
    gateway.status_code = 400

    result = await gateway_client.send_template(
        "vehicle_checkin", "919876543210", ARGS, max_attempts=3, retry_base_delay=0
    )

    assert result.success is False
    assert len(gateway.requests) == 1


@pytest.mark.asyncio
async def test_open_breaker_rejects_without_request(gateway):
    gateway_breaker.open()

    result = await gateway_client.send_template("vehicle_checkin", "919876543210", ARGS)

    assert result.success is False
    assert "unavailable" in result.error
    assert gateway.requests == []


@pytest.mark.asyncio
async def test_probe_bypasses_breaker(gateway):
    gateway_breaker.open()

    reachable, data = await gateway_client.probe(
        "vehicle_checkin", "919999999999", ARGS, timeout=1.0
    )

    assert reachable is True
    assert data["messageId"] == "wamid.TEST123"
    assert len(gateway.requests) == 1
