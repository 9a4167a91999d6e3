import logging
import time
from datetime import datetime
from typing import Any, Dict
from uuid import uuid4

from fastapi import APIRouter, Body, Request, status
from fastapi.responses import JSONResponse

from whatsapp_dispatch.api.v1.endpoints.templates import optional_str
from whatsapp_dispatch.core.exceptions import InvalidPayload, MissingEventKey, MissingPhone
from whatsapp_dispatch.core.phone import normalize_phone
from whatsapp_dispatch.schemas.dispatch import SendOptions
from whatsapp_dispatch.services.argument_builder import argument_builder, render_preview
from whatsapp_dispatch.services.dispatch_service import dispatch_service
from whatsapp_dispatch.services.event_resolver import VALID_EVENT_KEYS, event_resolver
from whatsapp_dispatch.services.template_registry import template_registry

router = APIRouter()
logger = logging.getLogger(__name__)


@router.post("/whatsapp/send-event")
async def send_event(request: Request, body: Dict[str, Any] = Body(...)):
    """
    Send the WhatsApp message for a business event.

    Callers only name the event; the template, argument order and
    formatting come from the event mapping table.

    **Request Body:**
    ```json
    {
      "eventKey": "wallet_topup",
      "partnerId": "partner_42",
      "payload": {
        "phone": "9876543210",
        "customer_name": "Rahul Sharma",
        "partner_name": "One Club",
        "action_type": "TOPUP",
        "wallet_balance": 5000,
        "date_time": "2026-10-18T14:30:00Z"
      }
    }
    ```

    **Returns:**
    - 200: Message accepted by the gateway
    - 400: Invalid event key, phone or payload
    - 500: Gateway failure or mapping misconfiguration
    """
    started = time.perf_counter()
    correlation_id = getattr(request.state, "correlation_id", str(uuid4()))
    event_key = body.get("eventKey") or body.get("event_key")

    if not event_key:
        raise MissingEventKey()

    # Unknown keys are rejected here, before any I/O
    mapping = event_resolver.resolve(event_key)

    payload = body.get("payload")
    if not isinstance(payload, dict):
        raise InvalidPayload()

    raw_phone = body.get("phone") or payload.get("phone")
    if not raw_phone:
        raise MissingPhone("Missing required field: phone (in body or payload)")
    phone = normalize_phone(raw_phone)

    template = template_registry.lookup(mapping.template_id)
    args = argument_builder.build(mapping, payload)
    preview = render_preview(template, args)

    options = SendOptions(
        event_key=mapping.event_key.value,
        partner_id=optional_str(body.get("partnerId")),
        wallet_id=optional_str(body.get("walletId")),
        transaction_id=optional_str(body.get("transactionId")),
        image_url=argument_builder.extract_image_url(mapping, payload),
    )

    logger.info(
        f"📨 Event '{event_key}' resolved to template '{template.id}'",
        extra={"correlation_id": correlation_id, **options.log_context()},
    )

    result = await dispatch_service.send(template.id, phone, args, options)
    duration_ms = round((time.perf_counter() - started) * 1000)

    if result.success:
        return JSONResponse(
            status_code=status.HTTP_200_OK,
            content={
                "success": True,
                "message": "WhatsApp template message sent successfully",
                "eventKey": mapping.event_key.value,
                "templateId": template.id,
                "templateName": template.name,
                "phone": phone,
                "messageId": result.message_id,
                "deliveryId": result.delivery_id,
                "args": args,
                "preview": preview,
                "durationMs": duration_ms,
                "timestamp": datetime.utcnow().isoformat(),
            },
        )

    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={
            "success": False,
            "error": "Failed to send WhatsApp template message",
            "details": result.error,
            "eventKey": mapping.event_key.value,
            "templateId": template.id,
            "phone": phone,
            "deliveryId": result.delivery_id,
            "durationMs": duration_ms,
            "timestamp": datetime.utcnow().isoformat(),
        },
    )


@router.get("/whatsapp/send-event")
async def describe_send_event():
    """Usage documentation for the event send endpoint."""
    return {
        "name": "WhatsApp Event Send API",
        "description": "Send WhatsApp template messages by business event key",
        "usage": {
            "method": "POST",
            "body": {
                "eventKey": "string (required) - one of validEvents",
                "phone": "string (optional) - falls back to payload.phone",
                "partnerId": "string (optional)",
                "walletId": "string (optional)",
                "transactionId": "string (optional)",
                "payload": "object (required) - fields named by the event's arg mapping",
            },
        },
        "validEvents": list(VALID_EVENT_KEYS),
        "events": [
            {
                "eventKey": m.event_key.value,
                "templateId": m.template_id,
                "payloadFields": [
                    {"path": rule.path, "format": rule.format.value, "required": rule.required}
                    for rule in m.arg_mapping
                ],
            }
            for m in event_resolver.mappings()
        ],
        "example": {
            "eventKey": "wallet_topup",
            "partnerId": "partner_42",
            "payload": {
                "phone": "919876543210",
                "customer_name": "Rahul Sharma",
                "partner_name": "One Club",
                "action_type": "TOPUP",
                "wallet_balance": 5000,
                "date_time": "2026-10-18T14:30:00Z",
            },
        },
    }
