import logging
from datetime import datetime
from typing import Any, Dict, Optional
from uuid import uuid4

from fastapi import APIRouter, Body, HTTPException, Request, status
from fastapi.responses import JSONResponse

from whatsapp_dispatch.schemas.dispatch import SendOptions
from whatsapp_dispatch.services.delivery_log_service import delivery_log_service
from whatsapp_dispatch.services.dispatch_service import dispatch_service
from whatsapp_dispatch.services.template_registry import template_registry

router = APIRouter()
logger = logging.getLogger(__name__)


def optional_str(value: Any) -> Optional[str]:
    if value is None or value == "":
        return None
    return str(value)


@router.post("/whatsapp/templates/send")
async def send_template(request: Request, body: Dict[str, Any] = Body(...)):
    """
    Send any registered WhatsApp template by id.

    **Request Body:**
    ```json
    {
      "templateId": "vehicle_checkin",
      "phone": "919876543210",
      "templateArgs": ["Rahul Sharma", "MH01AB1234", "12:00 PM", "One Club"],
      "partnerId": "partner_42",
      "walletId": "wallet_7",
      "transactionId": "txn_99"
    }
    ```

    **Returns:**
    - 200: Message accepted by the gateway
    - 400: Missing field, unknown template or wrong argument count
    - 500: Gateway rejected or could not be reached
    """
    correlation_id = getattr(request.state, "correlation_id", str(uuid4()))
    template_id = body.get("templateId")
    phone = body.get("phone")

    logger.info(
        "📨 Received template send request",
        extra={"correlation_id": correlation_id, "template_id": template_id},
    )

    options = SendOptions(
        partner_id=optional_str(body.get("partnerId")),
        wallet_id=optional_str(body.get("walletId")),
        transaction_id=optional_str(body.get("transactionId")),
        image_url=optional_str(body.get("imageUrl")),
    )

    # Validation errors propagate to the DispatchError handler as 400s
    result = await dispatch_service.send(
        template_id, phone, body.get("templateArgs"), options
    )
    template = template_registry.lookup(template_id)

    if result.success:
        return JSONResponse(
            status_code=status.HTTP_200_OK,
            content={
                "success": True,
                "message": "WhatsApp template message sent successfully",
                "templateId": template.id,
                "templateName": template.name,
                "phone": phone,
                "messageId": result.message_id,
                "deliveryId": result.delivery_id,
                "timestamp": datetime.utcnow().isoformat(),
            },
        )

    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={
            "success": False,
            "error": "Failed to send WhatsApp template message",
            "details": result.error,
            "templateId": template.id,
            "phone": phone,
            "deliveryId": result.delivery_id,
            "timestamp": datetime.utcnow().isoformat(),
        },
    )


@router.get("/whatsapp/templates/send")
async def list_templates():
    """Available templates and their argument requirements."""
    return {
        "success": True,
        "templates": [template.describe() for template in template_registry.list()],
        "usage": {
            "method": "POST",
            "endpoint": "/api/v1/whatsapp/templates/send",
            "body": {
                "templateId": "string (required)",
                "phone": "string (required, with country code)",
                "templateArgs": "string[] (required)",
                "partnerId": "string (optional)",
                "walletId": "string (optional)",
                "transactionId": "string (optional)",
                "imageUrl": "string (optional, image templates only)",
            },
        },
        "timestamp": datetime.utcnow().isoformat(),
    }


@router.get("/whatsapp/deliveries/{delivery_id}")
async def get_delivery(delivery_id: str):
    """
    Delivery state of a previous send (pending, sent, failed).
    Records expire after 24 hours.
    """
    record = await delivery_log_service.get_record(delivery_id)

    if not record:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Delivery not found or expired (24-hour TTL)",
        )

    return {"success": True, "delivery": record}
