from datetime import datetime
from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field


class SendOptions(BaseModel):
    """
    Per-send options. Correlation identifiers are attached to logs and the
    delivery record only; they never influence dispatch.
    """

    partner_id: Optional[str] = None
    wallet_id: Optional[str] = None
    transaction_id: Optional[str] = None
    event_key: Optional[str] = None
    image_url: Optional[str] = None
    timeout: Optional[float] = Field(
        None, gt=0, description="Gateway timeout in seconds (defaults to settings)."
    )

    def log_context(self) -> dict:
        return {
            k: v
            for k, v in {
                "partner_id": self.partner_id,
                "wallet_id": self.wallet_id,
                "transaction_id": self.transaction_id,
                "event_key": self.event_key,
            }.items()
            if v is not None
        }


class DispatchResult(BaseModel):
    """Outcome of one gateway dispatch. Failures are values, not exceptions."""

    success: bool
    message_id: Optional[str] = None
    error: Optional[str] = None
    status_code: Optional[int] = None
    response: Optional[dict] = None
    delivery_id: Optional[str] = None

    @classmethod
    def ok(
        cls,
        message_id: Optional[str] = None,
        status_code: Optional[int] = None,
        response: Optional[dict] = None,
    ) -> "DispatchResult":
        return cls(
            success=True,
            message_id=message_id,
            status_code=status_code,
            response=response,
        )

    @classmethod
    def failed(
        cls, error: str, status_code: Optional[int] = None, response: Optional[dict] = None
    ) -> "DispatchResult":
        return cls(success=False, error=error, status_code=status_code, response=response)


class DeliveryStatus(str, Enum):
    PENDING = "pending"
    SENT = "sent"
    FAILED = "failed"


class DeliveryRecord(BaseModel):
    """Delivery state of one dispatch, kept in Redis for 24 hours."""

    delivery_id: str
    template_id: str
    phone: str
    status: DeliveryStatus = DeliveryStatus.PENDING
    message_id: Optional[str] = None
    error_message: Optional[str] = None
    event_key: Optional[str] = None
    partner_id: Optional[str] = None
    wallet_id: Optional[str] = None
    transaction_id: Optional[str] = None
    created_at: datetime = Field(default_factory=datetime.utcnow)
    updated_at: datetime = Field(default_factory=datetime.utcnow)
