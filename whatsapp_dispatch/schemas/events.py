from enum import Enum
from typing import Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field


class WhatsAppEvent(str, Enum):
    """Closed set of business events that can trigger a WhatsApp message."""

    # Wallet lifecycle
    WALLET_CREATED = "wallet_created"
    WALLET_TOPUP = "wallet_topup"
    WALLET_EXPIRED = "wallet_expired"
    WALLET_EXPIRY_REMINDER = "wallet_expiry_reminder"

    # Transactions
    ITEM_REDEEMED = "item_redeemed"
    BILL_REDEEMED = "bill_redeemed"
    REFUND_TRANSACTION = "refund_transaction"
    REFUND_WALLET = "refund_wallet"
    TOPUP_REQUEST = "topup_request"

    # Packages
    PACKAGE_CREATED = "package_created"
    PACKAGE_ITEM_REDEEMED = "package_item_redeemed"

    # Customer lifecycle
    SIGNUP_BONUS = "signup_bonus"
    SESSION_CHECKIN = "session_checkin"
    VEHICLE_CHECKIN = "vehicle_checkin"

    # Gate
    VISITOR_CHECKIN = "visitor_checkin"
    PARCEL_RECEIVED = "parcel_received"

    # Authentication
    OTP_AUTH = "otp_auth"


class ArgFormat(str, Enum):
    """How a payload value is rendered into a template argument."""

    TEXT = "text"
    NUMBER = "number"
    CURRENCY = "currency"
    DATE = "date"
    DATETIME = "datetime"
    TIME = "time"


class ArgRule(BaseModel):
    """
    Extraction rule for one template slot.
    A rule without a fallback is required. `fallback_now` fills a missing
    date/time slot with the current time, rendered in the rule's format.
    """

    model_config = ConfigDict(frozen=True)

    path: str = Field(..., description="Dotted field path into the event payload.")
    format: ArgFormat = ArgFormat.TEXT
    fallback: Optional[str] = None
    fallback_now: bool = False

    @property
    def required(self) -> bool:
        return self.fallback is None and not self.fallback_now


class EventMapping(BaseModel):
    """Binds a business event to a template and its argument extraction rules."""

    model_config = ConfigDict(frozen=True)

    event_key: WhatsAppEvent
    template_id: str
    arg_mapping: Tuple[ArgRule, ...]
    image_path: Optional[str] = Field(
        None, description="Payload path of the media URL for image templates."
    )
