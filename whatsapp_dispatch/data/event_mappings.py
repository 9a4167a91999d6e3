"""Business event -> template bindings. Every WhatsAppEvent member needs one entry."""

from whatsapp_dispatch.schemas.events import ArgFormat, ArgRule, EventMapping, WhatsAppEvent

CUSTOMER = ArgRule(path="customer_name")
PARTNER = ArgRule(path="partner_name")
BALANCE = ArgRule(path="wallet_balance", format=ArgFormat.CURRENCY)

EVENT_MAPPINGS = (
    EventMapping(
        event_key=WhatsAppEvent.WALLET_CREATED,
        template_id="wallet_created",
        arg_mapping=(CUSTOMER, PARTNER, BALANCE),
        image_path="qr_code_url",
    ),
    EventMapping(
        event_key=WhatsAppEvent.WALLET_TOPUP,
        template_id="topup_confirmation",
        arg_mapping=(
            CUSTOMER,
            PARTNER,
            ArgRule(path="action_type", fallback="TOPUP"),
            BALANCE,
            ArgRule(path="date_time", format=ArgFormat.DATETIME),
        ),
    ),
    EventMapping(
        event_key=WhatsAppEvent.WALLET_EXPIRED,
        template_id="wallet_expired",
        arg_mapping=(
            CUSTOMER,
            PARTNER,
            BALANCE,
            ArgRule(path="expiry_date", format=ArgFormat.DATE, fallback_now=True),
        ),
    ),
    EventMapping(
        event_key=WhatsAppEvent.WALLET_EXPIRY_REMINDER,
        template_id="wallet_expiry_reminder",
        arg_mapping=(
            CUSTOMER,
            PARTNER,
            BALANCE,
            ArgRule(path="expiry_date", format=ArgFormat.DATE),
        ),
    ),
    EventMapping(
        event_key=WhatsAppEvent.ITEM_REDEEMED,
        template_id="redeem_item",
        arg_mapping=(
            CUSTOMER,
            PARTNER,
            ArgRule(path="items_list"),
            ArgRule(path="total_amount", format=ArgFormat.CURRENCY),
            BALANCE,
        ),
    ),
    EventMapping(
        event_key=WhatsAppEvent.BILL_REDEEMED,
        template_id="redeem_bill",
        arg_mapping=(
            CUSTOMER,
            PARTNER,
            ArgRule(path="bill_amount", format=ArgFormat.CURRENCY),
            BALANCE,
        ),
    ),
    EventMapping(
        event_key=WhatsAppEvent.REFUND_TRANSACTION,
        template_id="refund_confirmation",
        arg_mapping=(
            CUSTOMER,
            PARTNER,
            ArgRule(path="refund_amount", format=ArgFormat.CURRENCY),
            BALANCE,
        ),
    ),
    EventMapping(
        event_key=WhatsAppEvent.REFUND_WALLET,
        template_id="refund_confirmation",
        arg_mapping=(
            CUSTOMER,
            PARTNER,
            ArgRule(path="refund_amount", format=ArgFormat.CURRENCY),
            BALANCE,
        ),
    ),
    EventMapping(
        event_key=WhatsAppEvent.TOPUP_REQUEST,
        template_id="topup_request",
        arg_mapping=(
            CUSTOMER,
            PARTNER,
            ArgRule(path="current_balance", format=ArgFormat.CURRENCY),
            ArgRule(path="suggested_amount", format=ArgFormat.CURRENCY, fallback="any amount"),
        ),
    ),
    EventMapping(
        event_key=WhatsAppEvent.PACKAGE_CREATED,
        template_id="package_created",
        arg_mapping=(
            CUSTOMER,
            PARTNER,
            ArgRule(path="package_name"),
            ArgRule(path="package_items", fallback="all package benefits"),
        ),
    ),
    EventMapping(
        event_key=WhatsAppEvent.PACKAGE_ITEM_REDEEMED,
        template_id="package_item_redeemed",
        arg_mapping=(
            CUSTOMER,
            PARTNER,
            ArgRule(path="package_name"),
            ArgRule(path="item_name"),
            ArgRule(path="remaining_count", format=ArgFormat.NUMBER, fallback="N/A"),
        ),
    ),
    EventMapping(
        event_key=WhatsAppEvent.SIGNUP_BONUS,
        template_id="signup_bonus",
        arg_mapping=(
            CUSTOMER,
            PARTNER,
            ArgRule(path="bonus_amount", format=ArgFormat.CURRENCY),
            BALANCE,
        ),
    ),
    EventMapping(
        event_key=WhatsAppEvent.SESSION_CHECKIN,
        template_id="session_checkin",
        arg_mapping=(
            CUSTOMER,
            ArgRule(path="event_name"),
            BALANCE,
            ArgRule(path="venue_name"),
        ),
    ),
    EventMapping(
        event_key=WhatsAppEvent.VEHICLE_CHECKIN,
        template_id="vehicle_checkin",
        arg_mapping=(
            CUSTOMER,
            ArgRule(path="vehicle_number"),
            ArgRule(path="checkin_time", format=ArgFormat.TIME),
            PARTNER,
        ),
    ),
    EventMapping(
        event_key=WhatsAppEvent.VISITOR_CHECKIN,
        template_id="visitor_checkin",
        arg_mapping=(
            ArgRule(path="resident_name"),
            ArgRule(path="visitor.name"),
            ArgRule(path="gate_name", fallback="the main gate"),
            ArgRule(path="checkin_time", format=ArgFormat.DATETIME),
        ),
    ),
    EventMapping(
        event_key=WhatsAppEvent.PARCEL_RECEIVED,
        template_id="parcel_received",
        arg_mapping=(
            ArgRule(path="resident_name"),
            ArgRule(path="courier_name", fallback="a courier"),
            ArgRule(path="pickup_location", fallback="the security desk"),
        ),
    ),
    EventMapping(
        event_key=WhatsAppEvent.OTP_AUTH,
        template_id="otp_auth",
        arg_mapping=(ArgRule(path="otp_code"),),
    ),
)
