"""Templates approved at the WhatsApp gateway, in display order."""

from whatsapp_dispatch.schemas.template import TemplateDefinition

TEMPLATE_DEFINITIONS = (
    TemplateDefinition(
        id="wallet_created",
        name="Wallet Created",
        description="Welcome message with the wallet QR code when a wallet is opened.",
        body=(
            "Hi {{1}}, your {{2}} wallet is ready with a balance of {{3}}. "
            "Show the attached QR code at the counter to pay."
        ),
        arg_count=3,
        arg_descriptions=("Customer name", "Partner name", "Wallet balance"),
        sample_args=("Rahul Sharma", "One Club", "₹5,000.00"),
        has_image=True,
    ),
    TemplateDefinition(
        id="signup_bonus",
        name="Signup Bonus",
        description="Confirms the signup bonus credited to a new wallet.",
        body=(
            "Hi {{1}}, welcome to {{2}}! A signup bonus of {{3}} has been added. "
            "Your wallet balance is now {{4}}."
        ),
        arg_count=4,
        arg_descriptions=("Customer name", "Partner name", "Bonus amount", "Wallet balance"),
        sample_args=("Rahul Sharma", "One Club", "₹500.00", "₹5,500.00"),
    ),
    TemplateDefinition(
        id="topup_confirmation",
        name="Top-up Confirmation",
        description="Sent after a wallet top-up, redemption or refund changes the balance.",
        body=(
            "Hi {{1}}, your {{2}} wallet has been updated. Transaction: {{3}}. "
            "Current balance: {{4}}. Date: {{5}}."
        ),
        arg_count=5,
        arg_descriptions=(
            "Customer name",
            "Partner name",
            "Action type",
            "Wallet balance",
            "Date and time",
        ),
        sample_args=("Rahul Sharma", "One Club", "TOPUP", "₹5,000.00", "18 Oct 2026, 02:30 PM"),
    ),
    TemplateDefinition(
        id="redeem_bill",
        name="Bill Redeemed",
        description="Confirms a bill paid from the wallet.",
        body="Hi {{1}}, a bill of {{3}} was paid from your {{2}} wallet. Remaining balance: {{4}}.",
        arg_count=4,
        arg_descriptions=("Customer name", "Partner name", "Bill amount", "Wallet balance"),
        sample_args=("Rahul Sharma", "One Club", "₹1,250.00", "₹3,750.00"),
    ),
    TemplateDefinition(
        id="redeem_item",
        name="Items Redeemed",
        description="Confirms items redeemed against the wallet.",
        body="Hi {{1}}, you redeemed {{3}} worth {{4}} at {{2}}. Remaining balance: {{5}}.",
        arg_count=5,
        arg_descriptions=(
            "Customer name",
            "Partner name",
            "Items list",
            "Total amount",
            "Wallet balance",
        ),
        sample_args=("Rahul Sharma", "One Club", "2x Coffee, 1x Sandwich", "₹450.00", "₹4,550.00"),
    ),
    TemplateDefinition(
        id="session_checkin",
        name="Session Check-in",
        description="Sent when a customer checks in to an event session.",
        body="Hi {{1}}, you are checked in to {{2}} at {{4}}. Wallet balance: {{3}}.",
        arg_count=4,
        arg_descriptions=("Customer name", "Event name", "Wallet balance", "Venue name"),
        sample_args=("Rahul Sharma", "Friday Night Live", "₹5,000.00", "One Club Lounge"),
    ),
    TemplateDefinition(
        id="vehicle_checkin",
        name="Vehicle Check-in",
        description="Sent when a vehicle is checked in at a venue.",
        body="Hi {{1}}, vehicle {{2}} was checked in at {{3}} at {{4}}.",
        arg_count=4,
        arg_descriptions=("Customer name", "Vehicle number", "Check-in time", "Venue name"),
        sample_args=("Test User", "TEST123", "12:00 PM", "Test Venue"),
    ),
    TemplateDefinition(
        id="wallet_expired",
        name="Wallet Expired",
        description="Tells the customer the wallet has expired.",
        body="Hi {{1}}, your {{2}} wallet with a balance of {{3}} expired on {{4}}.",
        arg_count=4,
        arg_descriptions=("Customer name", "Partner name", "Wallet balance", "Expiry date"),
        sample_args=("Rahul Sharma", "One Club", "₹200.00", "18 Oct 2026"),
    ),
    TemplateDefinition(
        id="wallet_expiry_reminder",
        name="Wallet Expiry Reminder",
        description="Reminds the customer to use the balance before the wallet expires.",
        body="Hi {{1}}, your {{2}} wallet balance of {{3}} expires on {{4}}. Use it before then!",
        arg_count=4,
        arg_descriptions=("Customer name", "Partner name", "Wallet balance", "Expiry date"),
        sample_args=("Rahul Sharma", "One Club", "₹200.00", "25 Oct 2026"),
    ),
    TemplateDefinition(
        id="refund_confirmation",
        name="Refund Confirmation",
        description="Confirms a refund credited back to the customer.",
        body="Hi {{1}}, a refund of {{3}} from {{2}} has been processed. Wallet balance: {{4}}.",
        arg_count=4,
        arg_descriptions=("Customer name", "Partner name", "Refund amount", "Wallet balance"),
        sample_args=("Rahul Sharma", "One Club", "₹300.00", "₹4,300.00"),
    ),
    TemplateDefinition(
        id="topup_request",
        name="Top-up Request",
        description="Low balance nudge asking the customer to top up.",
        body=(
            "Hi {{1}}, your {{2}} wallet balance is low at {{3}}. "
            "Suggested top-up: {{4}}."
        ),
        arg_count=4,
        arg_descriptions=("Customer name", "Partner name", "Current balance", "Suggested amount"),
        sample_args=("Rahul Sharma", "One Club", "₹50.00", "₹1,000.00"),
    ),
    TemplateDefinition(
        id="package_created",
        name="Package Created",
        description="Confirms a prepaid package added to the customer's wallet.",
        body="Hi {{1}}, your {{3}} package at {{2}} is now active. Includes: {{4}}.",
        arg_count=4,
        arg_descriptions=("Customer name", "Partner name", "Package name", "Package items"),
        sample_args=("Rahul Sharma", "One Club", "Gold Pass", "10x Coffee"),
    ),
    TemplateDefinition(
        id="package_item_redeemed",
        name="Package Item Redeemed",
        description="Confirms an item redeemed from a prepaid package.",
        body="Hi {{1}}, {{4}} from your {{3}} package was redeemed at {{2}}. Remaining: {{5}}.",
        arg_count=5,
        arg_descriptions=(
            "Customer name",
            "Partner name",
            "Package name",
            "Item name",
            "Remaining count",
        ),
        sample_args=("Rahul Sharma", "One Club", "Gold Pass", "Coffee", "9"),
    ),
    TemplateDefinition(
        id="visitor_checkin",
        name="Visitor Check-in",
        description="Tells a resident that their visitor was checked in at the gate.",
        body="Hi {{1}}, your visitor {{2}} was checked in at {{3}} on {{4}}.",
        arg_count=4,
        arg_descriptions=("Resident name", "Visitor name", "Gate name", "Check-in time"),
        sample_args=("Anita Rao", "Vikram Mehta", "Main Gate", "18 Oct 2026, 06:15 PM"),
    ),
    TemplateDefinition(
        id="parcel_received",
        name="Parcel Received",
        description="Tells a resident that a parcel is waiting at the security desk.",
        body="Hi {{1}}, a parcel from {{2}} is waiting for you at {{3}}.",
        arg_count=3,
        arg_descriptions=("Resident name", "Courier name", "Pickup location"),
        sample_args=("Anita Rao", "BlueDart", "Security desk"),
    ),
    TemplateDefinition(
        id="otp_auth",
        name="OTP Authentication",
        description="One-time password for login.",
        body="{{1}} is your verification code. For your security, do not share this code.",
        arg_count=1,
        arg_descriptions=("OTP code",),
        sample_args=("482913",),
    ),
)
