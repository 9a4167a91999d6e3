import re
from typing import Any

from whatsapp_dispatch.core.config import settings
from whatsapp_dispatch.core.exceptions import InvalidPhone

NON_DIGITS_RE = re.compile(r"[^0-9]")
MIN_PHONE_DIGITS = 10


def normalize_phone(phone: Any, country_code: str = settings.DEFAULT_COUNTRY_CODE) -> str:
    """
    Reduce a phone number to the digits-only form the gateway expects.

    "+91 98765-43210" -> "919876543210"; a bare 10 digit number gets the
    country code prepended.

    Raises:
        InvalidPhone: fewer than 10 digits remain.
    """
    digits = NON_DIGITS_RE.sub("", str(phone))
    if len(digits) < MIN_PHONE_DIGITS:
        raise InvalidPhone()
    # A bare national number may itself start with the country code digits
    if len(digits) == MIN_PHONE_DIGITS:
        return f"{country_code}{digits}"
    return digits
