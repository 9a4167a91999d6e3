import logging
from datetime import date, datetime
from decimal import Decimal, InvalidOperation
from typing import Any, Dict, List, Mapping, Optional, Sequence

from whatsapp_dispatch.core.config import settings
from whatsapp_dispatch.core.exceptions import (
    ArgumentInvariantViolation,
    InvalidArgumentValue,
    MissingRequiredArgument,
)
from whatsapp_dispatch.schemas.events import ArgFormat, ArgRule, EventMapping
from whatsapp_dispatch.schemas.template import TemplateDefinition
from whatsapp_dispatch.services.template_registry import (
    PLACEHOLDER_RE,
    TemplateRegistry,
    template_registry,
)

logger = logging.getLogger(__name__)

DATE_FORMAT = "%d %b %Y"
TIME_FORMAT = "%I:%M %p"
DATETIME_FORMAT = f"{DATE_FORMAT}, {TIME_FORMAT}"

# Largest accepted magnitude for numeric slots (10^15)
MAX_NUMERIC_EXPONENT = 15

_MISSING = object()


def extract_path(payload: Mapping[str, Any], path: str) -> Any:
    """Follow a dotted path through nested mappings. Returns _MISSING when absent."""
    value: Any = payload
    for part in path.split("."):
        if not isinstance(value, Mapping) or part not in value:
            return _MISSING
        value = value[part]
    return value


def _is_absent(value: Any) -> bool:
    return value is _MISSING or value is None or (isinstance(value, str) and not value.strip())


def _parse_datetime(value: Any) -> Optional[datetime]:
    if isinstance(value, datetime):
        return value
    if isinstance(value, date):
        return datetime(value.year, value.month, value.day)
    if isinstance(value, str):
        text = value.strip()
        if text.endswith("Z"):
            text = text[:-1] + "+00:00"
        try:
            return datetime.fromisoformat(text)
        except ValueError:
            return None
    return None


def _to_decimal(value: Any) -> Optional[Decimal]:
    if isinstance(value, bool):
        return None
    try:
        return Decimal(str(value).replace(",", "").strip())
    except InvalidOperation:
        return None


def format_value(rule: ArgRule, value: Any, slot: str) -> str:
    """Render one payload value according to the rule's format."""
    if rule.format in (ArgFormat.CURRENCY, ArgFormat.NUMBER):
        amount = _to_decimal(value)
        if amount is None or not amount.is_finite():
            raise InvalidArgumentValue(slot, rule.path, value, "a number")
        if amount and amount.adjusted() > MAX_NUMERIC_EXPONENT:
            raise InvalidArgumentValue(
                slot, rule.path, value, f"a number below 10^{MAX_NUMERIC_EXPONENT + 1}"
            )
        if rule.format == ArgFormat.CURRENCY:
            return f"{settings.CURRENCY_SYMBOL}{amount:,.2f}"
        if amount == amount.to_integral_value():
            return str(int(amount))
        return str(amount.normalize())

    if rule.format in (ArgFormat.DATE, ArgFormat.DATETIME, ArgFormat.TIME):
        parsed = _parse_datetime(value)
        if parsed is None:
            # Already human readable (e.g. "12:00 PM"), send as-is
            return str(value).strip()
        if rule.format == ArgFormat.DATE:
            return parsed.strftime(DATE_FORMAT)
        if rule.format == ArgFormat.TIME:
            return parsed.strftime(TIME_FORMAT)
        return parsed.strftime(DATETIME_FORMAT)

    return str(value).strip()


def render_preview(template: TemplateDefinition, args: Sequence[str]) -> str:
    """Substitute args into the template body. Unknown placeholders are left untouched."""

    def substitute(match) -> str:
        index = int(match.group(1)) - 1
        if 0 <= index < len(args):
            return str(args[index])
        return match.group(0)

    return PLACEHOLDER_RE.sub(substitute, template.body)


class ArgumentBuilder:
    """Projects an event payload into the positional args of the mapped template."""

    def __init__(self, registry: TemplateRegistry):
        self.registry = registry

    def _template_for(self, mapping: EventMapping) -> TemplateDefinition:
        template = self.registry.lookup(mapping.template_id)
        if template is None:
            raise ArgumentInvariantViolation(
                f"Mapping for '{mapping.event_key.value}' references missing template "
                f"'{mapping.template_id}'"
            )
        return template

    def build(self, mapping: EventMapping, payload: Mapping[str, Any]) -> List[str]:
        """
        Build the ordered argument list for `mapping` from `payload`.

        All missing required fields are reported together.

        Raises:
            MissingRequiredArgument: required fields are absent and have no fallback.
            InvalidArgumentValue: a numeric slot received a non-numeric value.
            ArgumentInvariantViolation: the result does not fit the template.
        """
        template = self._template_for(mapping)
        args: List[str] = []
        missing: List[Dict[str, str]] = []

        for position, rule in enumerate(mapping.arg_mapping, start=1):
            slot = f"{{{{{position}}}}}"
            value = extract_path(payload, rule.path)

            if _is_absent(value):
                if rule.fallback is not None:
                    args.append(rule.fallback)
                elif rule.fallback_now:
                    args.append(format_value(rule, datetime.now(), slot))
                else:
                    missing.append({"slot": slot, "path": rule.path})
                continue

            args.append(format_value(rule, value, slot))

        if missing:
            raise MissingRequiredArgument(template.id, missing, sorted(payload.keys()))

        if len(args) != template.arg_count:
            logger.critical(
                f"🚨 Built {len(args)} args for template '{template.id}' "
                f"which declares {template.arg_count}"
            )
            raise ArgumentInvariantViolation(
                f"Built {len(args)} args for template '{template.id}', expected "
                f"{template.arg_count}"
            )

        return args

    def build_preview(self, mapping: EventMapping, payload: Mapping[str, Any]) -> str:
        """Human readable message body for UI previews. No network access."""
        return render_preview(self._template_for(mapping), self.build(mapping, payload))

    def extract_image_url(
        self, mapping: EventMapping, payload: Mapping[str, Any]
    ) -> Optional[str]:
        template = self._template_for(mapping)
        if not (template.has_image and mapping.image_path):
            return None

        image_url = extract_path(payload, mapping.image_path)
        if _is_absent(image_url):
            logger.warning(
                f"⚠️ Template '{template.id}' has an image but payload is missing "
                f"'{mapping.image_path}'"
            )
            return None
        return str(image_url)


argument_builder = ArgumentBuilder(template_registry)
