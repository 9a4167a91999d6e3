import logging
from typing import Any, Dict, Iterable, List, Tuple

from whatsapp_dispatch.core.exceptions import (
    InvalidEventKey,
    RegistryConfigurationError,
    UnknownTemplateForEvent,
)
from whatsapp_dispatch.data.event_mappings import EVENT_MAPPINGS
from whatsapp_dispatch.schemas.events import EventMapping, WhatsAppEvent
from whatsapp_dispatch.services.template_registry import (
    TemplateRegistry,
    template_registry,
)

logger = logging.getLogger(__name__)

VALID_EVENT_KEYS = tuple(event.value for event in WhatsAppEvent)


def is_valid_event_key(event_key: Any) -> bool:
    """True if `event_key` is one of the known business events."""
    return isinstance(event_key, str) and event_key in VALID_EVENT_KEYS


class EventResolver:
    """Resolves business event keys to their template mapping."""

    def __init__(self, mappings: Dict[WhatsAppEvent, EventMapping], registry: TemplateRegistry):
        self._mappings = mappings
        self.registry = registry

    @classmethod
    def build(
        cls, mappings: Iterable[EventMapping], registry: TemplateRegistry
    ) -> "EventResolver":
        """
        Index the mapping table, checking that every event has exactly one
        mapping and that each mapping fits its template.

        Raises:
            RegistryConfigurationError: the tables are inconsistent.
        """
        table: Dict[WhatsAppEvent, EventMapping] = {}
        for mapping in mappings:
            if mapping.event_key in table:
                raise RegistryConfigurationError(
                    f"Event '{mapping.event_key.value}' is mapped more than once"
                )

            template = registry.lookup(mapping.template_id)
            if template is None:
                raise RegistryConfigurationError(
                    f"Event '{mapping.event_key.value}' maps to unknown template "
                    f"'{mapping.template_id}'"
                )
            if len(mapping.arg_mapping) != template.arg_count:
                raise RegistryConfigurationError(
                    f"Event '{mapping.event_key.value}' defines {len(mapping.arg_mapping)} "
                    f"arg rules but template '{template.id}' takes {template.arg_count}"
                )
            table[mapping.event_key] = mapping

        missing = [event.value for event in WhatsAppEvent if event not in table]
        if missing:
            raise RegistryConfigurationError(
                f"No template mapping for events: {', '.join(missing)}"
            )

        return cls(table, registry)

    def resolve(self, event_key: Any) -> EventMapping:
        """
        Look up the mapping for `event_key`.

        Raises:
            InvalidEventKey: not a known business event.
            UnknownTemplateForEvent: the mapped template is not registered.
        """
        if not is_valid_event_key(event_key):
            raise InvalidEventKey(event_key, VALID_EVENT_KEYS)

        mapping = self._mappings[WhatsAppEvent(event_key)]
        if mapping.template_id not in self.registry:
            logger.error(
                f"❌ Event '{event_key}' maps to unregistered template '{mapping.template_id}'"
            )
            raise UnknownTemplateForEvent(event_key, mapping.template_id)
        return mapping

    def mappings(self) -> Tuple[EventMapping, ...]:
        return tuple(self._mappings.values())

    def required_template_ids(self) -> List[str]:
        """Templates that at least one business event depends on, without duplicates."""
        seen: List[str] = []
        for mapping in self._mappings.values():
            if mapping.template_id not in seen:
                seen.append(mapping.template_id)
        return seen


event_resolver = EventResolver.build(EVENT_MAPPINGS, template_registry)
