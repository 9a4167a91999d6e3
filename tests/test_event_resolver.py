import pytest

from whatsapp_dispatch.core.exceptions import (
    InvalidEventKey,
    RegistryConfigurationError,
    UnknownTemplateForEvent,
)
from whatsapp_dispatch.data.event_mappings import EVENT_MAPPINGS
from whatsapp_dispatch.schemas.events import ArgRule, EventMapping, WhatsAppEvent
from whatsapp_dispatch.services.event_resolver import (
    VALID_EVENT_KEYS,
    EventResolver,
    event_resolver,
    is_valid_event_key,
)
from whatsapp_dispatch.services.template_registry import TemplateRegistry, template_registry


@pytest.mark.parametrize("mapping", event_resolver.mappings(), ids=lambda m: m.event_key.value)
def test_mapping_fits_template(mapping):
    template = template_registry.lookup(mapping.template_id)
    assert template is not None
    assert len(mapping.arg_mapping) == template.arg_count


@pytest.mark.parametrize("event", list(WhatsAppEvent), ids=lambda e: e.value)
def test_every_event_resolves(event):
    assert is_valid_event_key(event.value)
    assert event_resolver.resolve(event.value).event_key is event


@pytest.mark.parametrize(
    "event_key", ["", "WALLET_CREATED", "wallet-created", "visitor checkin", "unknown_event", 42, None]
)
def test_invalid_event_key_rejected(event_key):
    assert not is_valid_event_key(event_key)
    with pytest.raises(InvalidEventKey) as exc_info:
        event_resolver.resolve(event_key)

    assert exc_info.value.status_code == 400
    assert exc_info.value.details["validEvents"] == list(VALID_EVENT_KEYS)


def test_refund_events_share_template():
    assert event_resolver.resolve("refund_transaction").template_id == "refund_confirmation"
    assert event_resolver.resolve("refund_wallet").template_id == "refund_confirmation"


def test_required_template_ids_are_unique_and_registered():
    required = event_resolver.required_template_ids()
    assert len(required) == len(set(required))
    assert "refund_confirmation" in required
    assert all(template_id in template_registry for template_id in required)


def test_build_rejects_missing_events():
    partial = [m for m in EVENT_MAPPINGS if m.event_key is not WhatsAppEvent.OTP_AUTH]
    with pytest.raises(RegistryConfigurationError, match="otp_auth"):
        EventResolver.build(partial, template_registry)


def test_build_rejects_duplicate_events():
    with pytest.raises(RegistryConfigurationError, match="more than once"):
        EventResolver.build(list(EVENT_MAPPINGS) + [EVENT_MAPPINGS[0]], template_registry)


def test_build_rejects_unknown_template():
    broken = [
        m if m.event_key is not WhatsAppEvent.OTP_AUTH
        else EventMapping(event_key=m.event_key, template_id="otp_v2", arg_mapping=m.arg_mapping)
        for m in EVENT_MAPPINGS
    ]
    with pytest.raises(RegistryConfigurationError, match="unknown template 'otp_v2'"):
        EventResolver.build(broken, template_registry)


def test_build_rejects_arg_count_mismatch():
    broken = [
        m if m.event_key is not WhatsAppEvent.OTP_AUTH
        else EventMapping(
            event_key=m.event_key,
            template_id=m.template_id,
            arg_mapping=(ArgRule(path="otp_code"), ArgRule(path="expires_in")),
        )
        for m in EVENT_MAPPINGS
    ]
    with pytest.raises(RegistryConfigurationError, match="defines 2 arg rules"):
        EventResolver.build(broken, template_registry)


def test_resolve_surfaces_registry_drift_as_configuration_error():
    """A mapping whose template vanished from the registry is an operator error."""
    registry_without_otp = TemplateRegistry.build(
        t for t in template_registry.list() if t.id != "otp_auth"
    )
    table = {m.event_key: m for m in EVENT_MAPPINGS}
    resolver = EventResolver(table, registry_without_otp)

    with pytest.raises(UnknownTemplateForEvent) as exc_info:
        resolver.resolve("otp_auth")

    assert exc_info.value.status_code == 500
    assert exc_info.value.details["errorType"] == "configuration"
