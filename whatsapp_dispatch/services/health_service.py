import logging
from datetime import datetime, timezone
from typing import Any, Dict

from whatsapp_dispatch.core.circuit_breaker import get_all_breakers_status
from whatsapp_dispatch.core.config import settings
from whatsapp_dispatch.schemas.template import ApprovalStatus
from whatsapp_dispatch.services.approval_service import ApprovalService, approval_service
from whatsapp_dispatch.services.event_resolver import EventResolver, event_resolver
from whatsapp_dispatch.services.gateway_client import GatewayClient, gateway_client
from whatsapp_dispatch.services.template_registry import TemplateRegistry, template_registry

logger = logging.getLogger(__name__)


class HealthService:
    """Summarises template approval state and optionally probes the gateway."""

    def __init__(
        self,
        approvals: ApprovalService,
        gateway: GatewayClient,
        registry: TemplateRegistry,
        resolver: EventResolver,
    ):
        self.approvals = approvals
        self.gateway = gateway
        self.registry = registry
        self.resolver = resolver

    async def template_stats(self) -> Dict[str, Any]:
        """Counts by approval status. A failed read yields zeroed stats."""
        stats: Dict[str, Any] = {
            "total": 0,
            "approved": 0,
            "pending": 0,
            "rejected": 0,
            "lastSync": None,
        }
        try:
            records = await self.approvals.list_records()
        except Exception as e:
            logger.error(f"❌ Template approval read failed: {e}")
            return stats

        stats["total"] = len(records)
        stats["approved"] = sum(
            1 for r in records if r.status == ApprovalStatus.APPROVED.value and r.is_active
        )
        stats["pending"] = sum(1 for r in records if r.status == ApprovalStatus.PENDING.value)
        stats["rejected"] = sum(1 for r in records if r.status == ApprovalStatus.REJECTED.value)

        synced = [r.last_synced_at for r in records if r.last_synced_at is not None]
        if synced:
            stats["lastSync"] = _latest(synced).isoformat()
        return stats

    async def probe_gateway(self) -> Dict[str, Any]:
        """One bounded probe call. Any failure maps to `disconnected`."""
        probe_template = self.registry.lookup(settings.WHATSAPP_PROBE_TEMPLATE_ID)
        sample_args = list(probe_template.sample_args) if probe_template else []

        try:
            reachable, response = await self.gateway.probe(
                settings.WHATSAPP_PROBE_TEMPLATE_ID,
                settings.WHATSAPP_PROBE_PHONE,
                sample_args,
                timeout=settings.WHATSAPP_HEALTH_TIMEOUT_SECONDS,
            )
        except Exception as e:
            logger.error(f"❌ Gateway connection test failed: {e}")
            return {"connectionStatus": "disconnected"}

        result: Dict[str, Any] = {
            "connectionStatus": "connected" if reachable else "disconnected"
        }
        if response:
            result["testResponse"] = response
        return result

    async def check(self, test_connection: bool = False) -> Dict[str, Any]:
        whatsapp: Dict[str, Any] = {
            "configured": self.gateway.configured,
            "endpoint": self.gateway.endpoint,
            "connectionStatus": "unknown",
        }

        templates = await self.template_stats()

        if test_connection and self.gateway.configured:
            whatsapp.update(await self.probe_gateway())

        return {
            "status": "ok",
            "timestamp": datetime.utcnow().isoformat(),
            "whatsapp": whatsapp,
            "templates": templates,
            "requiredTemplates": self.resolver.required_template_ids(),
            "circuitBreakers": get_all_breakers_status(),
        }


def _latest(values) -> datetime:
    # Naive timestamps are treated as UTC so mixed records still compare
    def sort_key(value: datetime) -> float:
        if value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc).timestamp()
        return value.timestamp()

    return max(values, key=sort_key)


health_service = HealthService(approval_service, gateway_client, template_registry, event_resolver)
