import json
import logging
from datetime import datetime
from typing import Any, Dict, Optional
from uuid import uuid4

from whatsapp_dispatch.core.circuit_breaker import async_circuit_breaker, redis_breaker
from whatsapp_dispatch.core.config import settings
from whatsapp_dispatch.core.redis import redis_manager
from whatsapp_dispatch.schemas.dispatch import DeliveryRecord, DeliveryStatus, SendOptions

logger = logging.getLogger(__name__)


class DeliveryLogService:
    """
    Tracks the delivery state of each dispatch in Redis (pending -> sent/failed).

    Logging is best effort: every method reports failure through its return
    value and never raises. Redis calls go through the Redis circuit breaker
    and the client's socket timeouts, so an unreachable Redis costs a send
    at most one bounded wait and, once the breaker opens, none.
    """

    def __init__(self, ttl_seconds: int = settings.DELIVERY_LOG_TTL_SECONDS):
        self.ttl_seconds = ttl_seconds

    @staticmethod
    def _key(delivery_id: str) -> str:
        return f"whatsapp:delivery:{delivery_id}"

    @async_circuit_breaker(redis_breaker)
    async def _write(self, key: str, record_json: str):
        client = redis_manager.get_client()
        await client.setex(key, self.ttl_seconds, record_json)

    @async_circuit_breaker(redis_breaker)
    async def _read(self, key: str) -> Optional[str]:
        client = redis_manager.get_client()
        return await client.get(key)

    async def record_pending(
        self, template_id: str, phone: str, options: SendOptions
    ) -> Optional[str]:
        """
        Store a pending delivery record before the gateway is called.

        Returns:
            The new delivery_id, or None if the record could not be stored
        """
        record = DeliveryRecord(
            delivery_id=f"dlv_{uuid4().hex[:12]}",
            template_id=template_id,
            phone=phone,
            event_key=options.event_key,
            partner_id=options.partner_id,
            wallet_id=options.wallet_id,
            transaction_id=options.transaction_id,
        )
        try:
            await self._write(self._key(record.delivery_id), record.model_dump_json())
            logger.info(
                f"📝 Delivery pending: {record.delivery_id} ({template_id} -> {phone})",
                extra={"delivery_id": record.delivery_id, **options.log_context()},
            )
            return record.delivery_id
        except Exception as e:
            logger.error(f"❌ Error recording pending delivery: {e}")
            return None

    async def get_record(self, delivery_id: str) -> Optional[Dict[str, Any]]:
        """
        Retrieve a delivery record from Redis.

        Returns:
            Record dict or None if not found
        """
        try:
            record_json = await self._read(self._key(delivery_id))
            if record_json:
                return json.loads(record_json)

            logger.warning(f"⚠️ Delivery record not found: {delivery_id}")
            return None
        except Exception as e:
            logger.error(f"❌ Error getting delivery record: {e}")
            return None

    async def _update(self, delivery_id: str, **changes: Any) -> bool:
        try:
            key = self._key(delivery_id)
            record_json = await self._read(key)
            if not record_json:
                logger.warning(f"⚠️ Cannot update non-existent delivery: {delivery_id}")
                return False

            record = json.loads(record_json)
            record.update(changes)
            record["updated_at"] = datetime.utcnow().isoformat()

            # Reset the TTL on update
            await self._write(key, json.dumps(record))
            logger.info(f"📊 Delivery updated: {delivery_id} -> {changes.get('status')}")
            return True
        except Exception as e:
            logger.error(f"❌ Error updating delivery record: {e}")
            return False

    async def mark_sent(self, delivery_id: Optional[str], message_id: Optional[str]) -> bool:
        if not delivery_id:
            return False
        return await self._update(
            delivery_id, status=DeliveryStatus.SENT.value, message_id=message_id
        )

    async def mark_failed(self, delivery_id: Optional[str], error_message: str) -> bool:
        if not delivery_id:
            return False
        return await self._update(
            delivery_id, status=DeliveryStatus.FAILED.value, error_message=error_message
        )


# Create singleton instance
delivery_log_service = DeliveryLogService()
