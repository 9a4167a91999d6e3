import json
import logging
from typing import List

from pydantic import ValidationError

from whatsapp_dispatch.core.circuit_breaker import async_circuit_breaker, redis_breaker
from whatsapp_dispatch.core.config import settings
from whatsapp_dispatch.core.redis import redis_manager
from whatsapp_dispatch.schemas.template import TemplateApprovalRecord

logger = logging.getLogger(__name__)


class ApprovalService:
    """
    Read access to template approval records.

    Records live in a Redis hash (`TEMPLATE_APPROVALS_KEY`) mapping template id to
    a JSON document, maintained by the template sync job.
    """

    def __init__(self, key: str = settings.TEMPLATE_APPROVALS_KEY):
        self.key = key

    @async_circuit_breaker(redis_breaker)
    async def list_records(self) -> List[TemplateApprovalRecord]:
        """
        Fetch all approval records. Malformed entries are skipped with a warning.

        Raises:
            RuntimeError: Redis client is not initialized.
            redis.RedisError: the read failed.
        """
        client = redis_manager.get_client()
        raw_records = await client.hgetall(self.key)

        records: List[TemplateApprovalRecord] = []
        for template_id, raw in raw_records.items():
            try:
                data = json.loads(raw)
                data.setdefault("template_id", template_id)
                records.append(TemplateApprovalRecord(**data))
            except (ValueError, TypeError, AttributeError, ValidationError) as e:
                logger.warning(f"⚠️ Skipping malformed approval record '{template_id}': {e}")

        logger.debug(f"📊 Loaded {len(records)} template approval records")
        return records


# Create singleton instance
approval_service = ApprovalService()
