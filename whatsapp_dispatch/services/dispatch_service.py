import logging
from typing import Any, List, Optional

from whatsapp_dispatch.core.config import settings
from whatsapp_dispatch.core.exceptions import (
    ArgCountMismatch,
    InvalidArgsType,
    MissingPhone,
    MissingTemplateId,
    UnknownTemplate,
)
from whatsapp_dispatch.schemas.dispatch import DispatchResult, SendOptions
from whatsapp_dispatch.schemas.template import TemplateDefinition
from whatsapp_dispatch.services.delivery_log_service import (
    DeliveryLogService,
    delivery_log_service,
)
from whatsapp_dispatch.services.gateway_client import GatewayClient, gateway_client
from whatsapp_dispatch.services.template_registry import (
    TemplateRegistry,
    template_registry,
)

logger = logging.getLogger(__name__)


class DispatchService:
    """Validates a send request against the registry, then dispatches it once."""

    def __init__(
        self,
        registry: TemplateRegistry,
        gateway: GatewayClient,
        delivery_log: DeliveryLogService,
    ):
        self.registry = registry
        self.gateway = gateway
        self.delivery_log = delivery_log

    def validate(self, template_id: Any, phone: Any, template_args: Any) -> TemplateDefinition:
        """
        Check a direct send request before anything leaves the process.

        Raises:
            MissingTemplateId, MissingPhone, InvalidArgsType, UnknownTemplate,
            ArgCountMismatch: in that order of precedence.
        """
        available = self.registry.ids()

        if not template_id:
            raise MissingTemplateId(available)
        if not phone:
            raise MissingPhone()
        if not isinstance(template_args, list):
            raise InvalidArgsType()

        template = self.registry.lookup(template_id)
        if template is None:
            raise UnknownTemplate(template_id, available)

        if len(template_args) != template.arg_count:
            raise ArgCountMismatch(
                template.id,
                template.arg_count,
                len(template_args),
                template.arg_descriptions,
                template.sample_args,
            )
        return template

    async def send(
        self,
        template_id: Any,
        phone: Any,
        template_args: Any,
        options: Optional[SendOptions] = None,
    ) -> DispatchResult:
        """
        Validate and dispatch one template message.

        Validation errors raise before any network call. Transport failures
        come back as a failed DispatchResult.
        """
        options = options or SendOptions()
        template = self.validate(template_id, phone, template_args)
        args: List[str] = [str(arg) for arg in template_args]
        phone = str(phone)

        log_extra = {"template_id": template.id, **options.log_context()}
        delivery_id = await self.delivery_log.record_pending(template.id, phone, options)

        logger.info(
            f"📤 Sending template '{template.id}' to {phone} ({len(args)} args)",
            extra={"delivery_id": delivery_id, **log_extra},
        )
        result = await self.gateway.send_template(
            template.id,
            phone,
            args,
            image_url=options.image_url,
            timeout=options.timeout,
            max_attempts=settings.DISPATCH_MAX_ATTEMPTS,
            retry_base_delay=settings.DISPATCH_RETRY_BASE_DELAY,
        )
        result.delivery_id = delivery_id

        if result.success:
            await self.delivery_log.mark_sent(delivery_id, result.message_id)
            logger.info(
                f"✅ Template '{template.id}' sent to {phone}",
                extra={"message_id": result.message_id, "delivery_id": delivery_id, **log_extra},
            )
        else:
            await self.delivery_log.mark_failed(delivery_id, result.error or "unknown error")
            logger.error(
                f"❌ Template '{template.id}' to {phone} failed: {result.error}",
                extra={"delivery_id": delivery_id, **log_extra},
            )
        return result


dispatch_service = DispatchService(template_registry, gateway_client, delivery_log_service)
