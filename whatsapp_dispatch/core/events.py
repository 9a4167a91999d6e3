import logging

from whatsapp_dispatch.core.config import settings
from whatsapp_dispatch.core.redis import redis_manager
from whatsapp_dispatch.services.gateway_client import HTTP_CLIENT
from whatsapp_dispatch.services.template_registry import template_registry
from whatsapp_dispatch.services.event_resolver import event_resolver

logger = logging.getLogger(__name__)


async def startup_handler():
    """Initialize external connections on startup."""
    logger.info(f"🚀 Starting {settings.PROJECT_NAME} ({settings.ENVIRONMENT})...")
    logger.info(
        f"📚 Loaded {len(template_registry)} templates and "
        f"{len(event_resolver.mappings())} event mappings"
    )

    if not settings.WHATSAPP_CONFIGURED:
        logger.warning("⚠️ WHATSAPP_API_KEY is not set - sends will fail until configured")

    # Redis backs the approval stats and delivery log; sends work without it
    try:
        redis_manager.initialize_client()
        await redis_manager.get_client().ping()
        logger.info("✅ Redis connected")
    except Exception as e:
        logger.error(
            f"❌ Redis connection failed. Delivery log and template stats disabled. Error: {e}"
        )


async def shutdown_handler():
    """Close external connections on shutdown."""
    logger.info("🔄 Shutting down...")

    try:
        await HTTP_CLIENT.aclose()
        logger.info("✅ Gateway HTTP client closed")
    except Exception as e:
        logger.error(f"⚠️ Error closing gateway HTTP client: {e}")

    try:
        await redis_manager.close()
    except Exception as e:
        logger.error(f"⚠️ Redis close error: {e}")
