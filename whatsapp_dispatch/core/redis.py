import logging
from typing import Optional

import redis.asyncio as redis

from whatsapp_dispatch.core.config import settings

logger = logging.getLogger(__name__)


class RedisManager:
    """Owns the process-wide Redis client shared by the approval store and delivery log."""

    def __init__(self):
        # Connection will be initialized externally in core/events.py
        self.redis_client: Optional[redis.Redis] = None

    def initialize_client(self):
        """Initializes the Redis client for use by the services."""
        if not self.redis_client:
            self.redis_client = redis.from_url(
                settings.REDIS_URL,
                encoding="utf-8",
                decode_responses=True,
                socket_connect_timeout=settings.REDIS_SOCKET_TIMEOUT_SECONDS,
                socket_timeout=settings.REDIS_SOCKET_TIMEOUT_SECONDS,
            )
            logger.info(
                f"✅ Redis client initialized: {settings.REDIS_HOST}:{settings.REDIS_PORT}"
            )

    def get_client(self) -> redis.Redis:
        """Returns the initialized Redis client instance."""
        if not self.redis_client:
            raise RuntimeError(
                "Redis client not initialized. Call initialize_client() first."
            )
        return self.redis_client

    async def close(self):
        """Close Redis connection."""
        if self.redis_client:
            await self.redis_client.aclose()
            self.redis_client = None
            logger.info("✅ Redis connection closed")


# Create singleton instance
redis_manager = RedisManager()
