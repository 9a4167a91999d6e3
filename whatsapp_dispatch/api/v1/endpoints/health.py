from fastapi import APIRouter, status
from fastapi.responses import JSONResponse
from whatsapp_dispatch.core.config import settings
from whatsapp_dispatch.services.health_service import health_service
from datetime import datetime
import logging

router = APIRouter()
logger = logging.getLogger(__name__)


@router.get("/whatsapp/health", status_code=status.HTTP_200_OK)
async def whatsapp_health(test: str = "false"):
    """
    WhatsApp dispatch health: gateway configuration, template approval
    counts and circuit breaker states.

    **Query Parameters:**
    - `test`: `true` sends one probe message to the gateway (5s timeout)

    Returns:
        - 200: Report generated (individual checks may still be degraded)
        - 500: The report itself could not be produced
    """
    try:
        report = await health_service.check(test_connection=test.lower() == "true")
        return JSONResponse(status_code=status.HTTP_200_OK, content=report)
    except Exception as e:
        logger.error(f"❌ Health check failed: {e}", exc_info=True)
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={
                "status": "error",
                "error": "Failed to check health",
                "details": str(e),
                "timestamp": datetime.utcnow().isoformat(),
            },
        )


@router.get("/live", status_code=status.HTTP_200_OK)
async def liveness_check():
    """Liveness probe. Touches neither Redis nor the gateway."""
    return {
        "alive": True,
        "timestamp": datetime.utcnow().isoformat(),
        "service": settings.PROJECT_NAME,
        "version": settings.VERSION,
    }
