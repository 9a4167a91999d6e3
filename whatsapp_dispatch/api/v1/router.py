from fastapi import APIRouter
from whatsapp_dispatch.api.v1.endpoints import events, health, templates


# Main router for API version v1 (mounted at settings.API_V1_PREFIX)
api_router = APIRouter()

api_router.include_router(templates.router, tags=["Templates"])
api_router.include_router(events.router, tags=["Events"])
api_router.include_router(health.router, tags=["Health"])
