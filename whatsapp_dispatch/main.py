import logging
from contextlib import asynccontextmanager
from uuid import uuid4

from fastapi import FastAPI, Request

# Local Imports
from whatsapp_dispatch.core.config import settings
from whatsapp_dispatch.core.events import startup_handler, shutdown_handler
from whatsapp_dispatch.core.exceptions import register_exception_handlers
from whatsapp_dispatch.api.v1.router import api_router

# --- 1. Logging ---

logging.basicConfig(
    level=settings.LOG_LEVEL.upper(),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)

# --- 2. App Initialization ---


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Open Redis before serving and close outbound clients on shutdown."""
    await startup_handler()
    yield
    await shutdown_handler()


app = FastAPI(
    title=settings.PROJECT_NAME,
    version=settings.VERSION,
    debug=settings.DEBUG,
    docs_url="/api/docs",
    redoc_url="/api/redoc",
    lifespan=lifespan,
)

register_exception_handlers(app)


# --- 3. Correlation ID Middleware ---


@app.middleware("http")
async def correlation_id_middleware(request: Request, call_next):
    """Attach a correlation id to every request (reusing the caller's if sent)."""
    correlation_id = request.headers.get("X-Correlation-ID") or str(uuid4())
    request.state.correlation_id = correlation_id

    response = await call_next(request)
    response.headers["X-Correlation-ID"] = correlation_id
    return response


# --- 4. Routes ---

app.include_router(api_router, prefix=settings.API_V1_PREFIX)


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "whatsapp_dispatch.main:app",
        host=settings.HOST,
        port=settings.PORT,
        reload=settings.DEBUG,
    )
