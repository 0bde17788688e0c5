"""
For You ranking API application.
Wires logging, error rendering, routers and telemetry into one FastAPI app.
"""
import logging
from contextlib import asynccontextmanager
from typing import AsyncGenerator

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from foryou.api.routers import config_router, feed_router, health_router, insights_router
from foryou.config import get_settings
from foryou.config.logging import configure_logging
from foryou.core.exceptions import AppException
from foryou.core.telemetry import setup_telemetry

logger = logging.getLogger(__name__)

DESCRIPTION = """
Multi-signal ranking for the interactive story feed.

- Completion, likes, recency, replay, velocity and authority signals
- A/B variant weights with admin overrides
- Topic and co-engagement affinity for signed-in viewers
- 24h exposure suppression and creator cool-down
- Per-creator and per-category diversity caps
- Score inspection and per-variant exposure reporting
"""


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    settings = get_settings()
    logger.info(
        f"Starting {settings.APP_NAME} v{settings.APP_VERSION} "
        f"(personalization={settings.PERSONALIZATION_ENABLED}, "
        f"kill_switch={settings.KILL_SWITCH_ACTIVE})"
    )
    yield
    logger.info("Shutting down application")


async def app_exception_handler(request: Request, exc: AppException) -> JSONResponse:
    """Render an AppException with its own status and error code."""
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict())


async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Log the failure and hide its details from the client."""
    logger.exception(f"Unhandled exception on {request.url.path}: {exc}")
    return JSONResponse(
        status_code=500,
        content={"error": {"code": "INTERNAL_ERROR", "message": "An unexpected error occurred"}},
    )


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(AppException, app_exception_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)


def create_app() -> FastAPI:
    """Create and configure the FastAPI application."""
    settings = get_settings()
    configure_logging(debug=settings.DEBUG)

    app = FastAPI(
        title=settings.APP_NAME,
        version=settings.APP_VERSION,
        description=DESCRIPTION,
        lifespan=lifespan,
    )
    register_exception_handlers(app)

    for router in (health_router, feed_router, config_router, insights_router):
        app.include_router(router)

    setup_telemetry(app)
    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("foryou.main:app", host="0.0.0.0", port=8000, reload=True)
