"""API package - FastAPI routes and dependencies."""
from .dependencies import get_for_you_service
from .routers import config_router, feed_router, health_router, insights_router

__all__ = [
    "config_router",
    "feed_router",
    "get_for_you_service",
    "health_router",
    "insights_router",
]
