"""API routers package."""
from .config import router as config_router
from .feed import router as feed_router
from .health import router as health_router
from .insights import router as insights_router

__all__ = ["config_router", "feed_router", "health_router", "insights_router"]
