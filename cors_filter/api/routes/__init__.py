"""API routes module."""

from cors_filter.api.routes.health import router as health_router
from cors_filter.api.routes.routes import router as routes_router

__all__ = [
    "health_router",
    "routes_router",
]
