"""API routes package."""

from insights.routes.analytics_routes import router as analytics_router
from insights.routes.connection_routes import router as connection_router

__all__ = ["analytics_router", "connection_router"]
