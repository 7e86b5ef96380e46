"""API routes package."""

from fileserver.routes.browse_routes import router as browse_router
from fileserver.routes.download_routes import router as download_router
from fileserver.routes.manage_routes import router as manage_router

__all__ = ["browse_router", "download_router", "manage_router"]
