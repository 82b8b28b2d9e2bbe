"""
API router modules.

This package contains FastAPI routers organized by feature area:
- graph: Interactive graph session endpoints
- health: Health check for monitoring
"""

from graph_explorer.api.routers.graph import router as graph_router
from graph_explorer.api.routers.health import router as health_router

__all__ = ["graph_router", "health_router"]
