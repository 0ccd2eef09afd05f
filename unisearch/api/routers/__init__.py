"""
UniSearch API Routers

Routers:
- health_router: Health check endpoint
- search_router: Federated search endpoints
"""

from .health_router import router as health_router
from .search_router import router as search_router

__all__ = [
    "health_router",
    "search_router",
]
