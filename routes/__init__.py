"""
API route modules.

Each module defines routes for one domain area.
"""

from routes.session import router as session_router
from routes.collections import router as collections_router, sites_router
from routes.imports import router as imports_router
from routes.images import router as images_router

__all__ = [
    "session_router",
    "collections_router",
    "sites_router",
    "imports_router",
    "images_router",
]
