"""
API Routes Package

This package contains the route modules organized by functionality.
"""

from api.routes.compile import router as compile_router
from api.routes.system import router as system_router

__all__ = [
    "compile_router",
    "system_router"
]
