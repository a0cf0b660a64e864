"""
Routers for the application.
"""

from authglue.core.routers.auth import router as auth_router

__all__ = ["auth_router"]
