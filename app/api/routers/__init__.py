"""
app/api/routers package marker.
"""

from app.api.routers.visibility import router as visibility_router

__all__ = ["visibility_router"]
