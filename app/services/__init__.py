"""
app/services package marker.
"""

from app.services.visibility_run_service import (
    VisibilityRunService,
    get_visibility_run_service,
)

__all__ = [
    "VisibilityRunService",
    "get_visibility_run_service",
]
