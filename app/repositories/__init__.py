"""
app/repositories package marker.
"""

from app.repositories.visibility_metric_repository import VisibilityMetricRepository

__all__ = ["VisibilityMetricRepository"]
