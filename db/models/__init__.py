"""
db/models package marker.
"""

from db.models.visibility_metric import VisibilityMetricRecord

__all__ = ["VisibilityMetricRecord"]
