"""
Remote delivery of visibility metrics.
"""

from app.publishing.metrics_publisher import MetricsPublisher, build_payload

__all__ = ["MetricsPublisher", "build_payload"]
