"""
Prometheus metric state and the scrape endpoint.
"""

from .registry import MetricRegistry, labels_for
from .server import MetricsServer, MetricsServerError

__all__ = [
    "MetricRegistry",
    "labels_for",
    "MetricsServer",
    "MetricsServerError",
]
