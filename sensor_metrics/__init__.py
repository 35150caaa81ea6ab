"""
Sensor Metrics - Prometheus exporter for a line-oriented sensor telemetry feed.
"""

from .const import APP_VERSION

__version__ = APP_VERSION
