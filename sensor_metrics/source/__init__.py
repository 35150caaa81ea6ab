"""
Sensor feed connection handling.
"""

from .client import ConnectionSession, LineTooLong, SensorSourceClient

__all__ = [
    "SensorSourceClient",
    "ConnectionSession",
    "LineTooLong",
]
