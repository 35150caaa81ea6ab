"""
Sample line parsing, unit conversion and device naming.
"""

from .classifier import classify_line
from .device import format_device
from .units import ParseError, fahrenheit_to_celsius, parse_fahrenheit, parse_humidity

__all__ = [
    "classify_line",
    "format_device",
    "ParseError",
    "fahrenheit_to_celsius",
    "parse_fahrenheit",
    "parse_humidity",
]
