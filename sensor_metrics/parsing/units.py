"""
Conversion of raw sample text into normalized units.

Sensors on the feed report temperature in fahrenheit; the exporter
publishes celsius rounded to 0.1 degrees, which is already finer than the
roughly ±0.5° the DS18x20 and DHT22 parts can resolve.
"""

import math
import re


# Decimal: "12", "12.", "12.5", ".5", optionally signed for temperatures
_DECIMAL_RE = re.compile(r"^(?:\d+\.?\d*|\.\d+)$", re.ASCII)
_SIGNED_DECIMAL_RE = re.compile(r"^-?(?:\d+\.?\d*|\.\d+)$", re.ASCII)


class ParseError(ValueError):
    """Raised when a numeric sample field cannot be parsed."""

    def __init__(self, text: str, field: str = "value"):
        self.text = text
        self.field = field
        super().__init__(f"invalid {field} {text!r}")


def round_half_away(value: float) -> float:
    """Round to the nearest integer, ties away from zero."""
    truncated = math.trunc(value)
    if abs(value - truncated) >= 0.5:
        truncated += math.copysign(1.0, value)
    return float(truncated)


def fahrenheit_to_celsius(fahrenheit: float) -> float:
    """Convert fahrenheit to celsius rounded to the nearest 0.1 degree."""
    return round_half_away(10 * (fahrenheit - 32.0) * 5.0 / 9.0) / 10


def _parse_decimal(text: str, field: str, signed: bool = False) -> float:
    pattern = _SIGNED_DECIMAL_RE if signed else _DECIMAL_RE
    if not pattern.match(text):
        raise ParseError(text, field)
    return float(text)


def parse_fahrenheit(text: str) -> float:
    """
    Parse a fahrenheit reading and return degrees celsius.

    Args:
        text: Raw decimal text from the sample line

    Returns:
        Temperature in celsius, rounded to 0.1

    Raises:
        ParseError: If the text is not a decimal number
    """
    return fahrenheit_to_celsius(_parse_decimal(text, "temperature", signed=True))


def parse_humidity(text: str) -> float:
    """
    Parse a relative humidity reading (percent, recorded as-is).

    Raises:
        ParseError: If the text is not a non-negative decimal number
    """
    return _parse_decimal(text, "humidity")
