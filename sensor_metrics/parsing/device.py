"""
Canonical device naming.

One-wire parts report an id made of a family byte followed by a serial
number; the exported ``device`` label is the model plus the serial number
so that the label reads the same regardless of how the id is cased.
"""

import re

from ..const import HUMIDITY_MODEL
from ..logging import get_logger


logger = get_logger("parsing.device")

# Family code (two hex digits) followed by the serial number
_DEVICE_ID_RE = re.compile(r"^([0-9a-f]{2})([0-9a-f]+)$", re.IGNORECASE | re.ASCII)

_UINT64_MAX = 0xFFFF_FFFF_FFFF_FFFF


class DeviceIDError(ValueError):
    """Raised when a device serial number does not fit in 64 bits."""


def parse_serial(digits: str) -> int:
    """
    Parse hex serial number digits as an unsigned 64-bit integer.

    Raises:
        DeviceIDError: On malformed hex or overflow
    """
    try:
        serial = int(digits, 16)
    except ValueError as e:
        raise DeviceIDError(f"invalid hex {digits!r}") from e
    if serial > _UINT64_MAX:
        raise DeviceIDError(f"{digits!r} out of range for 64 bits")
    return serial


def format_device(device_id: str, model: str) -> str:
    """
    Resolve a raw device id and model to a stable device label.

    Args:
        device_id: Device id as reported on the wire
        model: Model token from the same line

    Returns:
        ``dht22`` for the humidity model, ``<model>-<12 hex digits>`` for
        one-wire ids, otherwise the raw id unchanged
    """
    if model == HUMIDITY_MODEL:
        # The DHT22 has no id; a single unit is assumed
        return HUMIDITY_MODEL.lower()

    match = _DEVICE_ID_RE.match(device_id)
    if match is None:
        return device_id

    try:
        serial = parse_serial(match.group(2))
    except DeviceIDError as e:
        logger.warning(f"Unparseable device ID {match.group(2)!r}: {e}")
        return device_id

    return f"{model.lower()}-{serial:012x}"
