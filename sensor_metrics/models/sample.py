"""
Parsed sensor samples and the label sets that identify their series.
"""

from dataclasses import dataclass
from enum import Enum


class SampleKind(Enum):
    """Kind of reading carried by a sample line."""
    TEMPERATURE = "temp"
    HUMIDITY = "humidity"


@dataclass(frozen=True)
class LabelSet:
    """Labels identifying one metric series for a physical sensor."""
    id: str
    device: str
    model: str

    def as_dict(self) -> dict[str, str]:
        """Label mapping in the order the gauges declare them."""
        return {"id": self.id, "device": self.device, "model": self.model}


@dataclass(frozen=True)
class Sample:
    """
    A matched line, parsed into fields but not yet converted or recorded.

    Numeric fields stay as the raw text from the wire; conversion happens
    when the sample is recorded so that a bad field only drops itself.

    For temperature lines ``values`` holds the fahrenheit reading. For
    humidity lines it holds the relative humidity followed by the
    fahrenheit reading.
    """
    kind: SampleKind
    raw_device_id: str
    model: str
    values: tuple[str, ...]
    sequence: str = ""

    @property
    def seen_key(self) -> str:
        """Key used to track which devices reported within a connection."""
        return self.raw_device_id
