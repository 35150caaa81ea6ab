"""
Classification of raw feed lines into samples.

Two line formats are recognized, tried in order:

    <seq> temp <hexid> <model> <fahrenheit>
    <seq> humidity DHT22 <humidity> <fahrenheit>

``<seq>`` is a possibly negative integer emitted by the source. Literal
tokens match case-insensitively. Anything else is protocol noise.
"""

import re

from ..models.sample import Sample, SampleKind


TEMPERATURE_RE = re.compile(
    r"(-?\d+) (temp) ([0-9a-f]+) (\w+) ([\d.]+)",
    re.IGNORECASE | re.ASCII,
)
HUMIDITY_RE = re.compile(
    r"(-?\d+) (humidity) (DHT22) ([\d.]+) ([\d.]+)",
    re.IGNORECASE | re.ASCII,
)


def classify_line(line: str) -> Sample | None:
    """
    Match a line (without its newline) against the known sample formats.

    Args:
        line: One line of text from the feed

    Returns:
        Parsed Sample, or None if the line is not a sample
    """
    match = TEMPERATURE_RE.fullmatch(line)
    if match:
        seq, _, device_id, model, value = match.groups()
        return Sample(
            kind=SampleKind.TEMPERATURE,
            raw_device_id=device_id,
            model=model,
            values=(value,),
            sequence=seq,
        )

    match = HUMIDITY_RE.fullmatch(line)
    if match:
        seq, _, model, humidity, temperature = match.groups()
        return Sample(
            kind=SampleKind.HUMIDITY,
            raw_device_id=model,
            model=model,
            values=(humidity, temperature),
            sequence=seq,
        )

    return None
