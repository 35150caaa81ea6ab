"""
Metric registry shared by the ingestion task and the scrape endpoint.

Wraps a prometheus_client CollectorRegistry holding the per-sensor gauges
and the operational counters. Gauges keep the last value written for each
label set until the process exits. prometheus_client guards every series
value with its own lock, so a scrape never observes a half-written value.
"""

from prometheus_client import (
    CollectorRegistry,
    Counter,
    Gauge,
    disable_created_metrics,
    generate_latest,
)

from ..const import METRIC_NAMESPACE
from ..logging import get_logger
from ..models.sample import LabelSet, Sample, SampleKind
from ..parsing.device import format_device
from ..parsing.units import ParseError, parse_fahrenheit, parse_humidity


logger = get_logger("metrics.registry")

SENSOR_LABELS = ("id", "device", "model")


def labels_for(sample: Sample) -> LabelSet:
    """
    Derive the series labels for a sample.

    Humidity sensors carry no id, so the model stands in for all three labels.
    """
    model = sample.model.lower()
    if sample.kind is SampleKind.HUMIDITY:
        return LabelSet(id=model, device=model, model=model)
    return LabelSet(
        id=sample.raw_device_id,
        device=format_device(sample.raw_device_id, sample.model),
        model=model,
    )


class MetricRegistry:
    """
    Current sensor values and collector counters.

    One instance is created by the application and handed to both the
    source client (writer) and the metrics server (reader).
    """

    def __init__(
        self,
        registry: CollectorRegistry | None = None,
        namespace: str = METRIC_NAMESPACE,
    ):
        # Counters export only their _total series, no _created timestamps
        disable_created_metrics()

        self.registry = registry if registry is not None else CollectorRegistry()
        self.namespace = namespace

        self.temperature = Gauge(
            "temperature_degrees_celsius",
            "Temperature sampled from a single sensor, in degrees celsius",
            SENSOR_LABELS,
            namespace=namespace,
            registry=self.registry,
        )
        self.humidity = Gauge(
            "relative_humidity_percent",
            "Relative humidity sampled from a single sensor, in percent",
            SENSOR_LABELS,
            namespace=namespace,
            registry=self.registry,
        )
        self.connection_attempts = Counter(
            "connection_attempts",
            "Attempts to connect to the sensor source",
            namespace=namespace,
            registry=self.registry,
        )
        self.connection_errors = Counter(
            "connection_errors",
            "Failures to connect to the sensor source",
            namespace=namespace,
            registry=self.registry,
        )
        self.samples_received = Counter(
            "samples_received",
            "Samples received by collector",
            namespace=namespace,
            registry=self.registry,
        )
        self.bytes_received = Counter(
            "bytes_received",
            "Bytes received by collector (not necessarily in samples)",
            namespace=namespace,
            registry=self.registry,
        )

    def record(self, sample: Sample) -> LabelSet:
        """
        Convert a sample's fields and write them to the gauges.

        Each field is converted independently; a field that fails to parse
        is logged and skipped without touching its gauge.

        Returns:
            The label set the sample was recorded under
        """
        labels = labels_for(sample)

        if sample.kind is SampleKind.TEMPERATURE:
            self._set(self.temperature, labels, parse_fahrenheit, sample.values[0], sample)
        else:
            humidity_text, temperature_text = sample.values
            self._set(self.humidity, labels, parse_humidity, humidity_text, sample)
            self._set(self.temperature, labels, parse_fahrenheit, temperature_text, sample)

        return labels

    @staticmethod
    def _set(gauge: Gauge, labels: LabelSet, parse, text: str, sample: Sample) -> None:
        try:
            value = parse(text)
        except ParseError as e:
            logger.warning(f"Error parsing sample value {e.text!r} from device {sample.raw_device_id!r}: {e}")
            return
        gauge.labels(**labels.as_dict()).set(value)

    def value(self, name: str, labels: LabelSet | dict[str, str] | None = None) -> float | None:
        """
        Read the current value of a sample by its exposition name.

        Args:
            name: Sample name without namespace, e.g. ``samples_received_total``
            labels: Label set for per-sensor gauges

        Returns:
            Current value, or None if the series does not exist
        """
        if isinstance(labels, LabelSet):
            labels = labels.as_dict()
        return self.registry.get_sample_value(f"{self.namespace}_{name}", labels or {})

    def exposition(self) -> bytes:
        """Render all metrics in the Prometheus text format."""
        return generate_latest(self.registry)
