"""
Configuration schema with dataclasses for validation and type safety.

Settings arrive as strings (command line or environment) and are converted
by the ``from_values`` constructors; conversion errors surface as ValueError
and are reported by the loader.
"""

import re
from collections.abc import Mapping
from dataclasses import dataclass, field

from ..const import (
    DEFAULT_CONNECT,
    DEFAULT_CONNECT_TIMEOUT,
    DEFAULT_LISTEN,
    DEFAULT_MAX_LINE_LENGTH,
    DEFAULT_RECONNECT_INTERVAL,
)


# Duration units in seconds
DURATION_UNITS = {
    "ms": 0.001,
    "s": 1,
    "m": 60,
    "h": 3600,
    "d": 86400,
}

_DURATION_PART_RE = re.compile(r"(\d+(?:\.\d*)?|\.\d+)(ms|s|m|h|d)", re.ASCII)
_NUMBER_RE = re.compile(r"^(?:\d+(?:\.\d*)?|\.\d+)$", re.ASCII)


def parse_duration(value: str | float) -> float:
    """
    Parse a duration into seconds.

    Accepts a bare number of seconds ("30", "2.5") or unit-suffixed parts
    ("500ms", "30s", "1m30s").

    Raises:
        ValueError: If the value is not a duration
    """
    if isinstance(value, (int, float)):
        return float(value)

    text = value.strip().lower()
    if _NUMBER_RE.match(text):
        return float(text)

    total = 0.0
    pos = 0
    for match in _DURATION_PART_RE.finditer(text):
        if match.start() != pos:
            break
        total += float(match.group(1)) * DURATION_UNITS[match.group(2)]
        pos = match.end()

    if not text or pos != len(text):
        raise ValueError(f"invalid duration {value!r}")
    return total


@dataclass(frozen=True)
class Address:
    """A host:port pair."""
    host: str
    port: int

    @classmethod
    def parse(cls, value: str, default_host: str | None = None) -> "Address":
        """
        Parse ``host:port``, ``[v6-host]:port`` or ``:port``.

        Args:
            value: Address text
            default_host: Host to use when the host part is empty; if None
                an empty host is an error

        Raises:
            ValueError: If the address is malformed
        """
        host, sep, port_text = value.strip().rpartition(":")
        if not sep:
            raise ValueError(f"address {value!r} is missing a port")

        if host.startswith("[") and host.endswith("]"):
            host = host[1:-1]

        if not host:
            if default_host is None:
                raise ValueError(f"address {value!r} is missing a host")
            host = default_host

        try:
            port = int(port_text)
        except ValueError:
            raise ValueError(f"invalid port in address {value!r}") from None
        if not 0 <= port <= 65535:
            raise ValueError(f"port out of range in address {value!r}")

        return cls(host=host, port=port)

    def __str__(self) -> str:
        if ":" in self.host:
            return f"[{self.host}]:{self.port}"
        return f"{self.host}:{self.port}"


@dataclass
class SourceConfig:
    """Sensor feed connection settings."""
    address: Address = field(default_factory=lambda: Address.parse(DEFAULT_CONNECT))
    connect_timeout: float = DEFAULT_CONNECT_TIMEOUT
    reconnect_interval: float = DEFAULT_RECONNECT_INTERVAL
    max_line_length: int = DEFAULT_MAX_LINE_LENGTH

    @classmethod
    def from_values(cls, values: Mapping[str, str | None]) -> "SourceConfig":
        """Create SourceConfig from raw setting strings."""
        max_line = values.get("max_line_length")
        config = cls(
            address=Address.parse(values.get("connect") or DEFAULT_CONNECT),
            connect_timeout=parse_duration(values.get("connect_timeout") or DEFAULT_CONNECT_TIMEOUT),
            reconnect_interval=parse_duration(
                values.get("reconnect_interval") or DEFAULT_RECONNECT_INTERVAL
            ),
            max_line_length=int(max_line) if max_line else DEFAULT_MAX_LINE_LENGTH,
        )

        if config.connect_timeout <= 0:
            raise ValueError("connect timeout must be positive")
        if config.reconnect_interval < 0:
            raise ValueError("reconnect interval must not be negative")
        if config.max_line_length <= 0:
            raise ValueError("max line length must be positive")
        return config


@dataclass
class ExporterConfig:
    """Scrape endpoint settings."""
    listen: Address = field(default_factory=lambda: Address.parse(DEFAULT_LISTEN, "0.0.0.0"))

    @classmethod
    def from_values(cls, values: Mapping[str, str | None]) -> "ExporterConfig":
        """Create ExporterConfig from raw setting strings."""
        return cls(listen=Address.parse(values.get("listen") or DEFAULT_LISTEN, "0.0.0.0"))


@dataclass
class LoggingConfig:
    """Logging configuration."""
    level: str = "warning"  # debug, info, warning, error
    file: str | None = None  # Log file path
    colors: bool = True  # Colored console output

    @classmethod
    def from_values(cls, values: Mapping[str, str | None]) -> "LoggingConfig":
        """Create LoggingConfig from raw setting strings."""
        level = (values.get("log_level") or "warning").lower()
        if level not in {"debug", "info", "warning", "warn", "error", "critical"}:
            raise ValueError(f"unknown log level {level!r}")

        colors = values.get("log_colors")
        return cls(
            level=level,
            file=values.get("log_file") or None,
            colors=colors is None or colors.lower() not in {"0", "off", "false", "no"},
        )


@dataclass
class Config:
    """Complete application configuration."""
    source: SourceConfig = field(default_factory=SourceConfig)
    exporter: ExporterConfig = field(default_factory=ExporterConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)

    @classmethod
    def from_values(cls, values: Mapping[str, str | None]) -> "Config":
        """Create Config from a flat mapping of setting name to string."""
        return cls(
            source=SourceConfig.from_values(values),
            exporter=ExporterConfig.from_values(values),
            logging=LoggingConfig.from_values(values),
        )
