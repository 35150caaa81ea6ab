"""
Configuration loader layering command line over environment over defaults.
"""

import os
from collections.abc import Mapping
from typing import Any

from ..const import ENV_PREFIX
from .schema import Config


class ConfigError(Exception):
    """Exception raised for configuration errors."""

    pass


class ConfigLoader:
    """
    Builds a validated Config from settings sources.

    Usage:
        loader = ConfigLoader()
        config = loader.load(args)  # argparse.Namespace or mapping
        for warning in loader.validate(config):
            ...
    """

    # Setting name -> environment variable suffix
    SETTINGS = {
        "listen": "LISTEN",
        "connect": "CONNECT",
        "connect_timeout": "CONNECT_TIMEOUT",
        "reconnect_interval": "RECONNECT_INTERVAL",
        "max_line_length": "MAX_LINE_LENGTH",
        "log_level": "LOG_LEVEL",
        "log_file": "LOG_FILE",
        "log_colors": "LOG_COLORS",
    }

    def __init__(self, environ: Mapping[str, str] | None = None):
        self.environ = os.environ if environ is None else environ

    def collect(self, args: Any = None) -> dict[str, str | None]:
        """
        Merge setting values from the environment and parsed arguments.

        Arguments that are None (not given on the command line) fall back
        to the environment.
        """
        if args is None:
            overrides: Mapping[str, Any] = {}
        elif isinstance(args, Mapping):
            overrides = args
        else:
            overrides = vars(args)

        values: dict[str, str | None] = {}
        for name, env_suffix in self.SETTINGS.items():
            value = overrides.get(name)
            if value is None:
                value = self.environ.get(f"{ENV_PREFIX}{env_suffix}")
            values[name] = None if value is None else str(value)

        return values

    def load(self, args: Any = None) -> Config:
        """
        Load configuration.

        Args:
            args: argparse.Namespace or mapping of setting overrides

        Returns:
            Validated Config object

        Raises:
            ConfigError: If a setting has an invalid value
        """
        values = self.collect(args)

        try:
            return Config.from_values(values)
        except ValueError as e:
            raise ConfigError(f"Invalid configuration: {e}") from e

    def validate(self, config: Config) -> list[str]:
        """
        Check a configuration for suspicious but legal settings.

        Returns:
            List of warning messages (empty if no issues)
        """
        warnings = []
        source = config.source
        listen = config.exporter.listen

        if source.reconnect_interval == 0:
            warnings.append("Reconnect interval is 0; a down source will be retried in a tight loop")

        if source.reconnect_interval > source.connect_timeout:
            warnings.append(
                f"Reconnect interval ({source.reconnect_interval}s) is longer than "
                f"connect timeout ({source.connect_timeout}s)"
            )

        loopback = {"localhost", "127.0.0.1", "::1", "0.0.0.0", "::"}
        if (
            source.address.host in loopback
            and listen.host in loopback
            and source.address.port == listen.port
        ):
            warnings.append(
                f"Sensor source {source.address} is the metrics listener itself ({listen})"
            )

        if source.max_line_length < 128:
            warnings.append(
                f"Max line length {source.max_line_length} is shorter than a typical sample line"
            )

        return warnings


def load_config(args: Any = None) -> Config:
    """
    Convenience function to load configuration from arguments and environment.

    Args:
        args: argparse.Namespace or mapping of setting overrides

    Returns:
        Validated Config object
    """
    return ConfigLoader().load(args)
