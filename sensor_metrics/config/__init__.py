"""
Configuration from command line arguments and environment variables.
"""

from .loader import ConfigError, ConfigLoader, load_config
from .schema import Address, Config, parse_duration

__all__ = [
    "Address",
    "Config",
    "ConfigError",
    "ConfigLoader",
    "load_config",
    "parse_duration",
]
