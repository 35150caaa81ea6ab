"""
Entry point for Sensor Metrics.

Usage:
    python -m sensor_metrics --connect 192.168.3.41:9456 --listen :9456
    python -m sensor_metrics --help
"""

import argparse
import asyncio
import sys

from . import __version__
from .app import run_app
from .config.loader import ConfigError, ConfigLoader
from .config.schema import Config
from .logging import LogConfig, get_logger, setup_logging
from .metrics.server import MetricsServerError


logger = get_logger("main")


def build_parser() -> argparse.ArgumentParser:
    """Create the command line parser. Unset options fall back to the environment."""
    parser = argparse.ArgumentParser(
        prog="sensor-metrics",
        description="Prometheus exporter for a line-oriented sensor telemetry feed",
    )

    parser.add_argument(
        "--listen",
        metavar="[HOST]:PORT",
        help="(Host and) port to listen on for Prometheus export (default: :9456)",
    )
    parser.add_argument(
        "--connect",
        metavar="HOST:PORT",
        help="Host/port to connect to for sensor readings (default: 192.168.3.41:9456)",
    )
    parser.add_argument(
        "--connect-timeout",
        metavar="DURATION",
        help="Connection deadline, e.g. 30s (default: 30s)",
    )
    parser.add_argument(
        "--reconnect-interval",
        metavar="DURATION",
        help="Fixed wait between connection attempts (default: 5s)",
    )
    parser.add_argument(
        "--max-line-length",
        metavar="BYTES",
        type=int,
        help="Longest accepted feed line before the connection is dropped (default: 65536)",
    )

    parser.add_argument(
        "-v", "--verbose",
        action="store_const",
        dest="log_level",
        const="info",
        help="Enable verbose logging (INFO level)",
    )
    parser.add_argument(
        "-d", "--debug",
        action="store_const",
        dest="log_level",
        const="debug",
        help="Enable debug logging (DEBUG level)",
    )
    parser.add_argument(
        "-q", "--quiet",
        action="store_const",
        dest="log_level",
        const="error",
        help="Quiet mode (only errors)",
    )
    parser.add_argument(
        "--log-file",
        metavar="PATH",
        help="Write logs to file",
    )
    parser.add_argument(
        "--no-color",
        action="store_const",
        dest="log_colors",
        const="off",
        help="Disable colored output",
    )

    parser.add_argument(
        "--validate",
        action="store_true",
        help="Validate configuration and exit",
    )
    parser.add_argument(
        "--version",
        action="version",
        version=f"%(prog)s {__version__}",
    )

    return parser


def log_config_for(config: Config) -> LogConfig:
    """Translate the logging section into handler settings."""
    return LogConfig(
        console_level=config.logging.level,
        console_colors=config.logging.colors,
        file_enabled=config.logging.file is not None,
        file_path=config.logging.file or LogConfig.file_path,
    )


def print_summary(config: Config, warnings: list[str]) -> None:
    """Print the effective configuration."""
    if warnings:
        print(f"Configuration warnings ({len(warnings)}):")
        for warning in warnings:
            print(f"  - {warning}")

    print("\nConfiguration summary:")
    print(f"  Sensor source: {config.source.address}")
    print(f"  Connect timeout: {config.source.connect_timeout}s")
    print(f"  Reconnect interval: {config.source.reconnect_interval}s")
    print(f"  Max line length: {config.source.max_line_length} bytes")
    print(f"  Metrics endpoint: http://{config.exporter.listen}/metrics")
    print(f"  Logging level: {config.logging.level}")
    if config.logging.file:
        print(f"  Log file: {config.logging.file}")

    print("\nConfiguration is valid!")


def main(argv: list[str] | None = None) -> int:
    """Main entry point."""
    args = build_parser().parse_args(argv)

    loader = ConfigLoader()
    try:
        config = loader.load(args)
    except ConfigError as e:
        print(f"Configuration error: {e}", file=sys.stderr)
        return 1

    warnings = loader.validate(config)

    if args.validate:
        print_summary(config, warnings)
        return 0

    setup_logging(log_config_for(config))
    for warning in warnings:
        logger.warning(f"Config warning: {warning}")

    try:
        asyncio.run(run_app(config))
        return 0
    except MetricsServerError as e:
        logger.critical(f"Fatal error: {e}")
        return 1
    except KeyboardInterrupt:
        logger.info("Interrupted by user")
        return 0


if __name__ == "__main__":
    sys.exit(main())
