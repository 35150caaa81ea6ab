"""
Main application orchestrator.

Handles:
- Metric registry ownership
- Scrape endpoint lifecycle
- The sensor feed ingestion task
- Shutdown on SIGTERM/SIGINT
"""

import asyncio
import signal

from .config.schema import Config
from .logging import get_logger
from .metrics.registry import MetricRegistry
from .metrics.server import MetricsServer
from .source.client import SensorSourceClient


logger = get_logger("app")


class Application:
    """
    Main application class.

    Owns the MetricRegistry and hands it to both the feed client, which
    writes it, and the metrics server, which reads it.
    """

    def __init__(self, config: Config, metrics: MetricRegistry | None = None):
        """
        Initialize application.

        Args:
            config: Application configuration
            metrics: Registry to use (a fresh one if None)
        """
        self.config = config
        self.metrics = metrics if metrics is not None else MetricRegistry()

        listen = config.exporter.listen
        self.server = MetricsServer(self.metrics, host=listen.host, port=listen.port)
        self.client = SensorSourceClient(config.source, self.metrics)

        self._ingest_task: asyncio.Task | None = None
        self._shutdown_event = asyncio.Event()

    def _setup_signal_handlers(self) -> None:
        """Setup signal handlers for shutdown."""
        loop = asyncio.get_running_loop()

        for sig in (signal.SIGTERM, signal.SIGINT):
            try:
                loop.add_signal_handler(sig, self._signal_handler)
            except (NotImplementedError, RuntimeError):
                # Not available off the main thread or on some platforms
                logger.debug(f"Cannot install handler for {sig.name}")

    def _signal_handler(self) -> None:
        """Handle shutdown signals."""
        logger.info("Received shutdown signal")
        self.request_shutdown()

    def request_shutdown(self) -> None:
        self._shutdown_event.set()

    async def start(self) -> None:
        """
        Start serving metrics and ingesting the feed.

        Raises:
            MetricsServerError: If the scrape listener cannot bind
        """
        logger.info(f"Starting sensor metrics exporter for {self.config.source.address}")

        # Binding failure is fatal; nothing else has started yet
        self.server.start()

        self._ingest_task = asyncio.create_task(self.client.run_forever())

    async def stop(self) -> None:
        """Stop ingestion and the scrape endpoint."""
        logger.info("Stopping sensor metrics exporter")

        if self._ingest_task is not None:
            self._ingest_task.cancel()
            try:
                await self._ingest_task
            except asyncio.CancelledError:
                pass
            self._ingest_task = None

        self.server.stop()
        logger.info("Sensor metrics exporter stopped")

    async def run(self) -> None:
        """Run until a shutdown signal arrives."""
        await self.start()
        self._setup_signal_handlers()

        try:
            await self._shutdown_event.wait()
        finally:
            await self.stop()


async def run_app(config: Config) -> None:
    """
    Create and run the application.

    Args:
        config: Loaded configuration
    """
    logger.debug(f"Source: {config.source.address}, listen: {config.exporter.listen}")
    logger.debug(
        f"Connect timeout {config.source.connect_timeout}s, "
        f"reconnect interval {config.source.reconnect_interval}s"
    )

    app = Application(config)
    await app.run()
