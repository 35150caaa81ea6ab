"""
HTTP scrape endpoint.

prometheus_client serves the registry from a daemon thread, independent of
the asyncio loop running the ingestion task.
"""

import threading
from wsgiref.simple_server import WSGIServer

from prometheus_client import start_http_server

from ..logging import get_logger
from .registry import MetricRegistry


logger = get_logger("metrics.server")


class MetricsServerError(OSError):
    """Raised when the scrape listener cannot be started."""


class MetricsServer:
    """Serves ``/metrics`` for a MetricRegistry."""

    def __init__(self, registry: MetricRegistry, host: str = "0.0.0.0", port: int = 9456):
        self.registry = registry
        self.host = host
        self.port = port
        self._server: WSGIServer | None = None
        self._thread: threading.Thread | None = None

    @property
    def running(self) -> bool:
        return self._server is not None

    @property
    def bound_port(self) -> int:
        """Port actually bound (useful when configured with port 0)."""
        if self._server is None:
            return self.port
        return self._server.server_address[1]

    def start(self) -> None:
        """
        Bind the listener and start serving.

        Raises:
            MetricsServerError: If the address cannot be bound
        """
        try:
            self._server, self._thread = start_http_server(
                self.port,
                addr=self.host,
                registry=self.registry.registry,
            )
        except OSError as e:
            raise MetricsServerError(f"Cannot listen on {self.host}:{self.port}: {e}") from e

        logger.info(f"Serving metrics on http://{self.host}:{self.bound_port}/metrics")

    def stop(self) -> None:
        """Shut down the listener and wait for the serving thread."""
        if self._server is None:
            return

        self._server.shutdown()
        self._server.server_close()
        if self._thread is not None:
            self._thread.join(timeout=5.0)

        self._server = None
        self._thread = None
        logger.info("Metrics server stopped")
