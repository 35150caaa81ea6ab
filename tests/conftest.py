"""
Pytest configuration and fixtures.
"""

import asyncio
import logging
import os
import socket
from collections.abc import Callable

import pytest

from sensor_metrics.config.schema import Address, SourceConfig
from sensor_metrics.logging import ROOT_LOGGER
from sensor_metrics.metrics.registry import MetricRegistry


@pytest.fixture(autouse=True)
def clean_environment(monkeypatch: pytest.MonkeyPatch) -> None:
    """Keep SENSOR_METRICS_* variables from the outer environment out of tests."""
    for name in list(os.environ):
        if name.startswith("SENSOR_METRICS_"):
            monkeypatch.delenv(name)


@pytest.fixture(autouse=True)
def reset_logging():
    """Drop handlers installed by setup_logging so they don't outlive the test."""
    yield
    logger = logging.getLogger(ROOT_LOGGER)
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()
    logger.setLevel(logging.NOTSET)
    for name in list(logging.root.manager.loggerDict):
        if name.startswith(f"{ROOT_LOGGER}."):
            logging.getLogger(name).setLevel(logging.NOTSET)


@pytest.fixture
def metrics() -> MetricRegistry:
    """A fresh registry, isolated from the global prometheus_client one."""
    return MetricRegistry()


@pytest.fixture
def source_config() -> Callable[..., SourceConfig]:
    """Factory for fast-retrying source configs pointing at localhost."""

    def make(port: int, **overrides) -> SourceConfig:
        settings = {
            "address": Address("127.0.0.1", port),
            "connect_timeout": 2.0,
            "reconnect_interval": 0.01,
        }
        settings.update(overrides)
        return SourceConfig(**settings)

    return make


@pytest.fixture
def unused_port() -> int:
    """A localhost port with nothing listening on it."""
    with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as sock:
        sock.bind(("127.0.0.1", 0))
        return sock.getsockname()[1]


class FeedServer:
    """
    Loopback stand-in for the sensor source.

    Each accepted connection is sent the next payload from ``payloads`` and
    then closed. Once the payloads run out, connections are held open
    until the client goes away.
    """

    def __init__(self, payloads: list[bytes]):
        self.payloads = list(payloads)
        self.accepted = 0
        self.port = 0
        self._server: asyncio.AbstractServer | None = None

    async def __aenter__(self) -> "FeedServer":
        self._server = await asyncio.start_server(self._handle, "127.0.0.1", 0)
        self.port = self._server.sockets[0].getsockname()[1]
        return self

    async def __aexit__(self, *exc_info) -> None:
        self._server.close()

    async def _handle(self, reader: asyncio.StreamReader, writer: asyncio.StreamWriter) -> None:
        index = self.accepted
        self.accepted += 1
        try:
            if index < len(self.payloads):
                writer.write(self.payloads[index])
                await writer.drain()
            else:
                await reader.read()
        except ConnectionError:
            pass
        finally:
            writer.close()


async def wait_until(predicate: Callable[[], bool], timeout: float = 5.0) -> None:
    """Poll until predicate() is true, failing the test after timeout seconds."""
    loop = asyncio.get_running_loop()
    deadline = loop.time() + timeout
    while not predicate():
        if loop.time() > deadline:
            raise AssertionError("condition not met before timeout")
        await asyncio.sleep(0.01)


async def cancel(task: asyncio.Task) -> None:
    """Cancel a task and wait for it to finish."""
    task.cancel()
    try:
        await task
    except asyncio.CancelledError:
        pass
