"""
Tests for the scrape endpoint and application wiring.
"""

import asyncio
import socket
import urllib.request

import pytest

from conftest import FeedServer, wait_until
from sensor_metrics.app import Application
from sensor_metrics.config.schema import Address, Config, ExporterConfig
from sensor_metrics.metrics.registry import MetricRegistry
from sensor_metrics.metrics.server import MetricsServer, MetricsServerError
from sensor_metrics.models.sample import LabelSet


def fetch(port: int, path: str = "/metrics") -> str:
    with urllib.request.urlopen(f"http://127.0.0.1:{port}{path}", timeout=5) as response:
        return response.read().decode()


def test_serves_registry(metrics: MetricRegistry) -> None:
    metrics.bytes_received.inc(42)
    server = MetricsServer(metrics, host="127.0.0.1", port=0)
    server.start()
    try:
        body = fetch(server.bound_port)
    finally:
        server.stop()

    assert "sensors_bytes_received_total 42.0" in body
    assert "# TYPE sensors_temperature_degrees_celsius gauge" in body
    assert not server.running


def test_bind_failure_is_fatal(metrics: MetricRegistry) -> None:
    with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as sock:
        sock.bind(("127.0.0.1", 0))
        sock.listen()
        port = sock.getsockname()[1]

        server = MetricsServer(metrics, host="127.0.0.1", port=port)
        with pytest.raises(MetricsServerError):
            server.start()

    assert not server.running


def test_stop_without_start_is_noop(metrics: MetricRegistry) -> None:
    MetricsServer(metrics, host="127.0.0.1", port=0).stop()


def test_application_exports_feed(source_config) -> None:
    labels = LabelSet(id="0428abcd1234", device="ds18b20-0028abcd1234", model="ds18b20")

    async def scenario() -> str:
        async with FeedServer([b"123 temp 0428abcd1234 DS18B20 98.6\n"]) as feed:
            config = Config(
                source=source_config(feed.port),
                exporter=ExporterConfig(listen=Address("127.0.0.1", 0)),
            )
            app = Application(config)
            runner = asyncio.create_task(app.run())

            await wait_until(
                lambda: app.metrics.value("temperature_degrees_celsius", labels) == 37.0
            )
            loop = asyncio.get_running_loop()
            body = await loop.run_in_executor(None, fetch, app.server.bound_port)

            app.request_shutdown()
            await asyncio.wait_for(runner, timeout=5)

            assert not app.server.running
            return body

    body = asyncio.run(scenario())

    assert "sensors_temperature_degrees_celsius" in body
    assert 'id="0428abcd1234"' in body
    assert "sensors_connection_attempts_total" in body
