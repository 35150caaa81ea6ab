"""
Reconnecting client for the sensor feed.

Features:
- Connect with a deadline, retry after a fixed backoff
- Newline-delimited reading with a bounded line length
- Per-connection tracking of which devices have reported
- Never gives up on link errors; only cancellation stops the loop
"""

import asyncio
from dataclasses import dataclass, field

from ..config.schema import SourceConfig
from ..logging import get_logger
from ..metrics.registry import MetricRegistry
from ..models.sample import Sample
from ..parsing.classifier import classify_line


logger = get_logger("source.client")


class LineTooLong(ConnectionError):
    """Raised when the source sends a line longer than the configured limit."""


@dataclass
class ConnectionSession:
    """State for one connected period of the feed."""
    number: int
    seen: set[str] = field(default_factory=set)
    lines: int = 0

    def first_sighting(self, key: str) -> bool:
        """Record a device as seen; True only the first time in this session."""
        if key in self.seen:
            return False
        self.seen.add(key)
        return True


def _describe(error: BaseException) -> str:
    return str(error) or type(error).__name__


class SensorSourceClient:
    """
    Ingests sample lines from a TCP sensor feed into a MetricRegistry.

    Run ``run_forever()`` as a single background task. Connection numbers
    start at 1 and increase by one for every successful connect.
    """

    def __init__(self, config: SourceConfig, metrics: MetricRegistry):
        """
        Initialize the client.

        Args:
            config: Source address, deadline, backoff and line limit
            metrics: Registry receiving samples and counters
        """
        self.config = config
        self.metrics = metrics
        self.address = config.address

        self._connection_number = 0
        self._session: ConnectionSession | None = None

    @property
    def connection_number(self) -> int:
        """Number of the current (or most recent) connection, 0 before the first."""
        return self._connection_number

    @property
    def session(self) -> ConnectionSession | None:
        """The active session, or None while disconnected."""
        return self._session

    @property
    def connected(self) -> bool:
        return self._session is not None

    async def _open(self) -> tuple[asyncio.StreamReader, asyncio.StreamWriter]:
        return await asyncio.wait_for(
            asyncio.open_connection(
                self.address.host,
                self.address.port,
                limit=self.config.max_line_length,
            ),
            timeout=self.config.connect_timeout,
        )

    async def _close(self, writer: asyncio.StreamWriter) -> None:
        writer.close()
        try:
            await writer.wait_closed()
        except OSError as e:
            logger.debug(f"Error closing connection to {self.address}: {_describe(e)}")

    def _begin_session(self) -> ConnectionSession:
        self._connection_number += 1
        self._session = ConnectionSession(number=self._connection_number)
        logger.info(f"Connected to {self.address} (connection {self._connection_number})")
        return self._session

    async def _readline(self, reader: asyncio.StreamReader) -> bytes | None:
        """
        Read one line including its delimiter.

        Returns:
            The line, a final unterminated line, or None at end of stream
        """
        try:
            return await reader.readuntil(b"\n")
        except asyncio.IncompleteReadError as e:
            return e.partial or None
        except asyncio.LimitOverrunError as e:
            raise LineTooLong(
                f"line exceeds {self.config.max_line_length} bytes"
            ) from e

    async def _read_lines(self, reader: asyncio.StreamReader, session: ConnectionSession) -> None:
        while True:
            raw = await self._readline(reader)
            if raw is None:
                return

            if raw.endswith(b"\n"):
                raw = raw[:-1]
            if raw.endswith(b"\r"):
                raw = raw[:-1]

            self.metrics.bytes_received.inc(len(raw) + 1)
            session.lines += 1
            self.handle_line(raw.decode("utf-8", errors="replace"), session)

    def handle_line(self, line: str, session: ConnectionSession) -> Sample | None:
        """
        Classify a line and record it if it is a sample.

        Args:
            line: Line text without its delimiter
            session: Session the line arrived on

        Returns:
            The recognized Sample, or None for non-sample lines
        """
        sample = classify_line(line)
        if sample is None:
            logger.debug(f"Ignoring unrecognized line {line!r}")
            return None

        self.metrics.samples_received.inc()

        if session.first_sighting(sample.seen_key):
            logger.info(f"Got first sample from {sample.seen_key} in connection {session.number}")

        self.metrics.record(sample)
        return sample

    async def run_once(self) -> None:
        """
        Make one connection attempt and read until the link drops.

        Link errors are logged and counted, never raised.
        """
        self.metrics.connection_attempts.inc()

        try:
            reader, writer = await self._open()
        except (OSError, asyncio.TimeoutError) as e:
            self.metrics.connection_errors.inc()
            logger.error(f"Error connecting to {self.address}: {_describe(e)}")
            return

        session = self._begin_session()
        try:
            await self._read_lines(reader, session)
            logger.warning(
                f"Connection {session.number} to {self.address} closed by peer "
                f"after {session.lines} lines"
            )
        except OSError as e:
            logger.warning(
                f"Read failed from {self.address} (connection {session.number}): {_describe(e)}"
            )
        finally:
            self._session = None
            await self._close(writer)

    async def run_forever(self) -> None:
        """Connect, read and reconnect until cancelled."""
        logger.info(f"Starting sensor feed client for {self.address}")

        while True:
            try:
                await self.run_once()
            except Exception as e:
                logger.exception(f"Unexpected error in sensor feed client: {e}")

            await asyncio.sleep(self.config.reconnect_interval)
