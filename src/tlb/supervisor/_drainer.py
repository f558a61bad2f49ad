"""Stream drainer for balancer server output.

A StreamDrainer copies one child output stream into an append-only sink
file from a dedicated worker thread, so the child never blocks on a full
pipe. Stopping is cooperative: the stop event ends the copy loop, one
final pass captures data that arrived concurrently with the stop, and
``stop()`` joins the worker before returning.
"""

import concurrent.futures
import threading
from pathlib import Path
from typing import IO, TYPE_CHECKING, final

from tlb.exceptions import DrainError

from ._models import DrainerState
from ._protocol import StreamReader

if TYPE_CHECKING:
    from structlog.typing import FilteringBoundLogger

DEFAULT_DRAIN_INTERVAL = 0.1


@final
class StreamDrainer:
    """Copies a child output stream into a sink file in the background.

    The sink is opened in append mode when the drainer starts and is
    written only by the drainer's worker until the worker finishes.

    Attributes:
        stream: Name of the drained stream, used in logs and errors.
    """

    __slots__ = (
        "_bytes_written",
        "_executor",
        "_future",
        "_interval",
        "_logger",
        "_sink",
        "_sink_file",
        "_source",
        "_state",
        "_stop_requested",
        "stream",
    )

    def __init__(
        self,
        stream: str,
        *,
        interval: float = DEFAULT_DRAIN_INTERVAL,
        logger: "FilteringBoundLogger | None" = None,
    ) -> None:
        """Initialize the drainer.

        Args:
            stream: Name of the stream to drain (e.g. "stdout").
            interval: Upper bound in seconds between data becoming
                available and it being written to the sink.
            logger: Logger for lifecycle events. Silent if None.
        """
        self.stream = stream
        self._interval = interval
        self._logger = logger
        self._state = DrainerState.CREATED
        self._stop_requested = threading.Event()
        self._source: StreamReader | None = None
        self._sink: Path | None = None
        self._sink_file: IO[bytes] | None = None
        self._executor: concurrent.futures.ThreadPoolExecutor | None = None
        self._future: concurrent.futures.Future[None] | None = None
        self._bytes_written = 0

    @property
    def state(self) -> DrainerState:
        """Return the current lifecycle state."""
        return self._state

    @property
    def sink(self) -> Path | None:
        """Return the sink file path once started."""
        return self._sink

    @property
    def bytes_written(self) -> int:
        """Return the number of bytes appended to the sink so far."""
        return self._bytes_written

    def start(self, source: StreamReader, sink: Path) -> None:
        """Begin draining ``source`` into ``sink`` without blocking.

        Args:
            source: Reader for the child output stream. Not owned.
            sink: File to append drained output to.

        Raises:
            RuntimeError: If the drainer was already started.
            OSError: If the sink file cannot be opened.
        """
        if self._state != DrainerState.CREATED:
            msg = f"Drainer for {self.stream} was already started"
            raise RuntimeError(msg)

        sink.parent.mkdir(parents=True, exist_ok=True)
        self._sink_file = sink.open("ab")
        self._sink = sink
        self._source = source
        self._executor = concurrent.futures.ThreadPoolExecutor(
            max_workers=1, thread_name_prefix=f"tlb-drain-{self.stream}"
        )
        self._future = self._executor.submit(self._run)
        self._state = DrainerState.RUNNING

        if self._logger is not None:
            self._logger.debug("drainer_started", stream=self.stream, sink=str(sink))

    def _write(self, data: bytes) -> None:
        if not data or self._sink_file is None:
            return
        _ = self._sink_file.write(data)
        self._sink_file.flush()
        self._bytes_written += len(data)

    def _run(self) -> None:
        source = self._source
        if source is None:  # pragma: no cover - set before submit
            return
        try:
            while not self._stop_requested.is_set() and not source.exhausted:
                self._write(source.read_available(self._interval))
            # Data may have arrived between the last read and the stop signal
            self._write(source.read_remaining())
        finally:
            if self._sink_file is not None:
                self._sink_file.close()

    def stop(self) -> None:
        """Request the drain loop to end and wait until it has finished.

        Performs a final drain pass before returning. No write reaches the
        sink after this method returns.

        Raises:
            DrainError: If the background loop failed. The drainer is
                stopped regardless.
        """
        if self._state == DrainerState.STOPPED:
            return
        if self._state == DrainerState.CREATED:
            self._state = DrainerState.STOPPED
            return

        self._state = DrainerState.STOPPING
        self._stop_requested.set()

        failure: BaseException | None = None
        try:
            if self._future is not None:
                failure = self._future.exception()
        finally:
            if self._executor is not None:
                self._executor.shutdown(wait=True)
            self._state = DrainerState.STOPPED

        if self._logger is not None:
            self._logger.debug(
                "drainer_stopped",
                stream=self.stream,
                bytes_written=self._bytes_written,
            )

        if failure is not None:
            msg = f"Draining {self.stream} failed: {failure}"
            raise DrainError(msg, stream=self.stream, cause=failure) from failure
