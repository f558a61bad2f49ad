"""Stream reader implementations for the supervisor system.

Two readers implement the StreamReader protocol:
- RawStreamReader: Readiness-checked raw byte reads on hosts with fork
- LineStreamReader: Line-buffered reads on hosts without fork, where
  pipes cannot be polled for readiness
"""

import os
import queue
import select
import threading
from typing import IO, final

DEFAULT_CHUNK_SIZE = 64 * 1024
DEFAULT_MAX_READ_BYTES = 1024 * 1024
DEFAULT_FINAL_WAIT = 1.0


@final
class RawStreamReader:
    """Reads raw bytes from a pipe once the OS reports it readable.

    Uses ``select`` on the pipe's file descriptor, so a read never blocks
    once readiness was reported. Ready chunks are consumed until the pipe
    is empty or ``max_bytes`` have been read, so a child that writes
    without pause cannot hold a single call forever.
    """

    __slots__ = ("_chunk_size", "_eof", "_fd", "_max_bytes", "_stream")

    def __init__(
        self,
        stream: IO[bytes],
        chunk_size: int = DEFAULT_CHUNK_SIZE,
        *,
        max_bytes: int = DEFAULT_MAX_READ_BYTES,
    ) -> None:
        """Initialize the reader.

        Args:
            stream: Binary pipe connected to a child output stream.
            chunk_size: Maximum bytes to read per system call.
            max_bytes: Soft limit on bytes returned by one read call.
        """
        self._stream = stream
        self._fd = stream.fileno()
        self._chunk_size = chunk_size
        self._max_bytes = max_bytes
        self._eof = False

    @property
    def exhausted(self) -> bool:
        """Return True once the pipe reported end of file."""
        return self._eof

    def read_available(self, timeout: float) -> bytes:
        """Wait up to ``timeout`` for data, then read everything ready."""
        if self._eof:
            return b""

        chunks: list[bytes] = []
        size = 0
        wait = timeout
        while size < self._max_bytes:
            ready, _, _ = select.select([self._fd], [], [], wait)
            if not ready:
                break
            chunk = os.read(self._fd, self._chunk_size)
            if not chunk:
                self._eof = True
                break
            chunks.append(chunk)
            size += len(chunk)
            wait = 0
        return b"".join(chunks)

    def read_remaining(self) -> bytes:
        """Read whatever is buffered in the pipe right now, up to max_bytes."""
        return self.read_available(0)

    def close(self) -> None:
        """Close the pipe."""
        self._stream.close()


@final
class LineStreamReader:
    """Reads a child output stream one line at a time.

    Pipes on hosts without fork cannot be polled for readiness, so a
    pump thread performs the blocking ``readline`` calls and hands each
    line over through a queue. ``read_available`` then waits on the
    queue, which keeps the drain loop responsive to its stop signal even
    while the writer holds the pipe open without producing a full line.
    """

    __slots__ = (
        "_eof",
        "_error",
        "_final_wait",
        "_lines",
        "_max_bytes",
        "_pump",
        "_stream",
    )

    def __init__(
        self,
        stream: IO[bytes],
        *,
        final_wait: float = DEFAULT_FINAL_WAIT,
        max_bytes: int = DEFAULT_MAX_READ_BYTES,
    ) -> None:
        """Initialize the reader and start its pump thread.

        Args:
            stream: Binary pipe connected to a child output stream.
            final_wait: Seconds ``read_remaining`` waits for the pump to
                reach end of file before returning what it has.
            max_bytes: Soft limit on bytes returned by one read call.
        """
        self._stream = stream
        self._final_wait = final_wait
        self._max_bytes = max_bytes
        self._eof = False
        self._error: OSError | ValueError | None = None
        self._lines: queue.Queue[bytes | None] = queue.Queue()
        self._pump = threading.Thread(
            target=self._pump_lines, name="tlb-line-reader", daemon=True
        )
        self._pump.start()

    def _pump_lines(self) -> None:
        try:
            for line in iter(self._stream.readline, b""):
                self._lines.put(line)
        except (OSError, ValueError) as e:
            self._error = e
        finally:
            self._stream.close()
            # None marks end of file
            self._lines.put(None)

    @property
    def exhausted(self) -> bool:
        """Return True once the stream reported end of file."""
        return self._eof

    def _take(self, first: bytes | None) -> bytes:
        chunks: list[bytes] = []
        size = 0
        item = first
        while True:
            if item is None:
                if chunks and self._error is not None:
                    # Report the failure on the next read
                    self._lines.put(None)
                    break
                self._eof = True
                if self._error is not None:
                    raise self._error
                break
            chunks.append(item)
            size += len(item)
            if size >= self._max_bytes:
                break
            try:
                item = self._lines.get_nowait()
            except queue.Empty:
                break
        return b"".join(chunks)

    def read_available(self, timeout: float) -> bytes:
        """Wait up to ``timeout`` for a line, then return every queued line."""
        if self._eof:
            return b""
        try:
            first = self._lines.get(timeout=timeout)
        except queue.Empty:
            return b""
        return self._take(first)

    def read_remaining(self) -> bytes:
        """Return queued lines, waiting briefly for the pump to reach EOF."""
        if self._eof:
            return b""
        self._pump.join(timeout=self._final_wait)
        chunks: list[bytes] = []
        size = 0
        while not self._eof and size < self._max_bytes:
            try:
                first = self._lines.get_nowait()
            except queue.Empty:
                break
            chunk = self._take(first)
            chunks.append(chunk)
            size += len(chunk)
        return b"".join(chunks)

    def close(self) -> None:
        """Close the stream once the pump has let go of it."""
        if not self._pump.is_alive():
            self._stream.close()
