"""Tests for tlb.supervisor._readers."""

import os
import time
from collections.abc import Iterator
from typing import IO

import pytest

from tlb.supervisor import LineStreamReader, RawStreamReader, StreamReader


@pytest.fixture
def pipe() -> Iterator[tuple[IO[bytes], IO[bytes]]]:
    read_fd, write_fd = os.pipe()
    reader = os.fdopen(read_fd, "rb", buffering=0)
    writer = os.fdopen(write_fd, "wb", buffering=0)
    try:
        yield reader, writer
    finally:
        for stream in (writer, reader):
            if not stream.closed:
                stream.close()


class TestRawStreamReader:
    def test_implements_protocol(self, pipe: tuple[IO[bytes], IO[bytes]]) -> None:
        assert isinstance(RawStreamReader(pipe[0]), StreamReader)

    def test_nothing_available(self, pipe: tuple[IO[bytes], IO[bytes]]) -> None:
        reader = RawStreamReader(pipe[0])
        assert reader.read_available(0.01) == b""
        assert reader.exhausted is False

    def test_reads_everything_ready(self, pipe: tuple[IO[bytes], IO[bytes]]) -> None:
        out, writer = pipe
        reader = RawStreamReader(out, chunk_size=4)
        _ = writer.write(b"partial line without newline")

        assert reader.read_available(1.0) == b"partial line without newline"

    def test_end_of_file(self, pipe: tuple[IO[bytes], IO[bytes]]) -> None:
        out, writer = pipe
        reader = RawStreamReader(out)
        _ = writer.write(b"last words")
        writer.close()

        assert reader.read_remaining() == b"last words"
        assert reader.exhausted is True
        assert reader.read_available(0.01) == b""

    def test_single_call_is_bounded(self, pipe: tuple[IO[bytes], IO[bytes]]) -> None:
        out, writer = pipe
        reader = RawStreamReader(out, chunk_size=4, max_bytes=8)
        _ = writer.write(b"0123456789abcdef")

        assert reader.read_available(1.0) == b"01234567"
        assert reader.read_available(1.0) == b"89abcdef"


class TestLineStreamReader:
    def test_implements_protocol(self, pipe: tuple[IO[bytes], IO[bytes]]) -> None:
        assert isinstance(LineStreamReader(pipe[0]), StreamReader)

    def test_reads_complete_lines(self, pipe: tuple[IO[bytes], IO[bytes]]) -> None:
        out, writer = pipe
        reader = LineStreamReader(out)
        _ = writer.write(b"first\nsecond\n")

        received = b""
        deadline = time.monotonic() + 5.0
        while received != b"first\nsecond\n" and time.monotonic() < deadline:
            received += reader.read_available(0.1)
        assert received == b"first\nsecond\n"

    def test_partial_line_does_not_block(
        self, pipe: tuple[IO[bytes], IO[bytes]]
    ) -> None:
        out, writer = pipe
        reader = LineStreamReader(out, final_wait=0.05)
        _ = writer.write(b"no newline yet")

        started = time.monotonic()
        assert reader.read_available(0.05) == b""
        assert reader.read_remaining() == b""
        assert time.monotonic() - started < 2.0
        assert reader.exhausted is False

    def test_read_remaining_reaches_end_of_file(
        self, pipe: tuple[IO[bytes], IO[bytes]]
    ) -> None:
        out, writer = pipe
        reader = LineStreamReader(out)
        _ = writer.write(b"one\ntwo\nno newline")
        writer.close()

        assert reader.read_remaining() == b"one\ntwo\nno newline"
        assert reader.exhausted is True
        assert reader.read_available(0.1) == b""
