"""Shared test fixtures for TLB tests."""

import socket
import time
from collections.abc import Callable
from pathlib import Path

import pytest

from tlb.config import BalancerConfig


def wait_until(
    predicate: Callable[[], bool], timeout: float = 5.0, interval: float = 0.02
) -> bool:
    """Poll ``predicate`` until it holds or ``timeout`` elapses."""
    deadline = time.monotonic() + timeout
    while time.monotonic() < deadline:
        if predicate():
            return True
        time.sleep(interval)
    return predicate()


@pytest.fixture
def free_port() -> int:
    """Return a TCP port that nothing is listening on."""
    with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as s:
        s.bind(("127.0.0.1", 0))
        return int(s.getsockname()[1])


@pytest.fixture
def balancer_config(tmp_path: Path, free_port: int) -> BalancerConfig:
    """Configuration pointing at a free port with sinks under tmp_path."""
    return BalancerConfig(
        host="127.0.0.1",
        port=free_port,
        startup_max_time=10,
        out_file=tmp_path / "tlb_out_file",
        err_file=tmp_path / "tlb_err_file",
        poll_interval=0.05,
        request_timeout=2.0,
        shutdown_timeout=5.0,
    )
