import subprocess
import sys
from collections.abc import Iterator
from pathlib import Path

import pytest

from tests.conftest import wait_until
from tlb.balancer import BalancerClient
from tlb.config import BalancerConfig

STUB_BALANCER = Path(__file__).parent / "stubs" / "stub_balancer.py"
UNCLAIMED_PARTITION_BODY = "Partition 2 of module 'unit' was never claimed"


def pytest_collection_modifyitems(items: list[pytest.Item]) -> None:
    for item in items:
        if Path(item.path).is_relative_to(Path(__file__).parent):
            item.add_marker(pytest.mark.integration)


def stub_command(port: int, *extra: str) -> list[str]:
    """Command line starting the stub balancer on ``port``."""
    return [sys.executable, str(STUB_BALANCER), "--port", str(port), *extra]


def python_command(code: str) -> list[str]:
    """Command line running a short Python program."""
    return [sys.executable, "-c", code]


@pytest.fixture
def external_balancer(balancer_config: BalancerConfig) -> Iterator[BalancerConfig]:
    """Run a stub balancer that this test's runtime did not launch."""
    process = subprocess.Popen(
        stub_command(balancer_config.port),
        stdout=subprocess.DEVNULL,
        stderr=subprocess.DEVNULL,
    )
    with BalancerClient.from_config(balancer_config) as client:
        assert wait_until(client.is_running, timeout=10.0)
    try:
        yield balancer_config
    finally:
        process.terminate()
        _ = process.wait(timeout=10)
