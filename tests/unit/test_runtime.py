"""Tests for tlb.balancer._runtime."""

from collections.abc import Callable
from pathlib import Path

import httpx
import pytest

from tests.unit.conftest import RecordingBalancer
from tlb.balancer import NOT_RUNNING_MESSAGE, BalancerRuntime
from tlb.config import BalancerConfig
from tlb.exceptions import BalancerNotRunningError, LaunchError
from tlb.supervisor import SupervisorState
from tlb.utils import create_logger


@pytest.fixture
def runtime(tmp_path: Path, recording_balancer: RecordingBalancer) -> BalancerRuntime:
    config = BalancerConfig(
        out_file=tmp_path / "out", err_file=tmp_path / "err", startup_max_time=1
    )
    return BalancerRuntime(
        config,
        transport=httpx.MockTransport(recording_balancer),
        logger=create_logger("test", level="error"),
    )


class TestReadinessGuard:
    def test_balance_checks_status_first(
        self, runtime: BalancerRuntime, recording_balancer: RecordingBalancer
    ) -> None:
        recording_balancer.respond(
            "POST", "/balance", httpx.Response(200, text="./b_test.py")
        )

        assigned = runtime.balance_and_order(["./a_test.py", "./b_test.py"], "unit")

        assert assigned == ["./b_test.py"]
        assert recording_balancer.paths() == ["/control/status", "/balance"]

    @pytest.mark.parametrize(
        ("call", "path"),
        [
            (lambda r: r.balance_and_order(["./a_test.py"]), "/balance"),
            (lambda r: r.suite_time("suite", 10), "/suite_time"),
            (lambda r: r.suite_result("suite", "true"), "/suite_result"),
            (
                lambda r: r.assert_all_partitions_executed(),
                "/assert_all_partitions_executed",
            ),
        ],
    )
    def test_refuses_protocol_calls_until_ready(
        self,
        runtime: BalancerRuntime,
        recording_balancer: RecordingBalancer,
        call: Callable[[BalancerRuntime], object],
        path: str,
    ) -> None:
        recording_balancer.status_text = "STARTING"

        with pytest.raises(BalancerNotRunningError, match=NOT_RUNNING_MESSAGE):
            _ = call(runtime)

        assert path not in recording_balancer.paths()

    def test_reports_when_ready(
        self, runtime: BalancerRuntime, recording_balancer: RecordingBalancer
    ) -> None:
        runtime.suite_time("tests/test_a.py", 250)
        runtime.suite_result("tests/test_a.py", "false")

        contents = [r.content for r in recording_balancer.requests if r.method == "POST"]
        assert contents == [b"tests/test_a.py: 250", b"tests/test_a.py: false"]


class TestStartServer:
    def test_already_running_skips_launch(self, runtime: BalancerRuntime) -> None:
        runtime.start_server()

        assert runtime.supervisor.state == SupervisorState.IDLE
        assert runtime.supervisor.pid is None

    def test_not_running_without_command_fails(
        self, runtime: BalancerRuntime, recording_balancer: RecordingBalancer
    ) -> None:
        recording_balancer.status_text = "STARTING"

        with pytest.raises(LaunchError):
            runtime.start_server()

    def test_stop_without_launch_sends_nothing(
        self, runtime: BalancerRuntime, recording_balancer: RecordingBalancer
    ) -> None:
        runtime.stop_server()

        assert recording_balancer.requests == []
        assert runtime.supervisor.state == SupervisorState.IDLE

    def test_context_manager(
        self, runtime: BalancerRuntime, recording_balancer: RecordingBalancer
    ) -> None:
        with runtime as active:
            assert active.server_running() is True

        assert "/control/suicide" not in recording_balancer.paths()

    def test_failed_start_in_context_manager_closes_client(
        self, runtime: BalancerRuntime, recording_balancer: RecordingBalancer
    ) -> None:
        recording_balancer.status_text = "STARTING"

        with pytest.raises(LaunchError), runtime:
            pass

        with pytest.raises(RuntimeError, match="client has been closed"):
            _ = runtime.client.balance(["./a_test.py"])


class TestRelativeFilePaths:
    def test_delegates_to_path_helper(self, tmp_path: Path) -> None:
        files = [tmp_path / "tests" / "test_a.py", "tests/test_b.py"]
        assert BalancerRuntime.relative_file_paths(files, tmp_path) == [
            "./tests/test_a.py",
            "./tests/test_b.py",
        ]

