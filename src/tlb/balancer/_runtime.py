"""Per-run handle tying the balancer client, supervisor and coordinator.

A BalancerRuntime is what test-framework adapters and build-tool tasks
hold for the duration of a run: it starts and stops the balancer server
and refuses protocol calls until the balancer reports it is ready.
"""

from collections.abc import Iterable, Sequence
from pathlib import Path
from typing import TYPE_CHECKING, Self, final

from tlb.config import BalancerConfig, load_config_from_env
from tlb.exceptions import BalancerNotRunningError
from tlb.supervisor import LaunchStrategy, ProcessSupervisor
from tlb.utils import create_logger, relative_file_paths

from ._client import BalancerClient
from ._coordinator import StartupCoordinator

if TYPE_CHECKING:
    from types import TracebackType

    import httpx
    from structlog.typing import FilteringBoundLogger

NOT_RUNNING_MESSAGE = "Balancer server must be started before tests are run."


@final
class BalancerRuntime:
    """Explicit handle for one test run's balancer.

    Attributes:
        config: Resolved, read-only configuration for this run.
        client: Protocol client for the configured endpoint.
        supervisor: Supervisor for a server process launched by this run.
    """

    __slots__ = (
        "_command",
        "_coordinator",
        "_logger",
        "client",
        "config",
        "supervisor",
    )

    def __init__(  # noqa: PLR0913
        self,
        config: BalancerConfig | None = None,
        *,
        command: str | Sequence[str] | None = None,
        strategy: LaunchStrategy | None = None,
        transport: "httpx.BaseTransport | None" = None,
        logger: "FilteringBoundLogger | None" = None,
    ) -> None:
        """Initialize the runtime.

        Args:
            config: Configuration. Loaded from TLB_* variables if None.
            command: Command line that starts the server. Defaults to
                running the configured server artifact with java.
            strategy: Launch strategy override for the supervisor.
            transport: httpx transport override for the client.
            logger: Logger for runtime events. Logs to stderr if None.
        """
        self.config = config if config is not None else load_config_from_env()
        self._logger = logger if logger is not None else create_logger("tlb")
        self.client = BalancerClient.from_config(
            self.config, transport=transport, logger=self._logger
        )
        self.supervisor = ProcessSupervisor.from_config(
            self.config, requester=self.client, strategy=strategy, logger=self._logger
        )
        self._command = command
        self._coordinator: StartupCoordinator | None = None

    def _server_command(self) -> str | Sequence[str] | None:
        if self._command is not None:
            return self._command
        if self.config.server_jar is not None:
            return self.config.server_command()
        return None

    def start_server(self) -> None:
        """Start the balancer unless it already runs, and wait until ready.

        Raises:
            LaunchError: If the server process cannot be started.
            StartupTimeoutError: If the balancer is not ready in time.
        """
        self._coordinator = StartupCoordinator(
            self.client,
            self.supervisor,
            self._server_command(),
            max_startup_time=self.config.startup_max_time,
            poll_interval=self.config.poll_interval,
            logger=self._logger,
        )
        self._coordinator.ensure_running()

    def stop_server(self) -> None:
        """Terminate the server process launched by this runtime, if any."""
        self.supervisor.terminate()

    def server_running(self) -> bool:
        """Return True if the balancer reports it is ready."""
        return self.client.is_running()

    def ensure_server_running(self) -> None:
        """Raise unless the balancer reports it is ready.

        Raises:
            BalancerNotRunningError: If the balancer is not ready.
        """
        if not self.server_running():
            raise BalancerNotRunningError(NOT_RUNNING_MESSAGE)

    def balance_and_order(
        self, file_set: Sequence[str], submodule: str | None = None
    ) -> list[str]:
        """Return this partition's files, in the order they should run.

        Raises:
            BalancerNotRunningError: If the balancer is not ready.
            ProtocolError: If the balancer rejects the request.
        """
        self.ensure_server_running()
        return self.client.balance(file_set, submodule)

    def suite_time(self, suite_name: str, millis: int) -> None:
        """Report a suite's run time in milliseconds."""
        self.ensure_server_running()
        self.client.report_suite_time(suite_name, millis)

    def suite_result(self, suite_name: str, result: str | bool) -> None:
        """Report a suite's failure flag."""
        self.ensure_server_running()
        self.client.report_suite_result(suite_name, result)

    def assert_all_partitions_executed(self, submodule: str | None = None) -> None:
        """Fail if any partition never claimed its files."""
        self.ensure_server_running()
        self.client.assert_all_partitions_executed(submodule)

    @staticmethod
    def relative_file_paths(
        file_names: Iterable[str | Path], cwd: Path | None = None
    ) -> list[str]:
        """Express file names relative to the working directory."""
        return relative_file_paths(file_names, cwd)

    def close(self) -> None:
        """Release the client's connections."""
        self.client.close()

    def __enter__(self) -> Self:
        try:
            self.start_server()
        except BaseException:
            self.close()
            raise
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: "TracebackType | None",
    ) -> None:
        try:
            self.stop_server()
        finally:
            self.close()
