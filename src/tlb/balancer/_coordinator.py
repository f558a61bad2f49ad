"""Startup coordination for the balancer server.

The StartupCoordinator launches the balancer through a ProcessSupervisor
and polls the status endpoint until the balancer reports RUNNING or the
startup bound elapses.
"""

from collections.abc import Sequence
from enum import StrEnum
from typing import TYPE_CHECKING, final

from tenacity import RetryError, Retrying, retry_if_result, stop_after_delay, wait_fixed

from tlb.exceptions import LaunchError, StartupTimeoutError

if TYPE_CHECKING:
    from structlog.typing import FilteringBoundLogger

    from tlb.supervisor import ProcessSupervisor

    from ._client import BalancerClient

DEFAULT_POLL_INTERVAL = 0.1


class CoordinatorState(StrEnum):
    """Startup coordinator states.

    - NOT_STARTED: ensure_running() has not been called
    - LAUNCHING: The server process is being started
    - POLLING: Waiting for the status endpoint to report RUNNING
    - READY: The balancer accepts requests
    - TIMED_OUT: The balancer never became ready; terminal
    - FAILED: The server process could not be launched; terminal
    """

    NOT_STARTED = "not_started"
    LAUNCHING = "launching"
    POLLING = "polling"
    READY = "ready"
    TIMED_OUT = "timed_out"
    FAILED = "failed"


def _startup_timeout_message(timeout: float) -> str:
    return (
        f"TLB server failed to start in {timeout:g} seconds. This usually happens "
        "when TLB configuration (environment variables) is incorrect. Please "
        "check your environment variable configuration."
    )


@final
class StartupCoordinator:
    """Brings the balancer to a ready state within a bounded time.

    A coordinator runs its state machine once. After TIMED_OUT or FAILED
    a fresh coordinator is needed to try again.
    """

    __slots__ = (
        "_client",
        "_command",
        "_logger",
        "_max_startup_time",
        "_poll_interval",
        "_state",
        "_supervisor",
    )

    def __init__(  # noqa: PLR0913
        self,
        client: "BalancerClient",
        supervisor: "ProcessSupervisor",
        command: str | Sequence[str] | None,
        *,
        max_startup_time: float,
        poll_interval: float = DEFAULT_POLL_INTERVAL,
        logger: "FilteringBoundLogger | None" = None,
    ) -> None:
        """Initialize the coordinator.

        Args:
            client: Client used to poll the status endpoint.
            supervisor: Supervisor that launches the server process.
            command: Command line that starts the server. Only required
                when the balancer is not already running.
            max_startup_time: Seconds to wait for readiness after launch.
            poll_interval: Seconds between status polls.
            logger: Logger for startup events. Silent if None.
        """
        self._client = client
        self._supervisor = supervisor
        self._command = command
        self._max_startup_time = max_startup_time
        self._poll_interval = poll_interval
        self._logger = logger
        self._state = CoordinatorState.NOT_STARTED

    @property
    def state(self) -> CoordinatorState:
        """Return the current state."""
        return self._state

    def ensure_running(self) -> None:
        """Make sure the balancer is ready, launching it if necessary.

        Returns immediately without launching anything if the balancer
        already reports RUNNING.

        Raises:
            LaunchError: If the server process cannot be started.
            StartupTimeoutError: If the balancer does not report RUNNING
                within the startup bound.
        """
        if self._state == CoordinatorState.READY:
            return
        if self._state == CoordinatorState.TIMED_OUT:
            raise StartupTimeoutError(
                _startup_timeout_message(self._max_startup_time),
                timeout=self._max_startup_time,
            )
        if self._state == CoordinatorState.FAILED:
            msg = "Balancer server launch already failed; create a new coordinator"
            raise LaunchError(msg)

        if self._client.is_running():
            self._state = CoordinatorState.READY
            if self._logger is not None:
                self._logger.info("balancer_already_running")
            return

        self._launch()
        self._poll_until_ready()

    def _launch(self) -> None:
        self._state = CoordinatorState.LAUNCHING
        if self._command is None:
            self._state = CoordinatorState.FAILED
            msg = "Balancer server is not running and no launch command is configured"
            raise LaunchError(msg)
        try:
            _ = self._supervisor.launch(self._command)
        except LaunchError:
            self._state = CoordinatorState.FAILED
            raise

    def _poll_until_ready(self) -> None:
        self._state = CoordinatorState.POLLING
        retrying = Retrying(
            stop=stop_after_delay(self._max_startup_time),
            wait=wait_fixed(self._poll_interval),
            retry=retry_if_result(lambda ready: not ready),
        )
        try:
            _ = retrying(self._client.is_running)
        except RetryError as e:
            self._state = CoordinatorState.TIMED_OUT
            if self._logger is not None:
                self._logger.error(
                    "balancer_startup_timeout", timeout=self._max_startup_time
                )
            self._supervisor.kill()
            raise StartupTimeoutError(
                _startup_timeout_message(self._max_startup_time),
                timeout=self._max_startup_time,
            ) from e

        self._state = CoordinatorState.READY
        if self._logger is not None:
            self._logger.info("balancer_ready", pid=self._supervisor.pid)
