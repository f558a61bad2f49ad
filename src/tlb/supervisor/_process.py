"""Process supervisor for the balancer server.

This module provides the ProcessSupervisor class that launches the
balancer server, drains both of its output streams into sink files, and
shuts it down in order: graceful exit request, wait for exit, final
drain, reap.
"""

import contextlib
import os
import shlex
import subprocess
from collections.abc import Mapping, Sequence
from pathlib import Path
from typing import TYPE_CHECKING, final

from tlb.config import TLB_APP, BalancerConfig
from tlb.exceptions import DrainError, LaunchError

from ._drainer import DEFAULT_DRAIN_INTERVAL, StreamDrainer
from ._launch import select_launch_strategy
from ._models import ServerProcess, StreamName, SupervisorState
from ._protocol import LaunchStrategy, ShutdownRequester

if TYPE_CHECKING:
    from structlog.typing import FilteringBoundLogger

DEFAULT_SHUTDOWN_TIMEOUT = 10.0


def split_command(command: str, *, posix: bool | None = None) -> tuple[str, ...]:
    """Split a command line string into arguments.

    Uses POSIX rules except on Windows, where backslashes are path
    separators and only double quotes group words.

    Args:
        command: The command line.
        posix: Force POSIX (True) or Windows (False) rules. Follows the
            host if None.

    Returns:
        The argument tuple.
    """
    if posix is None:
        posix = os.name != "nt"
    if posix:
        return tuple(shlex.split(command))
    return tuple(
        token[1:-1] if len(token) > 1 and token[0] == token[-1] == '"' else token
        for token in shlex.split(command, posix=False)
    )


@final
class ProcessSupervisor:
    """Owns the lifecycle of one balancer server process.

    The supervisor starts the child with the host's launch strategy and
    attaches a StreamDrainer to each output stream. It never reports
    STOPPED while either drainer is still active.

    Attributes:
        out_file: Sink file for the child's standard output.
        err_file: Sink file for the child's standard error.
        drain_errors: Failures reported by drainers during shutdown.
    """

    __slots__ = (
        "_app_entry_point",
        "_drain_interval",
        "_drainers",
        "_logger",
        "_process",
        "_requester",
        "_returncode",
        "_shutdown_timeout",
        "_state",
        "_strategy",
        "drain_errors",
        "err_file",
        "out_file",
    )

    def __init__(  # noqa: PLR0913
        self,
        *,
        out_file: Path,
        err_file: Path,
        requester: ShutdownRequester | None = None,
        strategy: LaunchStrategy | None = None,
        app_entry_point: str | None = None,
        drain_interval: float = DEFAULT_DRAIN_INTERVAL,
        shutdown_timeout: float = DEFAULT_SHUTDOWN_TIMEOUT,
        logger: "FilteringBoundLogger | None" = None,
    ) -> None:
        """Initialize the supervisor.

        Args:
            out_file: Sink file for the child's standard output.
            err_file: Sink file for the child's standard error.
            requester: Asks the service to exit during terminate().
            strategy: Launch strategy. Chosen from host capability if None.
            app_entry_point: Value exported to the child as TLB_APP.
            drain_interval: Idle interval for both drainers.
            shutdown_timeout: Seconds the child gets to exit after the
                exit request before it is signalled.
            logger: Logger for lifecycle events. Silent if None.
        """
        self.out_file = out_file
        self.err_file = err_file
        self.drain_errors: list[DrainError] = []
        self._requester = requester
        self._strategy: LaunchStrategy = strategy or select_launch_strategy()
        self._app_entry_point = app_entry_point
        self._drain_interval = drain_interval
        self._shutdown_timeout = shutdown_timeout
        self._logger = logger
        self._state = SupervisorState.IDLE
        self._process: ServerProcess | None = None
        self._drainers: dict[StreamName, StreamDrainer] = {}
        self._returncode: int | None = None

    @classmethod
    def from_config(
        cls,
        config: BalancerConfig,
        *,
        requester: ShutdownRequester | None = None,
        strategy: LaunchStrategy | None = None,
        logger: "FilteringBoundLogger | None" = None,
    ) -> "ProcessSupervisor":
        """Create a supervisor using sink files and timings from config."""
        return cls(
            out_file=config.out_file,
            err_file=config.err_file,
            requester=requester,
            strategy=strategy,
            app_entry_point=config.app_entry_point,
            drain_interval=config.poll_interval,
            shutdown_timeout=config.shutdown_timeout,
            logger=logger,
        )

    @property
    def state(self) -> SupervisorState:
        """Return the current lifecycle state."""
        return self._state

    @property
    def strategy(self) -> LaunchStrategy:
        """Return the launch strategy in use."""
        return self._strategy

    @property
    def pid(self) -> int | None:
        """Return the child's process ID while it is supervised."""
        return self._process.pid if self._process is not None else None

    @property
    def returncode(self) -> int | None:
        """Return the child's exit code once it has been reaped."""
        return self._returncode

    @property
    def drainers(self) -> dict[StreamName, StreamDrainer]:
        """Return the drainers attached to the current process."""
        return dict(self._drainers)

    def _build_env(self, env: Mapping[str, str] | None) -> dict[str, str]:
        child_env = {**os.environ, **(env or {})}
        if self._app_entry_point is not None:
            child_env[TLB_APP] = self._app_entry_point
        return child_env

    def launch(
        self,
        command: str | Sequence[str],
        env: Mapping[str, str] | None = None,
    ) -> int:
        """Start the balancer server and begin draining its output.

        Returns once the child has started, not once it is ready to serve.

        Args:
            command: Command line, either a string or an argument sequence.
            env: Extra environment variables layered over ``os.environ``.

        Returns:
            The child's process ID.

        Raises:
            LaunchError: If a process is already supervised, the child cannot
                be started, or its output cannot be wired to the sinks.
        """
        if self._state in (SupervisorState.RUNNING, SupervisorState.STOPPING):
            msg = f"Balancer server is already supervised (pid={self.pid})"
            raise LaunchError(msg)

        argv = split_command(command) if isinstance(command, str) else tuple(command)
        process = self._strategy.launch(argv, self._build_env(env))

        drainers: dict[StreamName, StreamDrainer] = {}
        sinks = {StreamName.STDOUT: self.out_file, StreamName.STDERR: self.err_file}
        try:
            for stream, sink in sinks.items():
                drainer = StreamDrainer(
                    stream, interval=self._drain_interval, logger=self._logger
                )
                drainer.start(process.reader(stream), sink)
                drainers[stream] = drainer
        except OSError as e:
            process.popen.kill()
            _ = process.popen.wait()
            for drainer in drainers.values():
                with contextlib.suppress(DrainError):
                    drainer.stop()
            process.stdout.close()
            process.stderr.close()
            msg = f"Failed to open output sink for balancer server: {e}"
            raise LaunchError(msg, command=argv, cause=e) from e

        self._process = process
        self._drainers = drainers
        self._returncode = None
        self.drain_errors = []
        self._state = SupervisorState.RUNNING

        if self._logger is not None:
            self._logger.info(
                "balancer_launched",
                pid=process.pid,
                command=" ".join(argv),
                strategy=process.strategy,
            )
        return process.pid

    def is_alive(self) -> bool:
        """Check whether the supervised child is still running."""
        return self._process is not None and self._process.popen.poll() is None

    def _wait_for_exit(self, process: ServerProcess, *, graceful: bool) -> None:
        popen = process.popen
        if graceful:
            try:
                _ = popen.wait(timeout=self._shutdown_timeout)
            except subprocess.TimeoutExpired:
                if self._logger is not None:
                    self._logger.warning(
                        "balancer_exit_timeout",
                        pid=popen.pid,
                        timeout=self._shutdown_timeout,
                    )
            else:
                return

        popen.terminate()
        try:
            _ = popen.wait(timeout=self._shutdown_timeout)
        except subprocess.TimeoutExpired:
            popen.kill()
            _ = popen.wait()

    def _shutdown(self, *, graceful: bool) -> None:
        process = self._process
        if process is None or self._state != SupervisorState.RUNNING:
            return

        self._state = SupervisorState.STOPPING

        if graceful and self._requester is not None:
            self._requester.terminate()

        try:
            self._wait_for_exit(process, graceful=graceful)

            for drainer in self._drainers.values():
                try:
                    drainer.stop()
                except DrainError as e:
                    self.drain_errors.append(e)
                    if self._logger is not None:
                        self._logger.warning(
                            "drain_failed", stream=e.stream, error=str(e.cause)
                        )
        finally:
            self._returncode = process.popen.wait()
            process.stdout.close()
            process.stderr.close()
            self._process = None
            self._state = SupervisorState.STOPPED

        if self._logger is not None:
            self._logger.info(
                "balancer_stopped", pid=process.pid, exit_code=self._returncode
            )

    def terminate(self) -> None:
        """Shut down the balancer server gracefully.

        Sends the exit request, waits for the child to exit (signalling it
        if it overstays the shutdown timeout), stops both drainers, then
        reaps the child. Does nothing if no process is supervised.
        """
        self._shutdown(graceful=True)

    def kill(self) -> None:
        """Shut down the balancer server without asking it first."""
        self._shutdown(graceful=False)
