# pyright: reportUnusedFunction=false
"""Balancer commands for the TLB CLI."""

import contextlib
import threading
from pathlib import Path
from typing import TYPE_CHECKING, Annotated

from cyclopts import App, Parameter

from tlb.balancer import RUNNING_STATUS, BalancerRuntime
from tlb.config import BalancerConfig, load_config_from_env
from tlb.exceptions import (
    BalancerNotRunningError,
    ConfigError,
    LaunchError,
    ProtocolError,
    ServerArtifactNotFoundError,
    StartupTimeoutError,
)
from tlb.utils import create_logger, find_server_jar

from ._shared import ExitCode, exit_with_error

if TYPE_CHECKING:
    from collections.abc import Iterator

    from rich.console import Console


def load_config(error_console: "Console | None" = None) -> BalancerConfig:
    """Load configuration from TLB_* variables or exit with LOAD_ERROR."""
    try:
        return load_config_from_env()
    except ConfigError as e:
        exit_with_error(str(e), ExitCode.LOAD_ERROR, console=error_console)


def build_runtime(
    config: BalancerConfig, *, command: tuple[str, ...] | None = None
) -> BalancerRuntime:
    """Create the runtime a command talks to the balancer through."""
    return BalancerRuntime(config, command=command, logger=create_logger("tlb.cli"))


@contextlib.contextmanager
def _exit_on_balancer_error(error_console: "Console") -> "Iterator[None]":
    try:
        yield
    except BalancerNotRunningError as e:
        exit_with_error(str(e), ExitCode.NOT_RUNNING, console=error_console)
    except ProtocolError as e:
        exit_with_error(str(e), ExitCode.PROTOCOL_ERROR, console=error_console)
    except (LaunchError, StartupTimeoutError) as e:
        exit_with_error(str(e), ExitCode.STARTUP_ERROR, console=error_console)


def register_commands(app: App, console: "Console", error_console: "Console") -> None:
    """Attach the balancer commands to ``app``.

    Args:
        app: The root cyclopts application.
        console: Console for regular output.
        error_console: Console for error output.
    """

    @app.command
    def status() -> None:
        """Print whether the balancer reports it is running."""
        runtime = build_runtime(load_config(error_console))
        try:
            running = runtime.server_running()
        finally:
            runtime.close()
        if not running:
            console.print("NOT RUNNING", highlight=False)
            raise SystemExit(ExitCode.NOT_RUNNING)
        console.print(RUNNING_STATUS, highlight=False)

    @app.command
    def serve(
        *,
        jar: Annotated[
            Path | None, Parameter(help="Balancer server artifact to run.")
        ] = None,
        root_dir: Annotated[
            Path | None,
            Parameter(help="Directory searched for a tlb-alien* artifact."),
        ] = None,
        java: Annotated[str, Parameter(help="Java runtime executable.")] = "java",
    ) -> None:
        """Start the balancer, wait until it is ready, and run until interrupted."""
        config = load_config(error_console)
        artifact = jar or config.server_jar
        if artifact is None:
            try:
                artifact = find_server_jar(root_dir or Path.cwd())
            except ServerArtifactNotFoundError as e:
                exit_with_error(str(e), ExitCode.LOAD_ERROR, console=error_console)

        runtime = build_runtime(
            config, command=config.server_command(artifact, java=java)
        )
        try:
            with _exit_on_balancer_error(error_console):
                runtime.start_server()
            console.print(
                f"Balancer running on port {config.port} "
                f"(pid={runtime.supervisor.pid})",
                highlight=False,
            )
            _ = threading.Event().wait()
        except KeyboardInterrupt:
            console.print("Stopping balancer", highlight=False)
        finally:
            runtime.stop_server()
            runtime.close()

    @app.command
    def balance(
        *files: str,
        submodule: Annotated[
            str | None, Parameter(help="Submodule tag for independent partitions.")
        ] = None,
    ) -> None:
        """Print this partition's share of FILES, one per line."""
        runtime = build_runtime(load_config(error_console))
        try:
            with _exit_on_balancer_error(error_console):
                assigned = runtime.balance_and_order(
                    runtime.relative_file_paths(files), submodule
                )
        finally:
            runtime.close()
        for file_name in assigned:
            console.print(file_name, highlight=False, markup=False)

    @app.command(name="suite-time")
    def suite_time(name: str, millis: int) -> None:
        """Report how long suite NAME took in milliseconds."""
        runtime = build_runtime(load_config(error_console))
        try:
            with _exit_on_balancer_error(error_console):
                runtime.suite_time(name, millis)
        finally:
            runtime.close()

    @app.command(name="suite-result")
    def suite_result(name: str, result: str) -> None:
        """Report the failure flag of suite NAME."""
        runtime = build_runtime(load_config(error_console))
        try:
            with _exit_on_balancer_error(error_console):
                runtime.suite_result(name, result)
        finally:
            runtime.close()

    @app.command(name="assert-executed")
    def assert_executed(
        *,
        submodule: Annotated[
            str | None, Parameter(help="Submodule tag to check.")
        ] = None,
    ) -> None:
        """Fail if any partition never claimed its files."""
        runtime = build_runtime(load_config(error_console))
        try:
            with _exit_on_balancer_error(error_console):
                runtime.assert_all_partitions_executed(submodule)
        finally:
            runtime.close()
        console.print("All partitions executed", highlight=False)

    @app.command
    def terminate() -> None:
        """Ask the balancer to exit. Errors are ignored."""
        runtime = build_runtime(load_config(error_console))
        try:
            runtime.client.terminate()
        finally:
            runtime.close()
