"""Supervisor package for the balancer server process.

Key Components:
    - StreamDrainer: Copies one child output stream into a sink file
    - RawStreamReader / LineStreamReader: Host-specific stream readers
    - ForkLaunchStrategy / SpawnLaunchStrategy: Host-specific process creation
    - select_launch_strategy: Picks the strategy from host capability
    - ProcessSupervisor: Launches, drains, and terminates the server

Example:
    >>> from pathlib import Path
    >>> from tlb.supervisor import ProcessSupervisor
    >>> supervisor = ProcessSupervisor(
    ...     out_file=Path("tlb_out_file"), err_file=Path("tlb_err_file")
    ... )
    >>> supervisor.launch("java -jar tlb-alien.jar")
    >>> supervisor.terminate()
"""

from ._drainer import DEFAULT_DRAIN_INTERVAL, StreamDrainer
from ._launch import (
    ForkLaunchStrategy,
    SpawnLaunchStrategy,
    can_fork,
    select_launch_strategy,
)
from ._models import DrainerState, ServerProcess, StreamName, SupervisorState
from ._process import ProcessSupervisor, split_command
from ._protocol import LaunchStrategy, ShutdownRequester, StreamReader
from ._readers import LineStreamReader, RawStreamReader

__all__ = [
    "DEFAULT_DRAIN_INTERVAL",
    "DrainerState",
    "ForkLaunchStrategy",
    "LaunchStrategy",
    "LineStreamReader",
    "ProcessSupervisor",
    "RawStreamReader",
    "ServerProcess",
    "ShutdownRequester",
    "SpawnLaunchStrategy",
    "StreamDrainer",
    "StreamName",
    "StreamReader",
    "SupervisorState",
    "can_fork",
    "select_launch_strategy",
    "split_command",
]
