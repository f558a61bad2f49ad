"""Launch strategies for the balancer server process.

Hosts with ``fork`` start the child with raw, readiness-polled pipes.
Hosts without it (e.g. Windows) start the child with buffered pipes read
line by line, because their pipes cannot be polled. Supervision is the
same for both; only process creation and stream reading differ.
"""

import functools
import os
import subprocess
from collections.abc import Mapping, Sequence
from typing import IO, final

from tlb.exceptions import LaunchError

from ._models import ServerProcess
from ._protocol import LaunchStrategy
from ._readers import LineStreamReader, RawStreamReader


@functools.cache
def can_fork() -> bool:
    """Return True if this host can fork processes."""
    return hasattr(os, "fork")


def _open_process(
    command: Sequence[str],
    env: Mapping[str, str],
    *,
    bufsize: int,
    creationflags: int = 0,
) -> tuple[subprocess.Popen[bytes], IO[bytes], IO[bytes]]:
    """Start the child with piped output and return its streams.

    Raises:
        LaunchError: If the executable cannot be started or either output
            stream is missing.
    """
    argv = tuple(command)
    if not argv:
        msg = "Cannot launch balancer server: empty command"
        raise LaunchError(msg, command=argv)

    try:
        popen = subprocess.Popen(  # noqa: S603
            argv,
            stdin=subprocess.DEVNULL,
            stdout=subprocess.PIPE,
            stderr=subprocess.PIPE,
            env=dict(env),
            bufsize=bufsize,
            creationflags=creationflags,
        )
    except (OSError, ValueError) as e:
        msg = f"Failed to launch balancer server {' '.join(argv)!r}: {e}"
        raise LaunchError(msg, command=argv, cause=e) from e

    if popen.stdout is None or popen.stderr is None:
        popen.kill()
        _ = popen.wait()
        msg = f"Balancer server {' '.join(argv)!r} started without output streams"
        raise LaunchError(msg, command=argv)

    return popen, popen.stdout, popen.stderr


@final
class ForkLaunchStrategy:
    """Starts the child via fork/exec and reads raw bytes as they arrive."""

    __slots__ = ()

    @property
    def name(self) -> str:
        """Return a short identifier for logging."""
        return "fork"

    def launch(self, command: Sequence[str], env: Mapping[str, str]) -> ServerProcess:
        """Start the child process with unbuffered pipes.

        Raises:
            LaunchError: If the process or its streams cannot be created.
        """
        popen, out, err = _open_process(command, env, bufsize=0)
        return ServerProcess(
            popen=popen,
            stdout=RawStreamReader(out),
            stderr=RawStreamReader(err),
            strategy=self.name,
        )


@final
class SpawnLaunchStrategy:
    """Starts the child without fork and reads its output line by line."""

    __slots__ = ()

    @property
    def name(self) -> str:
        """Return a short identifier for logging."""
        return "spawn"

    def launch(self, command: Sequence[str], env: Mapping[str, str]) -> ServerProcess:
        """Start the child process with buffered pipes.

        Raises:
            LaunchError: If the process or its streams cannot be created.
        """
        popen, out, err = _open_process(
            command,
            env,
            bufsize=-1,
            creationflags=getattr(subprocess, "CREATE_NEW_PROCESS_GROUP", 0),
        )
        return ServerProcess(
            popen=popen,
            stdout=LineStreamReader(out),
            stderr=LineStreamReader(err),
            strategy=self.name,
        )


def select_launch_strategy(*, fork_available: bool | None = None) -> LaunchStrategy:
    """Choose the launch strategy for this host.

    Args:
        fork_available: Override for the host capability check.

    Returns:
        ForkLaunchStrategy where fork exists, SpawnLaunchStrategy otherwise.
    """
    available = can_fork() if fork_available is None else fork_available
    return ForkLaunchStrategy() if available else SpawnLaunchStrategy()
