"""Data models for balancer process supervision.

This module defines the lifecycle states used by the supervisor:
- StreamName: Which child output stream a drainer reads
- DrainerState: Lifecycle of a stream drainer
- SupervisorState: Lifecycle of the supervised server process
- ServerProcess: A spawned child with readers for its output streams
"""

import subprocess
from dataclasses import dataclass
from enum import StrEnum
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from ._protocol import StreamReader


class StreamName(StrEnum):
    """Output streams of the balancer server process."""

    STDOUT = "stdout"
    STDERR = "stderr"


class DrainerState(StrEnum):
    """Stream drainer lifecycle states.

    - CREATED: Drainer exists but its worker has not been started
    - RUNNING: Worker is copying stream output into the sink
    - STOPPING: Stop was requested; the final drain pass is in progress
    - STOPPED: Worker has finished and the sink is closed
    """

    CREATED = "created"
    RUNNING = "running"
    STOPPING = "stopping"
    STOPPED = "stopped"


class SupervisorState(StrEnum):
    """Balancer server process lifecycle states.

    - IDLE: No process has been launched
    - RUNNING: The child process was started and its output is drained
    - STOPPING: Termination is in progress
    - STOPPED: The child was reaped and both drainers have finished
    """

    IDLE = "idle"
    RUNNING = "running"
    STOPPING = "stopping"
    STOPPED = "stopped"


@dataclass(slots=True)
class ServerProcess:
    """A spawned balancer server process and readers for its output.

    Owned exclusively by the ProcessSupervisor that launched it. The
    readers hold the child's pipes; drainers only borrow them.

    Attributes:
        popen: Handle of the child process.
        stdout: Reader for the child's standard output.
        stderr: Reader for the child's standard error.
        strategy: Name of the launch strategy that created the process.
    """

    popen: subprocess.Popen[bytes]
    stdout: "StreamReader"
    stderr: "StreamReader"
    strategy: str

    @property
    def pid(self) -> int:
        """Return the child's process ID."""
        return self.popen.pid

    def reader(self, stream: StreamName) -> "StreamReader":
        """Return the reader for the given stream."""
        return self.stdout if stream == StreamName.STDOUT else self.stderr
