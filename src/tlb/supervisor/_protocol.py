"""Protocol definitions for the supervisor system.

This module defines the interfaces that decouple the supervisor core
from host-specific process handling:
- StreamReader: Reads whatever a child output stream currently holds
- LaunchStrategy: Starts the child process and wraps its output streams
- ShutdownRequester: Asks the running service to exit gracefully
"""

from collections.abc import Mapping, Sequence
from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from ._models import ServerProcess


@runtime_checkable
class StreamReader(Protocol):
    """Protocol for draining one output stream of a child process.

    All methods are called from the owning drainer's worker thread only.
    """

    @property
    def exhausted(self) -> bool:
        """Return True once the stream has reached end of file."""
        ...

    def read_available(self, timeout: float) -> bytes:
        """Return data that becomes available within ``timeout`` seconds.

        Args:
            timeout: Upper bound in seconds to wait for data to appear.

        Returns:
            The bytes read, or ``b""`` if nothing arrived or the stream
            is exhausted.
        """
        ...

    def read_remaining(self) -> bytes:
        """Return everything the stream still holds without waiting for more."""
        ...

    def close(self) -> None:
        """Close the underlying stream."""
        ...


@runtime_checkable
class LaunchStrategy(Protocol):
    """Protocol for starting the balancer server process."""

    @property
    def name(self) -> str:
        """Return a short identifier for logging."""
        ...

    def launch(
        self,
        command: Sequence[str],
        env: Mapping[str, str],
    ) -> "ServerProcess":
        """Start the child process with piped output streams.

        Args:
            command: Command and arguments to execute.
            env: Complete environment for the child.

        Returns:
            The started process with a reader for each output stream.

        Raises:
            LaunchError: If the process or its streams cannot be created.
        """
        ...


@runtime_checkable
class ShutdownRequester(Protocol):
    """Protocol for requesting a graceful exit from the running service."""

    def terminate(self) -> None:
        """Ask the service to exit. Must not raise on transport failure."""
        ...
