"""TLB exceptions."""

from pathlib import Path


class TlbError(Exception):
    """Base exception for TLB errors."""


class ConfigError(TlbError):
    """Raised when configuration values cannot be parsed."""

    def __init__(self, message: str, *, key: str, value: str) -> None:
        """Initialize with error message and the offending setting."""
        super().__init__(message)
        self.key: str = key
        self.value: str = value


class ServerArtifactNotFoundError(TlbError):
    """Raised when the balancer server artifact cannot be located.

    Attributes:
        root_dir: The directory that was searched.
    """

    def __init__(self, message: str, *, root_dir: Path) -> None:
        """Initialize with error message and search location."""
        super().__init__(message)
        self.root_dir: Path = root_dir


# =============================================================================
# Supervisor Exceptions
# =============================================================================


class SupervisorError(TlbError):
    """Base exception for balancer process supervision errors."""


class LaunchError(SupervisorError):
    """Raised when the balancer server process cannot be started.

    Attributes:
        command: The command line that failed to launch.
        cause: The underlying exception that caused the failure.
    """

    def __init__(
        self,
        message: str,
        *,
        command: tuple[str, ...] = (),
        cause: Exception | None = None,
    ) -> None:
        """Initialize with error message and launch context.

        Args:
            message: Human-readable error message.
            command: The command line that failed to launch.
            cause: The underlying exception that caused the failure.
        """
        super().__init__(message)
        self.command: tuple[str, ...] = command
        self.cause: Exception | None = cause


class DrainError(SupervisorError):
    """Raised when a stream drainer's background loop failed.

    Attributes:
        stream: Name of the stream being drained.
        cause: The underlying exception raised by the drain loop.
    """

    def __init__(
        self,
        message: str,
        *,
        stream: str,
        cause: BaseException | None = None,
    ) -> None:
        """Initialize with error message and stream context."""
        super().__init__(message)
        self.stream: str = stream
        self.cause: BaseException | None = cause


# =============================================================================
# Balancer Exceptions
# =============================================================================


class BalancerError(TlbError):
    """Base exception for balancer protocol errors."""


class StartupTimeoutError(BalancerError):
    """Raised when the balancer does not report readiness in time.

    Attributes:
        timeout: The startup bound in seconds that elapsed.
    """

    def __init__(self, message: str, *, timeout: float) -> None:
        """Initialize with error message and the elapsed bound."""
        super().__init__(message)
        self.timeout: float = timeout


class ProtocolError(BalancerError):
    """Raised when the balancer answers a request with an error response.

    The message embeds both the HTTP status and the response body so
    server-side diagnostics reach the operator unchanged.

    Attributes:
        method: HTTP method of the failed request.
        path: Request path of the failed request.
        status_code: HTTP status code returned by the balancer.
        body: Response body text returned by the balancer.
    """

    def __init__(
        self,
        message: str,
        *,
        method: str,
        path: str,
        status_code: int,
        body: str,
    ) -> None:
        """Initialize with error message and response context.

        Args:
            message: Human-readable error message.
            method: HTTP method of the failed request.
            path: Request path of the failed request.
            status_code: HTTP status code returned by the balancer.
            body: Response body text returned by the balancer.
        """
        super().__init__(message)
        self.method: str = method
        self.path: str = path
        self.status_code: int = status_code
        self.body: str = body


class BalancerNotRunningError(BalancerError):
    """Raised when a protocol call is attempted before the balancer is ready."""
