"""Balancer configuration model.

This module provides the BalancerConfig Pydantic model holding the
read-only settings the runtime consumes: the balancer endpoint, the
startup bound, and the sink files receiving the server's output.
"""

from dataclasses import dataclass
from pathlib import Path
from typing import ClassVar

from pydantic import BaseModel, ConfigDict, Field, PositiveFloat

DEFAULT_HOST = "localhost"
DEFAULT_PORT = 8019
DEFAULT_STARTUP_MAX_TIME = 120.0
DEFAULT_APP_ENTRY_POINT = "tlb.balancer.BalancerInitializer"
DEFAULT_OUT_FILE_NAME = "tlb_out_file"
DEFAULT_ERR_FILE_NAME = "tlb_err_file"


@dataclass(frozen=True, slots=True)
class ServerEndpoint:
    """Network location of the balancer server.

    Attributes:
        host: Host name the balancer listens on.
        port: TCP port the balancer listens on.
    """

    host: str
    port: int

    @property
    def base_url(self) -> str:
        """Return the HTTP base URL for this endpoint."""
        return f"http://{self.host}:{self.port}"


class BalancerConfig(BaseModel):
    """Settings for talking to, and launching, the balancer server.

    Attributes:
        host: Host the balancer listens on. Fixed to localhost.
        port: Port the balancer listens on.
        startup_max_time: Seconds to wait for the balancer to report readiness.
        out_file: Sink file for the server's standard output.
        err_file: Sink file for the server's standard error.
        app_entry_point: Service entry point exported to the child as TLB_APP.
        server_jar: Path to the server artifact, if known up front.
        poll_interval: Idle interval for drainers and status polling.
        request_timeout: Transport timeout for balancer requests, or None
            to use the HTTP client's default.
        shutdown_timeout: Seconds the child gets to exit after a terminate
            request before it is signalled.
    """

    model_config: ClassVar[ConfigDict] = ConfigDict(frozen=True, extra="ignore")

    host: str = DEFAULT_HOST
    port: int = Field(default=DEFAULT_PORT, gt=0, lt=65536)
    startup_max_time: PositiveFloat = DEFAULT_STARTUP_MAX_TIME
    out_file: Path = Field(default_factory=lambda: Path.cwd() / DEFAULT_OUT_FILE_NAME)
    err_file: Path = Field(default_factory=lambda: Path.cwd() / DEFAULT_ERR_FILE_NAME)
    app_entry_point: str = DEFAULT_APP_ENTRY_POINT
    server_jar: Path | None = None
    poll_interval: PositiveFloat = 0.1
    request_timeout: PositiveFloat | None = None
    shutdown_timeout: PositiveFloat = 10.0

    @property
    def endpoint(self) -> ServerEndpoint:
        """Return the balancer endpoint described by this configuration."""
        return ServerEndpoint(host=self.host, port=self.port)

    def server_command(
        self, jar: Path | None = None, *, java: str = "java"
    ) -> tuple[str, ...]:
        """Build the command line that starts the balancer server.

        Args:
            jar: Server artifact to run. Falls back to ``server_jar``.
            java: The Java runtime executable.

        Returns:
            The command as an argument tuple.

        Raises:
            ValueError: If no artifact is given or configured.
        """
        artifact = jar if jar is not None else self.server_jar
        if artifact is None:
            msg = "No balancer server artifact configured"
            raise ValueError(msg)
        return (java, "-jar", str(artifact))
