"""Synchronous client for the balancer's text protocol.

Every operation blocks until the balancer answers or the transport
fails. Error responses raise ProtocolError, except for ``status`` (an
unreachable or failing balancer is simply not ready) and ``terminate``
(best effort, the balancer may already be gone).
"""

from collections.abc import Mapping, Sequence
from typing import TYPE_CHECKING, Self, final

import httpx

from tlb.config import BalancerConfig, ServerEndpoint
from tlb.exceptions import ProtocolError

from ._routes import (
    ALL_PARTITIONS_EXECUTED_ASSERTION_PATH,
    BALANCE_PATH,
    MODULE_NAME_HEADER,
    RUNNING_STATUS,
    STATUS_PATH,
    SUITE_RESULT_REPORTING_PATH,
    SUITE_TIME_REPORTING_PATH,
    TERMINATE_PATH,
    TEXT_CONTENT_TYPE,
)

if TYPE_CHECKING:
    from types import TracebackType

    from structlog.typing import FilteringBoundLogger

DEFAULT_REQUEST_TIMEOUT = 5.0


def additional_headers(header_map: Mapping[str, str | None]) -> dict[str, str]:
    """Drop headers whose value is None.

    Args:
        header_map: Candidate header names and values.

    Returns:
        Only the headers that carry a value.
    """
    return {key: value for key, value in header_map.items() if value is not None}


def _module_headers(submodule: str | None) -> dict[str, str]:
    return additional_headers({MODULE_NAME_HEADER: submodule})


@final
class BalancerClient:
    """Blocking request/response client for one balancer endpoint.

    Attributes:
        endpoint: The balancer's host and port.
    """

    __slots__ = ("_client", "_logger", "endpoint")

    def __init__(
        self,
        endpoint: ServerEndpoint,
        *,
        timeout: float | None = None,
        transport: httpx.BaseTransport | None = None,
        logger: "FilteringBoundLogger | None" = None,
    ) -> None:
        """Initialize the client.

        Args:
            endpoint: The balancer's host and port.
            timeout: Transport timeout in seconds. Uses the default when None.
            transport: Custom httpx transport, e.g. a MockTransport in tests.
            logger: Logger for protocol events. Silent if None.
        """
        self.endpoint = endpoint
        self._logger = logger
        self._client = httpx.Client(
            base_url=endpoint.base_url,
            timeout=timeout if timeout is not None else DEFAULT_REQUEST_TIMEOUT,
            transport=transport,
            trust_env=False,
        )

    @classmethod
    def from_config(
        cls,
        config: BalancerConfig,
        *,
        transport: httpx.BaseTransport | None = None,
        logger: "FilteringBoundLogger | None" = None,
    ) -> "BalancerClient":
        """Create a client for the endpoint and timeout in config."""
        return cls(
            config.endpoint,
            timeout=config.request_timeout,
            transport=transport,
            logger=logger,
        )

    def close(self) -> None:
        """Close pooled connections."""
        self._client.close()

    def __enter__(self) -> Self:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: "TracebackType | None",
    ) -> None:
        self.close()

    def _request(
        self,
        method: str,
        path: str,
        *,
        content: str | None = None,
        headers: Mapping[str, str] | None = None,
    ) -> str:
        """Send one request and return the response body.

        Raises:
            ProtocolError: If the balancer answers with a non-success status.
            httpx.TransportError: If the balancer cannot be reached.
        """
        request_headers = dict(headers or {})
        if content is not None:
            request_headers["Content-Type"] = TEXT_CONTENT_TYPE

        response = self._client.request(
            method, path, content=content, headers=request_headers
        )
        body = response.text

        if not response.is_success:
            msg = (
                f"{response.status_code} {response.reason_phrase} "
                f"from {method} {path}. Details: {{ {body} }}"
            )
            if self._logger is not None:
                self._logger.error(
                    "balancer_request_failed",
                    method=method,
                    path=path,
                    status_code=response.status_code,
                )
            raise ProtocolError(
                msg,
                method=method,
                path=path,
                status_code=response.status_code,
                body=body,
            )

        if self._logger is not None:
            self._logger.debug(
                "balancer_request",
                method=method,
                path=path,
                status_code=response.status_code,
            )
        return body

    def balance(self, files: Sequence[str], submodule: str | None = None) -> list[str]:
        """Ask the balancer for this partition's share of ``files``.

        Args:
            files: Relative test file paths for the whole suite.
            submodule: Optional tag selecting an independent partition state.

        Returns:
            The files assigned to this partition, in the balancer's order.
            May be empty.

        Raises:
            ProtocolError: If the balancer rejects the request.
        """
        body = self._request(
            "POST",
            BALANCE_PATH,
            content="\n".join(files),
            headers=_module_headers(submodule),
        )
        files = body.split("\n")
        while files and not files[-1]:
            _ = files.pop()
        return files

    def report_suite_time(self, suite_name: str, millis: int) -> None:
        """Report how long a suite took, in milliseconds.

        Raises:
            ProtocolError: If the balancer rejects the report.
        """
        _ = self._request(
            "POST", SUITE_TIME_REPORTING_PATH, content=f"{suite_name}: {millis}"
        )

    def report_suite_result(self, suite_name: str, result: str | bool) -> None:
        """Report whether a suite failed.

        Raises:
            ProtocolError: If the balancer rejects the report.
        """
        value = str(result).lower() if isinstance(result, bool) else result
        _ = self._request(
            "POST", SUITE_RESULT_REPORTING_PATH, content=f"{suite_name}: {value}"
        )

    def assert_all_partitions_executed(self, submodule: str | None = None) -> None:
        """Check that every partition claimed its share.

        Raises:
            ProtocolError: If the balancer reports an unclaimed partition.
        """
        _ = self._request(
            "GET",
            ALL_PARTITIONS_EXECUTED_ASSERTION_PATH,
            headers=_module_headers(submodule),
        )

    def status(self) -> str | None:
        """Return the balancer's status text, or None if it is unreachable.

        Error responses count as unreachable too.
        """
        try:
            return self._request("GET", STATUS_PATH)
        except (httpx.HTTPError, ProtocolError) as e:
            if self._logger is not None:
                self._logger.debug("balancer_status_unavailable", error=str(e))
            return None

    def is_running(self) -> bool:
        """Return True if the balancer reports it is ready."""
        return (self.status() or "").strip() == RUNNING_STATUS

    def terminate(self) -> None:
        """Ask the balancer to exit.

        The balancer exits right after answering, so transport failures and
        error responses are logged and otherwise ignored.
        """
        try:
            _ = self._request("GET", TERMINATE_PATH)
        except (httpx.HTTPError, ProtocolError) as e:
            if self._logger is not None:
                self._logger.info("balancer_terminate_ignored", error=str(e))
