"""Balancer protocol client, startup coordination and run handle.

Key Components:
    - BalancerClient: Blocking client for the balancer's text protocol
    - StartupCoordinator: Launches the server and waits for readiness
    - BalancerRuntime: Per-run handle used by framework adapters

Example:
    >>> from tlb.balancer import BalancerRuntime
    >>> with BalancerRuntime(command="java -jar tlb-alien.jar") as runtime:
    ...     mine = runtime.balance_and_order(["./test_a.py", "./test_b.py"])
"""

from ._client import DEFAULT_REQUEST_TIMEOUT, BalancerClient, additional_headers
from ._coordinator import DEFAULT_POLL_INTERVAL, CoordinatorState, StartupCoordinator
from ._routes import (
    ALL_PARTITIONS_EXECUTED_ASSERTION_PATH,
    BALANCE_PATH,
    MODULE_NAME_HEADER,
    RUNNING_STATUS,
    STATUS_PATH,
    SUITE_RESULT_REPORTING_PATH,
    SUITE_TIME_REPORTING_PATH,
    TERMINATE_PATH,
)
from ._runtime import NOT_RUNNING_MESSAGE, BalancerRuntime

__all__ = [
    "ALL_PARTITIONS_EXECUTED_ASSERTION_PATH",
    "BALANCE_PATH",
    "DEFAULT_POLL_INTERVAL",
    "DEFAULT_REQUEST_TIMEOUT",
    "MODULE_NAME_HEADER",
    "NOT_RUNNING_MESSAGE",
    "RUNNING_STATUS",
    "STATUS_PATH",
    "SUITE_RESULT_REPORTING_PATH",
    "SUITE_TIME_REPORTING_PATH",
    "TERMINATE_PATH",
    "BalancerClient",
    "BalancerRuntime",
    "CoordinatorState",
    "StartupCoordinator",
    "additional_headers",
]
