"""Wire constants of the balancer's text protocol."""

BALANCE_PATH = "/balance"
SUITE_TIME_REPORTING_PATH = "/suite_time"
SUITE_RESULT_REPORTING_PATH = "/suite_result"
ALL_PARTITIONS_EXECUTED_ASSERTION_PATH = "/assert_all_partitions_executed"
STATUS_PATH = "/control/status"
TERMINATE_PATH = "/control/suicide"

MODULE_NAME_HEADER = "X-Tlb-Module-Name"

RUNNING_STATUS = "RUNNING"
TEXT_CONTENT_TYPE = "text/plain; charset=utf-8"
