"""Configuration for the TLB client runtime."""

from ._env import (
    TLB_APP,
    TLB_BALANCER_PORT,
    TLB_BALANCER_STARTUP_MAXTIME,
    TLB_ERR_FILE,
    TLB_OUT_FILE,
    TLB_SERVER_JAR,
    load_config_from_env,
)
from ._models import (
    DEFAULT_APP_ENTRY_POINT,
    DEFAULT_PORT,
    DEFAULT_STARTUP_MAX_TIME,
    BalancerConfig,
    ServerEndpoint,
)

__all__ = [
    "DEFAULT_APP_ENTRY_POINT",
    "DEFAULT_PORT",
    "DEFAULT_STARTUP_MAX_TIME",
    "TLB_APP",
    "TLB_BALANCER_PORT",
    "TLB_BALANCER_STARTUP_MAXTIME",
    "TLB_ERR_FILE",
    "TLB_OUT_FILE",
    "TLB_SERVER_JAR",
    "BalancerConfig",
    "ServerEndpoint",
    "load_config_from_env",
]
