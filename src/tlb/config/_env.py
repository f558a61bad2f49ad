"""Environment variable loading for balancer configuration."""

import os
from collections.abc import Mapping
from pathlib import Path

from pydantic import ValidationError

from tlb.exceptions import ConfigError

from ._models import DEFAULT_ERR_FILE_NAME, DEFAULT_OUT_FILE_NAME, BalancerConfig

TLB_BALANCER_PORT = "TLB_BALANCER_PORT"
TLB_BALANCER_STARTUP_MAXTIME = "TLB_BALANCER_STARTUP_MAXTIME"
TLB_OUT_FILE = "TLB_OUT_FILE"
TLB_ERR_FILE = "TLB_ERR_FILE"
TLB_SERVER_JAR = "TLB_SERVER_JAR"
TLB_APP = "TLB_APP"

_FIELD_VARIABLES = {
    "port": TLB_BALANCER_PORT,
    "startup_max_time": TLB_BALANCER_STARTUP_MAXTIME,
    "out_file": TLB_OUT_FILE,
    "err_file": TLB_ERR_FILE,
    "server_jar": TLB_SERVER_JAR,
}


def _parse_int(environ: Mapping[str, str], key: str) -> int | None:
    raw = environ.get(key, "").strip()
    if not raw:
        return None
    try:
        return int(raw)
    except ValueError as e:
        msg = f"{key} must be an integer, got {raw!r}"
        raise ConfigError(msg, key=key, value=raw) from e


def load_config_from_env(
    environ: Mapping[str, str] | None = None,
    *,
    cwd: Path | None = None,
) -> BalancerConfig:
    """Build a BalancerConfig from TLB_* environment variables.

    Unset variables fall back to model defaults. Sink files default to
    ``tlb_out_file`` and ``tlb_err_file`` in the working directory.

    Args:
        environ: Environment mapping to read. Defaults to ``os.environ``.
        cwd: Directory for default sink files. Defaults to the current
            working directory.

    Returns:
        The resolved configuration.

    Raises:
        ConfigError: If a variable cannot be parsed or is out of range.
    """
    env = os.environ if environ is None else environ
    base_dir = cwd if cwd is not None else Path.cwd()

    values: dict[str, object] = {
        "out_file": Path(env.get(TLB_OUT_FILE) or base_dir / DEFAULT_OUT_FILE_NAME),
        "err_file": Path(env.get(TLB_ERR_FILE) or base_dir / DEFAULT_ERR_FILE_NAME),
    }

    port = _parse_int(env, TLB_BALANCER_PORT)
    if port is not None:
        values["port"] = port

    startup_max_time = _parse_int(env, TLB_BALANCER_STARTUP_MAXTIME)
    if startup_max_time is not None:
        values["startup_max_time"] = startup_max_time

    server_jar = env.get(TLB_SERVER_JAR)
    if server_jar:
        values["server_jar"] = Path(server_jar)

    try:
        return BalancerConfig.model_validate(values)
    except ValidationError as e:
        error = e.errors()[0]
        field = str(error["loc"][0]) if error["loc"] else ""
        key = _FIELD_VARIABLES.get(field, field)
        value = str(values.get(field, ""))
        msg = f"{key} is invalid, got {value!r}: {error['msg']}"
        raise ConfigError(msg, key=key, value=value) from e
