"""Tests for tlb.config."""

from pathlib import Path

import pytest
from pydantic import ValidationError

from tlb.config import (
    DEFAULT_APP_ENTRY_POINT,
    BalancerConfig,
    ServerEndpoint,
    load_config_from_env,
)
from tlb.exceptions import ConfigError


class TestBalancerConfig:
    def test_default_values(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.chdir(tmp_path)
        config = BalancerConfig()
        assert config.host == "localhost"
        assert config.port == 8019
        assert config.startup_max_time == 120
        assert config.out_file == tmp_path / "tlb_out_file"
        assert config.err_file == tmp_path / "tlb_err_file"
        assert config.app_entry_point == DEFAULT_APP_ENTRY_POINT
        assert config.request_timeout is None

    def test_frozen(self) -> None:
        config = BalancerConfig()
        with pytest.raises(ValidationError):
            config.port = 9000  # pyright: ignore[reportAttributeAccessIssue]

    def test_rejects_out_of_range_port(self) -> None:
        with pytest.raises(ValidationError):
            _ = BalancerConfig(port=70000)

    def test_endpoint(self) -> None:
        config = BalancerConfig(port=9001)
        assert config.endpoint == ServerEndpoint(host="localhost", port=9001)
        assert config.endpoint.base_url == "http://localhost:9001"

    def test_server_command_uses_configured_jar(self) -> None:
        config = BalancerConfig(server_jar=Path("/opt/tlb/tlb-alien-0.3.jar"))
        assert config.server_command() == ("java", "-jar", "/opt/tlb/tlb-alien-0.3.jar")

    def test_server_command_prefers_explicit_jar(self) -> None:
        config = BalancerConfig(server_jar=Path("/opt/a.jar"))
        command = config.server_command(Path("/opt/b.jar"), java="/usr/bin/java")
        assert command == ("/usr/bin/java", "-jar", "/opt/b.jar")

    def test_server_command_without_jar(self) -> None:
        with pytest.raises(ValueError, match="No balancer server artifact"):
            _ = BalancerConfig().server_command()


class TestLoadConfigFromEnv:
    def test_empty_environment_uses_defaults(self, tmp_path: Path) -> None:
        config = load_config_from_env({}, cwd=tmp_path)
        assert config.port == 8019
        assert config.startup_max_time == 120
        assert config.out_file == tmp_path / "tlb_out_file"
        assert config.err_file == tmp_path / "tlb_err_file"
        assert config.server_jar is None

    def test_reads_overrides(self, tmp_path: Path) -> None:
        environ = {
            "TLB_BALANCER_PORT": "9123",
            "TLB_BALANCER_STARTUP_MAXTIME": "5",
            "TLB_OUT_FILE": str(tmp_path / "out.log"),
            "TLB_ERR_FILE": str(tmp_path / "err.log"),
            "TLB_SERVER_JAR": "/opt/tlb-alien.jar",
        }
        config = load_config_from_env(environ, cwd=tmp_path)
        assert config.port == 9123
        assert config.startup_max_time == 5
        assert config.out_file == tmp_path / "out.log"
        assert config.err_file == tmp_path / "err.log"
        assert config.server_jar == Path("/opt/tlb-alien.jar")

    def test_blank_values_fall_back_to_defaults(self, tmp_path: Path) -> None:
        config = load_config_from_env(
            {"TLB_BALANCER_PORT": "  ", "TLB_OUT_FILE": ""}, cwd=tmp_path
        )
        assert config.port == 8019
        assert config.out_file == tmp_path / "tlb_out_file"

    def test_invalid_port(self) -> None:
        with pytest.raises(ConfigError) as exc_info:
            _ = load_config_from_env({"TLB_BALANCER_PORT": "eighty"})
        assert exc_info.value.key == "TLB_BALANCER_PORT"
        assert exc_info.value.value == "eighty"

    @pytest.mark.parametrize(
        ("key", "raw"),
        [
            ("TLB_BALANCER_PORT", "70000"),
            ("TLB_BALANCER_PORT", "0"),
            ("TLB_BALANCER_STARTUP_MAXTIME", "0"),
            ("TLB_BALANCER_STARTUP_MAXTIME", "-5"),
        ],
    )
    def test_out_of_range_values(self, key: str, raw: str) -> None:
        with pytest.raises(ConfigError) as exc_info:
            _ = load_config_from_env({key: raw})
        assert exc_info.value.key == key
        assert exc_info.value.value == raw
        assert key in str(exc_info.value)

    def test_reads_process_environment_by_default(
        self, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        monkeypatch.setenv("TLB_BALANCER_PORT", "8555")
        assert load_config_from_env().port == 8555
