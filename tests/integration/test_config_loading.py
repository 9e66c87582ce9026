"""Integration tests for configuration loading with layered precedence.

Tests the real load_config() function with actual YAML files, environment
variables, and CLI overrides to verify precedence: defaults < YAML < ENV < CLI.
"""

from __future__ import annotations

from pathlib import Path

import pytest
import yaml
from pydantic import ValidationError

from cloudseek.infrastructure.config.load import load_config

pytestmark = pytest.mark.integration


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    import os

    for key in list(os.environ):
        if key.startswith("CLOUDSEEK_"):
            monkeypatch.delenv(key, raising=False)


@pytest.fixture()
def yaml_config(tmp_path: Path) -> Path:
    """Write a minimal YAML config and return its path."""
    config = {
        "app_name": "cloudseek-test",
        "environment": "test",
        "plugins": {"plugin_dir": str(tmp_path / "plugins")},
        "search": {
            "default_concurrency": 8,
            "default_channels": ["chan_a", "chan_b"],
        },
        "cache": {"ttl_minutes": 10},
        "http": {"timeout_seconds": 15.0, "user_agent": "TestAgent/1.0"},
        "logging": {"level": "DEBUG", "format": "console"},
    }
    path = tmp_path / "config.yaml"
    path.write_text(yaml.dump(config), encoding="utf-8")
    return path


class TestDefaultsOnly:
    """Load with no YAML, no ENV, no CLI: pure defaults."""

    def test_defaults_produce_valid_config(self) -> None:
        config = load_config()
        assert config.app_name == "cloudseek"
        assert config.environment == "dev"
        assert config.plugin_dir == Path("plugins")
        assert config.search.default_concurrency == 5
        assert config.search.plugin_timeout_ms == 10_000
        assert config.cache.enabled is True
        assert config.cache.ttl_ms == 30 * 60 * 1000
        assert config.rate_limit.max_requests == 60
        assert config.hot_search.backend == "memory"
        assert "赌博" in config.hot_search.forbidden_terms
        assert config.telegram_base_url == "https://t.me/s"
        assert config.log_format == "console"
        assert config.admin_token is None

    def test_prod_derives_json_logs(self) -> None:
        config = load_config(cli_overrides={"environment": "prod"})
        assert config.log_format == "json"


class TestYamlOverrides:
    def test_yaml_overrides_defaults(self, yaml_config: Path) -> None:
        config = load_config(config_path=yaml_config)
        assert config.app_name == "cloudseek-test"
        assert config.search.default_concurrency == 8
        assert config.search.default_channels == ["chan_a", "chan_b"]
        assert config.cache.ttl_minutes == 10
        assert config.http_user_agent == "TestAgent/1.0"
        assert config.log_level == "DEBUG"
        # untouched keys in a partially set section keep their defaults
        assert config.cache.max_size == 1000
        assert config.search.plugin_timeout_ms == 10_000

    def test_yaml_file_not_found_raises(self, tmp_path: Path) -> None:
        with pytest.raises(FileNotFoundError):
            load_config(config_path=tmp_path / "nonexistent.yaml")

    def test_yaml_must_be_mapping(self, tmp_path: Path) -> None:
        path = tmp_path / "list.yaml"
        path.write_text("- a\n- b\n", encoding="utf-8")
        with pytest.raises(ValueError, match="mapping"):
            load_config(config_path=path)

    def test_empty_yaml_keeps_defaults(self, tmp_path: Path) -> None:
        path = tmp_path / "empty.yaml"
        path.write_text("", encoding="utf-8")
        assert load_config(config_path=path).app_name == "cloudseek"


class TestEnvOverrides:
    def test_env_overrides_yaml(
        self, yaml_config: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        monkeypatch.setenv("CLOUDSEEK_LOG_LEVEL", "WARNING")
        monkeypatch.setenv("CLOUDSEEK_SEARCH_DEFAULT_CONCURRENCY", "3")
        monkeypatch.setenv("CLOUDSEEK_SEARCH_DEFAULT_CHANNELS", "x, y")

        config = load_config(config_path=yaml_config)
        assert config.log_level == "WARNING"
        assert config.search.default_concurrency == 3
        assert config.search.default_channels == ["x", "y"]
        assert config.app_name == "cloudseek-test"

    def test_env_flags(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("CLOUDSEEK_CACHE_ENABLED", "false")
        monkeypatch.setenv("CLOUDSEEK_HOT_SEARCH_BACKEND", "diskcache")
        monkeypatch.setenv("CLOUDSEEK_ADMIN_TOKEN", "s3cret")

        config = load_config()
        assert config.cache.enabled is False
        assert config.hot_search.backend == "diskcache"
        assert config.admin_token == "s3cret"

    def test_dotenv_file(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        dotenv = tmp_path / ".env"
        dotenv.write_text("CLOUDSEEK_RATE_LIMIT_MAX_REQUESTS=7\n", encoding="utf-8")
        # load_dotenv writes into os.environ; register for cleanup
        monkeypatch.setenv("CLOUDSEEK_RATE_LIMIT_MAX_REQUESTS", "")
        monkeypatch.delenv("CLOUDSEEK_RATE_LIMIT_MAX_REQUESTS")

        config = load_config(dotenv_path=dotenv)
        assert config.rate_limit.max_requests == 7

    def test_missing_dotenv_raises(self, tmp_path: Path) -> None:
        with pytest.raises(FileNotFoundError):
            load_config(dotenv_path=tmp_path / "missing.env")


class TestCliOverrides:
    def test_cli_beats_env_and_yaml(
        self, yaml_config: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        monkeypatch.setenv("CLOUDSEEK_LOG_LEVEL", "WARNING")

        config = load_config(
            config_path=yaml_config,
            cli_overrides={
                "log_level": "ERROR",
                "plugin_dir": "/opt/plugins",
                "search_default_concurrency": 12,
            },
        )
        assert config.log_level == "ERROR"
        assert config.plugin_dir == Path("/opt/plugins")
        assert config.search.default_concurrency == 12


class TestValidation:
    @pytest.mark.parametrize("value", [0, 21])
    def test_concurrency_bounds(self, value: int) -> None:
        with pytest.raises(ValidationError):
            load_config(cli_overrides={"search_default_concurrency": value})

    def test_threshold_bounds(self, tmp_path: Path) -> None:
        path = tmp_path / "bad.yaml"
        path.write_text(yaml.dump({"cache": {"memory_threshold": 1.5}}), encoding="utf-8")
        with pytest.raises(ValidationError):
            load_config(config_path=path)

    def test_blank_admin_token_is_unset(self) -> None:
        config = load_config(cli_overrides={"admin_token": "   "})
        assert config.admin_token is None
