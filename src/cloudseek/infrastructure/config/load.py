from __future__ import annotations

from copy import deepcopy
from pathlib import Path
from typing import Any, Mapping

import yaml
from dotenv import load_dotenv

from .defaults import DEFAULT_CONFIG
from .schema import AppConfig, EnvOverrides


_SECTION_KEYS: set[str] = {
    "plugins",
    "search",
    "cache",
    "rate_limit",
    "hot_search",
    "http",
    "telegram",
    "logging",
}

# Flat keys (env vars, CLI flags) -> (section, key)
_FLAT_MAP: dict[str, tuple[str, str]] = {
    "plugin_dir": ("plugins", "plugin_dir"),
    "search_default_concurrency": ("search", "default_concurrency"),
    "search_plugin_timeout_ms": ("search", "plugin_timeout_ms"),
    "search_priority_channels": ("search", "priority_channels"),
    "search_default_channels": ("search", "default_channels"),
    "search_filter_by_keyword": ("search", "filter_by_keyword"),
    "cache_enabled": ("cache", "enabled"),
    "cache_ttl_minutes": ("cache", "ttl_minutes"),
    "cache_max_size": ("cache", "max_size"),
    "cache_max_memory_bytes": ("cache", "max_memory_bytes"),
    "rate_limit_enabled": ("rate_limit", "enabled"),
    "rate_limit_window_ms": ("rate_limit", "window_ms"),
    "rate_limit_max_requests": ("rate_limit", "max_requests"),
    "hot_search_backend": ("hot_search", "backend"),
    "hot_search_directory": ("hot_search", "directory"),
    "hot_search_max_entries": ("hot_search", "max_entries"),
    "http_timeout_seconds": ("http", "timeout_seconds"),
    "http_user_agent": ("http", "user_agent"),
    "telegram_base_url": ("telegram", "base_url"),
    "log_level": ("logging", "level"),
    "log_format": ("logging", "format"),
}


def _deep_merge(base: dict[str, Any], override: Mapping[str, Any]) -> dict[str, Any]:
    """
    Recursively merge `override` into `base` and return `base`.

    Rules:
    - dict + dict => deep merge
    - otherwise => override wins
    """
    for key, value in override.items():
        if (
            key in base
            and isinstance(base[key], dict)
            and isinstance(value, Mapping)
        ):
            _deep_merge(base[key], value)
        else:
            base[key] = value
    return base


def _normalize_layer(data: Mapping[str, Any]) -> dict[str, Any]:
    """
    Normalize a layer (defaults/YAML/ENV/CLI) into the canonical *sectioned* shape.

    Sectioned blocks pass through unchanged; flat keys such as
    ``search_default_concurrency`` are moved into their section.
    """
    out: dict[str, Any] = {}

    # Pass through already sectioned blocks
    for section in _SECTION_KEYS:
        if section in data and isinstance(data[section], Mapping):
            out[section] = dict(data[section])

    # General
    for key in ("app_name", "environment", "admin_token"):
        if key in data:
            out[key] = data[key]

    for flat_key, (section, section_key) in _FLAT_MAP.items():
        if flat_key in data:
            out.setdefault(section, {})
            out[section][section_key] = data[flat_key]

    return out


def _read_yaml_config(config_path: Path) -> dict[str, Any]:
    raw = config_path.read_text(encoding="utf-8")
    parsed = yaml.safe_load(raw)
    if parsed is None:
        return {}
    if not isinstance(parsed, dict):
        raise ValueError(
            f"Config YAML must be a mapping, got: {type(parsed)!r}")
    return parsed


def load_config(
    *,
    config_path: Path | None = None,
    dotenv_path: Path | None = None,
    cli_overrides: dict[str, Any] | None = None,
) -> AppConfig:
    """
    Load configuration with strict precedence:
    defaults < YAML file < env vars < cli overrides

    This function MUST NOT create files or directories (no filesystem side-effects).
    """
    cli_overrides = cli_overrides or {}

    # Load .env first so it participates as "env vars" layer.
    if dotenv_path is not None:
        if not dotenv_path.exists():
            raise FileNotFoundError(dotenv_path)
        load_dotenv(dotenv_path, override=False)

    base = _normalize_layer(deepcopy(DEFAULT_CONFIG))

    if config_path is not None:
        if not config_path.exists():
            raise FileNotFoundError(config_path)
        yaml_layer = _normalize_layer(_read_yaml_config(config_path))
        _deep_merge(base, yaml_layer)

    env_layer_flat = EnvOverrides().to_update_dict()
    env_layer = _normalize_layer(env_layer_flat)
    _deep_merge(base, env_layer)

    cli_layer = _normalize_layer(cli_overrides)
    _deep_merge(base, cli_layer)

    # Validate final merged config (single source of truth).
    return AppConfig.model_validate(base)
