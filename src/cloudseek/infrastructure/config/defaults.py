"""Hardcoded default configuration values."""

from __future__ import annotations

from typing import Any

DEFAULT_CONFIG: dict[str, Any] = {
    "app_name": "cloudseek",
    "environment": "dev",
    "plugins": {
        "plugin_dir": "./plugins",
    },
    "search": {
        "default_concurrency": 5,
        "plugin_timeout_ms": 10_000,
        "priority_channels": [],
        "default_channels": [],
        "filter_by_keyword": False,
    },
    "cache": {
        "enabled": True,
        "ttl_minutes": 30,
        "max_size": 1000,
        "max_memory_bytes": 100 * 1024 * 1024,
        "cleanup_interval_ms": 5 * 60 * 1000,
        "memory_threshold": 0.8,
    },
    "rate_limit": {
        "enabled": True,
        "window_ms": 60_000,
        "max_requests": 60,
        "skip_paths": ["/api/health", "/api/hot-search-stats"],
    },
    "hot_search": {
        "backend": "memory",
        "directory": "./data/hot_search",
        "max_entries": 30,
        "forbidden_terms": [
            "政治",
            "暴力",
            "色情",
            "赌博",
            "毒品",
            "fuck",
            "shit",
            "bitch",
        ],
    },
    "http": {
        "timeout_seconds": 10.0,
        "user_agent": "cloudseek/0.1.0",
    },
    "telegram": {
        "base_url": "https://t.me/s",
    },
    "logging": {
        "level": "INFO",
        "format": None,  # Derived from environment in schema.py
    },
    "admin_token": None,
}
