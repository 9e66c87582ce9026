"""Pydantic configuration models with validation."""

from __future__ import annotations

from pathlib import Path
from typing import Annotated, Any, Literal, Optional

from pydantic import (
    AliasChoices,
    AliasPath,
    BaseModel,
    Field,
    field_validator,
    model_validator,
)
from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict

Environment = Literal["dev", "test", "prod"]
LogLevel = Literal["DEBUG", "INFO", "WARNING", "ERROR"]
LogFormat = Literal["json", "console"]
HotSearchBackend = Literal["memory", "diskcache"]

MAX_CONCURRENCY = 20


def _normalize_path(value: Any) -> Path:
    """
    Normalize a path-like value without causing filesystem side-effects.

    This function MUST NOT create directories or files.
    """
    if isinstance(value, Path):
        return value.expanduser()
    if isinstance(value, str):
        return Path(value).expanduser()
    raise TypeError(f"Expected path-like value, got: {type(value)!r}")


def _split_list(value: Any) -> Any:
    """Accept ``"a, b"`` as well as ``["a", "b"]`` for list settings."""
    if value is None:
        return None
    if isinstance(value, str):
        return [item.strip() for item in value.split(",") if item.strip()]
    return value


class SearchConfig(BaseModel):
    """Search orchestration defaults."""

    default_concurrency: int = Field(
        default=5,
        ge=1,
        le=MAX_CONCURRENCY,
        description="Sources searched at once when the request sets no override.",
    )
    plugin_timeout_ms: int = Field(
        default=10_000,
        gt=0,
        description="Per-source timeout in milliseconds.",
    )
    priority_channels: list[str] = Field(
        default_factory=list,
        description="Channels always searched first when selected.",
    )
    default_channels: list[str] = Field(
        default_factory=list,
        description="Channels searched when the request names none.",
    )
    filter_by_keyword: bool = Field(
        default=False,
        description="Drop results whose title/content lack the keyword.",
    )

    @field_validator("priority_channels", "default_channels", mode="before")
    @classmethod
    def _validate_channels(cls, v: Any) -> Any:
        return _split_list(v) or []


class CacheConfig(BaseModel):
    """In-memory search result cache."""

    enabled: bool = Field(default=True, description="Cache search results.")
    ttl_minutes: int = Field(
        default=30,
        gt=0,
        description="TTL for cached search results (minutes).",
    )
    max_size: int = Field(default=1000, gt=0, description="Max cached searches.")
    max_memory_bytes: int = Field(
        default=100 * 1024 * 1024,
        gt=0,
        description="Memory budget for cached values (estimated bytes).",
    )
    cleanup_interval_ms: int = Field(
        default=5 * 60 * 1000,
        ge=0,
        description="Minimum time between opportunistic cleanups.",
    )
    memory_threshold: float = Field(
        default=0.8,
        gt=0,
        le=1,
        description="Utilisation above which ~10% of the cache is released.",
    )

    @property
    def ttl_ms(self) -> int:
        return self.ttl_minutes * 60 * 1000


class RateLimitConfig(BaseModel):
    """Fixed-window per-client rate limiting."""

    enabled: bool = Field(default=True)
    window_ms: int = Field(default=60_000, gt=0, description="Window length (ms).")
    max_requests: int = Field(
        default=60, gt=0, description="Requests allowed per client per window."
    )
    skip_paths: list[str] = Field(
        default_factory=lambda: ["/api/health", "/api/hot-search-stats"],
        description="Path prefixes exempt from rate limiting.",
    )

    @field_validator("skip_paths", mode="before")
    @classmethod
    def _validate_skip_paths(cls, v: Any) -> Any:
        return _split_list(v) or []


class HotSearchConfig(BaseModel):
    """Hot search term tracking."""

    backend: HotSearchBackend = Field(
        default="memory",
        description="Store backend: 'memory' or 'diskcache' (SQLite).",
    )
    directory: Path = Field(
        default=Path("./data/hot_search"),
        description="Diskcache SQLite DB path (diskcache backend only).",
    )
    max_entries: int = Field(default=30, gt=0, description="Terms kept.")
    forbidden_terms: list[str] = Field(
        default_factory=list,
        description="Terms containing any of these are never recorded.",
    )

    @field_validator("directory", mode="before")
    @classmethod
    def _validate_directory(cls, v: Any) -> Path:
        return _normalize_path(v)

    @field_validator("forbidden_terms", mode="before")
    @classmethod
    def _validate_forbidden(cls, v: Any) -> Any:
        return _split_list(v) or []


class AppConfig(BaseModel):
    """
    Canonical application configuration (validated, final).

    Note:
    - YAML is expected to be sectioned (plugins/search/cache/rate_limit/
      hot_search/http/telegram/logging).
    - Environment variables are handled by EnvOverrides(BaseSettings) to allow strict
      precedence control (defaults < YAML < ENV < CLI) in load.py.
    """

    # General
    app_name: str = Field(default="cloudseek", description="Application name.")
    environment: Environment = Field(
        default="dev",
        description="Runtime environment (affects defaults like log format).",
    )

    # Plugins (YAML section: plugins.plugin_dir)
    plugin_dir: Path = Field(
        default=Path("./plugins"),
        validation_alias=AliasChoices(
            "plugin_dir",
            AliasPath("plugins", "plugin_dir"),
        ),
        description="Directory containing Python search plugins.",
    )

    search: SearchConfig = Field(default_factory=SearchConfig)
    cache: CacheConfig = Field(default_factory=CacheConfig)
    rate_limit: RateLimitConfig = Field(default_factory=RateLimitConfig)
    hot_search: HotSearchConfig = Field(default_factory=HotSearchConfig)

    # HTTP client (YAML section: http.*)
    http_timeout_seconds: float = Field(
        default=10.0,
        validation_alias=AliasChoices(
            "http_timeout_seconds",
            AliasPath("http", "timeout_seconds"),
        ),
        description="HTTP timeout in seconds for channel requests.",
    )
    http_user_agent: str = Field(
        default="cloudseek/0.1.0",
        validation_alias=AliasChoices(
            "http_user_agent",
            AliasPath("http", "user_agent"),
        ),
        description="User-Agent for outgoing HTTP requests.",
    )

    # Telegram (YAML section: telegram.*)
    telegram_base_url: str = Field(
        default="https://t.me/s",
        validation_alias=AliasChoices(
            "telegram_base_url",
            AliasPath("telegram", "base_url"),
        ),
        description="Root of the public channel web preview.",
    )

    # Logging (YAML section: logging.*)
    log_level: LogLevel = Field(
        default="INFO",
        validation_alias=AliasChoices(
            "log_level",
            AliasPath("logging", "level"),
        ),
        description="Log level.",
    )
    log_format: Optional[LogFormat] = Field(
        default=None,
        validation_alias=AliasChoices(
            "log_format",
            AliasPath("logging", "format"),
        ),
        description=(
            "Log renderer format (console/json). If unset, derived from environment."
        ),
    )

    admin_token: str | None = Field(
        default=None,
        description="Token required by the metrics endpoints. Unset = open.",
    )

    @field_validator("plugin_dir", mode="before")
    @classmethod
    def _validate_paths(cls, v: Any) -> Path:
        return _normalize_path(v)

    @field_validator("http_timeout_seconds")
    @classmethod
    def _validate_http_timeout(cls, v: float) -> float:
        if v <= 0:
            raise ValueError("http_timeout_seconds must be > 0")
        return v

    @field_validator("admin_token")
    @classmethod
    def _validate_admin_token(cls, v: str | None) -> str | None:
        if v is not None and not v.strip():
            return None
        return v

    @model_validator(mode="after")
    def _derive_defaults(self) -> "AppConfig":
        # Default log format: console in dev/test, json in prod.
        if self.log_format is None:
            self.log_format = "json" if self.environment == "prod" else "console"
        return self


class EnvOverrides(BaseSettings):
    """
    Environment-variable overrides (all optional).

    Intended usage:
    - load.py creates EnvOverrides() to read CLOUDSEEK_* variables,
      converts to dict of set values, merges into YAML/defaults,
      then validates AppConfig.

    Supported env var examples (flat, explicit):
    - CLOUDSEEK_PLUGIN_DIR
    - CLOUDSEEK_SEARCH_DEFAULT_CONCURRENCY
    - CLOUDSEEK_SEARCH_DEFAULT_CHANNELS=tgsearchers3,Aliyun_4K_Movies
    - CLOUDSEEK_CACHE_ENABLED
    - CLOUDSEEK_LOG_LEVEL
    """

    model_config = SettingsConfigDict(
        env_prefix="CLOUDSEEK_",
        extra="ignore",
        case_sensitive=False,
    )

    app_name: Optional[str] = None
    environment: Optional[Environment] = None

    plugin_dir: Optional[Path] = None

    search_default_concurrency: Optional[int] = None
    search_plugin_timeout_ms: Optional[int] = None
    search_priority_channels: Annotated[Optional[list[str]], NoDecode] = None
    search_default_channels: Annotated[Optional[list[str]], NoDecode] = None
    search_filter_by_keyword: Optional[bool] = None

    cache_enabled: Optional[bool] = None
    cache_ttl_minutes: Optional[int] = None
    cache_max_size: Optional[int] = None
    cache_max_memory_bytes: Optional[int] = None

    rate_limit_enabled: Optional[bool] = None
    rate_limit_window_ms: Optional[int] = None
    rate_limit_max_requests: Optional[int] = None

    hot_search_backend: Optional[HotSearchBackend] = None
    hot_search_directory: Optional[Path] = None
    hot_search_max_entries: Optional[int] = None

    http_timeout_seconds: Optional[float] = None
    http_user_agent: Optional[str] = None

    telegram_base_url: Optional[str] = None

    log_level: Optional[LogLevel] = None
    log_format: Optional[LogFormat] = None

    admin_token: Optional[str] = None

    @field_validator("plugin_dir", "hot_search_directory", mode="before")
    @classmethod
    def _validate_paths(cls, v: Any) -> Any:
        if v is None:
            return None
        return _normalize_path(v)

    @field_validator("search_priority_channels", "search_default_channels", mode="before")
    @classmethod
    def _validate_lists(cls, v: Any) -> Any:
        return _split_list(v)

    def to_update_dict(self) -> dict[str, Any]:
        """
        Return only values that were actually provided (non-None), for merging.
        """
        return self.model_dump(exclude_none=True)
