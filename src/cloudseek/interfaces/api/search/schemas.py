"""Request validation for the search endpoint."""

from __future__ import annotations

import json
import re
from typing import Any, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from cloudseek.domain.entities import SearchRequestProfile

MAX_KEYWORD_LENGTH = 100
MAX_CHANNELS = 50
MAX_PLUGINS = 20
MAX_CLOUD_TYPES = 10

# Letters, digits, CJK unified ideographs and whitespace.
KEYWORD_RE = re.compile(r"^[a-zA-Z0-9\u4e00-\u9fa5\s]+$")


def validate_keyword(value: Any) -> str:
    if not isinstance(value, str):
        raise ValueError("keyword must be a string")
    value = value.strip()
    if not value:
        raise ValueError("keyword must not be empty")
    if len(value) > MAX_KEYWORD_LENGTH:
        raise ValueError(f"keyword too long (max {MAX_KEYWORD_LENGTH} characters)")
    if not KEYWORD_RE.match(value):
        raise ValueError(
            "keyword may only contain letters, digits, Chinese characters and spaces"
        )
    return value


def _split_list(value: Any) -> Any:
    """Accept comma-separated strings and arrays; blanks are dropped."""
    if value is None:
        return None
    if isinstance(value, str):
        items = [item.strip() for item in value.split(",")]
    elif isinstance(value, (list, tuple)):
        items = [item.strip() if isinstance(item, str) else item for item in value]
    else:
        return value
    items = [item for item in items if item != ""]
    return items or None


class SearchRequestModel(BaseModel):
    """Search parameters as accepted on ``/api/search`` (query or JSON body)."""

    model_config = ConfigDict(extra="ignore")

    kw: str
    conc: Optional[int] = Field(default=None, ge=1, le=20)
    channels: Optional[list[str]] = Field(default=None, max_length=MAX_CHANNELS)
    refresh: bool = False
    res: Literal["all", "results", "merged_by_type"] = "merged_by_type"
    src: Literal["all", "tg", "plugin"] = "all"
    plugins: Optional[list[str]] = Field(default=None, max_length=MAX_PLUGINS)
    cloud_types: Optional[list[str]] = Field(default=None, max_length=MAX_CLOUD_TYPES)
    ext: dict[str, Any] = Field(default_factory=dict)

    @field_validator("kw", mode="before")
    @classmethod
    def _validate_kw(cls, v: Any) -> str:
        return validate_keyword(v)

    @field_validator("conc", mode="before")
    @classmethod
    def _validate_conc(cls, v: Any) -> Any:
        return None if v in ("", None) else v

    @field_validator("refresh", mode="before")
    @classmethod
    def _validate_refresh(cls, v: Any) -> Any:
        if v in ("", None):
            return False
        return v

    @field_validator("channels", "plugins", "cloud_types", mode="before")
    @classmethod
    def _validate_lists(cls, v: Any) -> Any:
        return _split_list(v)

    @field_validator("ext", mode="before")
    @classmethod
    def _validate_ext(cls, v: Any) -> Any:
        if v in ("", None):
            return {}
        if isinstance(v, str):
            try:
                v = json.loads(v)
            except json.JSONDecodeError as e:
                raise ValueError("ext must be a valid JSON object") from e
        if not isinstance(v, dict):
            raise ValueError("ext must be a JSON object")
        return v

    @model_validator(mode="before")
    @classmethod
    def _fill_defaults(cls, data: Any) -> Any:
        # Blank res/src fall back to their defaults.
        if isinstance(data, dict):
            data = {
                k: v
                for k, v in data.items()
                if not (k in ("res", "src") and v in ("", None))
            }
        return data

    @model_validator(mode="after")
    def _apply_source_type(self) -> "SearchRequestModel":
        if self.src == "tg":
            self.plugins = None
        elif self.src == "plugin":
            self.channels = None
        return self

    def to_profile(self) -> SearchRequestProfile:
        return SearchRequestProfile(
            keyword=self.kw,
            channels=tuple(self.channels) if self.channels else None,
            plugins=tuple(self.plugins) if self.plugins else None,
            cloud_types=tuple(self.cloud_types) if self.cloud_types else None,
            concurrency=self.conc,
            force_refresh=self.refresh,
            result_type=self.res,
            source_type=self.src,
            ext=self.ext,
        )


class HotSearchRecordModel(BaseModel):
    term: str

    @field_validator("term", mode="before")
    @classmethod
    def _validate_term(cls, v: Any) -> str:
        return validate_keyword(v)
