from .cloud_types import KNOWN_CLOUD_TYPES, CloudType
from .errors import AppError, ErrorCode, SearchError
from .hot_search import HotSearchItem, HotSearchStats
from .search import (
    PLUGIN_TIMEOUT_EXT_KEY,
    Link,
    MergedLinks,
    ResultType,
    SearchRequestProfile,
    SearchResponse,
    SearchResult,
    SourceType,
)

__all__ = [
    "KNOWN_CLOUD_TYPES",
    "PLUGIN_TIMEOUT_EXT_KEY",
    "AppError",
    "CloudType",
    "ErrorCode",
    "HotSearchItem",
    "HotSearchStats",
    "Link",
    "MergedLinks",
    "ResultType",
    "SearchError",
    "SearchRequestProfile",
    "SearchResponse",
    "SearchResult",
    "SourceType",
]
