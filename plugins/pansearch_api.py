"""Generic JSON search API plugin for CloudSeek.

Queries a pan-search style endpoint (``GET {api_url}?q=<keyword>``) that
answers with::

    {"data": [{"id": ..., "title": ..., "content": ..., "time": ...,
               "links": ["https://pan.quark.cn/s/...", ...]}]}

Links are taken from the ``links`` array and from URLs found in
``content``; both are classified into storage types.

The endpoint comes from ``ext["api_url"]`` or the
``CLOUDSEEK_PANSEARCH_API_URL`` environment variable. Without one the
plugin returns no results.
"""

from __future__ import annotations

import os
from typing import Any, Mapping

import httpx
import structlog

from cloudseek.domain.entities import SearchResult
from cloudseek.domain.plugins import BaseSearchPlugin
from cloudseek.infrastructure.channels.link_classifier import extract_links

log = structlog.get_logger(__name__)

_API_URL_ENV = "CLOUDSEEK_PANSEARCH_API_URL"
_TIMEOUT_SECONDS = 8.0
_MAX_RESULTS = 100


def _to_result(item: Mapping[str, Any], source: str) -> SearchResult | None:
    item_id = str(item.get("id") or "").strip()
    if not item_id:
        return None

    content = str(item.get("content") or "")
    explicit = [u for u in item.get("links") or [] if isinstance(u, str)]
    links = extract_links(content, explicit)
    if not links:
        return None

    title = str(item.get("title") or "").strip() or content.split("\n", 1)[0].strip()
    return SearchResult(
        unique_id=f"{source}-{item_id}",
        channel="",
        datetime=str(item.get("time") or ""),
        title=title,
        content=content,
        links=links,
    )


class PanSearchApiPlugin(BaseSearchPlugin):
    """Plugin for JSON pan-search APIs using httpx."""

    name = "pansearch_api"
    priority = 50

    async def search(
        self, keyword: str, ext: Mapping[str, Any] | None = None
    ) -> list[SearchResult]:
        api_url = (ext or {}).get("api_url") or os.getenv(_API_URL_ENV)
        if not api_url:
            return []

        async with httpx.AsyncClient(
            timeout=_TIMEOUT_SECONDS, follow_redirects=True
        ) as client:
            resp = await client.get(api_url, params={"q": keyword})
            resp.raise_for_status()
            payload = resp.json()

        items = payload.get("data") if isinstance(payload, dict) else None
        if not isinstance(items, list):
            log.warning("pansearch_api_unexpected_payload", api_url=api_url)
            return []

        results: list[SearchResult] = []
        for item in items[:_MAX_RESULTS]:
            if not isinstance(item, Mapping):
                continue
            result = _to_result(item, self.name)
            if result is not None:
                results.append(result)

        log.debug("pansearch_api_done", keyword=keyword, results=len(results))
        return results


plugin = PanSearchApiPlugin()
