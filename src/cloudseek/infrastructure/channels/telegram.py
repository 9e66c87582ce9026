"""Telegram public channel searcher (t.me/s web preview).

The web preview at ``https://t.me/s/<channel>?q=<keyword>`` renders the
matching messages as HTML widgets; no bot token or API session is
needed.
"""

from __future__ import annotations

from typing import Any, Mapping

import httpx
import structlog
from bs4 import BeautifulSoup, Tag

from cloudseek.domain.entities import SearchResult
from cloudseek.infrastructure.channels.link_classifier import extract_links

log = structlog.get_logger(__name__)

DEFAULT_BASE_URL = "https://t.me/s"
DEFAULT_TIMEOUT_SECONDS = 10.0
DEFAULT_USER_AGENT = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) "
    "AppleWebKit/537.36 (KHTML, like Gecko) "
    "Chrome/124.0 Safari/537.36"
)


def _message_text(node: Tag) -> str:
    for br in node.find_all("br"):
        br.replace_with("\n")
    return node.get_text().strip()


def parse_channel_page(html: str, channel: str) -> list[SearchResult]:
    """Parse a t.me/s page into results. Messages without links are skipped."""
    soup = BeautifulSoup(html, "lxml")
    results: list[SearchResult] = []

    for message in soup.select("div.tgme_widget_message[data-post]"):
        post = str(message.get("data-post", ""))
        message_id = post.rsplit("/", 1)[-1] if post else ""
        if not message_id:
            continue

        text_node = message.select_one("div.tgme_widget_message_text")
        if text_node is None:
            continue
        hrefs = [
            str(a["href"]) for a in text_node.find_all("a", href=True)
        ]
        text = _message_text(text_node)

        links = extract_links(text, hrefs)
        if not links:
            continue

        time_node = message.select_one("a.tgme_widget_message_date time[datetime]")
        posted_at = str(time_node["datetime"]) if time_node is not None else ""
        title = next((line.strip() for line in text.splitlines() if line.strip()), "")

        results.append(
            SearchResult(
                unique_id=f"{channel}:{message_id}",
                message_id=message_id,
                channel=channel,
                datetime=posted_at,
                title=title,
                content=text,
                links=tuple(links),
            )
        )

    # the preview lists oldest first
    results.reverse()
    return results


class TelegramChannelSearcher:
    """Searches public Telegram channels through the web preview.

    HTTP errors propagate; the search orchestrator isolates them per
    channel.

    Args:
        base_url: Preview root (default ``https://t.me/s``).
        timeout_seconds: Per-request timeout.
        user_agent: User-Agent header.
        client: Pre-built httpx client (tests). Created lazily otherwise.
    """

    def __init__(
        self,
        *,
        base_url: str = DEFAULT_BASE_URL,
        timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS,
        user_agent: str = DEFAULT_USER_AGENT,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self._timeout = timeout_seconds
        self._user_agent = user_agent
        self._client = client

    async def _ensure_client(self) -> httpx.AsyncClient:
        """Create httpx client if not already running."""
        if self._client is None:
            self._client = httpx.AsyncClient(
                timeout=self._timeout,
                follow_redirects=True,
                headers={"User-Agent": self._user_agent},
            )
        return self._client

    async def aclose(self) -> None:
        """Close httpx client."""
        if self._client is not None:
            await self._client.aclose()
            self._client = None

    async def search_channel(
        self,
        channel: str,
        keyword: str,
        ext: Mapping[str, Any] | None = None,
    ) -> list[SearchResult]:
        client = await self._ensure_client()
        url = f"{self.base_url}/{channel}"
        resp = await client.get(url, params={"q": keyword})
        resp.raise_for_status()

        results = parse_channel_page(resp.text, channel)
        log.debug(
            "channel_search_done",
            channel=channel,
            keyword=keyword,
            result_count=len(results),
        )
        return results
