"""Search orchestration use case.

Keyword -> cache lookup -> bounded fan-out to channels and plugins
-> merge by type -> cache write -> cloud-type filter -> shaped response.
"""

from __future__ import annotations

import asyncio
import dataclasses
import hashlib
import time
from collections.abc import Awaitable, Callable, Iterable, Mapping, Sequence
from dataclasses import dataclass
from typing import Any, Literal, Protocol

import structlog

from cloudseek.application.merger import (
    filter_merged_by_cloud_types,
    group_links_by_type,
    merge_merged_by_type,
)
from cloudseek.domain.entities import (
    CloudType,
    Link,
    MergedLinks,
    ResultType,
    SearchError,
    SearchRequestProfile,
    SearchResponse,
    SearchResult,
    SourceType,
)
from cloudseek.domain.plugins import SearchPluginProtocol
from cloudseek.domain.ports.cache import CachePort
from cloudseek.domain.ports.channel_searcher import ChannelSearcherPort
from cloudseek.domain.ports.plugin_registry import PluginRegistryPort

# ---------------------------------------------------------------------------
# Protocols: what this use case needs from its dependencies.
# Infrastructure components satisfy these via structural subtyping.
# ---------------------------------------------------------------------------


class _SearchConfig(Protocol):
    """Configuration values consumed by SearchUseCase."""

    default_concurrency: int
    plugin_timeout_ms: int
    priority_channels: list[str]
    default_channels: list[str]
    filter_by_keyword: bool


SourceOutcome = Literal["success", "failure", "timeout"]


class _MetricsRecorder(Protocol):
    """Records per-source outcomes and search totals."""

    def search_started(self) -> None: ...

    def record_search(
        self,
        duration_ns: int,
        result_count: int,
        *,
        cache_hit: bool,
    ) -> None: ...

    def record_plugin_search(
        self,
        name: str,
        duration_ns: int,
        result_count: int,
        *,
        outcome: SourceOutcome,
    ) -> None: ...


log = structlog.get_logger(__name__)

MIN_CONCURRENCY = 1
MAX_CONCURRENCY = 20


def _search_cache_key(
    keyword: str,
    source_type: str,
    channels: Iterable[str],
    plugins: Iterable[str],
) -> str:
    """Compute deterministic cache key for a search.

    The cloud-type filter is not part of the key: the cache
    holds the unfiltered assembly and filtering happens on read.
    """
    raw = "|".join(
        [
            keyword.lower().strip(),
            source_type,
            ",".join(sorted(channels)),
            ",".join(sorted(plugins)),
        ]
    )
    return f"search:{hashlib.sha256(raw.encode()).hexdigest()[:16]}"


def _clamp_concurrency(value: int) -> int:
    return max(MIN_CONCURRENCY, min(MAX_CONCURRENCY, value))


def _order_channels(
    channels: Iterable[str], priority_channels: Iterable[str]
) -> list[str]:
    """De-duplicate *channels* and move configured priority channels first."""
    unique = list(dict.fromkeys(c for c in channels if c))
    present = set(unique)
    front = [c for c in dict.fromkeys(priority_channels) if c in present]
    front_set = set(front)
    return front + [c for c in unique if c not in front_set]


def _matches_keyword(result: SearchResult, keyword: str) -> bool:
    haystack = f"{result.title}\n{result.content}".lower()
    return all(term in haystack for term in keyword.lower().split())


def _clean_result(result: SearchResult) -> SearchResult:
    """Drop malformed links and normalize link types to known cloud types."""
    links = tuple(
        link
        if link.type == CloudType.normalize(link.type).value
        else dataclasses.replace(link, type=CloudType.normalize(link.type).value)
        for link in result.links
        if isinstance(link, Link) and isinstance(link.url, str)
    )
    if links == result.links:
        return result
    return dataclasses.replace(result, links=links)


@dataclass(frozen=True)
class AssembledSearch:
    """Unfiltered search outcome as stored in the cache."""

    results: tuple[SearchResult, ...]
    merged_by_type: MergedLinks


@dataclass(frozen=True)
class _Source:
    kind: Literal["channel", "plugin"]
    name: str
    run: Callable[[], Awaitable[list[SearchResult] | None]]
    skip_filter: Callable[[], bool] = lambda: False


@dataclass(frozen=True)
class _SourceResults:
    results: list[SearchResult]
    skip_filter: bool = False


class SearchUseCase:
    """Aggregates results from channels and plugins for one keyword.

    Individual sources may fail or time out; they then contribute no
    results and never fail the whole search. One semaphore per call
    bounds how many sources run at once, shared between the channel
    and plugin fan-outs.
    """

    def __init__(
        self,
        *,
        plugins: PluginRegistryPort,
        config: _SearchConfig,
        channel_searcher: ChannelSearcherPort | None = None,
        cache: CachePort | None = None,
        cache_ttl_ms: int = 30 * 60 * 1000,
        metrics: _MetricsRecorder | None = None,
    ) -> None:
        """Initialize use case with dependencies.

        Args:
            plugins: Priority-ordered plugin registry.
            config: Search defaults (concurrency, timeout, channels).
            channel_searcher: Searcher used for channel sources. Without
                one, channel sources are skipped.
            cache: Result cache. ``None`` disables caching.
            cache_ttl_ms: TTL for cached searches. 0 disables caching.
            metrics: Optional recorder for per-source outcomes.
        """
        self._plugins = plugins
        self._config = config
        self._channel_searcher = channel_searcher
        self._cache = cache
        self._cache_ttl_ms = cache_ttl_ms
        self._metrics = metrics

    async def search(
        self,
        keyword: str,
        channels: Sequence[str] | None = None,
        concurrency: int | None = None,
        force_refresh: bool = False,
        result_type: ResultType = "merged_by_type",
        source_type: SourceType = "all",
        plugins: Sequence[str] | None = None,
        cloud_types: Sequence[str] | None = None,
        ext: Mapping[str, Any] | None = None,
        *,
        abort: asyncio.Event | None = None,
    ) -> SearchResponse:
        """Keyword-argument front end for :meth:`execute`."""
        profile = SearchRequestProfile(
            keyword=keyword,
            channels=tuple(channels) if channels is not None else None,
            plugins=tuple(plugins) if plugins is not None else None,
            cloud_types=tuple(cloud_types) if cloud_types is not None else None,
            concurrency=concurrency,
            force_refresh=force_refresh,
            result_type=result_type,
            source_type=source_type,
            ext=dict(ext or {}),
        )
        return await self.execute(profile, abort=abort)

    async def execute(
        self,
        profile: SearchRequestProfile,
        *,
        abort: asyncio.Event | None = None,
    ) -> SearchResponse:
        """Run a search.

        Args:
            profile: Validated request.
            abort: When set while sources are in flight, pending sources
                are cancelled and the partial outcome is returned
                uncached.

        Raises:
            SearchError: The keyword is empty.
        """
        keyword = profile.keyword.strip()
        if not keyword:
            raise SearchError("Search keyword must not be empty")

        t0 = time.perf_counter_ns()
        if self._metrics is not None:
            self._metrics.search_started()

        plugins = self._select_plugins(profile)
        channels = self._select_channels(profile)
        cache_key = _search_cache_key(
            keyword,
            profile.source_type,
            channels,
            [p.name for p in plugins],
        )

        assembled: AssembledSearch | None = None
        if not profile.force_refresh:
            assembled = self._cache_read(cache_key, keyword)
        cache_hit = assembled is not None

        try:
            if assembled is None:
                assembled, aborted = await self._run_search(
                    profile, keyword, cache_key, channels, plugins, abort
                )
                if aborted:
                    log.info(
                        "search_aborted",
                        keyword=keyword,
                        partial_result_count=len(assembled.results),
                    )
                else:
                    self._cache_write(cache_key, assembled)

            response = self._shape(assembled, profile)
        finally:
            if self._metrics is not None:
                self._metrics.record_search(
                    time.perf_counter_ns() - t0,
                    len(assembled.results) if assembled is not None else 0,
                    cache_hit=cache_hit,
                )

        log.info(
            "search_completed",
            keyword=keyword,
            source_type=profile.source_type,
            channel_count=len(channels),
            plugin_count=len(plugins),
            total=response.total,
            cache_hit=cache_hit,
        )
        return response

    # --- selection ---
    def _select_plugins(
        self, profile: SearchRequestProfile
    ) -> list[SearchPluginProtocol]:
        if profile.source_type == "tg":
            return []
        available = self._plugins.get_plugins()
        if not profile.plugins:
            return available
        wanted = {name for name in profile.plugins if name}
        # registry order, not caller order
        return [p for p in available if p.name in wanted]

    def _select_channels(self, profile: SearchRequestProfile) -> list[str]:
        if profile.source_type == "plugin":
            return []
        requested = profile.channels or self._config.default_channels
        return _order_channels(requested, self._config.priority_channels)

    # --- cache ---
    def _cache_enabled(self) -> bool:
        return self._cache is not None and self._cache_ttl_ms > 0

    def _cache_read(self, cache_key: str, keyword: str) -> AssembledSearch | None:
        if not self._cache_enabled():
            return None
        lookup = self._cache.get(cache_key)  # type: ignore[union-attr]
        if not lookup.hit or not isinstance(lookup.value, AssembledSearch):
            return None
        log.info(
            "search_cache_hit",
            keyword=keyword,
            cache_key=cache_key,
            result_count=len(lookup.value.results),
        )
        return lookup.value

    def _cache_write(self, cache_key: str, assembled: AssembledSearch) -> None:
        if not self._cache_enabled():
            return
        self._cache.set(cache_key, assembled, self._cache_ttl_ms)  # type: ignore[union-attr]
        log.debug(
            "search_cache_stored",
            cache_key=cache_key,
            ttl_ms=self._cache_ttl_ms,
            result_count=len(assembled.results),
        )

    # --- fan-out ---
    async def _run_search(
        self,
        profile: SearchRequestProfile,
        keyword: str,
        cache_key: str,
        channels: list[str],
        plugins: list[SearchPluginProtocol],
        abort: asyncio.Event | None,
    ) -> tuple[AssembledSearch, bool]:
        concurrency = _clamp_concurrency(
            profile.concurrency
            if profile.concurrency is not None
            else self._config.default_concurrency
        )
        timeout_ms = profile.plugin_timeout_ms or self._config.plugin_timeout_ms
        semaphore = asyncio.Semaphore(concurrency)
        ext = dict(profile.ext)

        channel_sources = self._channel_sources(channels, keyword, ext)
        plugin_sources = [
            self._plugin_source(p, keyword, cache_key, ext) for p in plugins
        ]

        log.debug(
            "search_fan_out",
            keyword=keyword,
            concurrency=concurrency,
            timeout_ms=timeout_ms,
            channels=channels,
            plugins=[p.name for p in plugins],
        )

        channel_outcome, plugin_outcome = await asyncio.gather(
            self._fan_out(channel_sources, concurrency, semaphore, timeout_ms, abort),
            self._fan_out(plugin_sources, concurrency, semaphore, timeout_ms, abort),
        )

        per_source = channel_outcome + plugin_outcome
        aborted = abort is not None and abort.is_set()
        return self._assemble(per_source, keyword), aborted

    def _channel_sources(
        self, channels: list[str], keyword: str, ext: dict[str, Any]
    ) -> list[_Source]:
        if not channels:
            return []
        searcher = self._channel_searcher
        if searcher is None:
            log.debug("channel_searcher_unavailable", channels=channels)
            return []

        def _make(channel: str) -> _Source:
            return _Source(
                kind="channel",
                name=channel,
                run=lambda: searcher.search_channel(channel, keyword, ext),
            )

        return [_make(c) for c in channels]

    def _plugin_source(
        self,
        plugin: SearchPluginProtocol,
        keyword: str,
        cache_key: str,
        ext: dict[str, Any],
    ) -> _Source:
        async def _run() -> list[SearchResult] | None:
            plugin.set_main_cache_key(cache_key)
            plugin.set_current_keyword(keyword)
            return await plugin.search(keyword, ext)

        return _Source(
            kind="plugin",
            name=plugin.name,
            run=_run,
            skip_filter=plugin.skip_service_filter,
        )

    async def _fan_out(
        self,
        sources: list[_Source],
        concurrency: int,
        semaphore: asyncio.Semaphore,
        timeout_ms: int,
        abort: asyncio.Event | None,
    ) -> list[_SourceResults]:
        """Run *sources* in sequential batches of *concurrency* members.

        Returns one result list per source, in source order. Sources that
        never ran because of an abort contribute an empty list.
        """
        out: list[_SourceResults] = []
        for start in range(0, len(sources), concurrency):
            batch = sources[start : start + concurrency]
            if abort is not None and abort.is_set():
                out.extend(_SourceResults([]) for _ in batch)
                continue
            out.extend(await self._run_batch(batch, semaphore, timeout_ms, abort))
        return out

    async def _run_batch(
        self,
        batch: list[_Source],
        semaphore: asyncio.Semaphore,
        timeout_ms: int,
        abort: asyncio.Event | None,
    ) -> list[_SourceResults]:
        tasks = [
            asyncio.create_task(self._search_one(src, semaphore, timeout_ms))
            for src in batch
        ]
        abort_waiter = (
            asyncio.create_task(abort.wait()) if abort is not None else None
        )
        try:
            pending: set[asyncio.Task[Any]] = set(tasks)
            while pending:
                waiting = pending | {abort_waiter} if abort_waiter else pending
                done, _ = await asyncio.wait(
                    waiting, return_when=asyncio.FIRST_COMPLETED
                )
                pending -= done
                if abort_waiter is not None and abort_waiter in done:
                    break
        finally:
            # Cancel whatever is still running (abort or caller cancellation).
            leftovers = [t for t in tasks if not t.done()]
            for task in leftovers:
                task.cancel()
            if abort_waiter is not None:
                abort_waiter.cancel()
            if leftovers:
                await asyncio.gather(*leftovers, return_exceptions=True)

        return [
            task.result() if not task.cancelled() else _SourceResults([])
            for task in tasks
        ]

    async def _search_one(
        self,
        source: _Source,
        semaphore: asyncio.Semaphore,
        timeout_ms: int,
    ) -> _SourceResults:
        """Search a single source, absorbing its failures and timeouts.

        Everything that touches source-provided objects runs here, so a
        malformed result or a raising hook fails only this source.
        """
        async with semaphore:
            t0 = time.perf_counter_ns()
            outcome: SourceOutcome = "failure"
            results: list[SearchResult] = []
            skip_filter = False
            try:
                raw = await asyncio.wait_for(source.run(), timeout=timeout_ms / 1000)
                cleaned = [
                    _clean_result(r) for r in raw or [] if isinstance(r, SearchResult)
                ]
                skip_filter = bool(source.skip_filter())
                results = cleaned
                outcome = "success"
            except TimeoutError:
                outcome = "timeout"
                log.warning(
                    "plugin_search_timeout",
                    source=source.kind,
                    plugin=source.name,
                    timeout_ms=timeout_ms,
                )
            except Exception:
                log.warning(
                    "plugin_search_failed",
                    source=source.kind,
                    plugin=source.name,
                    exc_info=True,
                )
            except BaseException:
                log.debug("plugin_search_cancelled", plugin=source.name)
                raise
            else:
                log.debug(
                    "plugin_search_done",
                    source=source.kind,
                    plugin=source.name,
                    result_count=len(results),
                )
            if self._metrics is not None:
                self._metrics.record_plugin_search(
                    f"{source.kind}:{source.name}"
                    if source.kind == "channel"
                    else source.name,
                    time.perf_counter_ns() - t0,
                    len(results),
                    outcome=outcome,
                )
            return _SourceResults(results, skip_filter)

    # --- assembly & shaping ---
    def _assemble(
        self,
        per_source: list[_SourceResults],
        keyword: str,
    ) -> AssembledSearch:
        filter_by_keyword = self._config.filter_by_keyword
        results: list[SearchResult] = []
        merged: MergedLinks = {}
        for source_results in per_source:
            kept = source_results.results
            if filter_by_keyword and not source_results.skip_filter:
                kept = [r for r in kept if _matches_keyword(r, keyword)]
            results.extend(kept)
            merged = merge_merged_by_type(merged, group_links_by_type(kept))
        return AssembledSearch(results=tuple(results), merged_by_type=merged)

    @staticmethod
    def _shape(
        assembled: AssembledSearch, profile: SearchRequestProfile
    ) -> SearchResponse:
        total = len(assembled.results)
        response = SearchResponse(total=total)
        if profile.result_type in ("results", "all"):
            response.results = list(assembled.results)
        if profile.result_type in ("merged_by_type", "all"):
            response.merged_by_type = filter_merged_by_cloud_types(
                assembled.merged_by_type, profile.cloud_types
            )
        return response
