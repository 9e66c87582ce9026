"""Zero-impact in-memory runtime metrics.

All counters are plain Python integers manipulated inside the single-threaded
async event loop: no locks, no I/O, no external dependencies.

Durations are recorded in nanoseconds (``time.perf_counter_ns()``) and
reported in milliseconds.
"""

from __future__ import annotations

import time
from collections import deque
from dataclasses import dataclass, field
from typing import Literal

# Averages are computed over this many most recent samples.
MAX_HISTORY = 1000

SourceOutcome = Literal["success", "failure", "timeout"]


def _avg_ms(samples: deque[int]) -> float:
    if not samples:
        return 0.0
    return round(sum(samples) / len(samples) / 1_000_000, 1)


@dataclass
class PluginStats:
    """Accumulated statistics for a single plugin or channel."""

    calls: int = 0
    successes: int = 0
    failures: int = 0
    timeouts: int = 0
    total_results: int = 0
    total_duration_ns: int = 0

    def snapshot(self) -> dict[str, object]:
        """Return a JSON-serializable summary."""
        avg_ms = (
            round(self.total_duration_ns / self.calls / 1_000_000, 1)
            if self.calls
            else 0.0
        )
        return {
            "calls": self.calls,
            "successes": self.successes,
            "failures": self.failures,
            "timeouts": self.timeouts,
            "total_results": self.total_results,
            "avg_duration_ms": avg_ms,
        }


@dataclass
class ApiStats:
    total_requests: int = 0
    successful_requests: int = 0
    failed_requests: int = 0
    status_codes: dict[int, int] = field(default_factory=dict)
    durations_ns: deque[int] = field(default_factory=lambda: deque(maxlen=MAX_HISTORY))

    def snapshot(self) -> dict[str, object]:
        return {
            "total_requests": self.total_requests,
            "successful_requests": self.successful_requests,
            "failed_requests": self.failed_requests,
            "status_codes": {str(k): v for k, v in sorted(self.status_codes.items())},
            "avg_response_ms": _avg_ms(self.durations_ns),
        }


@dataclass
class SearchStats:
    total_searches: int = 0
    concurrent_searches: int = 0
    total_results: int = 0
    cache_hits: int = 0
    durations_ns: deque[int] = field(default_factory=lambda: deque(maxlen=MAX_HISTORY))

    def snapshot(self) -> dict[str, object]:
        return {
            "total_searches": self.total_searches,
            "concurrent_searches": self.concurrent_searches,
            "total_results": self.total_results,
            "cache_hits": self.cache_hits,
            "avg_search_ms": _avg_ms(self.durations_ns),
        }


@dataclass
class ErrorStats:
    total_errors: int = 0
    by_code: dict[str, int] = field(default_factory=dict)
    last_error: dict[str, object] | None = None

    def snapshot(self) -> dict[str, object]:
        return {
            "total_errors": self.total_errors,
            "by_code": dict(sorted(self.by_code.items())),
            "last_error": self.last_error,
        }


@dataclass
class MetricsCollector:
    """Central in-memory metrics collector.

    Thread-safety is not required: the async event loop is
    single-threaded, so plain integer increments are atomic enough.
    """

    _api: ApiStats = field(default_factory=ApiStats)
    _search: SearchStats = field(default_factory=SearchStats)
    _plugins: dict[str, PluginStats] = field(default_factory=dict)
    _errors: ErrorStats = field(default_factory=ErrorStats)
    _start_ns: int = field(default_factory=time.perf_counter_ns)

    # ------------------------------------------------------------------
    # Recording
    # ------------------------------------------------------------------

    def record_api_request(self, status_code: int, duration_ns: int) -> None:
        """Record one HTTP request."""
        api = self._api
        api.total_requests += 1
        if 200 <= status_code < 300:
            api.successful_requests += 1
        else:
            api.failed_requests += 1
        api.status_codes[status_code] = api.status_codes.get(status_code, 0) + 1
        api.durations_ns.append(duration_ns)

    def search_started(self) -> None:
        self._search.total_searches += 1
        self._search.concurrent_searches += 1

    def record_search(
        self,
        duration_ns: int,
        result_count: int,
        *,
        cache_hit: bool,
    ) -> None:
        """Record the end of one search started with :meth:`search_started`."""
        s = self._search
        s.concurrent_searches = max(0, s.concurrent_searches - 1)
        s.total_results += result_count
        s.durations_ns.append(duration_ns)
        if cache_hit:
            s.cache_hits += 1

    def record_plugin_search(
        self,
        name: str,
        duration_ns: int,
        result_count: int,
        *,
        outcome: SourceOutcome,
    ) -> None:
        """Record one plugin (or channel) search invocation."""
        stats = self._plugins.get(name)
        if stats is None:
            stats = PluginStats()
            self._plugins[name] = stats

        stats.calls += 1
        stats.total_duration_ns += duration_ns

        if outcome == "success":
            stats.successes += 1
            stats.total_results += result_count
        elif outcome == "timeout":
            stats.timeouts += 1
        else:
            stats.failures += 1

    def record_error(self, code: str, message: str) -> None:
        e = self._errors
        e.total_errors += 1
        e.by_code[code] = e.by_code.get(code, 0) + 1
        e.last_error = {
            "code": code,
            "message": message,
            "timestamp": int(time.time() * 1000),
        }

    def reset(self) -> None:
        """Drop all recorded data. Uptime keeps counting."""
        concurrent = self._search.concurrent_searches
        self._api = ApiStats()
        self._search = SearchStats(concurrent_searches=concurrent)
        self._plugins = {}
        self._errors = ErrorStats()

    # ------------------------------------------------------------------
    # Snapshot
    # ------------------------------------------------------------------

    def snapshot(self) -> dict[str, object]:
        """Return a JSON-serializable snapshot of all metrics."""
        uptime_ns = time.perf_counter_ns() - self._start_ns
        uptime_s = round(uptime_ns / 1_000_000_000, 1)

        return {
            "uptime_seconds": uptime_s,
            "api": self._api.snapshot(),
            "search": self._search.snapshot(),
            "plugins": {
                name: stats.snapshot() for name, stats in sorted(self._plugins.items())
            },
            "errors": self._errors.snapshot(),
        }
