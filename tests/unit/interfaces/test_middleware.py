"""Tests for the per-IP rate limiting middleware."""

from __future__ import annotations

from starlette.applications import Starlette
from starlette.requests import Request
from starlette.responses import JSONResponse
from starlette.routing import Route
from starlette.testclient import TestClient

from cloudseek.domain.entities import ErrorCode
from cloudseek.interfaces.api.middleware import RateLimitMiddleware, client_ip


class FakeClock:
    def __init__(self) -> None:
        self.now = 1000.0

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


async def _echo_ip(request: Request) -> JSONResponse:
    return JSONResponse({"ip": client_ip(request)})


def _make_app(clock: FakeClock, max_requests: int = 2) -> Starlette:
    app = Starlette(
        routes=[
            Route("/api/search", _echo_ip),
            Route("/api/health", _echo_ip),
        ]
    )
    app.add_middleware(
        RateLimitMiddleware,
        window_ms=60_000,
        max_requests=max_requests,
        skip_paths=["/api/health"],
        clock=clock,
    )
    return app


# ---------------------------------------------------------------------------
# client_ip
# ---------------------------------------------------------------------------


class TestClientIp:
    def test_forwarded_for_first_hop(self) -> None:
        client = TestClient(_make_app(FakeClock(), max_requests=10))
        resp = client.get(
            "/api/search", headers={"X-Forwarded-For": "1.2.3.4, 10.0.0.1"}
        )
        assert resp.json()["ip"] == "1.2.3.4"

    def test_peer_address(self) -> None:
        client = TestClient(_make_app(FakeClock(), max_requests=10))
        assert client.get("/api/search").json()["ip"] == "testclient"


# ---------------------------------------------------------------------------
# Limiting
# ---------------------------------------------------------------------------


class TestRateLimit:
    def test_headers_count_down(self) -> None:
        client = TestClient(_make_app(FakeClock()))
        first = client.get("/api/search")
        second = client.get("/api/search")

        assert first.headers["X-RateLimit-Limit"] == "2"
        assert first.headers["X-RateLimit-Remaining"] == "1"
        assert second.headers["X-RateLimit-Remaining"] == "0"
        assert first.headers["X-RateLimit-Reset"] == "60"

    def test_over_limit_returns_429_envelope(self) -> None:
        clock = FakeClock()
        client = TestClient(_make_app(clock))
        client.get("/api/search")
        clock.advance(15.2)
        client.get("/api/search")

        resp = client.get("/api/search")
        assert resp.status_code == 429
        body = resp.json()
        assert body["code"] == ErrorCode.RATE_LIMIT_EXCEEDED
        assert body["data"] is None
        assert body["error"]["details"] == {"retry_after_seconds": 45}
        assert resp.headers["Retry-After"] == "45"
        assert resp.headers["X-RateLimit-Remaining"] == "0"

    def test_window_resets(self) -> None:
        clock = FakeClock()
        client = TestClient(_make_app(clock))
        client.get("/api/search")
        client.get("/api/search")
        assert client.get("/api/search").status_code == 429

        clock.advance(60)
        resp = client.get("/api/search")
        assert resp.status_code == 200
        assert resp.headers["X-RateLimit-Remaining"] == "1"

    def test_clients_are_independent(self) -> None:
        client = TestClient(_make_app(FakeClock(), max_requests=1))
        assert client.get("/api/search", headers={"X-Forwarded-For": "1.1.1.1"}).status_code == 200
        assert client.get("/api/search", headers={"X-Forwarded-For": "2.2.2.2"}).status_code == 200
        assert client.get("/api/search", headers={"X-Forwarded-For": "1.1.1.1"}).status_code == 429

    def test_skip_paths_are_not_counted(self) -> None:
        client = TestClient(_make_app(FakeClock(), max_requests=1))
        for _ in range(3):
            resp = client.get("/api/health")
            assert resp.status_code == 200
            assert "X-RateLimit-Limit" not in resp.headers
        assert client.get("/api/search").status_code == 200

    def test_reset_never_below_one_second(self) -> None:
        clock = FakeClock()
        client = TestClient(_make_app(clock, max_requests=1))
        client.get("/api/search")
        clock.advance(59.9)
        resp = client.get("/api/search")
        assert resp.status_code == 429
        assert resp.headers["Retry-After"] == "1"
