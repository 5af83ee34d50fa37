"""
Rate limiting middleware tests.

Redis is replaced by an in-memory fake so the fixed-window logic can be
exercised without a server.
"""
import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from core.config import settings
from core.rate_limit import RateLimitMiddleware


class FakeRedis:
    """Just enough of the redis client for the fixed-window counter."""

    def __init__(self):
        self.store = {}
        self.expiries = {}

    def incr(self, key):
        self.store[key] = self.store.get(key, 0) + 1
        return self.store[key]

    def expire(self, key, window):
        self.expiries[key] = window
        return True

    def ttl(self, key):
        return 42


class BrokenRedis(FakeRedis):
    def incr(self, key):
        raise ConnectionError("redis went away")


def _make_app(limit=2):
    app = FastAPI()
    app.add_middleware(RateLimitMiddleware, default_limit=limit, window=60)

    @app.post("/v1/public/environmental/heat-pace")
    def heat_pace():
        return {"ok": True}

    @app.get("/health")
    def health():
        return {"status": "healthy"}

    return app


@pytest.fixture
def enabled(monkeypatch):
    monkeypatch.setattr(settings, "RATE_LIMIT_ENABLED", True)


def test_blocks_after_limit(monkeypatch, enabled):
    fake = FakeRedis()
    monkeypatch.setattr("core.rate_limit.get_redis_client", lambda: fake)
    client = TestClient(_make_app(limit=2))

    first = client.post("/v1/public/environmental/heat-pace")
    assert first.status_code == 200
    assert first.headers["X-RateLimit-Limit"] == "2"
    assert first.headers["X-RateLimit-Remaining"] == "1"

    assert client.post("/v1/public/environmental/heat-pace").status_code == 200

    blocked = client.post("/v1/public/environmental/heat-pace")
    assert blocked.status_code == 429
    body = blocked.json()
    assert body["error_code"] == "RATE_LIMITED"
    assert body["limit"] == 2
    assert blocked.headers["X-RateLimit-Remaining"] == "0"
    assert "Retry-After" in blocked.headers
    assert list(fake.expiries.values()) == [60]


def test_exempt_paths_not_counted(monkeypatch, enabled):
    fake = FakeRedis()
    monkeypatch.setattr("core.rate_limit.get_redis_client", lambda: fake)
    client = TestClient(_make_app(limit=1))

    for _ in range(3):
        assert client.get("/health").status_code == 200
    assert fake.store == {}


def test_fails_open_without_redis(monkeypatch, enabled):
    monkeypatch.setattr("core.rate_limit.get_redis_client", lambda: None)
    client = TestClient(_make_app(limit=1))

    for _ in range(3):
        assert client.post("/v1/public/environmental/heat-pace").status_code == 200


def test_fails_open_on_redis_error(monkeypatch, enabled):
    monkeypatch.setattr("core.rate_limit.get_redis_client", lambda: BrokenRedis())
    client = TestClient(_make_app(limit=1))

    for _ in range(3):
        assert client.post("/v1/public/environmental/heat-pace").status_code == 200


def test_disabled_setting_skips_redis(monkeypatch):
    monkeypatch.setattr(settings, "RATE_LIMIT_ENABLED", False)

    def _unexpected():
        raise AssertionError("redis should not be consulted")

    monkeypatch.setattr("core.rate_limit.get_redis_client", _unexpected)
    client = TestClient(_make_app(limit=1))

    assert client.post("/v1/public/environmental/heat-pace").status_code == 200
    assert client.post("/v1/public/environmental/heat-pace").status_code == 200


def test_endpoint_specific_limits():
    middleware = RateLimitMiddleware(FastAPI(), default_limit=60)
    assert middleware._get_endpoint_limit("/v1/public/pacing/strategy") == 30
    assert middleware._get_endpoint_limit("/v1/public/environmental/calculate") == 30
    assert middleware._get_endpoint_limit("/v1/public/environmental/wind") == 60
