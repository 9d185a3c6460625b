from fastapi import FastAPI
from fastapi.testclient import TestClient

from punchclock.middleware.rate_limiter import RateLimiterMiddleware


def make_client():
    app = FastAPI()
    app.add_middleware(RateLimiterMiddleware)

    @app.get("/ping")
    async def ping():
        return {"ok": True}

    return TestClient(app)


def test_requests_over_limit_get_429(monkeypatch):
    monkeypatch.setenv("DISABLE_RATE_LIMIT", "0")
    monkeypatch.setenv("RATE_LIMIT", "2")
    monkeypatch.delenv("REDIS_URL", raising=False)
    client = make_client()

    assert client.get("/ping").status_code == 200
    assert client.get("/ping").status_code == 200
    response = client.get("/ping")
    assert response.status_code == 429
    assert response.json()["error"]["code"] == "RATE_LIMITED"


def test_disabled_limiter_lets_everything_through(monkeypatch):
    monkeypatch.setenv("DISABLE_RATE_LIMIT", "1")
    monkeypatch.setenv("RATE_LIMIT", "1")
    client = make_client()

    assert all(client.get("/ping").status_code == 200 for _ in range(5))


def test_unreachable_redis_falls_back_to_memory(monkeypatch):
    monkeypatch.setenv("DISABLE_RATE_LIMIT", "0")
    monkeypatch.setenv("RATE_LIMIT", "1")
    monkeypatch.setenv("REDIS_URL", "redis://127.0.0.1:1/0")
    client = make_client()

    assert client.get("/ping").status_code == 200
    assert client.get("/ping").status_code == 429
