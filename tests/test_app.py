from types import SimpleNamespace

from starlette.requests import Request

import pytest
from fastapi import HTTPException

from elearning.utils import rate_limiter as rate_limiter_module
from elearning.utils.rate_limiter import RateLimiter
from elearning.utils.security import sign_token


def test_health(client):
    response = client.get("/health")

    assert response.status_code == 200
    body = response.json()
    assert body["status"] == "healthy"
    assert body["service"] == "E-Learning Platform"
    assert "version" in body
    assert "timestamp" in body


def test_unknown_route_uses_http_error_shape(client):
    response = client.get("/does-not-exist")

    assert response.status_code == 404
    assert response.json() == {"error": "http_error", "message": "Not Found", "status_code": 404}


def test_malformed_json_body_is_bad_request(client):
    response = client.post(
        "/gemini/check-answers",
        content="{not json",
        headers={"Content-Type": "application/json"}
    )

    assert response.status_code == 400
    assert response.json()["error"] == "bad_request"


def test_store_created_on_startup(client):
    from elearning.main import app

    assert len(app.state.quiz_store) == 0


def make_request(headers=None, host="10.0.0.1"):
    scope = {
        "type": "http",
        "method": "GET",
        "path": "/courses",
        "headers": [(key.lower().encode(), value.encode()) for key, value in (headers or {}).items()],
        "client": (host, 1234),
    }
    return Request(scope)


class TestRateLimiter:
    async def test_rejects_after_minute_limit(self):
        limiter = RateLimiter(requests_per_minute=2, requests_per_hour=100)
        request = make_request()

        await limiter.check_rate_limit(request)
        await limiter.check_rate_limit(request)
        with pytest.raises(HTTPException) as exc:
            await limiter.check_rate_limit(request)

        assert exc.value.status_code == 429
        assert exc.value.detail["retry_after"] == 60

    async def test_clients_tracked_separately(self):
        limiter = RateLimiter(requests_per_minute=1, requests_per_hour=100)

        await limiter.check_rate_limit(make_request(host="10.0.0.1"))
        await limiter.check_rate_limit(make_request(host="10.0.0.2"))
        await limiter.check_rate_limit(make_request(headers={"Authorization": f"Bearer {sign_token({'id': 1})}"}))
        await limiter.check_rate_limit(make_request(headers={"Authorization": f"Bearer {sign_token({'id': 2})}"}))

        assert set(limiter.history) == {"10.0.0.1", "10.0.0.2", "user:1", "user:2"}

    async def test_rotating_unverified_tokens_share_address_quota(self):
        limiter = RateLimiter(requests_per_minute=2, requests_per_hour=100)

        await limiter.check_rate_limit(make_request(headers={"Authorization": "Bearer junk0"}, host="1.2.3.4"))
        await limiter.check_rate_limit(make_request(headers={"Authorization": "Bearer junk1"}, host="1.2.3.4"))
        with pytest.raises(HTTPException) as exc:
            await limiter.check_rate_limit(make_request(headers={"Authorization": "Bearer junk2"}, host="1.2.3.4"))

        assert exc.value.status_code == 429
        assert list(limiter.history) == ["1.2.3.4"]

    async def test_same_user_limited_across_addresses(self):
        limiter = RateLimiter(requests_per_minute=1, requests_per_hour=100)
        headers = {"Authorization": f"Bearer {sign_token({'id': 7})}"}

        await limiter.check_rate_limit(make_request(headers=headers, host="10.0.0.1"))
        with pytest.raises(HTTPException):
            await limiter.check_rate_limit(make_request(headers=headers, host="10.0.0.9"))

    async def test_idle_clients_forgotten_after_window(self, monkeypatch):
        limiter = RateLimiter(requests_per_minute=5, requests_per_hour=100)
        clock = [1000.0]
        monkeypatch.setattr(rate_limiter_module, "time", SimpleNamespace(time=lambda: clock[0]))

        for index in range(10):
            await limiter.check_rate_limit(make_request(host=f"10.0.1.{index}"))
        assert len(limiter.history) == 10

        clock[0] += 3601
        limiter._cleanup_old_entries(clock[0])

        assert limiter.history == {}

        await limiter.check_rate_limit(make_request(host="10.0.2.1"))
        assert list(limiter.history) == ["10.0.2.1"]

    async def test_hour_window(self):
        limiter = RateLimiter(requests_per_minute=100, requests_per_hour=1)
        request = make_request()

        await limiter.check_rate_limit(request)
        with pytest.raises(HTTPException) as exc:
            await limiter.check_rate_limit(request)

        assert exc.value.detail["retry_after"] == 3600
