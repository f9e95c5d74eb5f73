"""Tests for the rate limiting decorator."""

from unittest.mock import AsyncMock, MagicMock, patch

import pytest
from fastapi import Request

from schoolhub.core import rate_limit as rate_limit_module
from schoolhub.core.rate_limit import RateLimitExceeded, check_rate_limit, rate_limit

REDIS_GETTER = "schoolhub.core.rate_limit.get_redis"


def _request(path="/api/v1/auth/login", host="1.2.3.4"):
    return Request(
        {
            "type": "http",
            "method": "POST",
            "path": path,
            "headers": [],
            "query_string": b"",
            "client": (host, 1234),
            "server": ("testserver", 80),
            "scheme": "http",
        }
    )


class TestMemoryBackend:
    @pytest.mark.asyncio
    async def test_allows_up_to_limit(self):
        results = [await check_rate_limit("k", limit=3, window_seconds=60) for _ in range(4)]

        assert results == [True, True, True, False]

    @pytest.mark.asyncio
    async def test_keys_are_independent(self):
        assert await check_rate_limit("a", limit=1, window_seconds=60)
        assert await check_rate_limit("b", limit=1, window_seconds=60)
        assert not await check_rate_limit("a", limit=1, window_seconds=60)

    @pytest.mark.asyncio
    async def test_window_expiry(self):
        with patch("schoolhub.core.rate_limit.time.time", return_value=1000.0):
            assert await check_rate_limit("k", limit=1, window_seconds=60)
            assert not await check_rate_limit("k", limit=1, window_seconds=60)

        with patch("schoolhub.core.rate_limit.time.time", return_value=1061.0):
            assert await check_rate_limit("k", limit=1, window_seconds=60)


    @pytest.mark.asyncio
    async def test_idle_keys_are_swept(self):
        with patch("schoolhub.core.rate_limit.time.time", return_value=1000.0):
            await check_rate_limit("idle", limit=5, window_seconds=60)
        with patch("schoolhub.core.rate_limit.time.time", return_value=1030.0):
            await check_rate_limit("active", limit=5, window_seconds=60)

        assert set(rate_limit_module._memory_store) == {"idle", "active"}

        with patch("schoolhub.core.rate_limit.time.time", return_value=1070.0):
            await check_rate_limit("other", limit=5, window_seconds=60)

        assert set(rate_limit_module._memory_store) == {"active", "other"}
        assert "idle" not in rate_limit_module._memory_windows


class TestRedisBackend:
    @pytest.mark.asyncio
    async def test_uses_redis_when_available(self):
        pipe = MagicMock()
        pipe.execute = AsyncMock(return_value=[0, 5, 1, True])
        client = MagicMock()
        client.pipeline.return_value = pipe

        with patch(REDIS_GETTER, new_callable=AsyncMock, return_value=client):
            assert not await check_rate_limit("k", limit=5, window_seconds=60)

        pipe.zadd.assert_called_once()

    @pytest.mark.asyncio
    async def test_falls_back_to_memory_on_redis_error(self):
        client = MagicMock()
        client.pipeline.side_effect = ConnectionError("redis down")

        with patch(REDIS_GETTER, new_callable=AsyncMock, return_value=client):
            assert await check_rate_limit("k", limit=1, window_seconds=60)
            assert not await check_rate_limit("k", limit=1, window_seconds=60)


class TestDecorator:
    @pytest.mark.asyncio
    async def test_raises_after_limit(self):
        @rate_limit(limit=2, window_seconds=30)
        async def endpoint(request: Request):
            return "ok"

        request = _request()
        assert await endpoint(request=request) == "ok"
        assert await endpoint(request=request) == "ok"

        with pytest.raises(RateLimitExceeded) as exc_info:
            await endpoint(request=request)

        assert exc_info.value.status_code == 429
        assert exc_info.value.headers == {"Retry-After": "30"}
        assert exc_info.value.detail["error"] == "RATE_LIMIT_EXCEEDED"

    @pytest.mark.asyncio
    async def test_limits_per_client(self):
        @rate_limit(limit=1, window_seconds=30)
        async def endpoint(request: Request):
            return "ok"

        assert await endpoint(request=_request(host="1.1.1.1")) == "ok"
        assert await endpoint(request=_request(host="2.2.2.2")) == "ok"

    @pytest.mark.asyncio
    async def test_without_request_passes_through(self):
        @rate_limit(limit=1, window_seconds=30)
        async def endpoint(value: int):
            return value

        assert await endpoint(value=1) == 1
        assert await endpoint(value=2) == 2
