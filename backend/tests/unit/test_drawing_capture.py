"""
画作捕获与会话缓存单元测试
"""

from unittest.mock import AsyncMock

import pytest

from draw2real.core.storage.models import ImagePayload
from draw2real.services.drawing.capture_service import DrawingCaptureService, InvalidDrawingError
from draw2real.services.drawing.session_cache import (
    InMemoryTTLCache,
    RedisSessionCache,
    SessionCacheError,
    cache_key,
    create_session_cache,
)
from tests.utils.factories import make_image_bytes, make_payload
from tests.utils.mock_utils import MockBuilder


class FakeClock:
    def __init__(self) -> None:
        self.now = 1000.0

    def __call__(self) -> float:
        return self.now


@pytest.mark.unit
@pytest.mark.drawing
class TestDrawingCaptureService:
    """画作捕获服务测试"""

    @pytest.mark.asyncio
    async def test_get_without_drawing_returns_none(self, drawings):
        assert await drawings.get("session-1") is None

    @pytest.mark.asyncio
    async def test_last_write_wins(self, drawings):
        first = make_payload("PNG", color=(255, 0, 0))
        second = make_payload("PNG", color=(0, 0, 255))

        await drawings.set("session-1", first)
        await drawings.set("session-1", second)

        assert await drawings.get("session-1") == second

    @pytest.mark.asyncio
    async def test_sessions_are_isolated(self, drawings):
        await drawings.set("session-1", make_payload())

        assert await drawings.get("session-2") is None

    @pytest.mark.asyncio
    async def test_clear_removes_cached_copy(self):
        cache = InMemoryTTLCache(ttl=60)
        drawings = DrawingCaptureService(cache)
        await drawings.set("session-1", make_payload())

        await drawings.clear("session-1")

        assert await drawings.get("session-1") is None
        assert await cache.load("session-1") is None

    @pytest.mark.asyncio
    async def test_restores_from_cache_after_restart(self):
        cache = InMemoryTTLCache(ttl=60)
        payload = make_payload("JPEG")
        await DrawingCaptureService(cache).set("session-1", payload)

        # 模拟服务重启：新的服务实例共享同一个缓存
        restarted = DrawingCaptureService(cache)

        assert await restarted.get("session-1") == payload

    @pytest.mark.asyncio
    async def test_drawing_expires_with_session_ttl(self):
        clock = FakeClock()
        drawings = DrawingCaptureService(InMemoryTTLCache(ttl=10, clock=clock))
        await drawings.set("session-1", make_payload())

        clock.now += 10000

        assert await drawings.get("session-1") is None

    @pytest.mark.asyncio
    async def test_workers_sharing_redis_see_latest_drawing(self):
        client = MockBuilder.create_mock_redis_client()
        worker_a = DrawingCaptureService(RedisSessionCache(client, ttl=120))
        worker_b = DrawingCaptureService(RedisSessionCache(client, ttl=120))

        await worker_a.set("session-1", make_payload("PNG"))
        assert (await worker_a.get("session-1")).mime_type == "image/png"

        await worker_b.set("session-1", make_payload("JPEG"))

        assert (await worker_a.get("session-1")).mime_type == "image/jpeg"

        await worker_b.clear("session-1")
        assert await worker_a.get("session-1") is None

    @pytest.mark.asyncio
    async def test_cache_failure_keeps_expiring_fallback_copy(self):
        cache = AsyncMock()
        cache.save.side_effect = ConnectionError("redis down")
        cache.load.return_value = None
        clock = FakeClock()
        drawings = DrawingCaptureService(cache, fallback=InMemoryTTLCache(ttl=10, clock=clock))
        payload = make_payload()

        await drawings.set("session-1", payload)
        assert await drawings.get("session-1") == payload

        clock.now += 10
        assert await drawings.get("session-1") is None

    @pytest.mark.asyncio
    async def test_successful_write_replaces_fallback_copy(self):
        cache = InMemoryTTLCache(ttl=60)
        fallback = InMemoryTTLCache(ttl=60)
        drawings = DrawingCaptureService(cache, fallback=fallback)
        await fallback.save("session-1", make_payload("PNG"))

        await drawings.set("session-1", make_payload("JPEG"))

        assert await fallback.load("session-1") is None
        assert (await drawings.get("session-1")).mime_type == "image/jpeg"

    @pytest.mark.asyncio
    async def test_set_bytes_detects_mime_type(self, drawings):
        payload = await drawings.set_bytes("session-1", make_image_bytes("JPEG"))

        assert payload.mime_type == "image/jpeg"
        assert payload.extension == "jpg"

    @pytest.mark.parametrize("data", [b"", b"definitely not an image"])
    def test_validate_rejects_non_images(self, drawings, data):
        with pytest.raises(InvalidDrawingError):
            drawings.validate(data)

    def test_validate_rejects_oversized_images(self):
        drawings = DrawingCaptureService(InMemoryTTLCache(ttl=60), max_size=20)

        with pytest.raises(InvalidDrawingError):
            drawings.validate(make_image_bytes("PNG"))


@pytest.mark.unit
@pytest.mark.drawing
class TestSessionCache:
    """会话缓存测试"""

    def test_cache_key_is_fixed_per_session(self):
        assert cache_key("user-1") == "draw2real:drawing:user-1"

    @pytest.mark.asyncio
    async def test_in_memory_entries_expire(self):
        clock = FakeClock()
        cache = InMemoryTTLCache(ttl=10, clock=clock)
        payload = make_payload()
        await cache.save("session-1", payload)

        clock.now += 9
        assert await cache.load("session-1") == payload

        clock.now += 1
        assert await cache.load("session-1") is None

    @pytest.mark.asyncio
    async def test_redis_cache_round_trip_with_ttl(self):
        client = MockBuilder.create_mock_redis_client()
        cache = RedisSessionCache(client, ttl=120)
        payload = make_payload("WEBP")

        await cache.save("session-1", payload)

        assert client.set.call_args.kwargs["expire"] == 120
        assert cache_key("session-1") in client.store
        assert await cache.load("session-1") == payload

        await cache.clear("session-1")
        assert await cache.load("session-1") is None

    @pytest.mark.asyncio
    async def test_redis_cache_drops_corrupt_entries(self):
        client = MockBuilder.create_mock_redis_client()
        client.store[cache_key("session-1")] = "not json"
        cache = RedisSessionCache(client, ttl=120)

        assert await cache.load("session-1") is None
        assert cache_key("session-1") not in client.store

    @pytest.mark.asyncio
    async def test_refused_redis_write_is_reported(self):
        client = MockBuilder.create_mock_redis_client()
        client.set = AsyncMock(return_value=False)
        cache = RedisSessionCache(client, ttl=120)
        drawings = DrawingCaptureService(cache)
        payload = make_payload("PNG")

        with pytest.raises(SessionCacheError):
            await cache.save("session-1", payload)

        await drawings.set("session-1", payload)
        assert await drawings.get("session-1") == payload

    def test_factory_selects_backend(self):
        client = MockBuilder.create_mock_redis_client()

        assert isinstance(create_session_cache("memory"), InMemoryTTLCache)
        assert isinstance(create_session_cache("redis", redis_client=client), RedisSessionCache)
        with pytest.raises(ValueError):
            create_session_cache("memcached")


def test_payload_extension_for_jpeg():
    assert ImagePayload(data=b"", mime_type="image/jpeg").extension == "jpg"
