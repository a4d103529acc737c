"""
会话缓存
保存每个会话当前的画作，是画作的唯一来源，条目按TTL过期

提供两种实现：Redis（带TTL）与进程内字典（带过期时间）。
"""

import base64
import json
import time
from abc import ABC, abstractmethod
from typing import Callable, Dict, Optional, Tuple

from draw2real.core.config import settings
from draw2real.core.log_utils import get_logger
from draw2real.core.redis import RedisClient
from draw2real.core.storage.models import ImagePayload

logger = get_logger(__name__)

CACHE_KEY_PREFIX = "draw2real:drawing"


def cache_key(session_id: str) -> str:
    """每个会话使用固定的缓存键"""
    return f"{CACHE_KEY_PREFIX}:{session_id}"


class SessionCacheError(Exception):
    """会话缓存写入失败"""


class SessionCache(ABC):
    """会话缓存接口"""

    @abstractmethod
    async def save(self, session_id: str, payload: ImagePayload) -> None:
        """保存画作副本，覆盖已有内容"""

    @abstractmethod
    async def load(self, session_id: str) -> Optional[ImagePayload]:
        """读取画作副本，不存在或已过期时返回None"""

    @abstractmethod
    async def clear(self, session_id: str) -> None:
        """删除画作副本"""


class InMemoryTTLCache(SessionCache):
    """进程内缓存，条目在TTL到期后失效"""

    def __init__(self, ttl: Optional[int] = None, clock: Callable[[], float] = time.monotonic):
        self._ttl = ttl or settings.drawing_cache_ttl
        self._clock = clock
        self._entries: Dict[str, Tuple[float, ImagePayload]] = {}

    async def save(self, session_id: str, payload: ImagePayload) -> None:
        self._entries[cache_key(session_id)] = (self._clock() + self._ttl, payload)

    async def load(self, session_id: str) -> Optional[ImagePayload]:
        key = cache_key(session_id)
        entry = self._entries.get(key)
        if entry is None:
            return None
        expires_at, payload = entry
        if self._clock() >= expires_at:
            del self._entries[key]
            return None
        return payload

    async def clear(self, session_id: str) -> None:
        self._entries.pop(cache_key(session_id), None)


class RedisSessionCache(SessionCache):
    """Redis缓存，图片以base64编码的JSON保存"""

    def __init__(self, client: RedisClient, ttl: Optional[int] = None):
        self._client = client
        self._ttl = ttl or settings.drawing_cache_ttl

    async def save(self, session_id: str, payload: ImagePayload) -> None:
        value = {
            "mime_type": payload.mime_type,
            "data": base64.b64encode(payload.data).decode("ascii"),
        }
        if not await self._client.set(cache_key(session_id), value, expire=self._ttl):
            raise SessionCacheError(f"Could not cache the drawing for session {session_id}")

    async def load(self, session_id: str) -> Optional[ImagePayload]:
        raw = await self._client.get(cache_key(session_id))
        if not raw:
            return None
        try:
            value = json.loads(raw)
            return ImagePayload(
                data=base64.b64decode(value["data"]),
                mime_type=value["mime_type"]
            )
        except (ValueError, KeyError, TypeError) as e:
            logger.warning("会话缓存内容无法解析，已丢弃: {session_id}", session_id=session_id, reason=str(e))
            await self._client.delete(cache_key(session_id))
            return None

    async def clear(self, session_id: str) -> None:
        await self._client.delete(cache_key(session_id))


def create_session_cache(backend: Optional[str] = None, redis_client: Optional[RedisClient] = None) -> SessionCache:
    """根据配置创建会话缓存"""
    backend = backend or settings.session_cache_backend
    if backend == "redis":
        if redis_client is None:
            from draw2real.core.redis import redis_client as default_client
            redis_client = default_client
        return RedisSessionCache(redis_client)
    if backend == "memory":
        return InMemoryTTLCache()
    raise ValueError(f"Unknown session cache backend: {backend}")
