"""
Redis客户端
会话缓存（画作镜像）使用的异步Redis连接，应用启动时初始化，关闭时释放
"""

import json
from typing import Any, Optional

import redis.asyncio as redis
from redis.asyncio.connection import ConnectionPool

from draw2real.core.config import settings
from draw2real.core.log_utils import get_logger

logger = get_logger(__name__)


class RedisClient:
    """
    Redis客户端封装

    读写失败只记录日志：get 返回None，set 返回False，delete 返回0，
    由调用方决定缓存失效是否影响业务。
    """

    def __init__(self, url: Optional[str] = None, max_connections: int = 20):
        self._url = url or settings.redis_url
        self._max_connections = max_connections
        self._pool: Optional[ConnectionPool] = None
        self._client: Optional[redis.Redis] = None

    @property
    def initialized(self) -> bool:
        return self._client is not None

    async def initialize(self) -> None:
        """
        建立连接池并检查连通性

        Raises:
            redis.RedisError: 无法连接Redis
        """
        if self._client is not None:
            return

        pool = ConnectionPool.from_url(
            self._url,
            max_connections=self._max_connections,
            socket_connect_timeout=5,
            socket_timeout=5,
            health_check_interval=30,
            decode_responses=True,
        )
        client = redis.Redis(connection_pool=pool)
        try:
            await client.ping()
        except redis.RedisError as e:
            logger.error("Redis连接失败: {host}:{port}", exception=e, host=settings.redis_host, port=settings.redis_port)
            await pool.disconnect()
            raise

        self._pool, self._client = pool, client
        logger.info("Redis连接成功: {host}:{port}/{db}", host=settings.redis_host, port=settings.redis_port, db=settings.redis_db)

    async def close(self) -> None:
        if self._client is not None:
            await self._client.aclose()
        if self._pool is not None:
            await self._pool.disconnect()
        self._client = None
        self._pool = None
        logger.info("Redis连接已关闭")

    async def _ensure(self) -> redis.Redis:
        if self._client is None:
            await self.initialize()
        return self._client

    async def get(self, key: str) -> Optional[str]:
        try:
            client = await self._ensure()
            return await client.get(key)
        except redis.RedisError as e:
            logger.error("Redis读取失败: {redis_key}", exception=e, redis_key=key)
            return None

    async def set(self, key: str, value: Any, expire: Optional[int] = None) -> bool:
        """写入值（dict/list序列化为JSON），expire为过期秒数"""
        if isinstance(value, (dict, list)):
            value = json.dumps(value, ensure_ascii=False)
        try:
            client = await self._ensure()
            return bool(await client.set(key, value, ex=expire))
        except redis.RedisError as e:
            logger.error("Redis写入失败: {redis_key}", exception=e, redis_key=key)
            return False

    async def delete(self, *keys: str) -> int:
        if not keys:
            return 0
        try:
            client = await self._ensure()
            return await client.delete(*keys)
        except redis.RedisError as e:
            logger.error("Redis删除失败", exception=e)
            return 0


# 全局Redis客户端实例
redis_client = RedisClient()
