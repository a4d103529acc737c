"""
测试专用的 mock 工具和辅助函数
提供常用的 mock 对象，供所有测试使用
"""

import json
from collections import Counter
from typing import Any, Callable, Dict, Optional
from unittest.mock import AsyncMock, MagicMock

import httpx

from draw2real.core.storage.adapters.local import LocalStorageAdapter
from draw2real.core.storage.exceptions import UploadError
from draw2real.core.storage.models import UploadResult
from .factories import make_image_bytes

GENERATED_IMAGE_URL = "https://images.example.com/generated/abc.png"
DESCRIPTION = "A friendly green dragon with orange wings standing in a sunny meadow"


def no_backoff(_failures: int) -> float:
    return 0.0


async def no_sleep(_delay: float) -> None:
    return None


def image_http_client(
    status_code: int = 200,
    content: Optional[bytes] = None,
    content_type: str = "image/png",
    handler: Optional[Callable[[httpx.Request], httpx.Response]] = None
) -> httpx.AsyncClient:
    """返回使用MockTransport的httpx客户端，所有请求返回同一张图片"""
    body = make_image_bytes("PNG") if content is None else content

    def _default_handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(status_code, content=body, headers={"content-type": content_type})

    return httpx.AsyncClient(transport=httpx.MockTransport(handler or _default_handler))


class FlakyStorage(LocalStorageAdapter):
    """本地存储，对指定存储桶的前 failures 次上传抛出UploadError（None表示一直失败）"""

    def __init__(self, root_dir: str, failing_bucket: str, failures: Optional[int] = None) -> None:
        super().__init__(root_dir=root_dir, base_url="http://testserver/static")
        self.failing_bucket = failing_bucket
        self.failures = failures
        self.upload_calls: Counter = Counter()

    async def upload(
        self,
        data: bytes,
        key: str,
        mime_type: str,
        bucket: str,
        metadata: Optional[Dict[str, Any]] = None
    ) -> UploadResult:
        self.upload_calls[bucket] += 1
        if bucket == self.failing_bucket and (
            self.failures is None or self.upload_calls[bucket] <= self.failures
        ):
            raise UploadError("simulated storage outage", details={"bucket": bucket, "key": key})
        return await super().upload(data, key, mime_type, bucket, metadata)


class MockBuilder:
    """Mock对象构建器 - 用于创建常用的mock对象"""

    @staticmethod
    def create_mock_ai_service(
        description: str = DESCRIPTION,
        image_url: str = GENERATED_IMAGE_URL
    ) -> MagicMock:
        """创建生成流程AI服务的mock对象，describe/synthesize 均成功"""
        mock = MagicMock()
        mock.describe = AsyncMock(return_value=description)
        mock.synthesize = AsyncMock(return_value=image_url)
        mock.close = AsyncMock()
        return mock

    @staticmethod
    def create_mock_gallery(error: Optional[Exception] = None) -> MagicMock:
        """创建画廊服务的mock对象，error非空时每次写入都失败"""
        mock = MagicMock()
        mock.record = AsyncMock(side_effect=error)
        mock.list = AsyncMock(return_value=([], 0))
        return mock

    @staticmethod
    def create_mock_redis_client() -> MagicMock:
        """创建内存字典实现的RedisClient替身"""
        store: Dict[str, str] = {}
        mock = MagicMock()

        async def _get(key):
            return store.get(key)

        async def _set(key, value, expire=None):
            store[key] = json.dumps(value) if isinstance(value, (dict, list)) else str(value)
            return True

        async def _delete(*keys):
            return sum(1 for key in keys if store.pop(key, None) is not None)

        mock.get = AsyncMock(side_effect=_get)
        mock.set = AsyncMock(side_effect=_set)
        mock.delete = AsyncMock(side_effect=_delete)
        mock.store = store
        return mock
