"""
图片存储服务
将画作原图与生成图写入对象存储并返回公开URL，下载生成服务返回的远程图片
"""

import asyncio
from typing import Awaitable, Callable, Optional, Set

import httpx

from draw2real.core.config import settings
from draw2real.core.log_messages import LogMessages
from draw2real.core.log_utils import get_logger
from draw2real.core.retry import BackoffFunc, exponential_backoff, retry_async
from draw2real.core.storage.abc import BaseStorage
from draw2real.core.storage.exceptions import RemoteImageNetworkError, StorageError
from draw2real.core.storage.models import ImagePayload
from draw2real.core.storage.utils.image import fetch_as_portable

logger = get_logger(__name__)


class ImageStoreError(Exception):
    """图片写入对象存储失败"""

    def __init__(self, message: str, category: str, logical_name: str) -> None:
        super().__init__(message)
        self.message = message
        self.category = category
        self.logical_name = logical_name


class ImageStoreService:
    """
    图片存储服务

    - 每个分类对应一个存储桶，首次使用时自动创建，创建成功后在进程内缓存
    - 同一分类下相同名称重复上传会覆盖，返回的URL不变
    - 原图上传是尽力而为；生成图上传按指数退避重试，重试耗尽后抛出异常
    """

    def __init__(
        self,
        storage: BaseStorage,
        http_client: Optional[httpx.AsyncClient] = None,
        backoff: Optional[BackoffFunc] = None,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
        generated_max_attempts: Optional[int] = None
    ):
        self.storage = storage
        self._http_client = http_client
        self._backoff = backoff or exponential_backoff()
        self._sleep = sleep
        self._generated_max_attempts = generated_max_attempts or settings.generated_upload_max_attempts
        self._ready_buckets: Set[str] = set()

    async def _ensure_bucket(self, bucket: str) -> None:
        if bucket in self._ready_buckets:
            return
        await self.storage.ensure_bucket(bucket)
        self._ready_buckets.add(bucket)

    async def upload(self, payload: ImagePayload, logical_name: str, category: str) -> str:
        """
        上传图片并返回公开URL

        Args:
            payload: 图片数据
            logical_name: 分类内的对象名称
            category: 业务分类（原图/生成图）

        Raises:
            ImageStoreError: 存储桶准备或上传失败
        """
        bucket = self.storage.bucket_for(category)
        logger.debug(LogMessages.FILE_UPLOAD_START, bucket=bucket, key=logical_name)

        try:
            await self._ensure_bucket(bucket)
            result = await self.storage.upload(
                data=payload.data,
                key=logical_name,
                mime_type=payload.mime_type,
                bucket=bucket
            )
        except StorageError as e:
            raise ImageStoreError(
                f"Could not store image: {e.message}",
                category=category,
                logical_name=logical_name
            ) from e

        logger.info(LogMessages.FILE_UPLOAD_SUCCESS, url=result.url)
        return result.url

    async def upload_original(self, payload: ImagePayload, logical_name: str) -> Optional[str]:
        """上传画作原图，失败时记录日志并返回None"""
        try:
            return await self.upload(payload, logical_name, settings.originals_category)
        except ImageStoreError as e:
            logger.error(LogMessages.ORIGINAL_UPLOAD_SKIPPED, exception=e, key=logical_name)
            return None

    async def upload_generated(self, payload: ImagePayload, logical_name: str) -> str:
        """
        上传生成图，有限次数重试

        Raises:
            ImageStoreError: 所有尝试均失败
        """
        return await retry_async(
            lambda: self.upload(payload, logical_name, settings.generated_category),
            max_attempts=self._generated_max_attempts,
            backoff=self._backoff,
            retry_on=(ImageStoreError,),
            operation_name="upload_generated_image",
            sleep=self._sleep
        )

    async def fetch_as_portable(self, url: str) -> ImagePayload:
        """
        下载远程图片，网络错误按生成图上传相同的次数重试

        Raises:
            RemoteImageError: 下载失败（与存储失败区分）
        """
        return await retry_async(
            lambda: fetch_as_portable(url, client=self._http_client),
            max_attempts=self._generated_max_attempts,
            backoff=self._backoff,
            retry_on=(RemoteImageNetworkError,),
            operation_name="fetch_generated_image",
            sleep=self._sleep
        )

    async def download(self, logical_name: str, category: str) -> ImagePayload:
        """从对象存储读回图片"""
        bucket = self.storage.bucket_for(category)
        result = await self.storage.download(logical_name, bucket)
        return ImagePayload(data=result.data, mime_type=result.mime_type)
