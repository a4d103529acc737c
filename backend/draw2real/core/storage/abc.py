"""
存储抽象基类
定义统一的对象存储接口：按存储桶组织对象，返回无需鉴权即可访问的公开URL
"""

import asyncio
from abc import ABC, abstractmethod
from functools import partial
from typing import Any, Callable, Dict, Optional, TypeVar

from draw2real.core.storage.models import DownloadResult, UploadResult

T = TypeVar('T')


class BaseStorage(ABC):
    """
    存储抽象基类

    每个业务分类（如原图、生成图）对应一个存储桶，存储桶在首次使用时自动创建。
    同一存储桶内相同key的重复上传会覆盖原对象，返回的URL保持不变。
    """

    # 适配器名称，用于工厂模式注册
    ADAPTER_NAME: str = ""

    def bucket_for(self, category: str) -> str:
        """
        将业务分类映射为存储桶名称

        Args:
            category: 业务分类

        Returns:
            str: 存储桶名称
        """
        return category

    @abstractmethod
    async def ensure_bucket(self, bucket: str) -> None:
        """
        确保存储桶存在，不存在时以公开读权限创建（幂等）

        Raises:
            BucketError: 检查或创建失败时抛出
        """

    @abstractmethod
    async def upload(
        self,
        data: bytes,
        key: str,
        mime_type: str,
        bucket: str,
        metadata: Optional[Dict[str, Any]] = None
    ) -> UploadResult:
        """
        上传文件，已存在的同名对象会被覆盖

        Raises:
            UploadError: 上传失败时抛出
        """

    @abstractmethod
    async def download(self, key: str, bucket: str) -> DownloadResult:
        """
        下载文件

        Raises:
            DownloadError: 下载失败时抛出
        """

    @abstractmethod
    async def delete(self, key: str, bucket: str) -> bool:
        """
        删除文件

        Raises:
            DeleteError: 删除失败时抛出
        """

    @abstractmethod
    async def exists(self, key: str, bucket: str) -> bool:
        """检查文件是否存在"""

    @abstractmethod
    def public_url(self, key: str, bucket: str) -> str:
        """构建对象的公开访问URL（不发起网络请求）"""

    async def _run_in_executor(self, func: Callable[..., T], **kwargs: Any) -> T:
        """在线程池中运行同步的SDK或文件系统调用"""
        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(None, partial(func, **kwargs))


__all__ = ['BaseStorage']
