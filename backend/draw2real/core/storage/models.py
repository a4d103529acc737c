"""
存储服务数据模型
定义存储操作中使用的所有数据结构
"""

from dataclasses import dataclass
from datetime import datetime
from typing import Optional


@dataclass(frozen=True)
class ImagePayload:
    """
    可直接存储或传输的图片数据

    Attributes:
        data: 图片二进制数据
        mime_type: MIME类型，如 image/png
    """
    data: bytes
    mime_type: str

    @property
    def size(self) -> int:
        return len(self.data)

    @property
    def extension(self) -> str:
        """根据MIME类型推断的文件扩展名（不含点）"""
        subtype = self.mime_type.split("/", 1)[-1].lower()
        return "jpg" if subtype == "jpeg" else subtype


@dataclass(frozen=True)
class UploadResult:
    """
    上传结果

    Attributes:
        key: 存储键
        url: 公开访问URL
        size: 文件大小（字节）
        mime_type: MIME类型
        bucket: 存储桶名称
        etag: 文件ETag
        uploaded_at: 上传时间
    """
    key: str
    url: str
    size: int
    mime_type: str
    bucket: Optional[str] = None
    etag: Optional[str] = None
    uploaded_at: Optional[datetime] = None


@dataclass(frozen=True)
class DownloadResult:
    """
    下载结果

    Attributes:
        data: 文件数据
        size: 文件大小（字节）
        mime_type: MIME类型
        last_modified: 最后修改时间
        etag: 文件ETag
    """
    data: bytes
    size: int
    mime_type: str
    last_modified: Optional[datetime] = None
    etag: Optional[str] = None


__all__ = [
    'ImagePayload',
    'UploadResult',
    'DownloadResult',
]
