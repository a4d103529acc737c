"""
存储服务异常定义
定义存储模块中使用的所有异常类型

StorageError 家族描述写入/读取对象存储本身的失败；
RemoteImageError 家族描述从外部URL下载图片的失败，两者互不继承，便于调用方区分。
"""

from typing import Any, Dict, Optional


class StorageError(Exception):
    """
    存储操作基础异常

    Attributes:
        message: 错误消息
        code: 错误码
        details: 错误详情
    """

    def __init__(
        self,
        message: str,
        code: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None
    ) -> None:
        super().__init__(message)
        self.message = message
        self.code = code
        self.details = details or {}

    def __str__(self) -> str:
        if self.code:
            return f"[{self.code}] {self.message}"
        return self.message


class ConfigurationError(StorageError):
    """存储配置错误"""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None) -> None:
        super().__init__(message, code="CONFIG_ERROR", details=details)


class BucketError(StorageError):
    """存储桶检查或创建失败"""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None) -> None:
        super().__init__(message, code="BUCKET_ERROR", details=details)


class UploadError(StorageError):
    """文件上传错误"""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None) -> None:
        super().__init__(message, code="UPLOAD_ERROR", details=details)


class DownloadError(StorageError):
    """文件下载错误"""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None) -> None:
        super().__init__(message, code="DOWNLOAD_ERROR", details=details)


class DeleteError(StorageError):
    """文件删除错误"""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None) -> None:
        super().__init__(message, code="DELETE_ERROR", details=details)


class RemoteImageError(Exception):
    """远程图片获取失败的基础异常"""

    def __init__(self, message: str, url: Optional[str] = None) -> None:
        super().__init__(message)
        self.message = message
        self.url = url


class RemoteImageHTTPError(RemoteImageError):
    """远程服务器返回了非成功状态码"""

    def __init__(self, message: str, status_code: int, url: Optional[str] = None) -> None:
        super().__init__(message, url=url)
        self.status_code = status_code


class RemoteImageNetworkError(RemoteImageError):
    """网络传输失败（连接、超时等）"""


class RemoteImageFormatError(RemoteImageError):
    """下载内容不是可识别的图片"""


__all__ = [
    'StorageError',
    'ConfigurationError',
    'BucketError',
    'UploadError',
    'DownloadError',
    'DeleteError',
    'RemoteImageError',
    'RemoteImageHTTPError',
    'RemoteImageNetworkError',
    'RemoteImageFormatError',
]
