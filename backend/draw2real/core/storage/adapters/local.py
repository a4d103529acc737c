"""
本地文件系统存储适配器
用于开发与测试环境，文件保存在workspace下，由应用以静态文件方式对外提供
"""

import mimetypes
import os
from datetime import datetime
from pathlib import Path, PurePosixPath
from typing import Any, Dict, Optional

from draw2real.core.config import settings
from draw2real.core.log_messages import LogMessages
from draw2real.core.log_utils import get_logger
from draw2real.core.storage.abc import BaseStorage
from draw2real.core.storage.exceptions import (
    BucketError,
    ConfigurationError,
    DeleteError,
    DownloadError,
    UploadError,
)
from draw2real.core.storage.models import DownloadResult, UploadResult

logger = get_logger(__name__)


class LocalStorageAdapter(BaseStorage):
    """
    本地存储适配器

    目录结构: {root_dir}/{bucket}/{key}
    访问地址: {base_url}/{bucket}/{key}
    """

    ADAPTER_NAME: str = "local"

    def __init__(self, root_dir: Optional[str] = None, base_url: Optional[str] = None) -> None:
        self.root_dir = Path(root_dir or settings.absolute_storage_dir)
        self.base_url = (
            base_url
            or settings.public_base_url.rstrip("/") + settings.storage_static_mount
        ).rstrip("/")

    def _resolve(self, key: str, bucket: str) -> Path:
        """计算对象的文件路径，拒绝越出存储桶目录的key"""
        parts = PurePosixPath(key).parts
        if not key or key.startswith("/") or ".." in parts or not parts:
            raise ConfigurationError("非法的存储键: {}".format(key))
        if not bucket or "/" in bucket or bucket in (".", ".."):
            raise ConfigurationError("非法的存储桶名称: {}".format(bucket))
        return self.root_dir.joinpath(bucket, *parts)

    async def ensure_bucket(self, bucket: str) -> None:
        bucket_dir = self.root_dir / bucket
        if bucket_dir.is_dir():
            return
        try:
            await self._run_in_executor(bucket_dir.mkdir, parents=True, exist_ok=True)
        except OSError as e:
            raise BucketError("创建存储目录失败: {}".format(str(e)), details={'bucket': bucket}) from e
        logger.info(LogMessages.BUCKET_CREATED, bucket=bucket)

    @staticmethod
    def _write_file(path: Path, data: bytes) -> None:
        path.parent.mkdir(parents=True, exist_ok=True)
        tmp_path = path.with_name(path.name + ".tmp")
        tmp_path.write_bytes(data)
        os.replace(tmp_path, path)

    async def upload(
        self,
        data: bytes,
        key: str,
        mime_type: str,
        bucket: str,
        metadata: Optional[Dict[str, Any]] = None
    ) -> UploadResult:
        path = self._resolve(key, bucket)
        try:
            await self._run_in_executor(self._write_file, path=path, data=data)
        except OSError as e:
            logger.error(LogMessages.FILE_UPLOAD_FAILED, exception=e, bucket=bucket, key=key)
            raise UploadError("写入文件失败: {}".format(str(e)), details={'bucket': bucket, 'key': key}) from e

        return UploadResult(
            key=key,
            url=self.public_url(key, bucket),
            size=len(data),
            mime_type=mime_type,
            bucket=bucket,
            uploaded_at=datetime.now()
        )

    async def download(self, key: str, bucket: str) -> DownloadResult:
        path = self._resolve(key, bucket)
        try:
            data = await self._run_in_executor(path.read_bytes)
            stat = path.stat()
        except OSError as e:
            raise DownloadError("读取文件失败: {}".format(str(e)), details={'bucket': bucket, 'key': key}) from e

        mime_type, _ = mimetypes.guess_type(path.name)
        return DownloadResult(
            data=data,
            size=len(data),
            mime_type=mime_type or "application/octet-stream",
            last_modified=datetime.fromtimestamp(stat.st_mtime)
        )

    async def delete(self, key: str, bucket: str) -> bool:
        path = self._resolve(key, bucket)
        try:
            await self._run_in_executor(path.unlink, missing_ok=True)
        except OSError as e:
            raise DeleteError("删除文件失败: {}".format(str(e)), details={'bucket': bucket, 'key': key}) from e
        return True

    async def exists(self, key: str, bucket: str) -> bool:
        return self._resolve(key, bucket).is_file()

    def public_url(self, key: str, bucket: str) -> str:
        return "{}/{}/{}".format(self.base_url, bucket, key)


__all__ = ['LocalStorageAdapter']
