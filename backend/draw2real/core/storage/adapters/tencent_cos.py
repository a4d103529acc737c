"""
腾讯云COS存储适配器
实现BaseStorage接口，按业务分类使用独立存储桶，存储桶首次使用时以公共读权限创建
"""

from datetime import datetime
from typing import Any, Dict, Optional
from urllib.parse import quote

from qcloud_cos import CosConfig, CosS3Client, CosServiceError

from draw2real.core.config.cos_config import (
    COSConfig,
    get_bucket_name,
    get_cos_base_url,
    get_cos_config,
    validate_cos_config,
)
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


class TencentCosAdapter(BaseStorage):
    """
    腾讯云COS存储适配器

    使用腾讯云COS SDK提供对象存储服务，支持：
    - 存储桶自动创建（公共读）
    - 文件上传（同名覆盖）/下载/删除
    - 公开访问URL构建
    """

    ADAPTER_NAME: str = "tencent_cos"

    def __init__(self, config: Optional[COSConfig] = None, client: Any = None) -> None:
        """
        初始化COS存储客户端

        Args:
            config: COS配置，默认从全局配置读取
            client: 已创建的CosS3Client，测试中可注入

        Raises:
            ConfigurationError: 配置不完整时抛出
        """
        self.config = config or get_cos_config()

        if not validate_cos_config(self.config):
            raise ConfigurationError("腾讯云COS配置不完整，请检查环境变量")

        self._client = client or self._create_client()

    def _create_client(self) -> CosS3Client:
        cos_config = CosConfig(
            Region=self.config.region,
            SecretId=self.config.secret_id,
            SecretKey=self.config.secret_key,
            Scheme=self.config.scheme,
            Timeout=self.config.timeout
        )
        return CosS3Client(cos_config)

    def bucket_for(self, category: str) -> str:
        return get_bucket_name(self.config, category)

    async def ensure_bucket(self, bucket: str) -> None:
        """
        检查存储桶是否存在，不存在时创建

        Raises:
            BucketError: 检查或创建失败时抛出
        """
        try:
            await self._run_in_executor(self._client.head_bucket, Bucket=bucket)
            return
        except CosServiceError as e:
            if e.get_status_code() != 404:
                logger.error(LogMessages.OPERATION_FAILED, exception=e, operation_name="检查存储桶")
                raise BucketError("检查存储桶失败: {}".format(str(e)), details={'bucket': bucket}) from e
        except Exception as e:
            logger.error(LogMessages.OPERATION_FAILED, exception=e, operation_name="检查存储桶")
            raise BucketError("检查存储桶失败: {}".format(str(e)), details={'bucket': bucket}) from e

        create_params: Dict[str, Any] = {'Bucket': bucket}
        if self.config.public_read:
            create_params['ACL'] = 'public-read'

        try:
            await self._run_in_executor(self._client.create_bucket, **create_params)
        except CosServiceError as e:
            # 并发创建时可能已被其他请求创建
            if e.get_error_code() in ("BucketAlreadyOwnedByYou", "BucketAlreadyExists"):
                return
            logger.error(LogMessages.OPERATION_FAILED, exception=e, operation_name="创建存储桶")
            raise BucketError("创建存储桶失败: {}".format(str(e)), details={'bucket': bucket}) from e
        except Exception as e:
            logger.error(LogMessages.OPERATION_FAILED, exception=e, operation_name="创建存储桶")
            raise BucketError("创建存储桶失败: {}".format(str(e)), details={'bucket': bucket}) from e

        logger.info(LogMessages.BUCKET_CREATED, bucket=bucket)

    async def upload(
        self,
        data: bytes,
        key: str,
        mime_type: str,
        bucket: str,
        metadata: Optional[Dict[str, Any]] = None
    ) -> UploadResult:
        """
        上传文件到COS，同名对象直接覆盖

        Raises:
            UploadError: 上传失败时抛出
        """
        upload_params: Dict[str, Any] = {
            'Bucket': bucket,
            'Key': key,
            'Body': data,
            'ContentType': mime_type
        }
        if metadata:
            upload_params['Metadata'] = metadata

        try:
            response = await self._run_in_executor(self._client.put_object, **upload_params)
        except Exception as e:
            logger.error(LogMessages.FILE_UPLOAD_FAILED, exception=e, bucket=bucket, key=key)
            raise UploadError("上传文件失败: {}".format(str(e)), details={'bucket': bucket, 'key': key}) from e

        return UploadResult(
            key=key,
            url=self.public_url(key, bucket),
            size=len(data),
            mime_type=mime_type,
            bucket=bucket,
            etag=(response or {}).get('ETag', '').strip('"'),
            uploaded_at=datetime.now()
        )

    async def download(self, key: str, bucket: str) -> DownloadResult:
        """
        从COS下载文件

        Raises:
            DownloadError: 下载失败时抛出
        """
        try:
            response = await self._run_in_executor(
                self._client.get_object,
                Bucket=bucket,
                Key=key
            )
            data = await self._run_in_executor(response['Body'].get_raw_stream().read)
        except Exception as e:
            logger.error(LogMessages.OPERATION_FAILED, exception=e, operation_name="COS下载")
            raise DownloadError("下载文件失败: {}".format(str(e)), details={'bucket': bucket, 'key': key}) from e

        return DownloadResult(
            data=data,
            size=len(data),
            mime_type=response.get('Content-Type', 'application/octet-stream'),
            last_modified=response.get('Last-Modified'),
            etag=response.get('ETag', '').strip('"')
        )

    async def delete(self, key: str, bucket: str) -> bool:
        try:
            await self._run_in_executor(
                self._client.delete_object,
                Bucket=bucket,
                Key=key
            )
        except Exception as e:
            logger.error(LogMessages.OPERATION_FAILED, exception=e, operation_name="COS删除")
            raise DeleteError("删除文件失败: {}".format(str(e)), details={'bucket': bucket, 'key': key}) from e
        return True

    async def exists(self, key: str, bucket: str) -> bool:
        try:
            await self._run_in_executor(
                self._client.head_object,
                Bucket=bucket,
                Key=key
            )
            return True
        except CosServiceError as e:
            if e.get_status_code() == 404:
                return False
            raise

    def public_url(self, key: str, bucket: str) -> str:
        return "{}/{}".format(get_cos_base_url(self.config, bucket), quote(key))


__all__ = ['TencentCosAdapter']
