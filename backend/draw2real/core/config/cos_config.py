"""
腾讯云COS配置模块
从全局配置构建COS连接参数，并提供存储桶与访问地址的计算
"""

from pydantic import BaseModel, Field

from draw2real.core.config.config import settings


class COSConfig(BaseModel):
    """COS配置数据类"""

    secret_id: str = Field(default="", description="腾讯云COS SecretId")
    secret_key: str = Field(default="", description="腾讯云COS SecretKey")
    region: str = Field(default="ap-beijing", description="COS地域")
    app_id: str = Field(default="", description="腾讯云APPID，存储桶名称后缀")
    scheme: str = Field(default="https", description="连接协议")
    timeout: int = Field(default=30, description="连接超时时间（秒）")
    public_read: bool = Field(default=True, description="新建存储桶是否允许公共读取")


def get_cos_config() -> COSConfig:
    """从全局配置获取COS配置"""
    return COSConfig(
        secret_id=settings.cos_secret_id,
        secret_key=settings.cos_secret_key,
        region=settings.cos_region,
        app_id=settings.cos_app_id,
        scheme=settings.cos_scheme,
        timeout=settings.cos_timeout,
    )


def validate_cos_config(config: COSConfig) -> bool:
    """验证COS配置完整性"""
    required_fields = ["secret_id", "secret_key", "region", "app_id"]
    return all(getattr(config, field) for field in required_fields)


def get_bucket_name(config: COSConfig, category: str) -> str:
    """COS要求存储桶名称以 -APPID 结尾"""
    return f"{category}-{config.app_id}"


def get_cos_base_url(config: COSConfig, bucket: str) -> str:
    """构建存储桶的基础访问URL"""
    return f"{config.scheme}://{bucket}.cos.{config.region}.myqcloud.com"
