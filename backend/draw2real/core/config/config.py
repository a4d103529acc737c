"""
应用配置管理模块
统一管理所有配置信息，包括环境变量和文件配置
"""

from typing import List, Optional
from pydantic_settings import BaseSettings
from pydantic import field_validator, ConfigDict

from draw2real.utils.config_utils import (
    get_workspace_path, get_config_path, parse_list_config, parse_json_config
)


class Settings(BaseSettings):
    """应用配置类 - 统一管理所有配置信息"""

    # ==================== 基础配置 ====================
    app_name: str = "Draw2Real"
    app_version: str = "1.0.0"
    app_debug: bool = True
    app_env: str = "development"

    # ==================== API配置 ====================
    api_v1_str: str = "/api/v1"
    project_name: str = "Draw2Real API"

    # ==================== 数据库配置 ====================
    POSTGRES_HOST: str = "localhost"
    POSTGRES_PORT: int = 5432
    POSTGRES_USER: str = "draw2real_dev"
    POSTGRES_PASSWORD: str = "dev_password"
    POSTGRES_DB: str = "draw2real_dev"
    db_echo: bool = False
    db_auto_create: bool = True
    # 非空时直接使用该URL（如测试环境的 sqlite+aiosqlite）
    database_url_override: Optional[str] = None

    # ==================== Redis配置 ====================
    redis_host: str = "localhost"
    redis_port: int = 6379
    redis_db: int = 0
    redis_password: Optional[str] = None

    # ==================== 安全配置 ====================
    SECRET_KEY: str = "development-secret-key-change-in-production"
    ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 3600
    # 身份服务签发令牌时使用的audience，为空则不校验
    auth_audience: Optional[str] = None

    # ==================== 文件存储配置 ====================
    log_dir: str = "log"
    local_storage_dir: str = "storage"
    max_image_size: int = 10485760   # 10MB
    image_formats: str = "jpg,jpeg,png,gif,bmp,webp"

    # 存储适配器: local / tencent_cos
    storage_adapter: str = "local"
    public_base_url: str = "http://localhost:8080"
    storage_static_mount: str = "/static"

    # 存储分类（对应存储桶）
    originals_category: str = "originals"
    generated_category: str = "generated-images"

    # ==================== COS存储配置 ====================
    cos_secret_id: str = ""
    cos_secret_key: str = ""
    cos_region: str = "ap-beijing"
    cos_app_id: str = ""
    cos_scheme: str = "https"
    cos_timeout: int = 30

    # ==================== 会话缓存配置 ====================
    # memory / redis
    session_cache_backend: str = "memory"
    drawing_cache_ttl: int = 86400
    # 已结束的生成尝试保留多久供轮询（秒）
    generation_attempt_retention: int = 3600

    # ==================== AI模型配置 ====================
    openai_api_key: str = ""
    openai_base_url: Optional[str] = None
    vision_model: str = "gpt-4o"
    vision_max_tokens: int = 500
    vision_temperature: float = 0.7
    image_model: str = "dall-e-3"
    image_size: str = "1024x1024"
    image_quality: str = "standard"

    describe_instruction: str = (
        "You are a visual AI assistant helping a child turn their crayon drawing "
        "into a realistic image. Look at the image carefully and describe it in one "
        "vivid, concrete sentence that includes: creature or object type, body parts, "
        "colours, pose, and background. Focus on what an image generator needs to "
        "recreate the drawing accurately. Respond with one detailed prompt only, "
        "no preamble or follow-up."
    )
    synthesis_prompt_template: str = (
        "Create a realistic version of this child's drawing: {description}. "
        "Make it look photorealistic while keeping the spirit and elements of the "
        "original drawing."
    )

    # ==================== 重试配置 ====================
    generated_upload_max_attempts: int = 3
    gallery_write_max_attempts: int = 3
    ledger_max_attempts: int = 3
    retry_delay_base: float = 0.5
    retry_backoff_factor: float = 2.0
    retry_max_delay: float = 8.0
    remote_fetch_timeout: float = 60.0

    # ==================== 支付与积分配置 ====================
    stripe_secret_key: str = ""
    stripe_webhook_secret: str = ""
    stripe_currency: str = "gbp"
    referral_bonus_credits: int = 5

    # ==================== 日志配置 ====================
    log_level: str = "INFO"
    log_file: str = "backend.log"
    log_format: str = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

    # ==================== 应用服务配置 ====================
    app_port: int = 8080
    app_host: str = "0.0.0.0"

    # ==================== CORS配置 ====================
    frontend_url: str = "http://localhost:5173"
    cors_origins: str = '["http://localhost:5173", "http://127.0.0.1:5173"]'

    # ==================== 验证器 ====================
    @field_validator("image_formats")
    @classmethod
    def split_image_formats(cls, value: str) -> List[str]:
        """将图片格式字符串转换为列表"""
        return parse_list_config(value)

    @field_validator("cors_origins")
    @classmethod
    def parse_cors_origins(cls, value: str) -> List[str]:
        """解析CORS origins配置"""
        return parse_json_config(value)

    # ==================== 计算属性 ====================
    @property
    def async_database_url(self) -> str:
        """构建异步数据库连接URL"""
        if self.database_url_override:
            return self.database_url_override
        return (
            f"postgresql+asyncpg://{self.POSTGRES_USER}:{self.POSTGRES_PASSWORD}@"
            f"{self.POSTGRES_HOST}:{self.POSTGRES_PORT}/{self.POSTGRES_DB}"
        )

    @property
    def redis_url(self) -> str:
        """构建Redis连接URL"""
        if self.redis_password:
            return (
                f"redis://:{self.redis_password}@{self.redis_host}:"
                f"{self.redis_port}/{self.redis_db}"
            )
        return f"redis://{self.redis_host}:{self.redis_port}/{self.redis_db}"

    @property
    def absolute_log_dir(self) -> str:
        """获取绝对日志目录路径"""
        return str(get_workspace_path(self.log_dir))

    @property
    def absolute_storage_dir(self) -> str:
        """获取本地存储根目录"""
        return str(get_workspace_path(self.local_storage_dir))

    model_config = ConfigDict(
        env_file=get_config_path(".env"),
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="allow",
        validate_default=True
    )


def get_settings() -> Settings:
    """获取应用配置实例"""
    # 环境变量文件加载由外部环境控制（Docker Compose、launch.json等）
    return Settings()


# 全局配置实例
settings = get_settings()
