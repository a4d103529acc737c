"""
AI模型配置管理
"""

from typing import Optional, Dict, Any, List

from draw2real.core.config import settings
from .models import ModelCapability


class ModelConfig:
    """AI模型配置类"""

    def __init__(
        self,
        model_id: str,
        model_name: str,
        api_key: str,
        base_url: Optional[str] = None,
        capabilities: Optional[List[str]] = None,
        provider_mapping: Optional[Dict[str, str]] = None,
        parameters: Optional[Dict[str, Any]] = None,
        max_tokens: Optional[int] = None
    ):
        """
        初始化模型配置

        Args:
            model_id: 模型ID
            model_name: 模型名称（如 "gpt-4o"）
            api_key: API密钥
            base_url: API基础URL
            capabilities: 支持的能力列表
            provider_mapping: Provider映射（如 {"image_gen": "openai_dalle"}）
            parameters: 其他参数
            max_tokens: 最大Token数
        """
        self.model_id = model_id
        self.model_name = model_name
        self.api_key = api_key
        self.base_url = base_url
        self.capabilities = capabilities or []
        self.provider_mapping = provider_mapping or {}
        self.parameters = parameters or {}
        self.max_tokens = max_tokens

    def get_provider_for_capability(self, capability: ModelCapability) -> Optional[str]:
        return self.provider_mapping.get(capability.value)

    def supports_capability(self, capability: ModelCapability) -> bool:
        return capability.value in self.capabilities


def vision_model_config() -> ModelConfig:
    """根据全局配置构建画作描述使用的多模态模型配置"""
    return ModelConfig(
        model_id="vision",
        model_name=settings.vision_model,
        api_key=settings.openai_api_key,
        base_url=settings.openai_base_url,
        capabilities=[ModelCapability.VISION.value],
        provider_mapping={ModelCapability.VISION.value: "openai"},
        parameters={"temperature": settings.vision_temperature},
        max_tokens=settings.vision_max_tokens
    )


def image_model_config() -> ModelConfig:
    """根据全局配置构建图片合成使用的模型配置"""
    return ModelConfig(
        model_id="image",
        model_name=settings.image_model,
        api_key=settings.openai_api_key,
        base_url=settings.openai_base_url,
        capabilities=[ModelCapability.IMAGE_GEN.value],
        provider_mapping={ModelCapability.IMAGE_GEN.value: "openai_dalle"},
        parameters={"size": settings.image_size, "quality": settings.image_quality}
    )
