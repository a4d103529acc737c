"""
AI Provider工厂
"""

from typing import Dict, List, Type

from draw2real.core.log_utils import get_logger
from .base import BaseAIProvider
from .config import ModelConfig
from .models import ModelCapability

logger = get_logger(__name__)


class AIProviderFactory:
    """AI Provider工厂类"""

    # Provider注册表: {capability: {provider_name: ProviderClass}}
    _providers: Dict[ModelCapability, Dict[str, Type[BaseAIProvider]]] = {}

    @classmethod
    def register(
        cls,
        capability: ModelCapability,
        provider_name: str,
        provider_class: Type[BaseAIProvider]
    ):
        """注册Provider"""
        cls._providers.setdefault(capability, {})[provider_name] = provider_class
        logger.debug(
            "注册Provider: {capability}/{provider_name}",
            capability=capability.value,
            provider_name=provider_name
        )

    @classmethod
    def create(
        cls,
        model_config: ModelConfig,
        capability: ModelCapability
    ) -> BaseAIProvider:
        """
        创建Provider实例

        Raises:
            ValueError: 如果能力不支持或Provider未注册
        """
        provider_name = model_config.get_provider_for_capability(capability)
        if not provider_name:
            raise ValueError(
                f"模型 {model_config.model_id} 未配置 {capability.value} 的Provider"
            )

        if not cls.is_registered(capability, provider_name):
            available = cls.get_available_providers(capability)
            raise ValueError(
                f"未注册的Provider: {capability.value}/{provider_name}, "
                f"可用的Provider: {available}"
            )

        provider_class = cls._providers[capability][provider_name]
        logger.info(
            "创建Provider实例: {capability}/{provider_name}",
            capability=capability.value,
            provider_name=provider_name,
            model_id=model_config.model_id
        )
        return provider_class(model_config)

    @classmethod
    def get_available_providers(cls, capability: ModelCapability) -> List[str]:
        return list(cls._providers.get(capability, {}).keys())

    @classmethod
    def is_registered(cls, capability: ModelCapability, provider_name: str) -> bool:
        return provider_name in cls._providers.get(capability, {})
