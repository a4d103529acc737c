"""
AI模型交互模块
画作描述（多模态）与图片合成（文生图）两类Provider，经工厂按能力创建
"""

from .base import BaseAIProvider
from .exceptions import AIProviderError
from .factory import AIProviderFactory
from .models import ImageGenerationResult, ModelCapability
from .registry import register_all_providers

__all__ = [
    "AIProviderError",
    "AIProviderFactory",
    "BaseAIProvider",
    "ImageGenerationResult",
    "ModelCapability",
    "register_all_providers",
]
