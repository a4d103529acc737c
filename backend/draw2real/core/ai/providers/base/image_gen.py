"""
文生图能力Provider基类
"""

from abc import abstractmethod
from typing import Set

from draw2real.core.ai.base import BaseAIProvider
from draw2real.core.ai.models import ImageGenerationResult, ModelCapability


class BaseImageGenProvider(BaseAIProvider):
    """文生图Provider基类，每次调用只生成一张图片"""

    def get_capabilities(self) -> Set[ModelCapability]:
        return {ModelCapability.IMAGE_GEN}

    @abstractmethod
    async def generate_image(
        self,
        prompt: str,
        size: str = "1024x1024",
        quality: str = "standard"
    ) -> ImageGenerationResult:
        """
        Raises:
            AIProviderError: 调用失败时抛出
        """
