"""
多模态能力Provider基类
"""

from abc import abstractmethod
from typing import Set

from draw2real.core.ai.base import BaseAIProvider
from draw2real.core.ai.models import ModelCapability
from draw2real.core.storage.models import ImagePayload


class BaseVisionProvider(BaseAIProvider):
    """看图说话：根据指令用文字描述一张图片"""

    def get_capabilities(self) -> Set[ModelCapability]:
        return {ModelCapability.VISION}

    @abstractmethod
    async def describe_image(
        self,
        image: ImagePayload,
        instruction: str,
        temperature: float = 0.7,
        max_tokens: int = 500
    ) -> str:
        """
        Returns:
            模型返回的文本，可能为空字符串

        Raises:
            AIProviderError: 调用失败时抛出
        """
