"""
生成流程的AI服务
描述画作（多模态模型）并据此合成写实图片（文生图模型）
"""

from typing import Optional

from draw2real.core.ai.config import image_model_config, vision_model_config
from draw2real.core.ai.factory import AIProviderFactory
from draw2real.core.ai.models import ModelCapability
from draw2real.core.ai.providers.base.image_gen import BaseImageGenProvider
from draw2real.core.ai.providers.base.vision import BaseVisionProvider
from draw2real.core.config import settings
from draw2real.core.storage.models import ImagePayload


class GenerationAIService:
    """封装生成流程需要的两次AI调用"""

    def __init__(
        self,
        vision_provider: BaseVisionProvider,
        image_provider: BaseImageGenProvider,
        describe_instruction: Optional[str] = None,
        prompt_template: Optional[str] = None
    ):
        self.vision_provider = vision_provider
        self.image_provider = image_provider
        self.describe_instruction = describe_instruction or settings.describe_instruction
        self.prompt_template = prompt_template or settings.synthesis_prompt_template

    @classmethod
    def from_settings(cls) -> "GenerationAIService":
        """按全局配置通过Provider工厂创建（调用前需已注册Provider）"""
        vision_provider = AIProviderFactory.create(vision_model_config(), ModelCapability.VISION)
        image_provider = AIProviderFactory.create(image_model_config(), ModelCapability.IMAGE_GEN)
        return cls(vision_provider, image_provider)

    async def describe(self, drawing: ImagePayload) -> str:
        """
        用一句具体生动的话描述画作

        Raises:
            AIProviderError: 调用失败或返回空文本
        """
        provider = self.vision_provider
        description = await provider.describe_image(
            drawing,
            self.describe_instruction,
            temperature=provider.parameter("temperature", 0.7),
            max_tokens=provider.model_config.max_tokens or 500
        )
        description = (description or "").strip()
        if not description:
            raise provider.error("The drawing could not be described")
        return description

    async def synthesize(self, description: str) -> str:
        """
        根据描述生成一张固定尺寸的图片，返回生成服务提供的临时URL

        Raises:
            AIProviderError: 调用失败或响应中没有URL
        """
        provider = self.image_provider
        result = await provider.generate_image(
            prompt=self.prompt_template.format(description=description),
            size=provider.parameter("size", "1024x1024"),
            quality=provider.parameter("quality", "standard")
        )
        if not result.success or not result.image_url:
            raise provider.error(result.error_message or "No image was returned")
        return result.image_url

    async def close(self) -> None:
        await self.vision_provider.close()
        await self.image_provider.close()
