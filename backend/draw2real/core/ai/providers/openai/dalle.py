"""
DALL-E图片生成Provider
"""

from draw2real.core.ai.models import ImageGenerationResult
from draw2real.core.ai.providers.base.image_gen import BaseImageGenProvider
from draw2real.core.log_messages import LogMessages
from draw2real.core.log_utils import get_logger
from .client import OpenAIClientMixin

logger = get_logger(__name__)


class DALLEProvider(BaseImageGenProvider, OpenAIClientMixin):
    """DALL-E图片生成Provider，结果以URL形式返回"""

    def __init__(self, model_config):
        BaseImageGenProvider.__init__(self, model_config)
        OpenAIClientMixin.__init__(self, model_config)

    def get_provider_name(self) -> str:
        return "openai_dalle"

    async def close(self):
        await self.close_client()

    async def generate_image(
        self,
        prompt: str,
        size: str = "1024x1024",
        quality: str = "standard"
    ) -> ImageGenerationResult:
        """
        Args:
            prompt: 合成提示词
            size: 1024x1024 / 1792x1024 / 1024x1792
            quality: standard / hd
        """
        logger.info(
            LogMessages.AI_CALL_START,
            provider=self.get_provider_name(),
            model=self.model_config.model_name,
            prompt_length=len(prompt),
            size=size
        )

        try:
            response = await self.client.images.generate(
                model=self.model_config.model_name,
                prompt=prompt,
                size=size,
                quality=quality,
                n=1,
                response_format="url"
            )
        except Exception as e:
            self.handle_error(e)

        image = response.data[0] if response.data else None
        if image is None or not image.url:
            return ImageGenerationResult(
                success=False,
                error_message="No image URL in the image service response"
            )

        return ImageGenerationResult(
            success=True,
            image_url=image.url,
            revised_prompt=getattr(image, "revised_prompt", None),
            metadata={"model": self.model_config.model_name, "size": size, "quality": quality}
        )
