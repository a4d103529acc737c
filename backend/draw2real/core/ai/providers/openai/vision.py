"""
OpenAI Vision Provider
通过 chat completions 的图片消息描述画作
"""

from draw2real.core.ai.providers.base.vision import BaseVisionProvider
from draw2real.core.log_messages import LogMessages
from draw2real.core.log_utils import get_logger
from draw2real.core.storage.models import ImagePayload
from draw2real.utils.image_codec import encode_data_url
from .client import OpenAIClientMixin

logger = get_logger(__name__)


class OpenAIVisionProvider(BaseVisionProvider, OpenAIClientMixin):
    """OpenAI多模态Provider"""

    def __init__(self, model_config):
        BaseVisionProvider.__init__(self, model_config)
        OpenAIClientMixin.__init__(self, model_config)

    def get_provider_name(self) -> str:
        return "openai"

    async def close(self):
        await self.close_client()

    async def describe_image(
        self,
        image: ImagePayload,
        instruction: str,
        temperature: float = 0.7,
        max_tokens: int = 500
    ) -> str:
        logger.info(
            LogMessages.AI_CALL_START,
            provider=self.get_provider_name(),
            model=self.model_config.model_name,
            image_size=image.size
        )

        # 图片以data URL内联发送，画作不需要先上传
        messages = [
            {
                "role": "user",
                "content": [
                    {"type": "text", "text": instruction},
                    {"type": "image_url", "image_url": {"url": encode_data_url(image.data, image.mime_type)}},
                ],
            }
        ]

        try:
            response = await self.client.chat.completions.create(
                model=self.model_config.model_name,
                messages=messages,
                temperature=temperature,
                max_tokens=max_tokens
            )
        except Exception as e:
            self.handle_error(e)

        if not response.choices:
            return ""
        return response.choices[0].message.content or ""
