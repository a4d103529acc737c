"""
OpenAI共享客户端和工具方法
"""

from typing import NoReturn, TYPE_CHECKING

import openai

from draw2real.core.log_utils import get_logger

if TYPE_CHECKING:
    from draw2real.core.ai.config import ModelConfig

logger = get_logger(__name__)


class OpenAIClientMixin:
    """OpenAI客户端Mixin

    提供共享的OpenAI客户端和错误处理
    """

    def __init__(self, model_config: 'ModelConfig'):
        self.client = openai.AsyncOpenAI(
            api_key=model_config.api_key,
            base_url=model_config.base_url
        )

    async def close_client(self):
        await self.client.close()

    def handle_error(self, e: Exception) -> NoReturn:
        """
        统一错误处理，将SDK异常转换为AIProviderError

        Raises:
            AIProviderError: 总是抛出
        """
        provider = self.get_provider_name()
        status_code = getattr(e, "status_code", None)

        if isinstance(e, openai.RateLimitError):
            message = "The image service is busy, please try again later"
        elif isinstance(e, openai.AuthenticationError):
            message = "The image service rejected our credentials"
        elif isinstance(e, openai.APITimeoutError):
            message = "The image service timed out"
        elif isinstance(e, openai.APIConnectionError):
            message = "Could not reach the image service"
        elif isinstance(e, openai.BadRequestError):
            message = "The image service rejected the request"
        elif isinstance(e, openai.APIStatusError):
            message = f"The image service returned an error (HTTP {status_code})"
        else:
            message = "The image service call failed"

        logger.error(
            "OpenAI API调用失败: {provider}",
            exception=e,
            provider=provider,
            status_code=status_code
        )
        raise self.error(message, status_code=status_code) from e
