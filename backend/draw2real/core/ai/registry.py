"""
AI Provider注册中心
"""

from draw2real.core.log_utils import get_logger
from .factory import AIProviderFactory
from .models import ModelCapability
from .providers.openai.dalle import DALLEProvider
from .providers.openai.vision import OpenAIVisionProvider

logger = get_logger(__name__)


def register_all_providers():
    """注册所有Provider（按提供商组织）"""
    AIProviderFactory.register(ModelCapability.VISION, "openai", OpenAIVisionProvider)
    AIProviderFactory.register(ModelCapability.IMAGE_GEN, "openai_dalle", DALLEProvider)

    logger.info("OpenAI Provider注册完成")
