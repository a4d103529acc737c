"""
AI Provider统一抽象基类
"""

from abc import ABC, abstractmethod
from typing import Optional, Set, TYPE_CHECKING

from .exceptions import AIProviderError
from .models import ModelCapability

if TYPE_CHECKING:
    from draw2real.core.ai.config import ModelConfig


class BaseAIProvider(ABC):
    """
    所有AI Provider的统一抽象基类

    Provider实例在应用启动时创建一次，在整个进程内复用，关闭应用时调用 close()。
    """

    def __init__(self, model_config: 'ModelConfig'):
        self.model_config = model_config

    @abstractmethod
    def get_capabilities(self) -> Set[ModelCapability]:
        pass

    @abstractmethod
    def get_provider_name(self) -> str:
        """Provider名称，写入日志与AIProviderError"""

    def parameter(self, name: str, default=None):
        """读取模型配置中的调用参数"""
        return self.model_config.parameters.get(name, default)

    def error(self, message: str, status_code: Optional[int] = None) -> AIProviderError:
        return AIProviderError(message, provider=self.get_provider_name(), status_code=status_code)

    async def close(self):
        pass
