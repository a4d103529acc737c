"""
AI Provider异常定义
"""

from typing import Optional


class AIProviderError(Exception):
    """
    AI服务调用失败

    Attributes:
        message: 面向用户的错误消息
        provider: Provider名称
        status_code: 上游返回的HTTP状态码（如有）
    """

    def __init__(
        self,
        message: str,
        provider: Optional[str] = None,
        status_code: Optional[int] = None
    ) -> None:
        super().__init__(message)
        self.message = message
        self.provider = provider
        self.status_code = status_code
