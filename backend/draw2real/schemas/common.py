"""
通用Pydantic模型
用于标准化API响应
"""

from typing import Any, Optional

from pydantic import BaseModel


class StandardResponse(BaseModel):
    """标准化响应模型"""
    status: str = "success"
    message: str = ""
    data: Optional[Any] = None
