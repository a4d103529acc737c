"""
画作捕获相关的Pydantic模型
"""

from pydantic import BaseModel, Field


class DrawingUploadRequest(BaseModel):
    """data URL形式的画作上传请求"""
    image_data: str = Field(..., min_length=1, description="图片data URL，如 data:image/png;base64,...")
