"""
AI模型交互的数据模型
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Optional


class ModelCapability(str, Enum):
    """生成流程用到的两种模型能力"""
    VISION = "vision"        # 描述画作
    IMAGE_GEN = "image_gen"  # 合成写实图片


@dataclass
class ImageGenerationResult:
    """
    单张图片的生成结果

    image_url 是生成服务托管的临时地址，需要尽快下载并转存。
    """
    success: bool
    image_url: Optional[str] = None
    revised_prompt: Optional[str] = None
    error_message: Optional[str] = None
    metadata: Dict[str, Any] = field(default_factory=dict)
