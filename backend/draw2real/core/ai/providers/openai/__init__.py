"""
OpenAI Provider：gpt-4o 描述画作，dall-e-3 合成图片
"""

from .dalle import DALLEProvider
from .vision import OpenAIVisionProvider

__all__ = [
    "OpenAIVisionProvider",
    "DALLEProvider",
]
