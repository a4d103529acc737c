from .image_gen import BaseImageGenProvider
from .vision import BaseVisionProvider

__all__ = [
    "BaseVisionProvider",
    "BaseImageGenProvider",
]
