"""
画廊服务模块
"""

from .gallery_service import GalleryService

__all__ = ['GalleryService']
