"""
图片服务模块
包含图片存储相关的业务服务
"""

from .image_store_service import ImageStoreError, ImageStoreService

__all__ = [
    'ImageStoreError',
    'ImageStoreService',
]
