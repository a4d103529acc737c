"""
存储工具模块
提供存储相关的工具函数
"""

from draw2real.core.storage.utils.image import fetch_as_portable, identify_image

__all__ = ['fetch_as_portable', 'identify_image']
