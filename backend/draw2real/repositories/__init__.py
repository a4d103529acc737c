"""
Repository模块
包含所有数据访问层的Repository类
"""

from .base import BaseRepository
from .credit import CreditRepository
from .gallery import GalleryRepository
from .referral import ReferralRepository

__all__ = [
    'BaseRepository',
    'CreditRepository',
    'GalleryRepository',
    'ReferralRepository',
]
