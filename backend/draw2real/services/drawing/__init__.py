"""
画作捕获模块
"""

from .capture_service import DrawingCaptureService, InvalidDrawingError
from .session_cache import InMemoryTTLCache, RedisSessionCache, SessionCache, SessionCacheError, create_session_cache

__all__ = [
    'DrawingCaptureService',
    'InvalidDrawingError',
    'InMemoryTTLCache',
    'RedisSessionCache',
    'SessionCache',
    'SessionCacheError',
    'create_session_cache',
]
