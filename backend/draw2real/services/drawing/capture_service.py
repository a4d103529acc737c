"""
画作捕获服务
每个会话只保存一幅待生成的画作，新画作直接覆盖旧画作
"""

from typing import Optional

from draw2real.core.config import settings
from draw2real.core.log_messages import LogMessages
from draw2real.core.log_utils import get_logger
from draw2real.core.storage.models import ImagePayload
from draw2real.core.storage.utils.image import identify_image
from .session_cache import InMemoryTTLCache, SessionCache

logger = get_logger(__name__)


class InvalidDrawingError(ValueError):
    """上传的内容不是可用的图片"""


class DrawingCaptureService:
    """
    画作捕获状态

    会话缓存是画作的唯一来源，多个worker读到的是同一份副本，过期策略也由缓存决定。
    缓存写入失败时，画作暂存在进程内的兜底缓存中（同样带TTL），
    直到下一次成功写入或清除。
    """

    def __init__(
        self,
        cache: SessionCache,
        max_size: Optional[int] = None,
        fallback: Optional[SessionCache] = None
    ):
        self._cache = cache
        self._max_size = max_size or settings.max_image_size
        self._fallback = fallback or InMemoryTTLCache()

    def validate(self, data: bytes) -> ImagePayload:
        """
        校验图片数据并识别MIME类型

        Raises:
            InvalidDrawingError: 为空、过大、格式不支持或不是图片
        """
        if not data:
            raise InvalidDrawingError("The uploaded drawing is empty")
        if len(data) > self._max_size:
            raise InvalidDrawingError(
                f"The drawing is too large (max {self._max_size // (1024 * 1024)}MB)"
            )
        try:
            mime_type, _, _ = identify_image(data)
        except ValueError as e:
            raise InvalidDrawingError("The uploaded file is not a supported image") from e

        extension = ImagePayload(data=b"", mime_type=mime_type).extension
        allowed = settings.image_formats
        if allowed and extension not in allowed:
            raise InvalidDrawingError(f"Image format '{extension}' is not supported")
        return ImagePayload(data=data, mime_type=mime_type)

    async def set(self, session_id: str, payload: ImagePayload) -> None:
        """保存画作（后写入者覆盖）到会话缓存"""
        try:
            await self._cache.save(session_id, payload)
        except Exception as e:
            logger.error(LogMessages.DRAWING_CACHE_FAILED, exception=e, session_id=session_id)
            await self._fallback.save(session_id, payload)
        else:
            await self._fallback.clear(session_id)
        logger.info(LogMessages.DRAWING_SET, session_id=session_id, size=payload.size)

    async def set_bytes(self, session_id: str, data: bytes) -> ImagePayload:
        payload = self.validate(data)
        await self.set(session_id, payload)
        return payload

    async def get(self, session_id: str) -> Optional[ImagePayload]:
        """读取画作，会话缓存中没有时读取兜底缓存"""
        try:
            payload = await self._cache.load(session_id)
        except Exception as e:
            logger.error(LogMessages.DRAWING_CACHE_FAILED, exception=e, session_id=session_id)
            payload = None

        if payload is not None:
            return payload
        return await self._fallback.load(session_id)

    async def clear(self, session_id: str) -> None:
        """同时清除会话缓存与兜底缓存中的副本"""
        await self._fallback.clear(session_id)
        await self._cache.clear(session_id)
        logger.info(LogMessages.DRAWING_CLEARED, session_id=session_id)
