"""
画作捕获业务处理器
"""

from typing import Any, Dict

from fastapi import HTTPException, status

from draw2real.core.log_utils import get_logger
from draw2real.core.storage.models import ImagePayload
from draw2real.utils.image_codec import decode_data_url, encode_data_url
from .capture_service import DrawingCaptureService, InvalidDrawingError

logger = get_logger(__name__)


def drawing_to_dict(payload: ImagePayload, include_data: bool = False) -> Dict[str, Any]:
    data: Dict[str, Any] = {
        "mime_type": payload.mime_type,
        "size": payload.size,
    }
    if include_data:
        data["image_data"] = encode_data_url(payload.data, payload.mime_type)
    return data


class DrawingHandler:
    """画作捕获业务处理器，会话以用户ID标识"""

    def __init__(self, drawings: DrawingCaptureService):
        self.drawings = drawings

    async def handle_set_data_url(self, user_id: str, image_data: str) -> Dict[str, Any]:
        """
        保存data URL形式的画作（相机拍照或画布导出）

        Raises:
            HTTPException: 400 数据无法解码或不是支持的图片
        """
        try:
            data, _ = decode_data_url(image_data)
        except ValueError as e:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="The drawing must be a base64 image data URL"
            ) from e
        return await self.handle_set_bytes(user_id, data)

    async def handle_set_bytes(self, user_id: str, data: bytes) -> Dict[str, Any]:
        """
        保存上传文件形式的画作

        Raises:
            HTTPException: 400 不是支持的图片
        """
        try:
            payload = await self.drawings.set_bytes(user_id, data)
        except InvalidDrawingError as e:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail=str(e)
            ) from e
        return drawing_to_dict(payload)

    async def handle_get(self, user_id: str) -> Dict[str, Any]:
        """
        Raises:
            HTTPException: 404 当前没有画作
        """
        payload = await self.drawings.get(user_id)
        if payload is None:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail="No drawing has been captured yet"
            )
        return drawing_to_dict(payload, include_data=True)

    async def handle_clear(self, user_id: str) -> None:
        try:
            await self.drawings.clear(user_id)
        except Exception as e:
            logger.error("清除画作失败", exception=e, user_id=user_id)
            raise HTTPException(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                detail="Could not clear the drawing"
            )
