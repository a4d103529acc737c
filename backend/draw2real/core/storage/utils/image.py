"""
图片工具
提供远程图片下载与图片数据识别
"""

import io
from typing import Optional, Tuple

import httpx
from PIL import Image, UnidentifiedImageError

from draw2real.core.config import settings
from draw2real.core.log_messages import LogMessages
from draw2real.core.log_utils import get_logger
from draw2real.core.storage.exceptions import (
    RemoteImageFormatError,
    RemoteImageHTTPError,
    RemoteImageNetworkError,
)
from draw2real.core.storage.models import ImagePayload

logger = get_logger(__name__)


def identify_image(data: bytes) -> Tuple[str, int, int]:
    """
    识别图片数据

    Args:
        data: 图片二进制数据

    Returns:
        Tuple[str, int, int]: (MIME类型, 宽, 高)

    Raises:
        ValueError: 数据不是可识别的图片
    """
    try:
        with Image.open(io.BytesIO(data)) as image:
            width, height = image.size
            image_format = image.format or "PNG"
    except (UnidentifiedImageError, OSError) as e:
        raise ValueError("Unsupported or corrupt image data") from e

    mime_type = Image.MIME.get(image_format, "image/{}".format(image_format.lower()))
    return mime_type, width, height


async def fetch_as_portable(
    url: str,
    timeout: Optional[float] = None,
    client: Optional[httpx.AsyncClient] = None
) -> ImagePayload:
    """
    下载远程图片并返回可直接存储的图片数据

    Args:
        url: 图片URL（如生成服务返回的临时地址）
        timeout: 请求超时（秒），默认使用配置
        client: 复用的httpx客户端，测试中可注入MockTransport

    Returns:
        ImagePayload: 图片数据与MIME类型

    Raises:
        RemoteImageHTTPError: 服务器返回非成功状态码
        RemoteImageNetworkError: 网络传输失败
        RemoteImageFormatError: 内容不是可识别的图片
    """
    logger.info(LogMessages.REMOTE_FETCH_START, url=url[:80])

    try:
        if client is not None:
            response = await client.get(url)
        else:
            async with httpx.AsyncClient(
                timeout=timeout or settings.remote_fetch_timeout,
                follow_redirects=True
            ) as session:
                response = await session.get(url)
        response.raise_for_status()
    except httpx.HTTPStatusError as e:
        status_code = e.response.status_code
        logger.error(LogMessages.REMOTE_FETCH_FAILED, url=url[:80], status_code=status_code)
        raise RemoteImageHTTPError(
            f"Image download failed (HTTP {status_code})",
            status_code=status_code,
            url=url
        ) from e
    except httpx.RequestError as e:
        logger.error(LogMessages.REMOTE_FETCH_FAILED, exception=e, url=url[:80])
        raise RemoteImageNetworkError(f"Image download failed (network error): {e}", url=url) from e

    data = response.content
    try:
        mime_type, width, height = identify_image(data)
    except ValueError as e:
        raise RemoteImageFormatError("Downloaded content is not an image", url=url) from e

    logger.debug(
        "图片下载成功: {width}x{height}, {size_bytes} bytes",
        width=width,
        height=height,
        size_bytes=len(data)
    )
    return ImagePayload(data=data, mime_type=mime_type)


__all__ = ['fetch_as_portable', 'identify_image']
