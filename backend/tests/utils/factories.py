"""
测试数据构造
"""

import io
from typing import Tuple

from PIL import Image

from draw2real.core.storage.models import ImagePayload
from draw2real.utils.image_codec import encode_data_url

FORMAT_MIME = {
    "PNG": "image/png",
    "JPEG": "image/jpeg",
    "WEBP": "image/webp",
}


def make_image_bytes(
    fmt: str = "PNG",
    size: Tuple[int, int] = (16, 16),
    color: Tuple[int, int, int] = (220, 40, 40)
) -> bytes:
    """用Pillow生成一张纯色小图"""
    buffer = io.BytesIO()
    Image.new("RGB", size, color).save(buffer, format=fmt)
    return buffer.getvalue()


def make_payload(fmt: str = "PNG", **kwargs) -> ImagePayload:
    return ImagePayload(data=make_image_bytes(fmt, **kwargs), mime_type=FORMAT_MIME[fmt])


def make_data_url(fmt: str = "PNG") -> str:
    return encode_data_url(make_image_bytes(fmt), FORMAT_MIME[fmt])
