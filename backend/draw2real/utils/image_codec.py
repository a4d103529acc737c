"""
图片编码工具
处理data URL（data:image/png;base64,...）与二进制数据之间的转换
"""

import base64
import binascii
import re
from typing import Tuple

_DATA_URL_PATTERN = re.compile(
    r"^data:(?P<mime>[\w/+.-]+)?(?P<params>(;[\w-]+=[\w.-]+)*)(?P<b64>;base64)?,(?P<data>.*)$",
    re.DOTALL
)


def decode_data_url(data_url: str) -> Tuple[bytes, str]:
    """
    解析data URL

    Args:
        data_url: 形如 data:image/png;base64,iVBOR... 的字符串

    Returns:
        Tuple[bytes, str]: (二进制数据, MIME类型)

    Raises:
        ValueError: 格式不正确或不是base64编码
    """
    match = _DATA_URL_PATTERN.match(data_url.strip())
    if not match:
        raise ValueError("Not a valid data URL")
    if not match.group("b64"):
        raise ValueError("Only base64 encoded data URLs are supported")

    try:
        data = base64.b64decode(match.group("data"), validate=True)
    except (binascii.Error, ValueError) as e:
        raise ValueError("Invalid base64 payload in data URL") from e

    return data, match.group("mime") or "application/octet-stream"


def encode_data_url(data: bytes, mime_type: str) -> str:
    """将二进制数据编码为base64 data URL"""
    return "data:{};base64,{}".format(mime_type, base64.b64encode(data).decode("ascii"))
