"""
ID生成工具模块
"""

import secrets
import string
import uuid

CODE_ALPHABET = string.ascii_uppercase + string.digits


def generate_uuid() -> str:
    """生成标准UUID字符串"""
    return str(uuid.uuid4())


def generate_code(length: int = 8, alphabet: str = CODE_ALPHABET) -> str:
    """
    生成随机邀请码（如推荐码）

    Args:
        length: 长度，默认8位
        alphabet: 可用字符，默认大写字母与数字

    Returns:
        str: 随机码
    """
    if length < 4:
        raise ValueError("code length must be at least 4")
    return "".join(secrets.choice(alphabet) for _ in range(length))
