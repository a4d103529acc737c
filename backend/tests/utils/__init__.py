"""
测试工具包
提供统一的测试工具和辅助函数
"""

from .factories import make_data_url, make_image_bytes, make_payload
from .mock_utils import FlakyStorage, MockBuilder, image_http_client, no_backoff, no_sleep

__all__ = [
    'make_data_url',
    'make_image_bytes',
    'make_payload',
    'FlakyStorage',
    'MockBuilder',
    'image_http_client',
    'no_backoff',
    'no_sleep',
]
