"""
存储服务模块
提供统一的存储服务访问接口，支持多种存储适配器
"""

from typing import Optional

from draw2real.core.config import settings
from draw2real.core.storage.abc import BaseStorage
from draw2real.core.storage.adapters.local import LocalStorageAdapter
from draw2real.core.storage.adapters.tencent_cos import TencentCosAdapter
from draw2real.core.storage.exceptions import *
from draw2real.core.storage.factory import (
    create_adapter,
    list_available_adapters,
    register_adapter,
)
from draw2real.core.storage.models import *
from draw2real.core.storage.utils import fetch_as_portable, identify_image

register_adapter(LocalStorageAdapter.ADAPTER_NAME, LocalStorageAdapter)
register_adapter(TencentCosAdapter.ADAPTER_NAME, TencentCosAdapter)


def get_storage_service(adapter_name: Optional[str] = None) -> BaseStorage:
    """
    获取存储服务实例

    Args:
        adapter_name: 适配器名称（'local' 或 'tencent_cos'），默认使用配置项 storage_adapter

    Returns:
        BaseStorage: 存储服务实例

    Raises:
        ConfigurationError: 适配器不存在或配置不完整时抛出
    """
    return create_adapter(adapter_name or settings.storage_adapter)


__all__ = [
    'get_storage_service',
    'create_adapter',
    'list_available_adapters',
    'register_adapter',
    'BaseStorage',
    'LocalStorageAdapter',
    'TencentCosAdapter',
    'fetch_as_portable',
    'identify_image',
]
