"""
通用工具模块包
"""

from .config_utils import (
    get_config_path,
    get_project_root,
    get_workspace_path,
    parse_json_config,
    parse_list_config,
)
from .id_utils import generate_code, generate_uuid
from .image_codec import decode_data_url, encode_data_url

__all__ = [
    # 配置工具
    'get_project_root',
    'get_workspace_path',
    'get_config_path',
    'parse_list_config',
    'parse_json_config',

    # ID工具
    'generate_uuid',
    'generate_code',

    # 图片编码
    'decode_data_url',
    'encode_data_url',
]
