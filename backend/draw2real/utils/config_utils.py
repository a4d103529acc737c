"""
配置工具模块
路径计算与配置字符串解析，供 Settings 使用
"""

import json
import logging
from pathlib import Path
from typing import List

logger = logging.getLogger(__name__)

# backend/draw2real/utils/config_utils.py → 仓库根目录
PROJECT_ROOT = Path(__file__).resolve().parents[3]


def get_project_root() -> Path:
    return PROJECT_ROOT


def _under(directory: str, sub_path: str) -> Path:
    base = PROJECT_ROOT / directory
    # 绝对路径（如测试使用的临时目录）原样返回
    return base / sub_path if sub_path else base


def get_workspace_path(sub_path: str = "") -> Path:
    """workspace目录：日志、本地存储等运行时文件"""
    return _under("workspace", sub_path)


def get_config_path(sub_path: str = "") -> Path:
    """config目录：.env 等配置文件"""
    return _under("config", sub_path)


def parse_list_config(value: str, separator: str = ",") -> List[str]:
    """解析逗号分隔的配置，如 "png, JPEG" → ["png", "jpeg"]"""
    if not value:
        return []
    return [item.strip().lower() for item in value.split(separator) if item.strip()]


def parse_json_config(value: str) -> List[str]:
    """解析JSON数组配置，如 CORS_ORIGINS='["http://localhost:5173"]'，解析失败返回空列表"""
    if not value:
        return []
    try:
        parsed = json.loads(value)
    except json.JSONDecodeError:
        logger.warning("JSON配置解析失败: %s", value)
        return []
    if not isinstance(parsed, list):
        logger.warning("JSON配置不是数组: %s", value)
        return []
    return [str(item) for item in parsed]
