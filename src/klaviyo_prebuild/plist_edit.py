"""
plist 字典读写与按键修改工具。

设计原则：
- 只修改调用方指定的键，未知键原样保留。
- 数组 upsert 不改变已有元素的顺序与内容。
"""

from __future__ import annotations

import plistlib
from typing import Any

from .fileops import FileOps


def load_plist(fs: FileOps, path: str) -> Any:
    """从磁盘读取 plist（自动识别 XML/Binary）并返回对象。"""
    return plistlib.loads(fs.read_bytes(path))


def save_plist_xml(fs: FileOps, path: str, obj: Any) -> None:
    """将对象以 XML plist 格式写回磁盘（源码工程中的 plist 均为 XML）。"""
    fs.write_bytes(path, plistlib.dumps(obj, fmt=plistlib.FMT_XML, sort_keys=False))


def set_value(root: dict, key: str, value: Any) -> None:
    """设置顶层键的值，已有值直接覆盖。"""
    if not isinstance(root, dict):
        raise TypeError("dict key used on non-dict container")
    root[key] = value


def _get_or_create_array(root: dict, key: str) -> list:
    """获取或创建目标数组节点，不是数组时抛出类型错误。"""
    if not isinstance(root, dict):
        raise TypeError("dict key used on non-dict container")
    if key not in root or root[key] is None:
        root[key] = []
    if not isinstance(root[key], list):
        raise TypeError(f"target is not an array: {key}")
    return root[key]


def array_upsert_string(root: dict, key: str, value: str) -> bool:
    """字符串不在数组中时追加；已存在则保持原位。返回是否追加。"""
    arr = _get_or_create_array(root, key)
    if value in arr:
        return False
    arr.append(value)
    return True
