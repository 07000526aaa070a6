"""
XML 元素树上的幂等 upsert/remove 原语。

记录的身份由指定属性决定（例如 `android:name` 或 `name`），从不依赖位置。
所有操作都原地修改传入的父元素。
"""

from __future__ import annotations

import xml.etree.ElementTree as ET
from collections.abc import Mapping

ANDROID_NS = "http://schemas.android.com/apk/res/android"
TOOLS_NS = "http://schemas.android.com/tools"

# 写回时保留常见的命名空间前缀，避免输出 ns0/ns1。
ET.register_namespace("android", ANDROID_NS)
ET.register_namespace("tools", TOOLS_NS)

_XML_DECLARATION = '<?xml version="1.0" encoding="utf-8"?>'


def parse_xml(text: str) -> ET.Element:
    """解析 XML 文本并保留注释节点。"""
    parser = ET.XMLParser(target=ET.TreeBuilder(insert_comments=True))
    parser.feed(text)
    return parser.close()


def serialize_xml(root: ET.Element) -> str:
    return _XML_DECLARATION + "\n" + ET.tostring(root, encoding="unicode") + "\n"


def android_attr(name: str) -> str:
    """返回带 android 命名空间的属性键，例如 `android:name`。"""
    return f"{{{ANDROID_NS}}}{name}"


def find_elements(parent: ET.Element, tag: str, identity_attr: str, identity_value: str) -> list[ET.Element]:
    return [c for c in parent.findall(tag) if c.get(identity_attr) == identity_value]


def find_element(
    parent: ET.Element, tag: str, identity_attr: str, identity_value: str
) -> ET.Element | None:
    """按身份属性查找第一个匹配的子元素。"""
    matches = find_elements(parent, tag, identity_attr, identity_value)
    return matches[0] if matches else None


def ensure_child(parent: ET.Element, tag: str, attrib: Mapping[str, str] | None = None) -> ET.Element:
    """返回第一个 `tag` 子元素；不存在时按 `attrib` 创建并追加。"""
    child = parent.find(tag)
    if child is None:
        child = ET.SubElement(parent, tag, dict(attrib or {}))
    return child


def upsert_element(
    parent: ET.Element,
    tag: str,
    identity_attr: str,
    identity_value: str,
    attrib: Mapping[str, str] | None = None,
    text: str | None = None,
) -> ET.Element:
    """
    确保父元素下恰好存在一个具有该身份的 `tag` 子元素。

    - 不存在：追加新元素。
    - 已存在：原地替换给定属性与文本，位置不变，其它属性保持原样。
    - 存在重复：保留第一个，删除其余。
    """
    matches = find_elements(parent, tag, identity_attr, identity_value)
    if not matches:
        node = ET.SubElement(parent, tag)
        node.set(identity_attr, identity_value)
    else:
        node = matches[0]
        for extra in matches[1:]:
            parent.remove(extra)

    for key, value in (attrib or {}).items():
        if node.get(key) != value:
            node.set(key, value)
    if text is not None:
        node.text = text
    return node


def remove_element(parent: ET.Element, tag: str, identity_attr: str, identity_value: str) -> bool:
    """删除所有匹配身份的子元素；不存在时静默跳过。返回是否有删除。"""
    matches = find_elements(parent, tag, identity_attr, identity_value)
    for node in matches:
        parent.remove(node)
    return bool(matches)
