"""
Android 资源修补：插件名称/版本字符串、通知颜色与通知图标文件。
"""

from __future__ import annotations

import os
import xml.etree.ElementTree as ET

from .errors import ConfigError, PrebuildError
from .fileops import FileOps
from .log import log_debug
from .tree_ops import parse_xml, remove_element, serialize_xml, upsert_element
from .types import PLUGIN_NAME, PLUGIN_VERSION, AndroidProps

PLUGIN_NAME_STRING = "klaviyo_sdk_plugin_name_override"
PLUGIN_VERSION_STRING = "klaviyo_sdk_plugin_version_override"
NOTIFICATION_COLOR_NAME = "klaviyo_notification_color"
NOTIFICATION_ICON_NAME = "notification_icon"

_RES_DIR = os.path.join("app", "src", "main", "res")
_ICON_EXTENSIONS = (".png", ".xml", ".webp", ".jpg")


def strings_path(platform_root: str) -> str:
    return os.path.join(platform_root, _RES_DIR, "values", "strings.xml")


def colors_path(platform_root: str) -> str:
    return os.path.join(platform_root, _RES_DIR, "values", "colors.xml")


def drawable_dir(platform_root: str) -> str:
    return os.path.join(platform_root, _RES_DIR, "drawable")


def load_resources(fs: FileOps, path: str) -> ET.Element:
    """读取资源 XML；文件不存在时返回空的 `<resources>`。"""
    if not fs.exists(path):
        return ET.Element("resources")
    root = parse_xml(fs.read_text(path))
    if root.tag != "resources":
        raise PrebuildError(f"unexpected root element <{root.tag}> in {path}")
    return root


def save_resources(fs: FileOps, path: str, root: ET.Element) -> None:
    fs.makedirs(os.path.dirname(path))
    fs.write_text(path, serialize_xml(root))


def patch_strings(resources: ET.Element) -> ET.Element:
    """写入插件名称与版本字符串（常量，不随配置变化）。"""
    upsert_element(resources, "string", "name", PLUGIN_NAME_STRING, text=PLUGIN_NAME)
    upsert_element(resources, "string", "name", PLUGIN_VERSION_STRING, text=PLUGIN_VERSION)
    return resources


def patch_colors(resources: ET.Element, props: AndroidProps) -> ET.Element:
    """配置了通知颜色则写入颜色资源，否则移除。"""
    if props.notification_color:
        upsert_element(
            resources, "color", "name", NOTIFICATION_COLOR_NAME, text=props.notification_color
        )
    elif remove_element(resources, "color", "name", NOTIFICATION_COLOR_NAME):
        log_debug("Removing notification color resource")
    return resources


def sync_notification_icon(
    fs: FileOps, project_root: str, platform_root: str, props: AndroidProps
) -> str:
    """
    同步通知图标文件到 `res/drawable/notification_icon.<ext>`。

    配置了图标时复制（目录不存在则创建），否则删除此前复制的图标。
    返回写入的目标路径；删除或无操作时返回空字符串。
    """
    target_dir = drawable_dir(platform_root)

    if not props.notification_icon_file_path:
        removed = False
        for ext in _ICON_EXTENSIONS:
            candidate = os.path.join(target_dir, NOTIFICATION_ICON_NAME + ext)
            if fs.exists(candidate):
                fs.remove(candidate)
                removed = True
                log_debug(f"Removed notification icon: {candidate}")
        if not removed:
            log_debug("No notification icon found to remove")
        return ""

    src = os.path.join(project_root, props.notification_icon_file_path)
    if not fs.exists(src):
        raise ConfigError(f"Notification icon file not found: {src}")

    ext = os.path.splitext(src)[1].lower() or ".png"
    if not fs.is_dir(target_dir):
        fs.makedirs(target_dir)
    dst = os.path.join(target_dir, NOTIFICATION_ICON_NAME + ext)
    try:
        fs.copy_file(src, dst)
    except OSError as e:
        raise PrebuildError(f"Failed to copy notification icon: {e}") from e
    log_debug(f"Copied notification icon to {dst}")
    return dst
