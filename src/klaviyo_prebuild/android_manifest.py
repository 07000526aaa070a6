"""
`AndroidManifest.xml` 修补：日志级别、推送服务与通知图标/颜色元数据。

所有修改都通过身份属性 `android:name` 做 upsert，重复执行结果不变。
"""

from __future__ import annotations

import os
import xml.etree.ElementTree as ET

from .fileops import FileOps
from .log import log_debug
from .tree_ops import (
    android_attr,
    ensure_child,
    parse_xml,
    remove_element,
    serialize_xml,
    upsert_element,
)
from .types import AndroidProps

LOG_LEVEL_META = "com.klaviyo.core.log_level"
LEGACY_LOG_LEVEL_META = "com.klaviyo.android.log_level"
PUSH_SERVICE = "com.klaviyo.pushFcm.KlaviyoPushService"
MESSAGING_EVENT_ACTION = "com.google.firebase.MESSAGING_EVENT"
NOTIFICATION_ICON_META = "com.klaviyo.push.default_notification_icon"
NOTIFICATION_COLOR_META = "com.klaviyo.push.default_notification_color"
NOTIFICATION_ICON_RESOURCE = "@drawable/notification_icon"
NOTIFICATION_COLOR_RESOURCE = "@color/klaviyo_notification_color"
DEFAULT_APPLICATION_NAME = ".MainApplication"

_NAME = android_attr("name")
_VALUE = android_attr("value")
_RESOURCE = android_attr("resource")
_EXPORTED = android_attr("exported")


def manifest_path(platform_root: str) -> str:
    return os.path.join(platform_root, "app", "src", "main", "AndroidManifest.xml")


def load_manifest(fs: FileOps, path: str) -> ET.Element:
    """读取 manifest 并返回根元素 `<manifest>`。"""
    return parse_xml(fs.read_text(path))


def save_manifest(fs: FileOps, path: str, root: ET.Element) -> None:
    fs.write_text(path, serialize_xml(root))


def ensure_application(manifest: ET.Element) -> ET.Element:
    """返回 `<application>`，缺失时以默认名称创建。"""
    return ensure_child(manifest, "application", {_NAME: DEFAULT_APPLICATION_NAME})


def apply_log_level(application: ET.Element, log_level: int) -> None:
    remove_element(application, "meta-data", _NAME, LEGACY_LOG_LEVEL_META)
    upsert_element(application, "meta-data", _NAME, LOG_LEVEL_META, {_VALUE: str(log_level)})


def apply_push_service(application: ET.Element) -> None:
    """声明推送服务（始终存在，与配置无关）。"""
    service = upsert_element(application, "service", _NAME, PUSH_SERVICE, {_EXPORTED: "false"})
    intent_filter = ensure_child(service, "intent-filter")
    upsert_element(intent_filter, "action", _NAME, MESSAGING_EVENT_ACTION)


def apply_notification_metadata(application: ET.Element, props: AndroidProps) -> None:
    """按配置添加或移除通知图标与颜色元数据。"""
    if props.notification_icon_file_path:
        log_debug(f"Adding notification icon meta-data: {props.notification_icon_file_path}")
        upsert_element(
            application,
            "meta-data",
            _NAME,
            NOTIFICATION_ICON_META,
            {_RESOURCE: NOTIFICATION_ICON_RESOURCE},
        )
    elif remove_element(application, "meta-data", _NAME, NOTIFICATION_ICON_META):
        log_debug("Removing notification icon meta-data")

    if props.notification_color:
        log_debug(f"Adding notification color meta-data: {props.notification_color}")
        upsert_element(
            application,
            "meta-data",
            _NAME,
            NOTIFICATION_COLOR_META,
            {_RESOURCE: NOTIFICATION_COLOR_RESOURCE},
        )
    elif remove_element(application, "meta-data", _NAME, NOTIFICATION_COLOR_META):
        log_debug("Removing notification color meta-data")


def patch_manifest(manifest: ET.Element, props: AndroidProps) -> ET.Element:
    """对 manifest 根元素应用全部修改，并原地返回同一根元素。"""
    application = ensure_application(manifest)
    apply_log_level(application, props.log_level)
    apply_push_service(application)
    apply_notification_metadata(application, props)
    return manifest
