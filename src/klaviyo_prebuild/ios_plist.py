"""
iOS `Info.plist` 修补：共享分组标识、角标自动清除与版本号。

主应用的 `Info.plist` 以字典对象修改；通知扩展的 `Info.plist`
按文本做字面替换，其余行保持原样。
"""

from __future__ import annotations

import os
import re
from xml.sax.saxutils import escape

from .errors import ConfigError, ExtensionPlistError
from .fileops import FileOps
from .log import log_debug
from .plist_edit import set_value
from .types import NSE_TARGET_NAME, IosProps

APP_GROUP_KEY = "klaviyo_app_group"
BADGE_AUTOCLEAR_KEY = "klaviyo_badge_autoclearing"
MARKETING_VERSION_KEY = "CFBundleShortVersionString"
PROJECT_VERSION_KEY = "CFBundleVersion"

DEFAULT_MARKETING_VERSION = "1.0"
DEFAULT_PROJECT_VERSION = "1"


def app_group_identifier(bundle_id: str) -> str:
    """由主应用包标识推导主应用与通知扩展共用的 App Group 标识。"""
    return f"group.{bundle_id}.{NSE_TARGET_NAME}.shared"


def require_bundle_id(bundle_id: str | None) -> str:
    if not isinstance(bundle_id, str) or not bundle_id.strip():
        raise ConfigError("iOS bundle identifier is required for app group configuration")
    return bundle_id.strip()


def version_pair(props: IosProps) -> tuple[str, str]:
    """返回 `(marketing_version, project_version)`，未配置时使用默认值。"""
    return (
        props.marketing_version or DEFAULT_MARKETING_VERSION,
        props.project_version or DEFAULT_PROJECT_VERSION,
    )


def patch_info_plist(info: dict, props: IosProps, bundle_id: str | None) -> dict:
    """原地修改主应用 `Info.plist` 字典并返回它。"""
    group = app_group_identifier(require_bundle_id(bundle_id))
    marketing, project = version_pair(props)

    set_value(info, APP_GROUP_KEY, group)
    set_value(info, BADGE_AUTOCLEAR_KEY, bool(props.badge_autoclearing))
    set_value(info, MARKETING_VERSION_KEY, marketing)
    set_value(info, PROJECT_VERSION_KEY, project)
    return info


def extension_info_plist_path(platform_root: str) -> str:
    return os.path.join(platform_root, NSE_TARGET_NAME, "Info.plist")


def _replace_string_value(text: str, key: str, value: str) -> str:
    """替换 `<key>KEY</key>` 之后紧邻的字符串值（含空元素 `<string/>`）；键不存在时插入到顶层字典末尾。"""
    pattern = re.compile(
        r"(<key>" + re.escape(key) + r"</key>\s*)(<string>.*?</string>|<string\s*/>)", re.DOTALL
    )
    safe = escape(value)
    if pattern.search(text):
        return pattern.sub(lambda m: f"{m.group(1)}<string>{safe}</string>", text, count=1)

    close = text.rfind("</dict>")
    if close == -1:
        raise ExtensionPlistError(f"no top-level <dict> found while setting {key}")
    newline = "\r\n" if "\r\n" in text else "\n"
    line_start = text.rfind("\n", 0, close) + 1
    prefix = text[line_start:close]
    if prefix.strip():
        # `</dict>` 与其它内容同行时直接插在它前面。
        entry = f"{newline}\t<key>{key}</key>{newline}\t<string>{safe}</string>{newline}"
        return text[:close] + entry + text[close:]
    indent = prefix + "\t"
    entry = f"{indent}<key>{key}</key>{newline}{indent}<string>{safe}</string>{newline}"
    return text[:line_start] + entry + text[line_start:]


def patch_extension_info_plist_text(text: str, props: IosProps) -> str:
    marketing, project = version_pair(props)
    text = _replace_string_value(text, MARKETING_VERSION_KEY, marketing)
    return _replace_string_value(text, PROJECT_VERSION_KEY, project)


def patch_extension_info_plist(fs: FileOps, platform_root: str, props: IosProps) -> bool:
    """读取、替换并写回通知扩展 `Info.plist`；缺失或不可读时抛出错误。返回是否写回。"""
    path = extension_info_plist_path(platform_root)
    if not fs.exists(path):
        raise ExtensionPlistError(f"Notification service extension Info.plist not found: {path}")
    try:
        text = fs.read_text(path)
    except (OSError, UnicodeDecodeError) as e:
        raise ExtensionPlistError(
            f"Failed to read notification service extension Info.plist {path}: {e}"
        ) from e

    new_text = patch_extension_info_plist_text(text, props)
    if new_text == text:
        log_debug(f"Extension Info.plist already up to date: {path}")
        return False
    fs.write_text(path, new_text)
    return True
