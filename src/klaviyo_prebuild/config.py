"""
插件配置的校验与默认值合并。

原始配置沿用 Expo 插件参数的 camelCase 键名，例如：

    {"android": {"logLevel": 2, "notificationColor": "#FF0000"},
     "ios": {"marketingVersion": "1.2.0", "projectVersion": "7"}}

校验只检查用户显式给出的字段；合并在校验通过后进行，
保证修补引擎始终拿到字段完整的配置记录。
"""

from __future__ import annotations

import json
import os
import re
from collections.abc import Callable, Mapping
from typing import Any

from .errors import ConfigError
from .types import AndroidProps, IosProps

LOG_LEVEL_MIN = 0
LOG_LEVEL_MAX = 6

CODE_SIGNING_STYLES = ("Automatic", "Manual")
SWIFT_VERSIONS = ("4.0", "4.2", "5.0", "6.0")

_HEX_COLOR_RE = re.compile(r"^#([A-Fa-f0-9]{6}|[A-Fa-f0-9]{3})$")
_PROJECT_VERSION_RE = re.compile(r"^\d+$")
_MARKETING_VERSION_RE = re.compile(r"^\d+\.\d+(\.\d+)?$")

_ANDROID_KEYS = {
    "logLevel": "log_level",
    "openTracking": "open_tracking",
    "notificationIconFilePath": "notification_icon_file_path",
    "notificationColor": "notification_color",
}

_IOS_KEYS = {
    "badgeAutoclearing": "badge_autoclearing",
    "codeSigningStyle": "code_signing_style",
    "projectVersion": "project_version",
    "marketingVersion": "marketing_version",
    "devTeam": "dev_team",
    "swiftVersion": "swift_version",
}


def _is_int(value: object) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


def validate_android_config(
    raw: Mapping[str, Any] | None,
    project_root: str = "",
    *,
    file_exists: Callable[[str], bool] = os.path.isfile,
) -> None:
    """校验 Android 原始配置，非法时抛出 `ConfigError`。"""
    if not raw:
        return

    log_level = raw.get("logLevel")
    if log_level is not None:
        if not _is_int(log_level) or not LOG_LEVEL_MIN <= log_level <= LOG_LEVEL_MAX:
            raise ConfigError(
                f"Android logLevel must be an integer between {LOG_LEVEL_MIN} and {LOG_LEVEL_MAX}"
            )

    open_tracking = raw.get("openTracking")
    if open_tracking is not None and not isinstance(open_tracking, bool):
        raise ConfigError("Android openTracking must be a boolean value")

    color = raw.get("notificationColor")
    if color:
        if not isinstance(color, str) or not _HEX_COLOR_RE.match(color):
            raise ConfigError(
                'Android notificationColor must be a valid hex color code (e.g., "#FF0000" or "#F00")'
            )

    icon = raw.get("notificationIconFilePath")
    if icon:
        if not isinstance(icon, str):
            raise ConfigError("Android notificationIconFilePath must be a string")
        if not project_root:
            raise ConfigError("projectRoot is required to validate notificationIconFilePath")
        if not file_exists(os.path.join(project_root, icon)):
            raise ConfigError(f"Android notificationIconFilePath does not exist: {icon}")


def validate_ios_config(raw: Mapping[str, Any] | None) -> None:
    """校验 iOS 原始配置，非法时抛出 `ConfigError`。"""
    if not raw:
        return

    badge = raw.get("badgeAutoclearing")
    if badge is not None and not isinstance(badge, bool):
        raise ConfigError("iOS badgeAutoclearing must be a boolean")

    style = raw.get("codeSigningStyle")
    if style and style not in CODE_SIGNING_STYLES:
        raise ConfigError('iOS codeSigningStyle must be either "Automatic" or "Manual"')

    project_version = raw.get("projectVersion")
    if project_version and (
        not isinstance(project_version, str) or not _PROJECT_VERSION_RE.match(project_version)
    ):
        raise ConfigError("iOS projectVersion must be a string containing only digits")

    marketing_version = raw.get("marketingVersion")
    if marketing_version and (
        not isinstance(marketing_version, str)
        or not _MARKETING_VERSION_RE.match(marketing_version)
    ):
        raise ConfigError('iOS marketingVersion must be in format "X.Y" or "X.Y.Z"')

    swift_version = raw.get("swiftVersion")
    if swift_version and str(swift_version) not in SWIFT_VERSIONS:
        raise ConfigError(f"iOS swiftVersion must be one of: {', '.join(SWIFT_VERSIONS)}")


def _overlay(raw: Mapping[str, Any] | None, keys: dict[str, str]) -> dict[str, Any]:
    """把 camelCase 原始配置映射为 dataclass 字段；`None` 值视为未设置。"""
    out: dict[str, Any] = {}
    for src, dst in keys.items():
        if raw and raw.get(src) is not None:
            out[dst] = raw[src]
    return out


def merge_android_props(raw: Mapping[str, Any] | None = None) -> AndroidProps:
    return AndroidProps(**_overlay(raw, _ANDROID_KEYS))


def merge_ios_props(raw: Mapping[str, Any] | None = None) -> IosProps:
    fields = _overlay(raw, _IOS_KEYS)
    if "swift_version" in fields:
        fields["swift_version"] = str(fields["swift_version"])
    return IosProps(**fields)


def load_props_file(path: str) -> dict[str, Any]:
    """读取 JSON 配置文件，返回原始（未合并）配置字典。"""
    try:
        with open(path, encoding="utf-8") as f:
            obj = json.load(f)
    except OSError as e:
        raise ConfigError(f"cannot read config file {path}: {e}") from e
    except json.JSONDecodeError as e:
        raise ConfigError(f"invalid JSON in config file {path}: {e}") from e

    if not isinstance(obj, dict):
        raise ConfigError(f"config file {path} must contain a JSON object")
    for platform in ("android", "ios"):
        section = obj.get(platform)
        if section is not None and not isinstance(section, dict):
            raise ConfigError(f"config section '{platform}' must be an object")
    return obj
