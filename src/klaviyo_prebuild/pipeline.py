"""
预构建流程编排。

Android 流程：
1) 校验并合并配置。
2) 修补 `AndroidManifest.xml`。
3) 修补 `strings.xml` / `colors.xml`，同步通知图标文件。
4) 写入 `gradle.properties` 中的 Gradle 属性。
5) 修补主 Activity 源文件（必须在 manifest 与资源之后）。

iOS 流程：
1) 校验并合并配置，确认 bundle id。
2) 在内存中修补主应用 `Info.plist`。
3) 修补通知扩展 `Info.plist`（缺失时报错，此时尚未写回任何文件）。
4) 写回主应用 `Info.plist`，修补 entitlements。
5) 复制插件配置 plist，并登记到 Xcode 工程与同步扩展构建设置。
"""

from __future__ import annotations

import os
from collections.abc import Mapping
from typing import Any

from . import pbxproj
from .android_gradle import patch_gradle_properties
from .android_manifest import load_manifest, manifest_path, patch_manifest, save_manifest
from .android_resources import (
    colors_path,
    load_resources,
    patch_colors,
    patch_strings,
    save_resources,
    strings_path,
    sync_notification_icon,
)
from .android_source import Locator, modify_main_activity
from .config import merge_android_props, merge_ios_props, validate_android_config, validate_ios_config
from .errors import PrebuildError
from .fileops import FileOps
from .ios_entitlements import patch_entitlements
from .ios_plist import patch_extension_info_plist, patch_info_plist, require_bundle_id
from .log import log_debug, log_step, log_warning
from .plist_edit import load_plist, save_plist_xml
from .xcode_project import (
    PLUGIN_CONFIG_FILE,
    XcodeProject,
    apply_extension_build_settings,
    copy_plugin_config,
    register_resource_file,
)


def info_plist_path(platform_root: str, project_name: str) -> str:
    return os.path.join(platform_root, project_name, "Info.plist")


def entitlements_path(platform_root: str, project_name: str) -> str:
    return os.path.join(platform_root, project_name, f"{project_name}.entitlements")


def pbxproj_path(platform_root: str, project_name: str) -> str:
    return os.path.join(platform_root, f"{project_name}.xcodeproj", "project.pbxproj")


def prebuild_android(
    project_root: str,
    platform_root: str,
    props: Mapping[str, Any] | None,
    *,
    fs: FileOps,
    locator: Locator | None = None,
) -> None:
    """对 `android/` 平台目录执行完整的修补流程。`props` 为未合并的 android 配置段。"""
    validate_android_config(props, project_root, file_exists=fs.exists)
    merged = merge_android_props(props)

    log_step("Patching AndroidManifest.xml")
    path = manifest_path(platform_root)
    if not fs.exists(path):
        raise PrebuildError(f"AndroidManifest.xml not found: {path}")
    manifest = patch_manifest(load_manifest(fs, path), merged)
    save_manifest(fs, path, manifest)

    log_step("Patching Android resources")
    path = strings_path(platform_root)
    save_resources(fs, path, patch_strings(load_resources(fs, path)))
    path = colors_path(platform_root)
    save_resources(fs, path, patch_colors(load_resources(fs, path), merged))
    sync_notification_icon(fs, project_root, platform_root, merged)

    log_step("Patching gradle.properties")
    patch_gradle_properties(fs, platform_root)

    log_step("Patching MainActivity")
    modify_main_activity(platform_root, merged, fs=fs, locator=locator)


def prebuild_ios(
    platform_root: str,
    props: Mapping[str, Any] | None,
    *,
    bundle_id: str | None,
    project_name: str,
    fs: FileOps,
) -> None:
    """对 `ios/` 平台目录执行完整的修补流程。`props` 为未合并的 ios 配置段。"""
    validate_ios_config(props)
    bundle_id = require_bundle_id(bundle_id)
    merged = merge_ios_props(props)

    log_step("Patching Info.plist")
    info_path = info_plist_path(platform_root, project_name)
    if not fs.exists(info_path):
        raise PrebuildError(f"Info.plist not found: {info_path}")
    info = patch_info_plist(load_plist(fs, info_path), merged, bundle_id)

    # 扩展 plist 缺失是致命错误，先于主应用 plist 写回。
    log_step("Patching notification service extension Info.plist")
    patch_extension_info_plist(fs, platform_root, merged)
    save_plist_xml(fs, info_path, info)

    log_step("Patching entitlements")
    ent_path = entitlements_path(platform_root, project_name)
    ent = load_plist(fs, ent_path) if fs.exists(ent_path) else {}
    save_plist_xml(fs, ent_path, patch_entitlements(ent, bundle_id))

    log_step("Copying plugin configuration")
    dst = copy_plugin_config(fs, platform_root, project_name)
    log_debug(f"Copied {PLUGIN_CONFIG_FILE} to {dst}")

    proj_path = pbxproj_path(platform_root, project_name)
    if not fs.exists(proj_path):
        log_warning(f"Xcode project not found: {proj_path}; skipped project registration")
        return

    log_step("Updating Xcode project")
    try:
        project = XcodeProject(pbxproj.load(fs, proj_path))
    except ValueError as e:
        raise PrebuildError(f"Failed to parse {proj_path}: {e}") from e
    register_resource_file(project, PLUGIN_CONFIG_FILE, group_name=project_name)
    apply_extension_build_settings(project, merged)
    pbxproj.save(fs, proj_path, project.data)
