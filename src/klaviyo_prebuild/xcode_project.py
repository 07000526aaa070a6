"""
Xcode 工程索引修补：注册插件配置资源文件，并同步通知扩展 target 的构建设置。

工程以 `pbxproj.loads` 得到的字典表示，所有修改都原地进行。
新对象的 id 由稳定种子生成，重复执行不会产生新的对象。
"""

from __future__ import annotations

import os
from typing import Any

from .fileops import FileOps
from .log import log_debug, log_warning
from .pbxproj import generate_id
from .types import NSE_TARGET_NAME, IosProps

PLUGIN_CONFIG_FILE = "klaviyo-plugin-configuration.plist"
APPLICATION_PRODUCT_TYPE = "com.apple.product-type.application"

_ASSETS_DIR = os.path.join(os.path.dirname(os.path.abspath(__file__)), "assets")


def plugin_asset_path(name: str = PLUGIN_CONFIG_FILE) -> str:
    return os.path.join(_ASSETS_DIR, name)


class XcodeProject:
    """对 pbxproj 顶层字典的轻量封装，提供按类型/名称查找对象的辅助方法。"""

    def __init__(self, data: dict[str, Any]) -> None:
        self.data = data

    @property
    def objects(self) -> dict[str, dict[str, Any]]:
        return self.data.setdefault("objects", {})

    def get(self, object_id: str) -> dict[str, Any] | None:
        obj = self.objects.get(object_id)
        return obj if isinstance(obj, dict) else None

    def root(self) -> dict[str, Any] | None:
        return self.get(self.data.get("rootObject", ""))

    def main_group_id(self) -> str | None:
        root = self.root()
        if root is None:
            return None
        gid = root.get("mainGroup")
        if not isinstance(gid, str) or self.get(gid) is None:
            return None
        return gid

    def find_child_group(self, parent_id: str, name: str) -> str | None:
        parent = self.get(parent_id) or {}
        for cid in parent.get("children", []):
            child = self.get(cid)
            if child and child.get("isa") == "PBXGroup" and name in (
                child.get("name"),
                child.get("path"),
            ):
                return cid
        return None

    def targets(self) -> list[str]:
        root = self.root() or {}
        return [t for t in root.get("targets", []) if self.get(t)]

    def find_target(self, name: str) -> str | None:
        for tid in self.targets():
            if self.objects[tid].get("name") == name:
                return tid
        return None

    def app_target(self) -> str | None:
        """返回第一个应用类型的 native target。"""
        for tid in self.targets():
            target = self.objects[tid]
            if (
                target.get("isa") == "PBXNativeTarget"
                and target.get("productType", "").strip('"') == APPLICATION_PRODUCT_TYPE
            ):
                return tid
        return None

    def add_object(self, object_id: str, obj: dict[str, Any]) -> str:
        self.objects[object_id] = obj
        return object_id


def find_or_create_resources_phase(project: XcodeProject, target_id: str) -> str:
    """查找 target 的 "Copy Bundle Resources" 构建阶段，不存在时创建。"""
    target = project.objects[target_id]
    phases = target.setdefault("buildPhases", [])
    for pid in phases:
        phase = project.get(pid)
        if phase and phase.get("isa") == "PBXResourcesBuildPhase":
            return pid

    pid = generate_id(f"PBXResourcesBuildPhase:{target_id}")
    project.add_object(
        pid,
        {
            "isa": "PBXResourcesBuildPhase",
            "buildActionMask": "2147483647",
            "files": [],
            "runOnlyForDeploymentPostprocessing": "0",
        },
    )
    phases.append(pid)
    log_debug(f"Created resources build phase for target {target.get('name', target_id)}")
    return pid


def _find_or_add_file_reference(project: XcodeProject, group_id: str, file_name: str) -> str:
    group = project.objects[group_id]
    children = group.setdefault("children", [])
    for cid in children:
        child = project.get(cid)
        if child and child.get("isa") == "PBXFileReference" and file_name in (
            child.get("path"),
            child.get("name"),
        ):
            return cid

    ref_id = generate_id(f"PBXFileReference:{group_id}:{file_name}")
    project.add_object(
        ref_id,
        {
            "isa": "PBXFileReference",
            "lastKnownFileType": "text.plist.xml",
            "path": file_name,
            "sourceTree": "<group>",
        },
    )
    children.append(ref_id)
    return ref_id


def register_resource_file(
    project: XcodeProject, file_name: str = PLUGIN_CONFIG_FILE, group_name: str = ""
) -> str | None:
    """
    把资源文件登记到工程分组、文件表和资源构建阶段。

    - 找不到主分组时记录警告并跳过（工程结构不在支持范围内）。
    - 构建阶段成员按文件引用 id 判重，不按路径字符串。
    返回文件引用 id；跳过时返回 `None`。
    """
    main_group = project.main_group_id()
    if main_group is None:
        log_warning(f"Xcode main group not found; skipped registering {file_name}")
        return None

    group_id = main_group
    if group_name:
        group_id = project.find_child_group(main_group, group_name) or main_group
    ref_id = _find_or_add_file_reference(project, group_id, file_name)

    target_id = project.app_target()
    if target_id is None:
        log_warning(f"Xcode application target not found; {file_name} not added to resources")
        return ref_id

    phase_id = find_or_create_resources_phase(project, target_id)
    files = project.objects[phase_id].setdefault("files", [])
    for bid in files:
        build_file = project.get(bid)
        if build_file and build_file.get("fileRef") == ref_id:
            return ref_id

    build_id = generate_id(f"PBXBuildFile:{phase_id}:{ref_id}")
    project.add_object(build_id, {"isa": "PBXBuildFile", "fileRef": ref_id})
    files.append(build_id)
    log_debug(f"Added {file_name} to resources build phase")
    return ref_id


def apply_extension_build_settings(project: XcodeProject, props: IosProps) -> bool:
    """同步通知扩展 target 各构建配置的签名与版本设置；target 不存在时警告并跳过。"""
    target_id = project.find_target(NSE_TARGET_NAME)
    if target_id is None:
        log_warning(f"{NSE_TARGET_NAME} target not found; skipped build settings")
        return False

    settings: dict[str, str] = {
        "CODE_SIGN_STYLE": props.code_signing_style,
        "CURRENT_PROJECT_VERSION": props.project_version,
        "MARKETING_VERSION": props.marketing_version,
    }
    if props.dev_team:
        settings["DEVELOPMENT_TEAM"] = props.dev_team
    if props.swift_version:
        settings["SWIFT_VERSION"] = props.swift_version

    config_list = project.get(project.objects[target_id].get("buildConfigurationList", ""))
    for cid in (config_list or {}).get("buildConfigurations", []):
        config = project.get(cid)
        if config is None:
            continue
        config.setdefault("buildSettings", {}).update(settings)
    return True


def copy_plugin_config(fs: FileOps, platform_root: str, project_name: str) -> str:
    """把插件自带的配置 plist 复制到应用源码目录，返回目标路径。"""
    dst_dir = os.path.join(platform_root, project_name)
    if not fs.is_dir(dst_dir):
        fs.makedirs(dst_dir)
    dst = os.path.join(dst_dir, PLUGIN_CONFIG_FILE)
    fs.copy_file(plugin_asset_path(), dst)
    return dst
