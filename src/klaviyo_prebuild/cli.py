"""
`klaviyo-prebuild` 的命令行入口模块。

负责收集平台目录、配置文件与 iOS 工程参数，并调用 `klaviyo_prebuild.pipeline`
中的 Android / iOS 修补流程。
"""

import argparse
import os
from collections.abc import Sequence

from .config import load_props_file
from .errors import PrebuildError
from .fileops import FileOps
from .log import log_step, set_verbose
from .pipeline import prebuild_android, prebuild_ios


def _abs(p: str) -> str:
    """将输入路径展开为绝对路径，统一后续文件校验逻辑。"""
    return os.path.abspath(os.path.expanduser(p))


def _guess_project_name(ios_root: str) -> str:
    """在 `ios/` 下查找唯一的 `*.xcodeproj`，以其名称作为工程名。"""
    if not os.path.isdir(ios_root):
        return ""
    names = sorted(
        name[: -len(".xcodeproj")]
        for name in os.listdir(ios_root)
        if name.endswith(".xcodeproj") and name != "Pods.xcodeproj"
    )
    if len(names) > 1:
        raise SystemExit(
            "Error: multiple Xcode projects found under ios/.\n"
            f"Candidates: {', '.join(names)}\n"
            "Please pass the desired one via --project-name.\n"
        )
    return names[0] if names else ""


def build_parser() -> argparse.ArgumentParser:
    """构建并返回 `klaviyo-prebuild` 命令行参数解析器。"""
    p = argparse.ArgumentParser(
        prog="klaviyo-prebuild",
        formatter_class=argparse.RawTextHelpFormatter,
        description=(
            "Patch generated native Android/iOS projects for the Klaviyo SDK.\n"
            "Safe to run repeatedly: every change converges to the same result."
        ),
    )
    p.add_argument(
        "--platform",
        choices=("android", "ios", "all"),
        default="all",
        help="Which native project to patch (default: all)",
    )
    p.add_argument(
        "--project-root",
        default=".",
        help="App project root containing android/ and ios/ (default: current directory)",
    )
    p.add_argument(
        "-c",
        "--config",
        default="",
        help='JSON config file: {"android": {...}, "ios": {...}}',
    )
    p.add_argument(
        "-b",
        "--bundle-id",
        default="",
        help="iOS main app bundle identifier (required for ios)",
    )
    p.add_argument(
        "--project-name",
        default="",
        help="iOS project name (default: the single *.xcodeproj under ios/)",
    )
    p.add_argument("--verbose", action="store_true", help="Verbose logging")
    return p


def main(argv: Sequence[str] | None = None) -> int:
    """CLI 入口：解析参数、读取配置并运行所选平台的修补流程。"""
    parser = build_parser()
    ns = parser.parse_args(argv)
    set_verbose(bool(ns.verbose))

    project_root = _abs(ns.project_root)
    if not os.path.isdir(project_root):
        raise SystemExit(f"Error: project root not found: {project_root}")

    try:
        raw = load_props_file(_abs(ns.config)) if ns.config else {}
        fs = FileOps()

        if ns.platform in ("android", "all"):
            log_step("Starting Android prebuild")
            prebuild_android(
                project_root,
                os.path.join(project_root, "android"),
                raw.get("android"),
                fs=fs,
            )

        if ns.platform in ("ios", "all"):
            ios_root = os.path.join(project_root, "ios")
            project_name = ns.project_name or _guess_project_name(ios_root)
            if not project_name:
                raise SystemExit(
                    "Error: missing --project-name and no *.xcodeproj found under ios/.\n"
                )
            log_step(f"Starting iOS prebuild ({project_name})")
            prebuild_ios(
                ios_root,
                raw.get("ios"),
                bundle_id=ns.bundle_id or None,
                project_name=project_name,
                fs=fs,
            )
    except PrebuildError as e:
        raise SystemExit(f"Error: {e}") from e

    log_step("Done")
    return 0
