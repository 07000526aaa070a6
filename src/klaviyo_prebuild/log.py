"""
简洁的流程日志输出。

普通步骤始终输出；调试信息仅在 verbose 模式或设置
`KLAVIYO_PREBUILD_DEBUG=true` 时输出；警告与错误写入 stderr。
"""

import os
import sys

_PREFIX = "[klaviyo-prebuild]"
_verbose = False


def set_verbose(enabled: bool) -> None:
    """切换调试日志输出。"""
    global _verbose
    _verbose = enabled


def is_verbose() -> bool:
    return _verbose or os.environ.get("KLAVIYO_PREBUILD_DEBUG", "") == "true"


def log_step(message: str) -> None:
    """输出流程阶段提示。"""
    print(f"{_PREFIX} {message}")


def log_debug(message: str) -> None:
    if is_verbose():
        print(f"{_PREFIX} {message}")


def log_warning(message: str) -> None:
    print(f"{_PREFIX} warning: {message}", file=sys.stderr)
