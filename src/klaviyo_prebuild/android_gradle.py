"""
`android/gradle.properties` 修补：按属性名写入 SDK 构建所需的 Gradle 属性。

只改动同名属性行（首个保留并改值，其余重复行删除），注释与其它属性原样保留。
"""

from __future__ import annotations

import os
import re

from .fileops import FileOps
from .log import log_debug

GRADLE_PROPERTIES = (
    ("kotlin.jvm.target.validation.mode", "warning"),
    ("org.gradle.jvmargs", "-Xmx2048m -Dfile.encoding=UTF-8"),
)


def gradle_properties_path(platform_root: str) -> str:
    return os.path.join(platform_root, "gradle.properties")


def _property_re(key: str) -> re.Pattern[str]:
    # 注释行以 `#` 或 `!` 开头，不会匹配。
    return re.compile(r"^[ \t]*" + re.escape(key) + r"[ \t]*[=:][^\r\n]*", re.MULTILINE)


def upsert_property(text: str, key: str, value: str) -> str:
    """设置 `key=value`；已存在则就地改写首个定义并删除其余重复定义，否则追加到末尾。"""
    line = f"{key}={value}"
    matches = list(_property_re(key).finditer(text))
    if not matches:
        newline = "\r\n" if "\r\n" in text else "\n"
        if text and not text.endswith("\n"):
            text += newline
        return text + line + newline

    first = matches[0]
    out = text[: first.start()] + line
    pos = first.end()
    for m in matches[1:]:
        out += text[pos : m.start()]
        # 连同行尾换行一起删除。
        pos = m.end()
        if text.startswith("\r\n", pos):
            pos += 2
        elif text.startswith("\n", pos):
            pos += 1
    return out + text[pos:]


def patch_gradle_properties_text(text: str) -> str:
    for key, value in GRADLE_PROPERTIES:
        text = upsert_property(text, key, value)
    return text


def patch_gradle_properties(fs: FileOps, platform_root: str) -> bool:
    """修补 `gradle.properties`（不存在则创建），返回文件是否被改写。"""
    path = gradle_properties_path(platform_root)
    text = fs.read_text(path) if fs.exists(path) else ""
    new_text = patch_gradle_properties_text(text)
    if new_text == text:
        log_debug(f"gradle.properties already up to date: {path}")
        return False
    fs.write_text(path, new_text)
    return True
