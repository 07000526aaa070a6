"""
主 Activity 源文件修补（Java / Kotlin）。

只识别插入所需的最小声明模式：
- `package` 声明：在其后插入 SDK 门面类的 import。
- `MainActivity` 类声明：在类体首行插入单行覆写。
- 已有的 `onCreate` / `onNewIntent` 覆写：在 `super` 调用之后插入带
  `// @generated begin/end klaviyo-*` 标记的代码块，关闭功能时按标记整块移除。

`onCreate` 转发 `onNewIntent(getIntent())`，使应用被通知冷启动时也能记录打开事件。
两种方言的检测正则相互独立，插入逻辑共用 `SourceSignature` 给出的偏移量。
"""

from __future__ import annotations

import os
import re
from collections.abc import Callable
from dataclasses import dataclass

from .errors import (
    ClassDeclarationNotFoundError,
    MainActivityNotFoundError,
    PackageDeclarationNotFoundError,
)
from .fileops import FileOps
from .log import log_debug, log_step
from .types import AndroidProps, MainActivityInfo

MAIN_ACTIVITY_CLASS = "MainActivity"

JAVA_IMPORT = "import com.klaviyo.analytics.Klaviyo;"
KOTLIN_IMPORT = "import com.klaviyo.analytics.Klaviyo"
JAVA_CALL = (
    "@Override public void onNewIntent(android.content.Intent intent) "
    "{ super.onNewIntent(intent); Klaviyo.INSTANCE.handlePush(intent); }"
)
KOTLIN_CALL = (
    "override fun onNewIntent(intent: android.content.Intent) "
    "{ super.onNewIntent(intent); Klaviyo.handlePush(intent) }"
)

JAVA_ON_CREATE = (
    "@Override protected void onCreate(android.os.Bundle savedInstanceState) "
    "{ super.onCreate(savedInstanceState); onNewIntent(getIntent()); }"
)
KOTLIN_ON_CREATE = (
    "override fun onCreate(savedInstanceState: android.os.Bundle?) "
    "{ super.onCreate(savedInstanceState); onNewIntent(intent) }"
)

ON_CREATE_TAG = "klaviyo-onCreate"
ON_NEW_INTENT_TAG = "klaviyo-onNewIntent"

# 相对 `android/` 平台目录的常规源码目录。
SOURCE_DIRS = (
    os.path.join("app", "src", "main", "java"),
    os.path.join("app", "src", "main", "kotlin"),
)

_JAVA_PACKAGE_RE = re.compile(r"^[ \t]*package[ \t]+[\w.]+[ \t]*;[^\r\n]*", re.MULTILINE)
_KOTLIN_PACKAGE_RE = re.compile(r"^[ \t]*package[ \t]+[\w.`]+[ \t]*;?[^\r\n]*", re.MULTILINE)
_JAVA_CLASS_RE = re.compile(
    r"^([ \t]*)(?:(?:public|final|abstract)\s+)*class\s+MainActivity\b[^{;]*\{",
    re.MULTILINE,
)
_KOTLIN_CLASS_RE = re.compile(
    r"^([ \t]*)(?:(?:public|internal|open|final|abstract)\s+)*class\s+MainActivity\b[^{]*\{",
    re.MULTILINE,
)
_ACTIVITY_SIGNATURE_RE = re.compile(r"\bclass\s+MainActivity\b")
_IMPORT_PRESENT_RE = re.compile(
    r"^[ \t]*import[ \t]+com\.klaviyo\.analytics\.Klaviyo[ \t]*;?[ \t]*\r?$", re.MULTILINE
)
_CALL_PRESENT_RE = re.compile(r"\bKlaviyo(?:\.INSTANCE)?\.handlePush\(")
_JAVA_ON_CREATE_RE = re.compile(r"\bvoid\s+onCreate\s*\([^)]*\)[^{;]*\{")
_KOTLIN_ON_CREATE_RE = re.compile(r"\bfun\s+onCreate\s*\([^)]*\)[^{=]*\{")
_JAVA_ON_NEW_INTENT_RE = re.compile(
    r"\bvoid\s+onNewIntent\s*\(\s*(?:(?:final|@[\w.]+)\s+)*[\w.]+\s+(\w+)\s*\)[^{;]*\{"
)
_KOTLIN_ON_NEW_INTENT_RE = re.compile(r"\bfun\s+onNewIntent\s*\(\s*(\w+)\s*:[^)]*\)[^{=]*\{")
_SUPER_ON_CREATE_RE = re.compile(r"\bsuper\.onCreate\s*\([^;\r\n]*\)[ \t]*;?")
_SUPER_ON_NEW_INTENT_RE = re.compile(r"\bsuper\.onNewIntent\s*\([^;\r\n]*\)[ \t]*;?")
_MARKER_BLOCK_RE = re.compile(
    r"^[ \t]*// @generated begin (klaviyo-[\w-]+)[^\n]*\n.*?^[ \t]*// @generated end \1\b[^\n]*(?:\n|\Z)",
    re.MULTILINE | re.DOTALL,
)

Locator = Callable[[str], "MainActivityInfo | str | None"]


@dataclass(frozen=True)
class SourceSignature:
    """源文件中插入点的偏移量与格式信息。"""

    # `package` 语句所在行的行尾（不含换行符）。
    package_end: int
    # 类声明 `{` 之后的位置。
    body_start: int
    class_indent: str
    body_indent: str
    newline: str


def _info_from_path(path: str) -> MainActivityInfo:
    return MainActivityInfo(path=path, is_kotlin=path.endswith(".kt"))


def scan_for_main_activity(platform_root: str, *, fs: FileOps) -> MainActivityInfo | None:
    """在常规源码目录下查找内容符合 Activity 类签名的 `MainActivity` 文件。"""
    names = (f"{MAIN_ACTIVITY_CLASS}.java", f"{MAIN_ACTIVITY_CLASS}.kt")
    for rel in SOURCE_DIRS:
        base = os.path.join(platform_root, rel)
        if not fs.is_dir(base):
            continue
        for root, dirs, files in fs.walk(base):
            dirs.sort()
            for name in sorted(files):
                if name not in names:
                    continue
                path = os.path.join(root, name)
                try:
                    content = fs.read_text(path)
                except OSError:
                    continue
                if _ACTIVITY_SIGNATURE_RE.search(content):
                    return _info_from_path(path)
    return None


def find_main_activity(
    platform_root: str, *, fs: FileOps, locator: Locator | None = None
) -> MainActivityInfo | None:
    """优先使用宿主提供的定位函数，失败或无结果时回退到目录扫描。"""
    if locator is not None:
        try:
            found = locator(platform_root)
        except Exception as e:
            log_debug(f"Main activity locator failed, falling back to scan: {e}")
            found = None
        if isinstance(found, str) and found:
            return _info_from_path(found)
        if isinstance(found, MainActivityInfo):
            return found

    return scan_for_main_activity(platform_root, fs=fs)


def _detect_newline(text: str) -> str:
    return "\r\n" if "\r\n" in text else "\n"


def _line_end(text: str, pos: int) -> int:
    """返回 `pos` 所在行的行尾位置（换行符之前）。"""
    idx = text.find("\n", pos)
    if idx == -1:
        return len(text)
    if idx > 0 and text[idx - 1] == "\r":
        return idx - 1
    return idx


def _body_indent(text: str, body_start: int, class_indent: str, unit: str) -> str:
    """取类体第一条非空行的缩进；类体为空时按方言默认缩进推导。"""
    for line in text[body_start:].splitlines()[1:]:
        stripped = line.strip()
        if not stripped:
            continue
        if stripped.startswith("}"):
            break
        return line[: len(line) - len(line.lstrip())]
    return class_indent + unit


def parse_activity_source(text: str, is_kotlin: bool) -> SourceSignature:
    """解析 `package` 与 `MainActivity` 类声明的位置，缺失时抛出对应错误。"""
    package_re = _KOTLIN_PACKAGE_RE if is_kotlin else _JAVA_PACKAGE_RE
    class_re = _KOTLIN_CLASS_RE if is_kotlin else _JAVA_CLASS_RE

    pkg = package_re.search(text)
    if pkg is None:
        raise PackageDeclarationNotFoundError("Could not find package declaration in MainActivity")

    cls = class_re.search(text, pkg.end())
    if cls is None:
        raise ClassDeclarationNotFoundError("Could not find MainActivity class declaration")

    class_indent = cls.group(1)
    unit = "    " if is_kotlin else "  "
    return SourceSignature(
        package_end=_line_end(text, pkg.start()),
        body_start=cls.end(),
        class_indent=class_indent,
        body_indent=_body_indent(text, cls.end(), class_indent, unit),
        newline=_detect_newline(text),
    )


def _has_marker(text: str, tag: str) -> bool:
    return f"// @generated begin {tag}" in text


def is_activity_patched(text: str) -> bool:
    return bool(_IMPORT_PRESENT_RE.search(text)) and bool(_CALL_PRESENT_RE.search(text))


def _line_indent(text: str, pos: int) -> str:
    start = text.rfind("\n", 0, pos) + 1
    line = text[start:]
    return line[: len(line) - len(line.lstrip(" \t"))]


def _block_close(text: str, open_end: int) -> int:
    """按花括号计数返回与 `open_end` 前的 `{` 配对的 `}` 位置；未闭合时返回文本长度。"""
    depth = 1
    for i in range(open_end, len(text)):
        ch = text[i]
        if ch == "{":
            depth += 1
        elif ch == "}":
            depth -= 1
            if depth == 0:
                return i
    return len(text)


def _insert_after(
    text: str, anchor: int, lines: list[str], indent: str, rest_indent: str, nl: str
) -> str:
    """在 `anchor` 所在行之后插入若干行；该行在 `anchor` 之后还有内容时先拆行。"""
    block = nl.join(indent + ln for ln in lines)
    end = _line_end(text, anchor)
    if text[anchor:end].strip():
        return text[:anchor] + nl + block + nl + rest_indent + text[anchor:].lstrip(" \t")
    brk = text.find("\n", anchor)
    if brk == -1:
        return text + nl + block
    # 以实际换行位置为准，兼容混用 LF / CRLF 的文件。
    pos = brk + 1
    return text[:pos] + block + nl + text[pos:]


def _insert_member(text: str, sig: SourceSignature, member: str) -> str:
    """把 `member` 插入为类体第一个成员。"""
    return _insert_after(
        text, sig.body_start, [member], sig.body_indent, sig.class_indent, sig.newline
    )


def _inject_into_method(
    text: str,
    method: re.Match[str],
    super_re: re.Pattern[str],
    tag: str,
    statement: str,
    unit: str,
    nl: str,
) -> str:
    """在已有方法的 `super` 调用之后插入标记块；没有 `super` 调用时插在方法体开头。"""
    open_end = method.end()
    close = _block_close(text, open_end)
    method_indent = _line_indent(text, method.start())
    lines = [f"// @generated begin {tag}", statement, f"// @generated end {tag}"]

    call = super_re.search(text, open_end, close)
    if call is not None:
        indent = _line_indent(text, call.start())
        if indent == method_indent:
            indent = method_indent + unit
        return _insert_after(text, call.end(), lines, indent, indent, nl)
    return _insert_after(text, open_end, lines, method_indent + unit, method_indent, nl)


def _patch_on_create(text: str, is_kotlin: bool) -> str:
    if _has_marker(text, ON_CREATE_TAG) or JAVA_ON_CREATE in text or KOTLIN_ON_CREATE in text:
        return text
    sig = parse_activity_source(text, is_kotlin)
    method_re = _KOTLIN_ON_CREATE_RE if is_kotlin else _JAVA_ON_CREATE_RE
    method = method_re.search(text, sig.body_start)
    if method is None:
        return _insert_member(text, sig, KOTLIN_ON_CREATE if is_kotlin else JAVA_ON_CREATE)

    statement = "onNewIntent(intent)" if is_kotlin else "onNewIntent(getIntent());"
    unit = "    " if is_kotlin else "  "
    return _inject_into_method(
        text, method, _SUPER_ON_CREATE_RE, ON_CREATE_TAG, statement, unit, sig.newline
    )


def _patch_on_new_intent(text: str, is_kotlin: bool) -> str:
    if _CALL_PRESENT_RE.search(text):
        return text
    sig = parse_activity_source(text, is_kotlin)
    method_re = _KOTLIN_ON_NEW_INTENT_RE if is_kotlin else _JAVA_ON_NEW_INTENT_RE
    method = method_re.search(text, sig.body_start)
    if method is None:
        return _insert_member(text, sig, KOTLIN_CALL if is_kotlin else JAVA_CALL)

    # 已有覆写时不能再声明一次 onNewIntent，改为在其中转发参数。
    param = method.group(1)
    if is_kotlin:
        statement = f"Klaviyo.handlePush({param})"
    else:
        statement = f"Klaviyo.INSTANCE.handlePush({param});"
    unit = "    " if is_kotlin else "  "
    return _inject_into_method(
        text, method, _SUPER_ON_NEW_INTENT_RE, ON_NEW_INTENT_TAG, statement, unit, sig.newline
    )


def patch_activity_source(text: str, is_kotlin: bool) -> str:
    """插入 import、`onNewIntent` 转发与 `onCreate` 转发；import 与 `handlePush` 调用都已存在时原样返回。"""
    parse_activity_source(text, is_kotlin)
    if is_activity_patched(text):
        return text

    out = _patch_on_create(text, is_kotlin)
    out = _patch_on_new_intent(out, is_kotlin)

    if not _IMPORT_PRESENT_RE.search(out):
        sig = parse_activity_source(out, is_kotlin)
        line = KOTLIN_IMPORT if is_kotlin else JAVA_IMPORT
        out = out[: sig.package_end] + sig.newline + line + out[sig.package_end:]

    return out


def unpatch_activity_source(text: str) -> str:
    """移除此前插入的标记块、import 与单行覆写，其它内容保持不变。"""
    text = _MARKER_BLOCK_RE.sub("", text)
    inserted = {JAVA_IMPORT, KOTLIN_IMPORT, JAVA_CALL, KOTLIN_CALL, JAVA_ON_CREATE, KOTLIN_ON_CREATE}
    lines = text.splitlines(keepends=True)
    kept = [ln for ln in lines if ln.strip() not in inserted]
    return "".join(kept)


def modify_main_activity(
    platform_root: str,
    props: AndroidProps,
    *,
    fs: FileOps,
    locator: Locator | None = None,
) -> bool:
    """
    定位、校验并改写主 Activity 文件，返回文件是否被改写。

    所有校验通过后才写回；内容不变时不写文件。
    """
    info = find_main_activity(platform_root, fs=fs, locator=locator)
    if info is None:
        raise MainActivityNotFoundError(
            "Could not find main activity file. Please ensure your app has a valid ReactActivity."
        )
    if not fs.exists(info.path):
        raise MainActivityNotFoundError(f"MainActivity not found at path: {info.path}")

    text = fs.read_text(info.path)
    if props.open_tracking:
        new_text = patch_activity_source(text, info.is_kotlin)
    else:
        parse_activity_source(text, info.is_kotlin)
        new_text = unpatch_activity_source(text)

    if new_text == text:
        log_debug(f"MainActivity already up to date: {info.path}")
        return False

    fs.write_text(info.path, new_text)
    log_step(f"Updated {os.path.basename(info.path)}")
    return True
