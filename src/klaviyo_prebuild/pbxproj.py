"""
`project.pbxproj`（OpenStep 风格 plist）的读写。

解析结果是普通的 `dict` / `list` / `str` 组合；写回时按 Xcode 的习惯
把 `objects` 按 `isa` 分节并按对象 id 排序。注释不会保留，Xcode 打开工程时会重新生成。
"""

from __future__ import annotations

import hashlib
import re
from typing import Any

from .fileops import FileOps

_HEADER = "// !$*UTF8*$!"
_UNQUOTED_CHARS = "abcdefghijklmnopqrstuvwxyzABCDEFGHIJKLMNOPQRSTUVWXYZ0123456789_$/:.-+"
_SAFE_UNQUOTED_RE = re.compile(r"^[A-Za-z0-9_$/.]+$")
_ESCAPES = {"n": "\n", "t": "\t", "r": "\r", '"': '"', "\\": "\\", "'": "'"}

# 单行输出的对象类型，与 Xcode 的写法一致。
_INLINE_ISAS = ("PBXBuildFile", "PBXFileReference")


def generate_id(seed: str) -> str:
    """由种子字符串生成稳定的 24 位十六进制对象 id。"""
    return hashlib.sha256(seed.encode("utf-8")).hexdigest()[:24].upper()


class _Parser:
    def __init__(self, text: str) -> None:
        self.text = text
        self.pos = 0

    def error(self, msg: str) -> ValueError:
        line = self.text.count("\n", 0, self.pos) + 1
        return ValueError(f"pbxproj parse error at line {line}: {msg}")

    def skip(self) -> None:
        """跳过空白与 `//`、`/* */` 注释。"""
        text = self.text
        n = len(text)
        while self.pos < n:
            c = text[self.pos]
            if c.isspace():
                self.pos += 1
            elif text.startswith("//", self.pos):
                end = text.find("\n", self.pos)
                self.pos = n if end == -1 else end + 1
            elif text.startswith("/*", self.pos):
                end = text.find("*/", self.pos + 2)
                if end == -1:
                    raise self.error("unterminated comment")
                self.pos = end + 2
            else:
                break

    def expect(self, ch: str) -> None:
        self.skip()
        if self.pos >= len(self.text) or self.text[self.pos] != ch:
            raise self.error(f"expected '{ch}'")
        self.pos += 1

    def peek(self) -> str:
        self.skip()
        return self.text[self.pos] if self.pos < len(self.text) else ""

    def value(self) -> Any:
        c = self.peek()
        if c == "{":
            return self.dictionary()
        if c == "(":
            return self.array()
        if c == '"' or c == "'":
            return self.quoted()
        return self.bare()

    def dictionary(self) -> dict[str, Any]:
        self.expect("{")
        out: dict[str, Any] = {}
        while self.peek() != "}":
            if not self.peek():
                raise self.error("unterminated dictionary")
            key = self.value()
            if not isinstance(key, str):
                raise self.error("dictionary key must be a string")
            self.expect("=")
            out[key] = self.value()
            self.expect(";")
        self.expect("}")
        return out

    def array(self) -> list[Any]:
        self.expect("(")
        out: list[Any] = []
        while self.peek() != ")":
            if not self.peek():
                raise self.error("unterminated array")
            out.append(self.value())
            if self.peek() == ",":
                self.pos += 1
        self.expect(")")
        return out

    def quoted(self) -> str:
        quote = self.text[self.pos]
        self.pos += 1
        buf: list[str] = []
        text = self.text
        while self.pos < len(text):
            c = text[self.pos]
            if c == quote:
                self.pos += 1
                return "".join(buf)
            if c == "\\" and self.pos + 1 < len(text):
                nxt = text[self.pos + 1]
                buf.append(_ESCAPES.get(nxt, nxt))
                self.pos += 2
                continue
            buf.append(c)
            self.pos += 1
        raise self.error("unterminated string")

    def bare(self) -> str:
        start = self.pos
        while self.pos < len(self.text) and self.text[self.pos] in _UNQUOTED_CHARS:
            self.pos += 1
        if start == self.pos:
            raise self.error(f"unexpected character {self.text[self.pos:self.pos + 1]!r}")
        return self.text[start:self.pos]


def loads(text: str) -> dict[str, Any]:
    """解析 pbxproj 文本，返回顶层字典。"""
    parser = _Parser(text)
    obj = parser.value()
    if parser.peek():
        raise parser.error("trailing content after root dictionary")
    if not isinstance(obj, dict):
        raise parser.error("root must be a dictionary")
    return obj


def _quote(s: str) -> str:
    if _SAFE_UNQUOTED_RE.match(s):
        return s
    escaped = (
        s.replace("\\", "\\\\").replace('"', '\\"').replace("\n", "\\n").replace("\t", "\\t")
    )
    return f'"{escaped}"'


def _inline(value: Any) -> str:
    if isinstance(value, dict):
        inner = "".join(f"{_quote(k)} = {_inline(v)}; " for k, v in value.items())
        return "{" + inner + "}"
    if isinstance(value, list):
        return "(" + "".join(f"{_inline(v)}, " for v in value) + ")"
    return _quote(str(value))


def _block(value: Any, depth: int) -> str:
    pad = "\t" * depth
    if isinstance(value, dict):
        lines = ["{"]
        for k, v in value.items():
            lines.append(f"{pad}\t{_quote(k)} = {_block(v, depth + 1)};")
        lines.append(pad + "}")
        return "\n".join(lines)
    if isinstance(value, list):
        lines = ["("]
        for v in value:
            lines.append(f"{pad}\t{_block(v, depth + 1)},")
        lines.append(pad + ")")
        return "\n".join(lines)
    return _quote(str(value))


def _objects_block(objects: dict[str, Any]) -> str:
    """按 `isa` 分节输出 objects，节与对象均按名称排序。"""
    by_isa: dict[str, list[str]] = {}
    for oid, obj in objects.items():
        isa = obj.get("isa", "") if isinstance(obj, dict) else ""
        by_isa.setdefault(isa, []).append(oid)

    lines = ["{"]
    for isa in sorted(by_isa):
        lines.append("")
        lines.append(f"/* Begin {isa} section */")
        for oid in sorted(by_isa[isa]):
            obj = objects[oid]
            if isa in _INLINE_ISAS:
                lines.append(f"\t\t{_quote(oid)} = {_inline(obj)};")
            else:
                lines.append(f"\t\t{_quote(oid)} = {_block(obj, 2)};")
        lines.append(f"/* End {isa} section */")
    lines.append("\t}")
    return "\n".join(lines)


def dumps(obj: dict[str, Any]) -> str:
    """把顶层字典序列化为 pbxproj 文本。"""
    lines = [_HEADER, "{"]
    for k, v in obj.items():
        if k == "objects" and isinstance(v, dict):
            lines.append(f"\tobjects = {_objects_block(v)};")
        else:
            lines.append(f"\t{_quote(k)} = {_block(v, 1)};")
    lines.append("}")
    return "\n".join(lines) + "\n"


def load(fs: FileOps, path: str) -> dict[str, Any]:
    return loads(fs.read_text(path))


def save(fs: FileOps, path: str, obj: dict[str, Any]) -> None:
    fs.write_text(path, dumps(obj))
