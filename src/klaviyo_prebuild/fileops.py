"""
对原生工程目录的文件读写能力封装。

各修补步骤通过参数接收 `FileOps` 实例，测试时可替换为内存实现。
"""

from __future__ import annotations

import os
import shutil
from collections.abc import Iterator


class FileOps:
    """基于本地磁盘的默认实现。"""

    def read_text(self, path: str) -> str:
        # newline="" 保留原始换行风格（CRLF/LF），写回时不做转换。
        with open(path, encoding="utf-8", newline="") as f:
            return f.read()

    def write_text(self, path: str, content: str) -> None:
        with open(path, "w", encoding="utf-8", newline="") as f:
            f.write(content)

    def read_bytes(self, path: str) -> bytes:
        with open(path, "rb") as f:
            return f.read()

    def write_bytes(self, path: str, data: bytes) -> None:
        with open(path, "wb") as f:
            f.write(data)

    def copy_file(self, src: str, dst: str) -> None:
        shutil.copyfile(src, dst)

    def exists(self, path: str) -> bool:
        return os.path.exists(path)

    def is_dir(self, path: str) -> bool:
        return os.path.isdir(path)

    def makedirs(self, path: str) -> None:
        os.makedirs(path, exist_ok=True)

    def remove(self, path: str) -> None:
        os.remove(path)

    def walk(self, top: str) -> Iterator[tuple[str, list[str], list[str]]]:
        return os.walk(top)
