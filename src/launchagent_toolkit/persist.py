"""
保存流程：编码、写回磁盘、重新加载服务。

写入失败对本次保存是致命的（内存中的 `Document` 保持不变）；重新加载失败只是部分
成功，已写入的文件不会回滚。
"""

from __future__ import annotations

import os
from dataclasses import dataclass

from . import launchctl
from .document import Document
from .plist_text import encode


@dataclass(frozen=True)
class SaveResult:
    """一次保存的结果；`message` 可直接展示给操作者。"""

    saved: bool
    reloaded: bool
    message: str
    text: str = ""


def write_text(path: str, text: str) -> None:
    """以 UTF-8 写出文本，失败时抛出 `OSError`。"""
    with open(path, "w", encoding="utf-8") as f:
        f.write(text)


def save_document(
    path: str,
    doc: Document,
    *,
    reload: bool = True,
    dry_run: bool = False,
    verbose: bool = False,
) -> SaveResult:
    """保存 `doc` 到 `path` 并按需重新加载；`dry_run` 时只返回编码结果。"""
    name = os.path.basename(path)
    text = encode(doc)
    if dry_run:
        return SaveResult(
            saved=False, reloaded=False, message=f"Dry-run: {name} not written", text=text
        )

    try:
        write_text(path, text)
    except OSError as e:
        return SaveResult(
            saved=False, reloaded=False, message=f"Failed to save {name}: {e}", text=text
        )

    if not reload:
        return SaveResult(saved=True, reloaded=False, message=f"Saved {name}", text=text)

    err = launchctl.reload_agent(path, verbose=verbose)
    if err:
        return SaveResult(
            saved=True,
            reloaded=False,
            message=f"Saved {name} but reload failed: {err}",
            text=text,
        )
    return SaveResult(saved=True, reloaded=True, message=f"Saved and reloaded {name}", text=text)
