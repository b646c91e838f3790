"""
表单字段目录：把 `Document` 的类型化属性映射为有序、可循环导航的可编辑字段。

每个字段只携带值类型标记与属性名；导航、填充编辑缓冲区与提交都由下面按
类型分派的通用函数完成。
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from .document import Document
from .plist_text import KEYS_BY_NAME, parse_int
from .types import (
    KIND_BOOL,
    KIND_INT,
    KIND_SESSION_TYPE,
    KIND_STRING,
    KIND_STRING_LIST,
    KIND_STRING_MAP,
    MultipleSessions,
    SingleSession,
)


@dataclass(frozen=True)
class FieldDescriptor:
    """描述一个表单字段：plist 键、显示名、值类型与对应的 `Document` 属性。"""

    id: str
    label: str
    kind: str
    attr: str

    def get(self, doc: Document) -> Any:
        return getattr(doc, self.attr)

    def set(self, doc: Document, value: Any) -> None:
        setattr(doc, self.attr, value)

    def seed(self, doc: Document) -> str:
        """把当前值渲染为编辑缓冲区的初始文本。"""
        return seed_text(self.kind, self.get(doc))

    def commit(self, doc: Document, text: str) -> None:
        """把编辑文本解析回类型化的值并写入 `doc`。"""
        self.set(doc, parse_text(self.kind, text))


def _field(key: str, label: str) -> FieldDescriptor:
    attr, kind = KEYS_BY_NAME[key]
    return FieldDescriptor(id=key, label=label, kind=kind, attr=attr)


# 表单中的字段顺序（与编码输出顺序无关）。
CATALOG: tuple[FieldDescriptor, ...] = (
    _field("Label", "Label"),
    _field("Program", "Program"),
    _field("ProgramArguments", "Program Arguments"),
    _field("StartInterval", "Start Interval"),
    _field("ThrottleInterval", "Throttle Interval"),
    _field("RunAtLoad", "Run At Load"),
    _field("KeepAlive", "Keep Alive"),
    _field("AbandonProcessGroup", "Abandon Process Group"),
    _field("StandardOutPath", "Standard Out Path"),
    _field("StandardErrorPath", "Standard Error Path"),
    _field("WorkingDirectory", "Working Directory"),
    _field("POSIXSpawnType", "POSIX Spawn Type"),
    _field("EnablePressuredExit", "Enable Pressured Exit"),
    _field("EnableTransactions", "Enable Transactions"),
    _field("EventMonitor", "Event Monitor"),
    _field("LimitLoadToSessionType", "Limit Load To Session Type"),
    _field("AssociatedBundleIdentifiers", "Associated Bundle Identifiers"),
    _field("EnvironmentVariables", "Environment Variables"),
)


def _normalize(name: str) -> str:
    return name.strip().lower().replace("_", "").replace(" ", "").replace("-", "")


def find_field(name: str) -> FieldDescriptor | None:
    """按 plist 键、属性名或显示名（忽略大小写、空格与下划线）查找字段。"""
    target = _normalize(name)
    if not target:
        return None
    for field in CATALOG:
        if target in (_normalize(field.id), _normalize(field.attr), _normalize(field.label)):
            return field
    return None


def _nonblank_lines(text: str) -> list[str]:
    # 只按 `\n`（及 `\r\n`）分行，其他 Unicode 换行符属于行内容。
    lines = (line.removesuffix("\r") for line in text.split("\n"))
    return [line.strip() for line in lines if line.strip()]


def seed_text(kind: str, value: Any) -> str:
    """按值类型把属性值转换为可编辑文本；缺省值得到空文本（布尔为 `false`）。"""
    if kind == KIND_BOOL:
        return "true" if value else "false"
    if value is None:
        return ""
    if kind == KIND_STRING:
        return value
    if kind == KIND_INT:
        return str(value)
    if kind == KIND_STRING_LIST:
        return "\n".join(value)
    if kind == KIND_STRING_MAP:
        return "\n".join(f"{k}={v}" for k, v in value.items())
    if kind == KIND_SESSION_TYPE:
        if isinstance(value, SingleSession):
            return value.value
        return "\n".join(value.values)
    raise RuntimeError(f"Unknown field kind: {kind}")


def parse_text(kind: str, text: str) -> Any:
    """
    按值类型把编辑文本解析回属性值。

    无法转换的输入不报错，而是退化为缺省（`None`）：
    - 整数解析失败时清空该属性。
    - 布尔只有精确的 `true` 为真，其余（包括 `True`）一律为假。
    - 字典中不含 `=` 的行被丢弃。
    """
    if kind == KIND_STRING:
        return text if text else None
    if kind == KIND_INT:
        return parse_int(text)
    if kind == KIND_BOOL:
        return text == "true"
    if kind == KIND_STRING_LIST:
        return _nonblank_lines(text) or None
    if kind == KIND_STRING_MAP:
        out: dict[str, str] = {}
        for line in _nonblank_lines(text):
            if "=" not in line:
                continue
            k, v = line.split("=", 1)
            out[k.strip()] = v.strip()
        return out or None
    if kind == KIND_SESSION_TYPE:
        lines = _nonblank_lines(text)
        if not lines:
            return None
        if len(lines) == 1:
            return SingleSession(lines[0])
        return MultipleSessions(tuple(lines))
    raise RuntimeError(f"Unknown field kind: {kind}")
