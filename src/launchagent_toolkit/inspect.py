"""
只读展示模块：按字段目录打印服务描述文件，以及打印扫描到的 LaunchAgent 列表。
"""

from __future__ import annotations

from typing import Any

from .document import Document
from .edit_session import EditSession
from .fields import CATALOG, FieldDescriptor
from .types import (
    KIND_BOOL,
    KIND_STRING_LIST,
    KIND_STRING_MAP,
    AgentStatus,
    LaunchAgent,
    MultipleSessions,
    SingleSession,
)

_STATUS_TEXT = {
    AgentStatus.RUNNING: "running",
    AgentStatus.STOPPED: "stopped",
    AgentStatus.ERROR: "error",
    AgentStatus.UNKNOWN: "?",
}

_NAME_WIDTH = max(len(f.label) for f in CATALOG)


def display_value(field: FieldDescriptor, value: Any) -> str:
    """把字段值渲染为单行文本；缺省值显示为 `-`。"""
    if value is None:
        return "-"
    if field.kind == KIND_BOOL:
        return "true" if value else "false"
    if field.kind == KIND_STRING_LIST:
        return ", ".join(value) if value else "(empty)"
    if field.kind == KIND_STRING_MAP:
        return ", ".join(f"{k}={v}" for k, v in value.items()) if value else "(empty)"
    if isinstance(value, SingleSession):
        return value.value
    if isinstance(value, MultipleSessions):
        return ", ".join(value.values) if value.values else "(empty)"
    return str(value)


def format_document(doc: Document, session: EditSession | None = None) -> list[str]:
    """按表单顺序生成展示行；传入 `session` 时标出光标所在字段。"""
    lines: list[str] = []
    for field in CATALOG:
        marker = "  "
        if session is not None and session.field == field:
            marker = "* " if session.editing else "> "
        value = display_value(field, field.get(doc))
        lines.append(f"{marker}{field.label:<{_NAME_WIDTH}} : {value}")
    return lines


def print_document(doc: Document, *, path: str = "", session: EditSession | None = None) -> None:
    """打印服务描述文件的全部字段。"""
    print(f"LaunchAgent: {path}" if path else "LaunchAgent:")
    for line in format_document(doc, session):
        print(f"  {line}")


def print_agents(agents: list[LaunchAgent]) -> None:
    """打印扫描结果：运行状态、启用状态、Label 与文件名。"""
    if not agents:
        print("No LaunchAgents found.")
        return
    for agent in agents:
        status = _STATUS_TEXT[agent.status]
        enabled = "enabled" if agent.enabled else "-"
        print(f"  {status:<8} {enabled:<8} {agent.label} ({agent.filename})")
    print(f"Total: {len(agents)}")
