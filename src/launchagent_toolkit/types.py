"""
CLI、表单与 launchctl 封装共享的轻量类型定义。
"""

from __future__ import annotations

import enum
from dataclasses import dataclass


# 字段值类型（解码键表与表单字段目录共用）：
# - `string`：`<string>`，缺省为 `None`
# - `int`：`<integer>`
# - `bool`：`<true/>` / `<false/>`
# - `string_list`：`<array>` of `<string>`
# - `string_map`：`<dict>` of `<key>`/`<string>`
# - `session_type`：`<string>` 或 `<array>`，见 `SingleSession` / `MultipleSessions`
KIND_STRING = "string"
KIND_INT = "int"
KIND_BOOL = "bool"
KIND_STRING_LIST = "string_list"
KIND_STRING_MAP = "string_map"
KIND_SESSION_TYPE = "session_type"


@dataclass(frozen=True)
class SingleSession:
    """`LimitLoadToSessionType` 只有一个会话类型时的取值（plist 中为 `<string>`）。"""

    value: str


@dataclass(frozen=True)
class MultipleSessions:
    """`LimitLoadToSessionType` 为多个会话类型时的取值（plist 中为 `<array>`）。"""

    values: tuple[str, ...]


# 两种情况显式区分，不依据值的结构推断。
SessionType = SingleSession | MultipleSessions


class AgentStatus(enum.Enum):
    """`launchctl print` 探测到的服务运行状态。"""

    RUNNING = "running"
    STOPPED = "stopped"
    ERROR = "error"
    UNKNOWN = "unknown"


@dataclass(frozen=True)
class LaunchAgent:
    """目录扫描得到的一条 LaunchAgent 记录。"""

    path: str
    filename: str
    # 文件中没有 `Label` 时回退为去掉 `.plist` 的文件名。
    label: str
    status: AgentStatus = AgentStatus.UNKNOWN
    enabled: bool = False
