"""
LaunchAgent 服务描述文件（plist）的内存模型。

所有属性相互独立、均可缺省：`None` 表示该键不存在，与空字符串/空列表/空字典不同。
"""

from __future__ import annotations

from dataclasses import dataclass

from .types import SessionType


@dataclass
class Document:
    """单个服务描述文件；仅由 `decode` 或默认构造创建，仅经字段目录修改。"""

    label: str | None = None
    program: str | None = None
    program_arguments: list[str] | None = None
    start_interval: int | None = None
    throttle_interval: int | None = None
    run_at_load: bool | None = None
    keep_alive: bool | None = None
    abandon_process_group: bool | None = None
    enable_pressured_exit: bool | None = None
    enable_transactions: bool | None = None
    event_monitor: bool | None = None
    standard_out_path: str | None = None
    standard_error_path: str | None = None
    working_directory: str | None = None
    posix_spawn_type: str | None = None
    environment_variables: dict[str, str] | None = None
    associated_bundle_identifiers: list[str] | None = None
    limit_load_to_session_type: SessionType | None = None
