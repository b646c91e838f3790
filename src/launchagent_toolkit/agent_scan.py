"""
在 LaunchAgents 目录中发现服务描述文件，并附带运行状态。
"""

from __future__ import annotations

import os

from . import launchctl
from .plist_text import load_document
from .types import AgentStatus, LaunchAgent

# `--location` 可选值对应的目录。
LOCATIONS: dict[str, str] = {
    "user": "~/Library/LaunchAgents",
    "global": "/Library/LaunchAgents",
    "apple": "/System/Library/LaunchAgents",
}


def location_dir(location: str) -> str:
    """把 `user` / `global` / `apple` 展开为绝对目录路径。"""
    try:
        raw = LOCATIONS[location]
    except KeyError:
        found = ", ".join(LOCATIONS)
        raise ValueError(f"unknown location: {location} (expected one of: {found})") from None
    return os.path.abspath(os.path.expanduser(raw))


def _stem(filename: str) -> str:
    return filename[: -len(".plist")] if filename.endswith(".plist") else filename


def extract_label(path: str) -> str:
    """读取文件中的 `Label`；读取失败或没有 `Label` 时回退为文件名（去掉 `.plist`）。"""
    try:
        label = load_document(path).label
    except OSError:
        label = None
    return label or _stem(os.path.basename(path))


def load_launch_agents(
    directory: str,
    *,
    probe: bool = True,
    verbose: bool = False,
) -> list[LaunchAgent]:
    """列出目录下全部 `.plist` 并按文件名排序；目录不存在时返回空列表。"""
    if not os.path.isdir(directory):
        return []

    agents: list[LaunchAgent] = []
    with os.scandir(directory) as it:
        for entry in it:
            if not entry.is_file() or not entry.name.endswith(".plist"):
                continue
            label = extract_label(entry.path)
            status = AgentStatus.UNKNOWN
            enabled = False
            if probe:
                status = launchctl.check_agent_status(label, verbose=verbose)
                enabled = launchctl.check_agent_enabled(label, verbose=verbose)
            agents.append(
                LaunchAgent(
                    path=entry.path,
                    filename=entry.name,
                    label=label,
                    status=status,
                    enabled=enabled,
                )
            )

    agents.sort(key=lambda a: a.filename)
    return agents


def filter_agents(agents: list[LaunchAgent], text: str) -> list[LaunchAgent]:
    """按文件名或 Label 做不区分大小写的子串过滤；空过滤串保留全部。"""
    needle = text.strip().lower()
    if not needle:
        return list(agents)
    return [a for a in agents if needle in a.filename.lower() or needle in a.label.lower()]


def find_agent(agents: list[LaunchAgent], name: str) -> LaunchAgent | None:
    """按文件名（可省略 `.plist`）或 Label 精确查找一条记录。"""
    target = name.strip()
    for agent in agents:
        if target in (agent.filename, _stem(agent.filename), agent.label):
            return agent
    return None
