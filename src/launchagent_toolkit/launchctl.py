"""
对 macOS `/bin/launchctl` 的轻量封装。

状态探测与重新加载相关的命令细节收敛在此模块；所有函数都不向上抛出命令失败，
而是返回状态值或错误描述，便于上层流程决定如何提示。
"""

from __future__ import annotations

import os
import re
import subprocess

from .types import AgentStatus

LAUNCHCTL = "/bin/launchctl"

# `launchctl unload` 对未加载的服务报告此错误，可视为成功。
_NOT_LOADED_MARKER = "Could not find specified service"


def _run(cmd: list[str], *, verbose: bool = False) -> subprocess.CompletedProcess[bytes]:
    """执行命令并返回结果对象；命令本身无法启动时抛出 `OSError`。"""
    if verbose:
        print(f"+ {' '.join(cmd)}")
    return subprocess.run(cmd, capture_output=True, check=False)


def _gui_domain() -> str:
    return f"gui/{os.getuid()}"


def check_agent_status(label: str, *, verbose: bool = False) -> AgentStatus:
    """通过 `launchctl print gui/<uid>/<label>` 判断服务运行状态。"""
    try:
        p = _run([LAUNCHCTL, "print", f"{_gui_domain()}/{label}"], verbose=verbose)
    except OSError:
        return AgentStatus.UNKNOWN
    out = p.stdout.decode(errors="replace")
    err = p.stderr.decode(errors="replace")
    # 未加载的服务：旧版输出 `No such service`，新版在 stderr 报告 `Could not find service`。
    if out.strip() == "No such service" or "Could not find service" in err:
        return AgentStatus.STOPPED
    if "state = running" in out:
        return AgentStatus.RUNNING
    if "state = stopped" in out:
        return AgentStatus.STOPPED
    return AgentStatus.ERROR


def check_agent_enabled(label: str, *, verbose: bool = False) -> bool:
    """通过 `launchctl print-disabled` 判断服务是否启用；命令失败时视为未启用。"""
    try:
        p = _run([LAUNCHCTL, "print-disabled", _gui_domain()], verbose=verbose)
    except OSError:
        return False
    if p.returncode != 0:
        return False
    # 输出形如 `"com.example.agent" => disabled`（旧版系统为 `=> true`）。
    disabled_re = re.compile(rf'"{re.escape(label)}"\s*=>\s*(disabled|true)\b')
    return disabled_re.search(p.stdout.decode(errors="replace")) is None


def reload_agent(path: str, *, verbose: bool = False) -> str:
    """
    先 `unload` 再 `load` 指定 plist，成功返回空串，否则返回错误描述。

    服务原本未加载时 `unload` 的报错被忽略；不做超时与重试。
    """
    try:
        p = _run([LAUNCHCTL, "unload", path], verbose=verbose)
    except OSError as e:
        return f"Failed to run launchctl unload: {e}"
    if p.returncode != 0:
        err = p.stderr.decode(errors="replace").strip()
        if _NOT_LOADED_MARKER not in err:
            return f"Unload failed: {err}"

    try:
        p = _run([LAUNCHCTL, "load", path], verbose=verbose)
    except OSError as e:
        return f"Failed to run launchctl load: {e}"
    if p.returncode != 0:
        return f"Load failed: {p.stderr.decode(errors='replace').strip()}"
    return ""
