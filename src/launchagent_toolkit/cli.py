"""
`launchagent-toolkit` 的命令行入口模块。

负责定位 LaunchAgent plist、收集字段编辑参数（或进入交互式表单），并调用保存与
`launchctl` 重新加载流程。
"""

import argparse
import os
import sys
import time
from collections.abc import Sequence

from .agent_scan import LOCATIONS, filter_agents, find_agent, load_launch_agents, location_dir
from .document import Document
from .edit_session import EditSession
from .fields import CATALOG, FieldDescriptor, find_field
from .inspect import print_agents, print_document
from .persist import SaveResult, save_document
from .plist_text import load_document
from .status_line import StatusMessage


def _log_step(message: str) -> None:
    """输出简洁的流程阶段提示。"""
    print(f"[launchagent-toolkit] {message}")


def _field_names() -> str:
    return ", ".join(f.id for f in CATALOG)


def _resolve_field(name: str) -> FieldDescriptor:
    field = find_field(name)
    if field is None:
        raise SystemExit(f"Error: unknown field: {name}\nAvailable fields: {_field_names()}\n")
    return field


def _parse_set(spec: str) -> tuple[FieldDescriptor, str]:
    """把 `FIELD=VALUE` 解析为字段与编辑文本；VALUE 中的 `\\n` 表示换行。"""
    if "=" not in spec:
        raise SystemExit(f"Error: expected FIELD=VALUE, got: {spec}")
    k, v = spec.split("=", 1)
    if not k.strip():
        raise SystemExit(f"Error: empty FIELD in: {spec}")
    return _resolve_field(k), v.replace("\\n", "\n")


def apply_edit(session: EditSession, doc: Document, field: FieldDescriptor, text: str) -> None:
    """以编辑会话的方式把 `text` 提交到指定字段（与交互式编辑走同一套转换规则）。"""
    session.reset()
    session.select(field.id)
    session.start_edit(doc)
    session.set_buffer(text)
    session.commit_edit(doc)


def _choose_candidate(
    *,
    kind: str,
    candidates: list[str],
    required_flag: str,
    context: str,
) -> str:
    """当候选有多个时，交互式让用户选择；非交互环境则报错。"""
    ordered = sorted(os.path.abspath(x) for x in candidates)
    if not sys.stdin.isatty():
        names = ", ".join(os.path.basename(x) for x in ordered)
        raise SystemExit(
            f"Error: multiple {kind} found {context} in non-interactive mode.\n"
            f"Candidates: {names}\n"
            f"Please pass the desired one via {required_flag}.\n"
        )

    print(f"Multiple {kind} found {context}. Please choose one:")
    for i, path in enumerate(ordered, start=1):
        print(f"  {i}) {path}")

    while True:
        raw = input(f"Select {kind} [1-{len(ordered)}]: ").strip()
        if raw.isdigit():
            idx = int(raw)
            if 1 <= idx <= len(ordered):
                selected = ordered[idx - 1]
                print(f"Selected {kind}: {selected}")
                return selected
        print("Invalid selection. Please enter a valid number.")


def _find_plist_in_cwd() -> str:
    """在当前工作目录自动发现 plist。"""
    cwd = os.getcwd()
    candidates: list[str] = []
    with os.scandir(cwd) as it:
        for entry in it:
            if entry.is_file() and entry.name.endswith(".plist"):
                candidates.append(entry.path)

    if len(candidates) == 1:
        return os.path.abspath(candidates[0])
    if len(candidates) > 1:
        return _choose_candidate(
            kind=".plist files",
            candidates=candidates,
            required_flag="-f/--file or -a/--agent",
            context="in current directory",
        )
    raise SystemExit(
        "Error: missing -f/--file and no .plist file found in current directory.\n"
        "Hint: pass a plist path via -f, an agent via -a, or browse with --list.\n"
    )


def _agents_dir(ns: argparse.Namespace) -> str:
    if ns.dir:
        return os.path.abspath(os.path.expanduser(ns.dir))
    return location_dir(ns.location)


def _resolve_target(ns: argparse.Namespace) -> str:
    """按 -f / -a / 当前目录的优先级确定要编辑的 plist。"""
    if ns.file:
        path = os.path.abspath(os.path.expanduser(ns.file))
        if not os.path.isfile(path):
            raise SystemExit(f"Error: plist not found: {path}")
        return path

    if ns.agent:
        directory = _agents_dir(ns)
        agent = find_agent(load_launch_agents(directory, probe=False), ns.agent)
        if agent is None:
            raise SystemExit(
                f"Error: agent not found in {directory}: {ns.agent}\n"
                "Hint: list available agents with --list.\n"
            )
        return agent.path

    return _find_plist_in_cwd()


def _report_save(result: SaveResult, *, dry_run: bool) -> None:
    if dry_run:
        print(result.text, end="")
    if not result.saved and not dry_run:
        raise SystemExit(f"Error: {result.message}")
    _log_step(result.message)


def _read_edit_lines(prompt: str) -> str | None:
    """逐行读取编辑内容：单独一行 `.` 结束并提交，单独一行 `!` 取消（返回 `None`）。"""
    lines: list[str] = []
    while True:
        try:
            line = input(prompt)
        except EOFError:
            return None
        if line == ".":
            return "\n".join(lines)
        if line == "!":
            return None
        lines.append(line)


def run_form(
    path: str,
    doc: Document,
    *,
    reload: bool = True,
    dry_run: bool = False,
    verbose: bool = False,
) -> bool:
    """
    交互式表单循环，返回是否存在未保存的修改。

    命令：`j`/`k` 下移/上移（循环），`g`/`G` 首/末字段，`e` 编辑当前字段，
    `s` 保存并重新加载，`p` 重新打印，`q` 退出。
    """
    session = EditSession()
    status = StatusMessage()
    dirty = False
    show = True

    while True:
        if show:
            print_document(doc, path=path, session=session)
        show = True
        msg = status.text_at(time.monotonic())
        if msg:
            print(f"[{msg}]")

        try:
            cmd = input("Command [j/k/g/G/e/s/p/q]: ").strip()
        except EOFError:
            return dirty

        if cmd == "j":
            session.move_next()
        elif cmd == "k":
            session.move_prev()
        elif cmd == "g":
            session.move_first()
        elif cmd == "G":
            session.move_last()
        elif cmd == "p":
            pass
        elif cmd in ("e", ""):
            field = session.field
            seed = session.start_edit(doc)
            print(f"Editing {field.label} ({field.kind}). Current value:")
            print(seed if seed else "(empty)")
            print("Enter the new value; finish with a single '.', cancel with '!'.")
            text = _read_edit_lines("| ")
            if text is None:
                session.cancel_edit()
                status.set("Edit cancelled", now=time.monotonic())
            else:
                session.set_buffer(text)
                session.commit_edit(doc)
                dirty = True
                status.set(f"Updated {field.label}", now=time.monotonic())
        elif cmd == "s":
            result = save_document(path, doc, reload=reload, dry_run=dry_run, verbose=verbose)
            if dry_run:
                print(result.text, end="")
            if result.saved:
                dirty = False
            status.set(result.message, now=time.monotonic())
        elif cmd == "q":
            if dirty:
                try:
                    answer = input("Discard unsaved changes? [y/N]: ").strip().lower()
                except EOFError:
                    answer = "y"
                if answer not in ("y", "yes"):
                    continue
            return dirty
        else:
            status.set(f"Unknown command: {cmd}", now=time.monotonic())
            show = False


def build_parser() -> argparse.ArgumentParser:
    """构建并返回 `launchagent-toolkit` 命令行参数解析器。"""
    p = argparse.ArgumentParser(
        prog="launchagent-toolkit",
        formatter_class=argparse.RawTextHelpFormatter,
        description=(
            "Inspect and edit launchd LaunchAgent plists, then reload the agent.\n"
            "Only the flat subset of keys used by service descriptors is edited;\n"
            "the file is rewritten in a canonical key order."
        ),
        epilog=f"Fields: {_field_names()}",
    )

    p.add_argument("-f", "--file", default="", help="LaunchAgent plist path")
    p.add_argument(
        "-a",
        "--agent",
        default="",
        help="Agent filename or Label inside the selected location",
    )
    p.add_argument(
        "--location",
        default="user",
        choices=sorted(LOCATIONS),
        help="LaunchAgents directory to use with --list / -a (default: user)",
    )
    p.add_argument("--dir", default="", help="Custom LaunchAgents directory (overrides --location)")
    p.add_argument("--list", action="store_true", help="List agents in the selected location")
    p.add_argument("--filter", default="", help="Filter --list output by filename or Label")
    p.add_argument(
        "--no-probe",
        action="store_true",
        help="Do not query launchctl for run/enable state when listing",
    )
    p.add_argument("--show", action="store_true", help="Print all fields of the plist")
    p.add_argument(
        "--set",
        action="append",
        default=[],
        metavar="FIELD=VALUE",
        help="Set a field (use \\n in VALUE to separate list items or KEY=VALUE lines)",
    )
    p.add_argument(
        "--clear",
        action="append",
        default=[],
        metavar="FIELD",
        help="Remove a field from the plist",
    )
    p.add_argument("--edit", action="store_true", help="Edit fields interactively")
    p.add_argument(
        "--no-reload",
        action="store_true",
        help="Write the plist without unloading/loading the agent",
    )
    p.add_argument(
        "--dry-run",
        action="store_true",
        help="Print the resulting plist without writing or reloading",
    )
    p.add_argument("--verbose", action="store_true", help="Echo launchctl commands")
    return p


def main(argv: Sequence[str] | None = None) -> int:
    """CLI 入口：解析参数、定位 plist、应用编辑并保存/重新加载。"""
    parser = build_parser()
    ns = parser.parse_args(argv)
    edits: list[tuple[FieldDescriptor, str | None]] = [_parse_set(spec) for spec in ns.set]
    # `None` 表示删除该键（布尔字段的空文本会被提交为 `false`）。
    edits += [(_resolve_field(name), None) for name in ns.clear]
    if ns.edit and (edits or ns.list):
        raise SystemExit("Error: --edit cannot be combined with --set/--clear/--list.")

    if ns.list:
        directory = _agents_dir(ns)
        _log_step(f"Scanning {directory}")
        agents = load_launch_agents(directory, probe=not ns.no_probe, verbose=bool(ns.verbose))
        print_agents(filter_agents(agents, ns.filter))
        return 0

    _log_step("Resolving plist")
    path = _resolve_target(ns)
    _log_step(f"Using plist: {path}")
    try:
        doc = load_document(path)
    except OSError as e:
        raise SystemExit(f"Error: failed to read plist: {path}\nDetail: {e}\n") from e

    reload = not ns.no_reload
    if ns.edit:
        if not sys.stdin.isatty():
            raise SystemExit("Error: --edit requires an interactive terminal.")
        dirty = run_form(
            path,
            doc,
            reload=reload,
            dry_run=bool(ns.dry_run),
            verbose=bool(ns.verbose),
        )
        if dirty:
            _log_step("Exited with unsaved changes")
        return 0

    if not edits:
        print_document(doc, path=path)
        return 0

    session = EditSession()
    for field, text in edits:
        if text is None:
            field.set(doc, None)
            _log_step(f"Cleared {field.label}")
        else:
            apply_edit(session, doc, field, text)
            _log_step(f"Updated {field.label}")
    if ns.show:
        print_document(doc, path=path)

    if ns.dry_run:
        _log_step("Dry-run mode enabled (no file modifications)")
    elif reload:
        _log_step("Saving plist and reloading agent")
    else:
        _log_step("Saving plist")
    result = save_document(
        path,
        doc,
        reload=reload,
        dry_run=bool(ns.dry_run),
        verbose=bool(ns.verbose),
    )
    _report_save(result, dry_run=bool(ns.dry_run))
    return 0
