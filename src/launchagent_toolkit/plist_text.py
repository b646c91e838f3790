"""
LaunchAgent plist 文本与 `Document` 之间的转换。

只支持服务描述文件实际用到的扁平子集：顶层 `<dict>` 下的字符串、整数、布尔、
字符串数组、字符串字典（`EnvironmentVariables`）以及 `LimitLoadToSessionType`
的单值/多值两种形式。

设计原则：
- 解码永不失败：无法识别的键、无法解析的整数、畸形行一律静默跳过。
- 编码总是成功：按固定键顺序输出，缺省属性不输出任何元素。
"""

from __future__ import annotations

import re
from typing import Any
from xml.sax.saxutils import escape, unescape

from .document import Document
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

# `(plist 键, Document 属性, 值类型)`，顺序即编码时的固定输出顺序。
KEYS: tuple[tuple[str, str, str], ...] = (
    ("Label", "label", KIND_STRING),
    ("ProgramArguments", "program_arguments", KIND_STRING_LIST),
    ("StartInterval", "start_interval", KIND_INT),
    ("RunAtLoad", "run_at_load", KIND_BOOL),
    ("KeepAlive", "keep_alive", KIND_BOOL),
    ("StandardOutPath", "standard_out_path", KIND_STRING),
    ("StandardErrorPath", "standard_error_path", KIND_STRING),
    ("WorkingDirectory", "working_directory", KIND_STRING),
    ("Program", "program", KIND_STRING),
    ("ThrottleInterval", "throttle_interval", KIND_INT),
    ("AbandonProcessGroup", "abandon_process_group", KIND_BOOL),
    ("EnablePressuredExit", "enable_pressured_exit", KIND_BOOL),
    ("EnableTransactions", "enable_transactions", KIND_BOOL),
    ("EventMonitor", "event_monitor", KIND_BOOL),
    ("POSIXSpawnType", "posix_spawn_type", KIND_STRING),
    ("AssociatedBundleIdentifiers", "associated_bundle_identifiers", KIND_STRING_LIST),
    ("LimitLoadToSessionType", "limit_load_to_session_type", KIND_SESSION_TYPE),
    ("EnvironmentVariables", "environment_variables", KIND_STRING_MAP),
)

KEYS_BY_NAME: dict[str, tuple[str, str]] = {key: (attr, kind) for key, attr, kind in KEYS}

_ARRAY_KINDS = (KIND_STRING_LIST, KIND_SESSION_TYPE)

_HEADER = (
    '<?xml version="1.0" encoding="UTF-8"?>\n'
    '<!DOCTYPE plist PUBLIC "-//Apple//DTD PLIST 1.0//EN" '
    '"http://www.apple.com/DTDs/PropertyList-1.0.dtd">\n'
    '<plist version="1.0">\n'
    "<dict>\n"
)
_FOOTER = "</dict>\n</plist>\n"
_INDENT = "    "

_COMMENT_RE = re.compile(r"<!--.*?-->", re.DOTALL)
_INT_RE = re.compile(r"^[+-]?[0-9]+$")
_TOKEN_RE = re.compile(
    r"<key>(?P<key>.*?)</key>"
    r"|<string>(?P<string>.*?)</string>"
    r"|(?P<empty_string><string\s*/>)"
    r"|<integer>(?P<integer>.*?)</integer>"
    r"|<(?P<bool>true|false)\s*/>"
    r"|<(?P<open>dict|array)>"
    r"|</(?P<close>dict|array)>"
    r"|<(?P<empty>dict|array)\s*/>"
)
_ENTITIES = {"&quot;": '"', "&apos;": "'", "&#10;": "\n", "&#13;": "\r"}
# 字符串值只能占一行，换行符以字符引用写出。
_LINE_BREAKS = {"\n": "&#10;", "\r": "&#13;"}


def parse_int(text: str) -> int | None:
    """按十进制解析整数（允许正负号，不允许首尾空白），失败返回 `None`。"""
    if not _INT_RE.fullmatch(text):
        return None
    return int(text)


def _tokens(text: str) -> list[tuple[str, str]]:
    """把文本切成 `(元素类型, 文本值)` 序列；不认识的内容直接丢弃。"""
    out: list[tuple[str, str]] = []
    for line in _COMMENT_RE.sub("", text).split("\n"):
        for m in _TOKEN_RE.finditer(line):
            kind = m.lastgroup or ""
            if kind == "empty_string":
                out.append(("string", ""))
            elif kind in ("key", "string", "integer"):
                out.append((kind, unescape(m.group(kind), _ENTITIES)))
            else:
                out.append((kind, m.group(kind)))
    return out


class _Decoder:
    """解码状态机：顶层 dict、正在收集的数组、正在收集的环境变量子字典。"""

    def __init__(self) -> None:
        self.doc = Document()
        self.in_dict = False
        self.key = ""
        # 数组所属的键；为空表示当前不在收集数组。
        self.array_key = ""
        self.items: list[str] = []
        self.env: dict[str, str] | None = None
        self.env_key: str | None = None
        # 被整体跳过的未知容器的嵌套深度。
        self.skip = 0

    def feed(self, kind: str, value: str) -> None:
        if self.skip:
            self._feed_skipped(kind, value)
        elif self.env is not None:
            self._feed_env(kind, value)
        elif self.array_key:
            self._feed_array(kind, value)
        elif self.in_dict:
            self._feed_top(kind, value)
        elif kind == "open" and value == "dict":
            self.in_dict = True

    def _feed_skipped(self, kind: str, value: str) -> None:
        if kind == "open":
            self.skip += 1
        elif kind == "close":
            self.skip -= 1

    def _feed_env(self, kind: str, value: str) -> None:
        if kind == "key":
            self.env_key = value
        elif kind == "string":
            if self.env_key is not None:
                self.env[self.env_key] = value
            self.env_key = None
        elif kind == "close" and value == "dict":
            self.doc.environment_variables = self.env
            self.env = None
            self.env_key = None
            self.key = ""
        elif kind == "open":
            # 非字符串值（嵌套容器）不在模型内，连同其键一起丢弃。
            self.env_key = None
            self.skip = 1
        elif kind in ("integer", "bool", "empty"):
            self.env_key = None

    def _feed_array(self, kind: str, value: str) -> None:
        if kind == "string":
            self.items.append(value)
        elif kind == "close" and value == "array":
            self._commit_array(self.array_key, self.items)
            self.array_key = ""
            self.items = []
            self.key = ""
        elif kind == "open":
            self.skip = 1

    def _feed_top(self, kind: str, value: str) -> None:
        if kind == "key":
            self.key = value
            return
        if kind == "close":
            if value == "dict":
                self.in_dict = False
            return

        entry = KEYS_BY_NAME.get(self.key)
        attr, field_kind = entry if entry else ("", "")
        if kind == "open":
            if value == "array" and field_kind in _ARRAY_KINDS:
                self.array_key = self.key
                self.items = []
            elif value == "dict" and field_kind == KIND_STRING_MAP:
                self.env = {}
                self.env_key = None
            else:
                self.skip = 1
                self.key = ""
            return
        if kind == "empty":
            if value == "array" and field_kind in _ARRAY_KINDS:
                self._commit_array(self.key, [])
            elif value == "dict" and field_kind == KIND_STRING_MAP:
                self.doc.environment_variables = {}
            self.key = ""
            return

        if attr:
            self._assign_scalar(attr, field_kind, kind, value)
        self.key = ""

    def _assign_scalar(self, attr: str, field_kind: str, kind: str, value: str) -> None:
        if kind == "string" and field_kind == KIND_STRING:
            setattr(self.doc, attr, value)
        elif kind == "string" and field_kind == KIND_SESSION_TYPE:
            setattr(self.doc, attr, SingleSession(value))
        elif kind == "integer" and field_kind == KIND_INT:
            parsed = parse_int(value)
            if parsed is not None:
                setattr(self.doc, attr, parsed)
        elif kind == "bool" and field_kind == KIND_BOOL:
            setattr(self.doc, attr, value == "true")

    def _commit_array(self, key: str, items: list[str]) -> None:
        attr, field_kind = KEYS_BY_NAME[key]
        if field_kind == KIND_SESSION_TYPE:
            setattr(self.doc, attr, MultipleSessions(tuple(items)))
        else:
            setattr(self.doc, attr, list(items))


def decode(text: str) -> Document:
    """把 plist 文本解码为 `Document`；无法识别的内容在结果中表现为缺省属性。"""
    decoder = _Decoder()
    for kind, value in _tokens(text):
        decoder.feed(kind, value)
    return decoder.doc


def _string_elem(value: str, depth: int) -> str:
    return f"{_INDENT * depth}<string>{escape(value, _LINE_BREAKS)}</string>\n"


def _encode_value(kind: str, value: Any) -> str:
    """编码单个属性值（不含 `<key>` 行）。"""
    if kind == KIND_STRING:
        return _string_elem(value, 1)
    if kind == KIND_INT:
        return f"{_INDENT}<integer>{int(value)}</integer>\n"
    if kind == KIND_BOOL:
        return f"{_INDENT}<{'true' if value else 'false'}/>\n"
    if kind == KIND_SESSION_TYPE and isinstance(value, SingleSession):
        return _string_elem(value.value, 1)
    if kind in _ARRAY_KINDS:
        items = value.values if isinstance(value, MultipleSessions) else value
        body = "".join(_string_elem(item, 2) for item in items)
        return f"{_INDENT}<array>\n{body}{_INDENT}</array>\n"
    if kind == KIND_STRING_MAP:
        body = "".join(
            f"{_INDENT * 2}<key>{escape(k, _LINE_BREAKS)}</key>\n{_string_elem(v, 2)}"
            for k, v in value.items()
        )
        return f"{_INDENT}<dict>\n{body}{_INDENT}</dict>\n"
    raise RuntimeError(f"Unknown field kind: {kind}")


def encode(doc: Document) -> str:
    """按固定键顺序把 `Document` 编码为完整的 XML plist 文本。"""
    entries: list[str] = []
    for key, attr, kind in KEYS:
        value = getattr(doc, attr)
        if value is None:
            continue
        entries.append(f"{_INDENT}<key>{key}</key>\n{_encode_value(kind, value)}")
    return _HEADER + "\n".join(entries) + _FOOTER


def load_document(path: str) -> Document:
    """从磁盘读取并解码服务描述文件；读取失败时抛出 `OSError`。"""
    with open(path, encoding="utf-8", errors="replace") as f:
        return decode(f.read())
