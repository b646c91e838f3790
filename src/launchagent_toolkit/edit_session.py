"""
表单编辑会话：当前选中字段（光标）、是否处于编辑态、编辑缓冲区。

状态转换：
- 非编辑态：只能移动光标（循环），或以当前字段开始编辑。
- 编辑态：光标移动无效；只能修改缓冲区，或提交/取消退出编辑态。
"""

from __future__ import annotations

from collections.abc import Sequence

from .document import Document
from .fields import CATALOG, FieldDescriptor


class EditSession:
    """绑定在字段目录上的编辑状态机；仅在有 `Document` 载入时存在。"""

    def __init__(self, catalog: Sequence[FieldDescriptor] = CATALOG) -> None:
        if not catalog:
            raise ValueError("empty field catalog")
        self.catalog = tuple(catalog)
        self.index = 0
        self.editing = False
        self.buffer = ""

    @property
    def field(self) -> FieldDescriptor:
        return self.catalog[self.index]

    def _move(self, index: int) -> bool:
        if self.editing:
            return False
        self.index = index % len(self.catalog)
        return True

    def move_next(self) -> bool:
        return self._move(self.index + 1)

    def move_prev(self) -> bool:
        return self._move(self.index - 1)

    def move_first(self) -> bool:
        return self._move(0)

    def move_last(self) -> bool:
        return self._move(len(self.catalog) - 1)

    def select(self, field_id: str) -> bool:
        """把光标移到指定 id 的字段；编辑中或找不到时返回 `False`。"""
        for i, field in enumerate(self.catalog):
            if field.id == field_id:
                return self._move(i)
        return False

    def start_edit(self, doc: Document) -> str:
        """以当前字段的值填充缓冲区并进入编辑态，返回填充的文本；已在编辑时保留现有缓冲区。"""
        if self.editing:
            return self.buffer
        self.buffer = self.field.seed(doc)
        self.editing = True
        return self.buffer

    def set_buffer(self, text: str) -> None:
        if self.editing:
            self.buffer = text

    def type_text(self, text: str) -> None:
        if self.editing:
            self.buffer += text

    def backspace(self) -> None:
        if self.editing:
            self.buffer = self.buffer[:-1]

    def commit_edit(self, doc: Document) -> FieldDescriptor | None:
        """把缓冲区解析回当前字段并退出编辑态；未在编辑时返回 `None`。"""
        if not self.editing:
            return None
        field = self.field
        field.commit(doc, self.buffer)
        self.reset()
        return field

    def cancel_edit(self) -> bool:
        """丢弃缓冲区，`Document` 保持不变。"""
        if not self.editing:
            return False
        self.reset()
        return True

    def reset(self) -> None:
        """退出编辑态并清空缓冲区（更换 `Document` 时调用）。"""
        self.editing = False
        self.buffer = ""
