"""
带过期时间的状态提示。

提示文本与过期时刻成对保存，由调用方在每次刷新时显式传入当前时间判断是否仍然显示。
"""

from __future__ import annotations

from dataclasses import dataclass

# 提示默认显示时长（秒）。
DEFAULT_TTL = 2.0


@dataclass
class StatusMessage:
    text: str = ""
    expires_at: float = 0.0

    def set(self, text: str, *, now: float, ttl: float = DEFAULT_TTL) -> None:
        self.text = text
        self.expires_at = now + ttl

    def text_at(self, now: float) -> str:
        """返回 `now` 时刻应显示的文本；已过期时返回空串。"""
        if not self.text or now >= self.expires_at:
            return ""
        return self.text

    def clear(self) -> None:
        self.text = ""
        self.expires_at = 0.0
