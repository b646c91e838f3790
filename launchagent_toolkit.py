#!/usr/bin/env python3
"""
源码目录下的直接入口：未安装时可用 `python3 launchagent_toolkit.py -f x.plist` 运行。

被当作 `launchagent_toolkit` 导入时（例如在仓库根目录运行 pytest），本文件充当包的
占位模块，把子模块查找转发到 `src/launchagent_toolkit/`。
"""

import os
import sys

_SRC = os.path.join(os.path.dirname(os.path.abspath(__file__)), "src")
if _SRC not in sys.path:
    sys.path.insert(0, _SRC)

# 子模块（cli、plist_text 等）从 src 下的真实包目录加载。
__path__ = [os.path.join(_SRC, "launchagent_toolkit")]


def main(argv: list[str] | None = None) -> int:
    from launchagent_toolkit.cli import main as cli_main

    return cli_main(argv)


if __name__ == "__main__":
    raise SystemExit(main())
