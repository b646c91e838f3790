"""支持 `python -m launchagent_toolkit`，与控制台脚本 `launchagent-toolkit` 等价。"""

from .cli import main

if __name__ == "__main__":
    raise SystemExit(main())
