# src/depinsight/__main__.py
"""
DepInsight 主執行入口。
"""

# 1. 標準庫導入
import sys

# 2. 第三方庫導入
# (無)

# 3. 本專案導入
from depinsight.cli import main

if __name__ == "__main__":
    sys.exit(main())
