# src/depinsight/core/__init__.py
"""
DepInsight 的核心基礎設施套件。

此套件負責設定載入、平行任務與依賴圖持久化；
串連各子系統的 ProjectProcessor 位於 `depinsight.core.project_processor`。
"""

from .config_loader import ConfigLoader
from .graph_store import GraphStore
from .parallel_manager import ParallelManager

__all__ = [
    "ConfigLoader",
    "GraphStore",
    "ParallelManager",
]
