# src/depinsight/builders/__init__.py
"""
建構器套件，負責將模組記錄轉換為依賴圖，並產生過濾後的視圖。
"""

from .dependency_builder import build_graph
from .graph_filter import FilterSpec, filter_graph

__all__ = [
    "FilterSpec",
    "build_graph",
    "filter_graph",
]
