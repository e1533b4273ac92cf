# src/depinsight/reporters/__init__.py
"""
報告器套件，負責將依賴圖匯總為文字報告。
"""

from .markdown_reporter import generate_markdown_report

__all__ = [
    "generate_markdown_report",
]
