# src/depinsight/parsers/__init__.py
"""
解析器套件，負責發現並解析模組描述檔。
"""

from .module_scanner import scan_modules

__all__ = [
    "scan_modules",
]
