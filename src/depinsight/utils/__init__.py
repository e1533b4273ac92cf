# src/depinsight/utils/__init__.py
"""
通用工具函式套件。
"""

from .color_utils import generate_color_palette, get_analogous_dark_color
from .file_system_utils import DEFAULT_EXCLUDED_DIRS, atomic_write_text, find_descriptor_files
from .logging_utils import configure_logging

__all__ = [
    "DEFAULT_EXCLUDED_DIRS",
    "atomic_write_text",
    "configure_logging",
    "find_descriptor_files",
    "generate_color_palette",
    "get_analogous_dark_color",
]
