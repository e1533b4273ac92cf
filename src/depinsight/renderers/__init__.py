# src/depinsight/renderers/__init__.py
"""
渲染器套件，負責將依賴圖視覺化為 HTML 與 Graphviz 輸出。
"""

from .dot_renderer import generate_dot_source, render_svg
from .html_renderer import RenderOptions, generate_html, render

__all__ = [
    "RenderOptions",
    "generate_dot_source",
    "generate_html",
    "render",
    "render_svg",
]
