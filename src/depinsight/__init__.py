"""
DepInsight：多模組建置原始碼樹的依賴圖產生與渲染工具。
"""

__version__ = "0.1.0"
