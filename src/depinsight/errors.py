# src/depinsight/errors.py
"""
DepInsight 的錯誤類型。

所有錯誤都攜帶出錯的路徑或選項名稱，以及可讀的原因說明。
建構參數會原樣保存在 `args` 中，確保錯誤可以跨程序邊界 (pickle) 傳遞。
"""


class DepInsightError(Exception):
    """所有 DepInsight 錯誤的基底類別。"""

    def __init__(self, subject: str, reason: str):
        super().__init__(subject, reason)
        self.subject = subject
        self.reason = reason

    def __str__(self) -> str:
        return f"{self.subject}: {self.reason}"


class ScanError(DepInsightError):
    """來源樹路徑無效，或模組描述檔無法讀取/解析。"""

    @property
    def path(self) -> str:
        return self.subject


class RenderError(DepInsightError):
    """輸出檔案或持久化圖檔的 I/O 失敗。"""

    @property
    def path(self) -> str:
        return self.subject


class FilterError(DepInsightError):
    """無效或未知的過濾選項。"""

    @property
    def option(self) -> str:
        return self.subject


class ConfigError(DepInsightError):
    """設定檔格式錯誤。"""

    @property
    def path(self) -> str:
        return self.subject
