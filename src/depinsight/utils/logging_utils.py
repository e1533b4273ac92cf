# src/depinsight/utils/logging_utils.py
"""
提供與日誌記錄相關的通用工具和過濾器。
"""

# 1. 標準庫導入
import logging

# 2. 第三方庫導入
# (無)

# 3. 本專案導入
# (無)

LOG_FORMAT = "%(asctime)s - %(levelname)s - %(message)s"
NOISY_LOGGERS = ("graphviz",)


class NoisyLibraryFilter(logging.Filter):
    """
    一個自訂的日誌過濾器，在非詳細模式下攔截第三方函式庫的除錯訊息。
    """

    def filter(self, record: logging.LogRecord) -> bool:
        """
        如果訊息來自雜訊函式庫且等級低於 INFO，則回傳 False。
        """
        if record.levelno >= logging.INFO:
            return True
        return not record.name.startswith(NOISY_LOGGERS)


def configure_logging(verbose: bool = False) -> None:
    """
    設定根日誌記錄器。

    Args:
        verbose: 為 True 時輸出 DEBUG 等級的訊息 (對應 `--log` 選項)。
    """
    level = logging.DEBUG if verbose else logging.INFO
    root_logger = logging.getLogger()
    root_logger.setLevel(level)

    if not root_logger.handlers:
        console_handler = logging.StreamHandler()
        console_handler.setFormatter(logging.Formatter(LOG_FORMAT))
        console_handler.addFilter(NoisyLibraryFilter())
        root_logger.addHandler(console_handler)
