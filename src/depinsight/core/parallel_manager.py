# src/depinsight/core/parallel_manager.py
"""
平行化任務管理器。

核心職責：
1. 封裝 ProcessPoolExecutor，提供跨平台 (Windows/Linux) 的多程序支援。
2. 以快速失敗 (fail-fast) 模式分發任務：第一個失敗的任務會取消所有尚未完成的任務。
3. 保證結果順序與輸入順序一致，並在中斷時清理工作程序。
"""

# 1. 標準庫導入
import concurrent.futures
import logging
import multiprocessing
import os
from collections.abc import Callable
from typing import Any, TypeVar

# 2. 第三方庫導入
# (無)

# 3. 本專案導入
# (無)

T = TypeVar("T")  # 輸入項目類型
R = TypeVar("R")  # 回傳結果類型


class ParallelManager:
    """
    管理平行化解析任務的核心類別。
    """

    def __init__(self, max_workers: int | None = None):
        """
        初始化 ParallelManager。

        Args:
            max_workers: 最大工作程序數。若為 None，則預設為 CPU 核心數。
        """
        self.max_workers = max(1, max_workers or os.cpu_count() or 1)
        self.mp_context = multiprocessing.get_context("spawn")

    def execute_fail_fast(
        self,
        task_func: Callable[[tuple[T, dict[str, Any]]], R],
        items: list[T],
        global_context: dict[str, Any],
    ) -> list[R]:
        """
        平行執行所有任務，任一任務失敗即中止。

        Args:
            task_func: 要在工作程序中執行的純函式 (必須是可序列化的頂層函式)。
                       簽名應為: task_func((item, context)) -> R
            items: 要處理的項目列表 (通常是檔案路徑列表)。
            global_context: 注入到每個任務的唯讀上下文。

        Returns:
            與 items 順序一致的結果列表。

        Raises:
            任務拋出的例外：若多個任務失敗，拋出輸入順序中最早的那一個。
        """
        total_items = len(items)
        if total_items == 0:
            return []

        if self.max_workers == 1 or total_items == 1:
            logging.debug(f"以單一程序處理 {total_items} 個項目。")
            return [task_func((item, global_context)) for item in items]

        workers = min(self.max_workers, total_items)
        logging.info(f"啟動平行處理: {total_items} 個項目, {workers} 個工作程序")

        executor = concurrent.futures.ProcessPoolExecutor(max_workers=workers, mp_context=self.mp_context)
        try:
            future_to_index = {
                executor.submit(task_func, (item, global_context)): index for index, item in enumerate(items)
            }
            done, not_done = concurrent.futures.wait(
                future_to_index, return_when=concurrent.futures.FIRST_EXCEPTION
            )

            failed = sorted(
                (future_to_index[future], future) for future in done if future.exception() is not None
            )
            if failed:
                index, future = failed[0]
                logging.debug(f"第 {index + 1}/{total_items} 個任務失敗，取消其餘 {len(not_done)} 個任務。")
                raise future.exception()

            results = [future.result() for future in sorted(future_to_index, key=future_to_index.get)]
        except BaseException:
            executor.shutdown(wait=False, cancel_futures=True)
            raise

        executor.shutdown(wait=True)
        logging.debug(f"平行進度: {total_items}/{total_items} 完成")
        return results
