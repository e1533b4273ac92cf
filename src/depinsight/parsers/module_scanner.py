# src/depinsight/parsers/module_scanner.py
"""
模組掃描器：走訪多模組建置原始碼樹，並將每個描述檔解析為 ModuleRecord。

核心職責：
1. 驗證根目錄並找出所有已註冊的模組描述檔。
2. 透過 ParallelManager 平行解析各描述檔；任一檔案失敗即中止整個掃描。
3. 完成 POM 的繼承解析，並檢查模組身分的唯一性。
"""

# 1. 標準庫導入
import logging
import os
from collections.abc import Iterable
from pathlib import Path
from typing import Any

# 2. 第三方庫導入
# (無)

# 3. 本專案導入
from depinsight.core.parallel_manager import ParallelManager
from depinsight.errors import ScanError
from depinsight.models import ModuleRecord
from depinsight.parsers.pom_parser import POM_FILENAME, PomModel, parse_pom, resolve_poms
from depinsight.parsers.yaml_descriptor_parser import YAML_DESCRIPTOR_FILENAME, parse_module_yaml
from depinsight.utils.file_system_utils import find_descriptor_files

DESCRIPTOR_PARSERS = {
    POM_FILENAME: parse_pom,
    YAML_DESCRIPTOR_FILENAME: parse_module_yaml,
}


def _parse_descriptor_task(args: tuple[str, dict[str, Any]]) -> PomModel | ModuleRecord:
    """工作程序任務：解析單一描述檔。必須是可序列化的頂層函式。"""
    path_str, context = args
    path = Path(path_str)
    source_path = path.relative_to(context["root"]).as_posix()
    parser = DESCRIPTOR_PARSERS[path.name]
    return parser(path, source_path)


def _validate_root(root: Path) -> Path:
    if not root.exists():
        raise ScanError(str(root), "來源路徑不存在")
    if not root.is_dir():
        raise ScanError(str(root), "來源路徑不是目錄")
    if not os.access(root, os.R_OK | os.X_OK):
        raise ScanError(str(root), "來源路徑無法讀取")
    return root.resolve()


def _check_unique_identities(modules: list[ModuleRecord]):
    """確認座標三元組與 group:artifact 在一次掃描中皆唯一。"""
    seen: dict[str, ModuleRecord] = {}
    for module in modules:
        previous = seen.get(module.key)
        if previous is not None:
            raise ScanError(
                module.source_path,
                f"模組身分 '{module.coordinate}' 與 '{previous.source_path}' 中的 '{previous.coordinate}' 重複",
            )
        seen[module.key] = module


def scan_modules(
    root: Path,
    descriptor_names: Iterable[str] | None = None,
    exclude_dirs: Iterable[str] | None = None,
    max_workers: int | None = None,
) -> list[ModuleRecord]:
    """
    掃描來源樹並回傳所有模組記錄。

    Args:
        root: 多模組建置原始碼樹的根目錄。
        descriptor_names: 要識別的描述檔名稱，預設為所有已註冊的名稱。
        exclude_dirs: 要略過的目錄名稱模式。
        max_workers: 平行解析的工作程序數，None 表示使用 CPU 核心數。

    Returns:
        按座標字串排序的 ModuleRecord 列表。

    Raises:
        ScanError: 根目錄無效，或任一描述檔無法解析。
    """
    root = _validate_root(Path(root))
    names = list(descriptor_names) if descriptor_names is not None else list(DESCRIPTOR_PARSERS)
    unknown = sorted(set(names) - set(DESCRIPTOR_PARSERS))
    if unknown:
        raise ScanError(str(root), f"不支援的描述檔類型: {', '.join(unknown)}")

    try:
        descriptor_files = find_descriptor_files(root, names, exclude_dirs)
    except OSError as e:
        raise ScanError(str(getattr(e, "filename", None) or root), f"走訪目錄時發生錯誤: {e}") from e

    logging.info(f"在 '{root}' 中找到 {len(descriptor_files)} 個模組描述檔。")
    if not descriptor_files:
        logging.warning("未找到任何模組描述檔，將產生空的依賴圖。")
        return []

    manager = ParallelManager(max_workers)
    parsed = manager.execute_fail_fast(
        _parse_descriptor_task,
        [str(path) for path in descriptor_files],
        {"root": str(root)},
    )

    pom_models = [item for item in parsed if isinstance(item, PomModel)]
    modules = [item for item in parsed if isinstance(item, ModuleRecord)]
    modules.extend(resolve_poms(pom_models))
    modules.sort(key=lambda module: (str(module.coordinate), module.source_path))

    _check_unique_identities(modules)
    logging.info(f"掃描完成：共 {len(modules)} 個模組 ({len(pom_models)} 個來自 {POM_FILENAME})。")
    return modules
