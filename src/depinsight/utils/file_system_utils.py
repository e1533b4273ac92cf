# src/depinsight/utils/file_system_utils.py
"""
提供與檔案系統操作相關的公用函式。
"""

# 1. 標準庫導入
import contextlib
import fnmatch
import os
import tempfile
from collections.abc import Iterable
from pathlib import Path

# 2. 第三方庫導入
# (無)

# 3. 本專案導入
# (無)

DEFAULT_EXCLUDED_DIRS: set[str] = {
    "__pycache__",
    ".git",
    ".svn",
    ".idea",
    ".vscode",
    "venv",
    ".venv",
    "node_modules",
    "target",
    "build",
    "dist",
    "graphs",
    "*.egg-info",
}


def is_excluded_dir(name: str, exclude_patterns: Iterable[str]) -> bool:
    """檢查目錄名稱是否符合任何排除模式。"""
    return any(fnmatch.fnmatch(name, pattern) for pattern in exclude_patterns)


def find_descriptor_files(
    root: Path,
    descriptor_names: Iterable[str],
    exclude_dirs: Iterable[str] | None = None,
) -> list[Path]:
    """
    遞迴地尋找根目錄下所有的模組描述檔。

    Args:
        root: 要掃描的根目錄。
        descriptor_names: 描述檔的檔名 (例如 "pom.xml")。
        exclude_dirs: 要略過的目錄名稱模式，支援 * 萬用字元。

    Returns:
        按路徑排序的描述檔列表。

    Raises:
        OSError: 走訪目錄時發生錯誤。
    """
    names = set(descriptor_names)
    patterns = set(DEFAULT_EXCLUDED_DIRS if exclude_dirs is None else exclude_dirs)
    found: list[Path] = []

    def _raise(error: OSError):
        raise error

    for dirpath, dirnames, filenames in os.walk(root, onerror=_raise):
        dirnames[:] = sorted(d for d in dirnames if not is_excluded_dir(d, patterns))
        for filename in sorted(filenames):
            if filename in names:
                found.append(Path(dirpath) / filename)

    return sorted(found)


def atomic_write_text(path: Path, content: str):
    """
    以原子方式寫入文字檔：先寫入同目錄下的暫存檔，再以 os.replace 取代目標。
    寫入失敗時會清除暫存檔，目標檔案保持原狀。

    Raises:
        OSError: 建立、寫入或取代檔案時失敗。
    """
    fd, temp_name = tempfile.mkstemp(prefix=f".{path.name}.", suffix=".tmp", dir=path.parent)
    temp_path = Path(temp_name)
    try:
        with os.fdopen(fd, "w", encoding="utf-8", newline="\n") as f:
            f.write(content)
        os.chmod(temp_path, 0o644)
        os.replace(temp_path, path)
    except BaseException:
        with contextlib.suppress(OSError):
            os.remove(temp_path)
        raise
