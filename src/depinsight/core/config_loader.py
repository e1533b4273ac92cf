# src/depinsight/core/config_loader.py
"""
負責載入並合併 DepInsight 的工作目錄設定。
"""

# 1. 標準庫導入
import copy
import logging
from pathlib import Path
from typing import Any

# 2. 第三方庫導入
import yaml

# 3. 本專案導入
from depinsight.errors import ConfigError
from depinsight.utils.file_system_utils import DEFAULT_EXCLUDED_DIRS

CONFIG_FILENAME = "depinsight.yaml"

DEFAULT_CONFIG: dict[str, Any] = {
    "output_dir": "graphs",
    "graph_file": "graph.json",
    "viz_file": "viz.html",
    "report_file": "deps_report.md",
    "scan": {
        "descriptors": ["pom.xml", "module.yaml"],
        "exclude_dirs": sorted(DEFAULT_EXCLUDED_DIRS),
        "max_workers": None,
    },
    "render": {
        "title": "Dependency Graph",
        "include_third_party": False,
        "filtering": {
            "scopes": [],
            "exclude_nodes": [],
        },
        "layout": {
            "x_spacing": 190,
            "y_spacing": 120,
        },
        "layout_engine": "dot",
        "embed_svg": False,
        "save_source_file": False,
        "report": False,
    },
}


class ConfigLoader:
    """一個處理設定檔載入與預設值合併的類別。"""

    def __init__(self, config_path: Path):
        self.config_path = config_path
        user_config = self._load_yaml(config_path)
        self.config = self._merge_configs(copy.deepcopy(DEFAULT_CONFIG), user_config)
        self._validate(self.config)

    @staticmethod
    def _load_yaml(path: Path) -> dict[str, Any]:
        """
        安全地載入一個 YAML 檔案。檔案不存在時回傳空字典。

        Raises:
            ConfigError: 檔案無法讀取、不是合法的 YAML，或頂層不是映射。
        """
        if not path.is_file():
            logging.debug(f"未找到設定檔 '{path}'，將使用預設設定。")
            return {}
        try:
            with open(path, encoding="utf-8") as f:
                data = yaml.safe_load(f)
        except OSError as e:
            raise ConfigError(str(path), f"無法讀取設定檔: {e}") from e
        except UnicodeDecodeError as e:
            raise ConfigError(str(path), f"設定檔不是合法的 UTF-8 文字: {e}") from e
        except yaml.YAMLError as e:
            raise ConfigError(str(path), f"解析設定檔時發生錯誤: {e}") from e

        if data is None:
            return {}
        if not isinstance(data, dict):
            raise ConfigError(str(path), "設定檔的頂層必須是一個映射 (mapping)")
        logging.debug(f"已載入設定檔: {path}")
        return data

    @staticmethod
    def _merge_configs(default: dict, user: dict) -> dict:
        """遞迴地合併使用者設定到預設設定中。"""
        for key, value in user.items():
            if isinstance(value, dict) and isinstance(default.get(key), dict):
                default[key] = ConfigLoader._merge_configs(default[key], value)
            else:
                default[key] = value
        return default

    def _validate(self, config: dict[str, Any]):
        """
        檢查合併後各設定區段與設定值的型別。

        Raises:
            ConfigError: 任一區段不是映射，或任一設定值的型別錯誤。
        """

        def fail(key: str, expected: str, value: Any):
            raise ConfigError(str(self.config_path), f"設定 '{key}' 必須是{expected}，實際為 {value!r}")

        def section(parent: dict[str, Any], key: str, dotted: str) -> dict[str, Any]:
            value = parent.get(key)
            if not isinstance(value, dict):
                fail(dotted, "一個映射 (mapping)", value)
            return value

        def check_str(parent: dict[str, Any], key: str, dotted: str):
            value = parent.get(key)
            if not isinstance(value, str) or not value.strip():
                fail(dotted, "非空字串", value)

        def check_bool(parent: dict[str, Any], key: str, dotted: str):
            value = parent.get(key)
            if not isinstance(value, bool):
                fail(dotted, "布林值", value)

        def check_positive_int(parent: dict[str, Any], key: str, dotted: str, allow_none: bool = False):
            value = parent.get(key)
            if value is None and allow_none:
                return
            if isinstance(value, bool) or not isinstance(value, int) or value < 1:
                fail(dotted, "正整數", value)

        def check_str_list(parent: dict[str, Any], key: str, dotted: str):
            value = parent.get(key)
            if not isinstance(value, list) or not all(isinstance(item, str) and item for item in value):
                fail(dotted, "非空字串的列表", value)

        for key in ("output_dir", "graph_file", "viz_file", "report_file"):
            check_str(config, key, key)

        scan = section(config, "scan", "scan")
        check_str_list(scan, "descriptors", "scan.descriptors")
        check_str_list(scan, "exclude_dirs", "scan.exclude_dirs")
        check_positive_int(scan, "max_workers", "scan.max_workers", allow_none=True)

        render = section(config, "render", "render")
        check_str(render, "title", "render.title")
        check_str(render, "layout_engine", "render.layout_engine")
        for key in ("include_third_party", "embed_svg", "save_source_file", "report"):
            check_bool(render, key, f"render.{key}")
        # 過濾選項的內容由 FilterSpec.from_options 驗證
        section(render, "filtering", "render.filtering")
        layout = section(render, "layout", "render.layout")
        for key in ("x_spacing", "y_spacing"):
            check_positive_int(layout, key, f"render.layout.{key}")

    @property
    def scan_settings(self) -> dict[str, Any]:
        return self.config.get("scan", {})

    @property
    def render_settings(self) -> dict[str, Any]:
        return self.config.get("render", {})

    def output_dir(self, workdir: Path) -> Path:
        """回傳輸出目錄；相對路徑以工作目錄為基準。"""
        return (workdir / self.config.get("output_dir", "graphs")).resolve()
