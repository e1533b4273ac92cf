# src/depinsight/parsers/yaml_descriptor_parser.py
"""
提供與建置工具無關的 module.yaml 描述檔解析功能。
"""

# 1. 標準庫導入
import logging
from pathlib import Path
from typing import Any

# 2. 第三方庫導入
import yaml

# 3. 本專案導入
from depinsight.errors import ScanError
from depinsight.models import DEFAULT_SCOPE, Coordinate, Dependency, ModuleRecord

YAML_DESCRIPTOR_FILENAME = "module.yaml"


def _required_str(data: dict[str, Any], key: str, source_path: str, context: str) -> str:
    value = data.get(key)
    if value is None or not str(value).strip():
        raise ScanError(source_path, f"{context}缺少必要的欄位 '{key}'")
    return str(value).strip()


def _optional_str(data: dict[str, Any], key: str) -> str | None:
    value = data.get(key)
    if value is None:
        return None
    text = str(value).strip()
    return text or None


def _optional_flag(data: dict[str, Any], source_path: str, context: str) -> bool:
    """`optional` 接受布林值或 "true"/"false" 字串 (與 POM 的 <optional> 相同)。"""
    value = data.get("optional", False)
    if value is None or isinstance(value, bool):
        return bool(value)
    if isinstance(value, str) and value.strip().lower() in ("true", "false"):
        return value.strip().lower() == "true"
    raise ScanError(source_path, f"{context}的 'optional' 必須是 true 或 false，實際為 {value!r}")


def _parse_dependency(raw: Any, index: int, source_path: str) -> Dependency:
    context = f"第 {index + 1} 個依賴"
    if isinstance(raw, str):
        raw = {"coordinate": raw}
    if not isinstance(raw, dict):
        raise ScanError(source_path, f"{context}必須是座標字串或映射")

    if "coordinate" in raw:
        try:
            coordinate = Coordinate.parse(raw["coordinate"])
        except ValueError as e:
            raise ScanError(source_path, f"{context}: {e}") from e
    else:
        coordinate = Coordinate(
            _required_str(raw, "group", source_path, context),
            _required_str(raw, "artifact", source_path, context),
            _optional_str(raw, "version"),
        )

    return Dependency(
        coordinate=coordinate,
        scope=_optional_str(raw, "scope") or DEFAULT_SCOPE,
        classifier=_optional_str(raw, "classifier"),
        optional=_optional_flag(raw, source_path, context),
    )


def parse_module_yaml(path: Path, source_path: str) -> ModuleRecord:
    """
    解析單一 module.yaml 描述檔。

    Raises:
        ScanError: 檔案無法讀取、YAML 格式錯誤，或缺少必要的身分欄位。
    """
    logging.debug(f"正在解析 YAML 描述檔: {source_path}")
    try:
        with open(path, encoding="utf-8") as f:
            data = yaml.safe_load(f)
    except OSError as e:
        raise ScanError(source_path, f"無法讀取描述檔: {e}") from e
    except UnicodeDecodeError as e:
        raise ScanError(source_path, f"描述檔不是合法的 UTF-8 文字: {e}") from e
    except yaml.YAMLError as e:
        raise ScanError(source_path, f"YAML 格式錯誤: {e}") from e

    if not isinstance(data, dict):
        raise ScanError(source_path, "描述檔的頂層必須是一個映射 (mapping)")

    coordinate = Coordinate(
        _required_str(data, "group", source_path, ""),
        _required_str(data, "artifact", source_path, ""),
        _required_str(data, "version", source_path, ""),
    )

    raw_dependencies = data.get("dependencies") or []
    if not isinstance(raw_dependencies, list):
        raise ScanError(source_path, "'dependencies' 必須是一個列表")

    dependencies = tuple(_parse_dependency(raw, i, source_path) for i, raw in enumerate(raw_dependencies))
    return ModuleRecord(
        coordinate=coordinate,
        dependencies=dependencies,
        source_path=source_path,
        name=_optional_str(data, "name"),
        packaging=_optional_str(data, "packaging"),
    )
