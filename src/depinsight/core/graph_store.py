# src/depinsight/core/graph_store.py
"""
負責在 `generate` 與 `render` 之間持久化依賴圖。

核心職責：
1. 將 Graph 序列化為穩定、帶版本號的 JSON (排序鍵、固定縮排)。
2. 以原子寫入 (Atomic Writes) 儲存，避免中斷時留下損毀的檔案。
3. 載入時檢查格式與版本，不相容的檔案視為錯誤。
"""

# 1. 標準庫導入
import json
import logging
from pathlib import Path
from typing import Any

# 2. 第三方庫導入
# (無)

# 3. 本專案導入
from depinsight.errors import RenderError
from depinsight.models import Coordinate, Dependency, DependencyEdge, Graph, ModuleRecord
from depinsight.utils.file_system_utils import atomic_write_text

# 格式版本號：當序列化結構發生不相容變更時，應升級此版本號。
GRAPH_FORMAT = "depinsight-graph"
GRAPH_FORMAT_VERSION = 1


def _coordinate_to_dict(coordinate: Coordinate) -> dict[str, Any]:
    return {"group": coordinate.group, "artifact": coordinate.artifact, "version": coordinate.version}


def _coordinate_from_dict(data: dict[str, Any]) -> Coordinate:
    return Coordinate(data["group"], data["artifact"], data.get("version"))


def graph_to_dict(graph: Graph, source_root: str | None = None) -> dict[str, Any]:
    """將 Graph 轉換為可 JSON 序列化的字典。"""
    modules = [
        {
            "coordinate": _coordinate_to_dict(module.coordinate),
            "name": module.name,
            "packaging": module.packaging,
            "source_path": module.source_path,
            "dependencies": [
                {
                    "coordinate": _coordinate_to_dict(dep.coordinate),
                    "scope": dep.scope,
                    "classifier": dep.classifier,
                    "optional": dep.optional,
                }
                for dep in module.dependencies
            ],
        }
        for module in graph.modules
    ]
    edges = [
        {
            "from": edge.source,
            "to": _coordinate_to_dict(edge.target),
            "scope": edge.scope,
            "classifier": edge.classifier,
            "is_third_party": edge.is_third_party,
        }
        for edge in graph.edges
    ]
    return {
        "format": GRAPH_FORMAT,
        "version": GRAPH_FORMAT_VERSION,
        "source_root": source_root,
        "modules": modules,
        "edges": edges,
    }


def graph_from_dict(data: dict[str, Any]) -> Graph:
    """
    從字典重建 Graph。

    Raises:
        ValueError: 格式名稱或版本不符，或缺少必要欄位。
    """
    if not isinstance(data, dict):
        raise ValueError(f"依賴圖檔案的頂層必須是物件，實際為 {type(data).__name__}")
    if data.get("format") != GRAPH_FORMAT:
        raise ValueError(f"不是 DepInsight 依賴圖檔案 (format={data.get('format')!r})")
    if data.get("version") != GRAPH_FORMAT_VERSION:
        raise ValueError(f"不支援的依賴圖格式版本 {data.get('version')!r} (預期 {GRAPH_FORMAT_VERSION})")

    try:
        modules = tuple(
            ModuleRecord(
                coordinate=_coordinate_from_dict(raw["coordinate"]),
                dependencies=tuple(
                    Dependency(
                        coordinate=_coordinate_from_dict(dep["coordinate"]),
                        scope=dep["scope"],
                        classifier=dep.get("classifier"),
                        optional=bool(dep.get("optional", False)),
                    )
                    for dep in raw.get("dependencies", [])
                ),
                source_path=raw.get("source_path", ""),
                name=raw.get("name"),
                packaging=raw.get("packaging"),
            )
            for raw in data["modules"]
        )
        edges = tuple(
            DependencyEdge(
                source=raw["from"],
                target=_coordinate_from_dict(raw["to"]),
                scope=raw["scope"],
                classifier=raw.get("classifier"),
                is_third_party=bool(raw["is_third_party"]),
            )
            for raw in data["edges"]
        )
    except (KeyError, TypeError) as e:
        raise ValueError(f"依賴圖檔案缺少必要欄位: {e}") from e

    return Graph(modules=modules, edges=edges)


def dumps_graph(graph: Graph, source_root: str | None = None) -> str:
    """序列化 Graph；相同的圖永遠產生位元組完全相同的文字。"""
    return json.dumps(graph_to_dict(graph, source_root), sort_keys=True, indent=2, ensure_ascii=False) + "\n"


def loads_graph(text: str) -> Graph:
    """反序列化 dumps_graph 的輸出。"""
    return graph_from_dict(json.loads(text))


class GraphStore:
    """
    管理工作目錄中持久化依賴圖的類別。
    """

    def __init__(self, graph_path: Path):
        self.graph_path = graph_path

    def exists(self) -> bool:
        return self.graph_path.is_file()

    def save(self, graph: Graph, source_root: str | None = None) -> Path:
        """
        將依賴圖寫入磁碟。

        Raises:
            RenderError: 無法建立目錄或寫入檔案。
        """
        try:
            self.graph_path.parent.mkdir(parents=True, exist_ok=True)
            atomic_write_text(self.graph_path, dumps_graph(graph, source_root))
        except OSError as e:
            raise RenderError(str(self.graph_path), f"無法儲存依賴圖: {e}") from e
        logging.info(f"依賴圖已儲存至: {self.graph_path}")
        return self.graph_path

    def load(self) -> Graph:
        """
        從磁碟載入依賴圖。

        Raises:
            RenderError: 檔案不存在 (尚未執行 generate)、無法讀取或格式不相容。
        """
        if not self.exists():
            raise RenderError(str(self.graph_path), "找不到已產生的依賴圖，請先執行 'generate'")
        try:
            text = self.graph_path.read_text(encoding="utf-8")
            graph = loads_graph(text)
        except OSError as e:
            raise RenderError(str(self.graph_path), f"無法讀取依賴圖: {e}") from e
        except ValueError as e:
            raise RenderError(str(self.graph_path), f"依賴圖檔案損毀或不相容: {e}") from e

        logging.info(f"成功載入依賴圖: {len(graph.modules)} 個模組，{len(graph.edges)} 條依賴邊。")
        return graph
