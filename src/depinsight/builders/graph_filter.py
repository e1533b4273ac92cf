# src/depinsight/builders/graph_filter.py
"""
過濾引擎：依據 FilterSpec 產生依賴圖的過濾視圖，不修改原始圖。
"""

# 1. 標準庫導入
import fnmatch
import logging
from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from typing import Any

# 2. 第三方庫導入
# (無)

# 3. 本專案導入
from depinsight.errors import FilterError
from depinsight.models import DependencyEdge, Graph


@dataclass(frozen=True)
class FilterSpec:
    """
    一次渲染所使用的過濾設定。

    Attributes:
        include_third_party: 是否保留第三方依賴。
        scopes: 只保留這些 scope 的依賴邊；None 表示不限制。
        exclude_nodes: 節點 id 或標籤的排除模式，支援 * 萬用字元。
    """

    include_third_party: bool = True
    scopes: frozenset[str] | None = None
    exclude_nodes: tuple[str, ...] = ()

    @property
    def is_identity(self) -> bool:
        return self.include_third_party and self.scopes is None and not self.exclude_nodes

    @classmethod
    def from_options(cls, options: Mapping[str, Any]) -> "FilterSpec":
        """
        從原始選項映射建立 FilterSpec，並驗證每個選項。

        Raises:
            FilterError: 未知的選項名稱，或選項值的型別錯誤。
        """
        known = {"include_third_party", "scopes", "exclude_nodes"}
        for key in options:
            if key not in known:
                raise FilterError(str(key), f"未知的過濾選項，可用選項為: {', '.join(sorted(known))}")

        include_third_party = options.get("include_third_party", True)
        if not isinstance(include_third_party, bool):
            raise FilterError("include_third_party", f"必須是布林值，實際為 {include_third_party!r}")

        scopes = _string_list(options.get("scopes"), "scopes")
        exclude_nodes = _string_list(options.get("exclude_nodes"), "exclude_nodes")

        return cls(
            include_third_party=include_third_party,
            scopes=frozenset(scopes) if scopes else None,
            exclude_nodes=tuple(exclude_nodes),
        )

    def describe(self) -> str:
        """回傳人類可讀的過濾摘要。"""
        parts = ["包含第三方依賴" if self.include_third_party else "不含第三方依賴"]
        if self.scopes is not None:
            parts.append(f"scope: {', '.join(sorted(self.scopes))}")
        if self.exclude_nodes:
            parts.append(f"排除: {', '.join(self.exclude_nodes)}")
        return "; ".join(parts)


def _string_list(value: Any, option: str) -> list[str]:
    if value is None:
        return []
    if isinstance(value, str):
        value = [value]
    if not isinstance(value, Iterable) or not all(isinstance(item, str) and item for item in value):
        raise FilterError(option, f"必須是非空字串的列表，實際為 {value!r}")
    return list(value)


def _is_excluded(node_id: str, label: str, patterns: tuple[str, ...]) -> bool:
    return any(fnmatch.fnmatchcase(node_id, p) or fnmatch.fnmatchcase(label, p) for p in patterns)


def filter_graph(graph: Graph, spec: FilterSpec) -> Graph:
    """
    回傳套用過濾設定後的新圖。

    不含第三方依賴時，所有第三方邊被移除，第三方節點隨之消失；
    內部模組即使失去所有邊仍會保留 (除非被 exclude_nodes 排除)。
    """
    if spec.is_identity:
        return graph

    excluded_ids = {
        node.id for node in graph.nodes() if _is_excluded(node.id, node.label, spec.exclude_nodes)
    }
    modules = tuple(module for module in graph.modules if module.key not in excluded_ids)

    def keep(edge: DependencyEdge) -> bool:
        if edge.source in excluded_ids or edge.target_id in excluded_ids:
            return False
        if edge.is_third_party and not spec.include_third_party:
            return False
        return spec.scopes is None or edge.scope in spec.scopes

    edges = tuple(edge for edge in graph.edges if keep(edge))
    logging.info(
        f"過濾完成 ({spec.describe()})：保留 {len(modules)}/{len(graph.modules)} 個模組，"
        f"{len(edges)}/{len(graph.edges)} 條依賴邊。"
    )
    return Graph(modules=modules, edges=edges)
