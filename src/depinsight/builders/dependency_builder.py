# src/depinsight/builders/dependency_builder.py
"""
提供模組依賴圖的建構邏輯。
"""
# 1. 標準庫導入
import logging
from collections.abc import Iterable

# 2. 第三方庫導入
# (無)

# 3. 本專案導入
from depinsight.models import DependencyEdge, Graph, ModuleRecord


def build_graph(modules: Iterable[ModuleRecord]) -> Graph:
    """
    將掃描出的模組記錄轉換為依賴圖。

    每個宣告的依賴產生一條邊；目標座標以 group:artifact 比對已掃描的模組
    (忽略版本)，比對不到的即為第三方依賴。節點與邊皆按座標字串排序，
    相同的輸入永遠產生相同的圖。
    """
    sorted_modules = sorted(modules, key=lambda module: str(module.coordinate))
    internal_keys = {module.key for module in sorted_modules}

    edges: set[DependencyEdge] = set()
    for module in sorted_modules:
        for dep in module.dependencies:
            edges.add(
                DependencyEdge(
                    source=module.key,
                    target=dep.coordinate,
                    scope=dep.scope,
                    classifier=dep.classifier,
                    is_third_party=dep.coordinate.key not in internal_keys,
                )
            )

    graph = Graph(
        modules=tuple(sorted_modules),
        edges=tuple(sorted(edges, key=DependencyEdge.sort_key)),
    )

    third_party_count = len(graph.third_party_nodes())
    internal_edge_count = sum(1 for edge in graph.edges if not edge.is_third_party)
    logging.info(
        f"依賴圖建構完成：共 {len(sorted_modules)} 個內部模組節點、{third_party_count} 個第三方節點，"
        f"{internal_edge_count} 條內部依賴邊、{len(graph.edges) - internal_edge_count} 條第三方依賴邊。"
    )
    return graph
