# src/depinsight/reporters/markdown_reporter.py
"""
提供將依賴圖匯總為單一 Markdown 報告的功能。
"""

# 1. 標準庫導入
import itertools
import logging
from collections import defaultdict
from pathlib import Path

# 2. 第三方庫導入
import networkx as nx

# 3. 本專案導入
from depinsight.errors import RenderError
from depinsight.models import Graph
from depinsight.utils.file_system_utils import atomic_write_text

MAX_REPORTED_CYCLES = 20


def _generate_adjacency_list_text(graph: Graph) -> list[str]:
    """
    將依賴圖轉換為帶有 scope 與第三方標記的鄰接串列 Markdown 格式。
    """
    adjacency = defaultdict(list)
    for edge in graph.edges:
        marker = " *(第三方)*" if edge.is_third_party else ""
        classifier = f", {edge.classifier}" if edge.classifier else ""
        adjacency[edge.source].append(f"`{edge.target}` [{edge.scope}{classifier}]{marker}")

    lines = []
    for module in graph.modules:
        lines.append(f"- **{module.key}** (`{module.source_path}`)")
        targets = adjacency.get(module.key, [])
        if not targets:
            lines.append("  - *(無依賴)*")
        lines.extend(f"  - {target}" for target in targets)
    return lines


def _generate_third_party_text(graph: Graph) -> list[str]:
    """列出所有第三方函式庫及其使用者。"""
    dependents = defaultdict(set)
    for edge in graph.edges:
        if edge.is_third_party:
            dependents[edge.target_id].add(edge.source)

    lines = []
    for node in graph.third_party_nodes():
        versions = ", ".join(node.versions) or "未指定版本"
        users = ", ".join(f"`{source}`" for source in sorted(dependents[node.id]))
        lines.append(f"- **{node.id}** ({versions}) ← {users}")
    return lines or ["*(無第三方依賴)*"]


def find_internal_cycles(graph: Graph, limit: int = MAX_REPORTED_CYCLES) -> list[list[str]]:
    """回傳內部模組之間的循環依賴 (不含自我依賴)，最多 limit 個。"""
    internal = graph.to_networkx()
    internal.remove_nodes_from([node.id for node in graph.third_party_nodes()])
    internal.remove_edges_from(list(nx.selfloop_edges(internal)))

    cycles = []
    for cycle in itertools.islice(nx.simple_cycles(internal), limit):
        pivot = cycle.index(min(cycle))
        cycles.append(cycle[pivot:] + cycle[:pivot])
    return sorted(cycles)


def generate_markdown_report(graph: Graph, output_path: Path, title: str, filter_summary: str) -> Path:
    """
    生成依賴圖的 Markdown 報告並以原子方式寫入。

    Raises:
        RenderError: 無法寫入報告檔案。
    """
    nodes = graph.nodes()
    third_party_count = sum(1 for node in nodes if node.is_third_party)
    internal_edges = sum(1 for edge in graph.edges if not edge.is_third_party)

    report_parts = [
        f"# {title}",
        "",
        f"> 過濾條件: {filter_summary}",
        "",
        "## 摘要",
        "",
        f"- 內部模組: {len(graph.modules)}",
        f"- 第三方函式庫: {third_party_count}",
        f"- 內部依賴邊: {internal_edges}",
        f"- 第三方依賴邊: {len(graph.edges) - internal_edges}",
        "",
        "## 模組依賴",
        "",
        *_generate_adjacency_list_text(graph),
        "",
        "## 第三方函式庫",
        "",
        *_generate_third_party_text(graph),
        "",
        "## 循環依賴",
        "",
    ]

    cycles = find_internal_cycles(graph)
    if cycles:
        report_parts.extend("- " + " → ".join(f"`{node}`" for node in cycle + cycle[:1]) for cycle in cycles)
        if len(cycles) >= MAX_REPORTED_CYCLES:
            report_parts.append(f"- *(僅列出前 {MAX_REPORTED_CYCLES} 個)*")
    else:
        report_parts.append("*(未發現循環依賴)*")

    try:
        output_path.parent.mkdir(parents=True, exist_ok=True)
        atomic_write_text(output_path, "\n".join(report_parts) + "\n")
    except OSError as e:
        raise RenderError(str(output_path), f"寫入報告時發生錯誤: {e}") from e

    logging.info(f"依賴報告已成功儲存至: {output_path}")
    return output_path
