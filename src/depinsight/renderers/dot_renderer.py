# src/depinsight/renderers/dot_renderer.py
"""
封裝依賴圖的 Graphviz 渲染邏輯。

提供 DOT 原始碼生成 (純 Python，不需要 Graphviz 執行檔)，
以及在 Graphviz 可用時渲染 SVG 靜態檢視。
"""

# 1. 標準庫導入
import logging

# 2. 第三方庫導入
import graphviz

# 3. 本專案導入
from depinsight.models import Graph
from depinsight.utils.color_utils import get_analogous_dark_color

THIRD_PARTY_FILL = "#FFFFFF"
THIRD_PARTY_BORDER = "#888888"


def _label(*lines: str) -> str:
    """組合多行 DOT 標籤，並停用反斜線與 <...> 的特殊意義。"""
    return graphviz.nohtml("\\n".join(line.replace("\\", "\\\\") for line in lines))


def generate_dot_source(graph: Graph, title: str, group_colors: dict[str, str]) -> str:
    """
    生成依賴圖的 DOT 原始碼。

    節點 id 含有冒號，而 DOT 會把冒號解讀為 port，因此節點以序號命名，
    實際的座標放在標籤與 tooltip 中。
    """
    dot = graphviz.Digraph("DependencyGraph")
    dot.attr(
        label=_label(title, "A -> B 表示 A 依賴 B"),
        labelloc="t",
        rankdir="TB",
        charset="UTF-8",
        nodesep="0.6",
        ranksep="1.0",
        fontname="Microsoft YaHei",
    )
    dot.attr("node", shape="box", style="rounded,filled", fontname="Microsoft YaHei", fontsize="11")
    dot.attr("edge", color="gray50", arrowsize="0.7", fontsize="9")

    node_names: dict[str, str] = {}
    modules_by_key = {module.key: module for module in graph.modules}
    for index, node in enumerate(graph.nodes()):
        name = f"n{index}"
        node_names[node.id] = name
        if node.is_third_party:
            dot.node(
                name,
                label=_label(node.label),
                tooltip=_label(node.id),
                fillcolor=THIRD_PARTY_FILL,
                color=THIRD_PARTY_BORDER,
                style="filled,dashed",
            )
        else:
            fill = group_colors.get(modules_by_key[node.id].coordinate.group, "#E6F7FF")
            dot.node(
                name,
                label=_label(node.label, node.id),
                tooltip=_label(node.source_path or node.id),
                fillcolor=fill,
                color=get_analogous_dark_color(fill),
            )

    seen: set[tuple[str, str, str]] = set()
    for edge in graph.edges:
        key = (edge.source, edge.target_id, edge.scope)
        if key in seen or edge.target_id not in node_names:
            continue
        seen.add(key)
        attrs = {}
        if edge.scope != "compile":
            attrs["label"] = _label(edge.scope)
            attrs["style"] = "dashed"
        dot.edge(node_names[edge.source], node_names[edge.target_id], **attrs)

    return dot.source


def render_svg(dot_source: str, layout_engine: str = "dot") -> str | None:
    """
    使用 Graphviz 將 DOT 原始碼渲染為 SVG 文字。

    Returns:
        SVG 文字 (已去除 XML 宣告)；Graphviz 不可用或執行失敗時回傳 None。
    """
    try:
        svg = graphviz.Source(dot_source, engine=layout_engine).pipe(format="svg", encoding="utf-8")
    except graphviz.ExecutableNotFound:
        logging.warning(f"Graphviz 執行檔 '{layout_engine}' 未找到，將略過 SVG 靜態檢視。")
        return None
    except graphviz.CalledProcessError as e:
        logging.warning(f"Graphviz ({layout_engine}) 執行時返回錯誤，將略過 SVG 靜態檢視: {e}")
        return None

    start = svg.find("<svg")
    return svg[start:] if start >= 0 else svg
