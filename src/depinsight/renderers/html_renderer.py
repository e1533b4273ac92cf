# src/depinsight/renderers/html_renderer.py
"""
將依賴圖渲染為可直接在瀏覽器開啟的自包含 HTML 檔案 (viz.html)。

頁面內嵌圖形資料 (JSON) 與檢視器 (HTML/CSS/JS)，不需要網路或伺服器。
節點座標由 networkx 在 Python 端以分層版面計算，檢視器只負責繪製與互動。
"""

# 1. 標準庫導入
import html
import json
import logging
import re
from dataclasses import dataclass
from pathlib import Path
from typing import Any

# 2. 第三方庫導入
import networkx as nx

# 3. 本專案導入
from depinsight.errors import RenderError
from depinsight.models import Graph
from depinsight.renderers.dot_renderer import THIRD_PARTY_BORDER, THIRD_PARTY_FILL, generate_dot_source, render_svg
from depinsight.utils.color_utils import generate_color_palette, get_analogous_dark_color
from depinsight.utils.file_system_utils import atomic_write_text

MARGIN = 40
MAX_NODES_PER_ROW = 12
NODE_WIDTH = 170
NODE_HEIGHT = 38

_SCRIPT_ESCAPES = {
    "<": "\\u003c",
    ">": "\\u003e",
    "&": "\\u0026",
    "\u2028": "\\u2028",
    "\u2029": "\\u2029",
}
_PLACEHOLDER = re.compile(r"__(TITLE|SUBTITLE|STATIC_VIEW|GRAPH_DATA)__")


@dataclass(frozen=True)
class RenderOptions:
    """一次渲染的呈現設定。"""

    title: str = "Dependency Graph"
    subtitle: str = ""
    x_spacing: int = 190
    y_spacing: int = 120
    layout_engine: str = "dot"
    embed_svg: bool = False
    save_source_file: bool = False

    @classmethod
    def from_settings(cls, render_settings: dict[str, Any], subtitle: str = "") -> "RenderOptions":
        layout = render_settings.get("layout", {})
        return cls(
            title=str(render_settings.get("title", cls.title)),
            subtitle=subtitle,
            x_spacing=int(layout.get("x_spacing", cls.x_spacing)),
            y_spacing=int(layout.get("y_spacing", cls.y_spacing)),
            layout_engine=str(render_settings.get("layout_engine", cls.layout_engine)),
            embed_svg=bool(render_settings.get("embed_svg", False)),
            save_source_file=bool(render_settings.get("save_source_file", False)),
        )


def assign_group_colors(graph: Graph) -> dict[str, str]:
    """依 group 為內部模組分配固定的顏色。"""
    groups = sorted({module.coordinate.group for module in graph.modules})
    return dict(zip(groups, generate_color_palette(len(groups)), strict=True))


def compute_layered_layout(graph: Graph, x_spacing: int = 190, y_spacing: int = 120) -> dict[str, tuple[int, int]]:
    """
    計算分層版面：依賴者在上、被依賴者在下。

    強連通分量 (循環依賴) 先被縮合為單一節點，使任何圖都能拓撲分層；
    過寬的層會換行，每列最多 MAX_NODES_PER_ROW 個節點。
    """
    nx_graph = graph.to_networkx()
    condensed = nx.condensation(nx_graph)

    positions: dict[str, tuple[int, int]] = {}
    row = 0
    for generation in nx.topological_generations(condensed):
        members = sorted(member for scc in generation for member in condensed.nodes[scc]["members"])
        for start in range(0, len(members), MAX_NODES_PER_ROW):
            for column, node_id in enumerate(members[start : start + MAX_NODES_PER_ROW]):
                positions[node_id] = (MARGIN + column * x_spacing, MARGIN + row * y_spacing)
            row += 1
    return positions


def build_render_document(graph: Graph, options: RenderOptions, group_colors: dict[str, str]) -> dict[str, Any]:
    """建立嵌入檢視器的圖形描述：節點 {id, label, isThirdParty, ...} 與邊 {from, to, scope}。"""
    positions = compute_layered_layout(graph, options.x_spacing, options.y_spacing)
    modules_by_key = {module.key: module for module in graph.modules}

    nodes = []
    for node in graph.nodes():
        if node.is_third_party:
            color, border = THIRD_PARTY_FILL, THIRD_PARTY_BORDER
        else:
            color = group_colors.get(modules_by_key[node.id].coordinate.group, "#E6F7FF")
            border = get_analogous_dark_color(color)
        x, y = positions[node.id]
        nodes.append(
            {
                "id": node.id,
                "label": node.label,
                "isThirdParty": node.is_third_party,
                "versions": list(node.versions),
                "sourcePath": node.source_path,
                "packaging": node.packaging,
                "color": color,
                "borderColor": border,
                "x": x,
                "y": y,
            }
        )

    edges = sorted({(edge.source, edge.target_id, edge.scope) for edge in graph.edges})
    return {
        "title": options.title,
        "subtitle": options.subtitle,
        "nodeSize": {"width": NODE_WIDTH, "height": NODE_HEIGHT},
        "nodes": nodes,
        "edges": [{"from": source, "to": target, "scope": scope} for source, target, scope in edges],
    }


def _json_for_script(data: dict[str, Any]) -> str:
    """序列化為可安全放入 <script> 區塊的 JSON。"""
    text = json.dumps(data, sort_keys=True, ensure_ascii=False)
    return re.sub("[<>&\u2028\u2029]", lambda m: _SCRIPT_ESCAPES[m.group(0)], text)


def generate_html(graph: Graph, options: RenderOptions | None = None, static_svg: str | None = None) -> str:
    """生成完整的 HTML 文件文字。"""
    options = options or RenderOptions()
    document = build_render_document(graph, options, assign_group_colors(graph))

    static_view = ""
    if static_svg:
        static_view = f'<section id="static-view"><h2>Graphviz 靜態檢視</h2>{static_svg}</section>'

    values = {
        "TITLE": html.escape(options.title),
        "SUBTITLE": html.escape(options.subtitle),
        "STATIC_VIEW": static_view,
        "GRAPH_DATA": _json_for_script(document),
    }
    return _PLACEHOLDER.sub(lambda m: values[m.group(1)], HTML_TEMPLATE)


def render(graph: Graph, output_path: Path, options: RenderOptions | None = None) -> Path:
    """
    將依賴圖渲染為 HTML 並以原子方式寫入 output_path。

    Raises:
        RenderError: 無法建立輸出目錄或寫入檔案。
    """
    options = options or RenderOptions()
    output_dir = output_path.parent
    try:
        output_dir.mkdir(parents=True, exist_ok=True)
    except OSError as e:
        raise RenderError(str(output_dir), f"無法建立輸出目錄: {e}") from e

    static_svg = None
    if options.embed_svg or options.save_source_file:
        dot_source = generate_dot_source(graph, options.title, assign_group_colors(graph))
        if options.save_source_file:
            source_path = output_path.with_suffix(".dot")
            try:
                atomic_write_text(source_path, dot_source)
            except OSError as e:
                raise RenderError(str(source_path), f"無法寫入 DOT 原始檔: {e}") from e
            logging.info(f"DOT 原始檔已儲存至: {source_path}")
        if options.embed_svg:
            static_svg = render_svg(dot_source, options.layout_engine)

    content = generate_html(graph, options, static_svg)
    logging.info(f"準備將依賴圖渲染至: {output_path}")
    try:
        atomic_write_text(output_path, content)
    except OSError as e:
        raise RenderError(str(output_path), f"無法寫入輸出檔案: {e}") from e

    logging.info(f"依賴圖已成功儲存至: {output_path} ({len(graph.nodes())} 個節點，{len(graph.edges)} 條邊)")
    return output_path


HTML_TEMPLATE = """<!DOCTYPE html>
<html lang="zh-Hant">
<head>
<meta charset="UTF-8">
<meta name="viewport" content="width=device-width, initial-scale=1.0">
<title>__TITLE__</title>
<style>
  body { margin: 0; font-family: -apple-system, "Segoe UI", "Microsoft YaHei", sans-serif; color: #222; }
  header { padding: 12px 20px; border-bottom: 1px solid #ddd; background: #fafafa; }
  header h1 { margin: 0; font-size: 20px; }
  header .subtitle { margin: 4px 0 8px; color: #666; font-size: 13px; }
  .controls { display: flex; gap: 16px; align-items: center; font-size: 13px; }
  .controls input[type=search] { width: 260px; padding: 4px 8px; }
  main { display: flex; height: calc(100vh - 110px); }
  #canvas { flex: 1; overflow: auto; }
  aside { width: 320px; border-left: 1px solid #ddd; padding: 12px; overflow: auto; font-size: 13px; }
  aside h2 { font-size: 15px; margin: 0 0 8px; word-break: break-all; }
  aside ul { padding-left: 18px; }
  .node rect { stroke-width: 1.5; }
  .node.third-party rect { stroke-dasharray: 4 3; }
  .node text { font-size: 12px; pointer-events: none; }
  .node { cursor: pointer; }
  .edge { stroke: #999; stroke-width: 1.2; fill: none; }
  .dim { opacity: 0.15; }
  .selected rect { stroke-width: 3; }
  .highlight { stroke: #d9480f; stroke-width: 2.2; }
  .hidden { display: none; }
  #static-view { padding: 12px 20px; border-top: 1px solid #ddd; overflow: auto; }
</style>
</head>
<body>
<header>
  <h1>__TITLE__</h1>
  <p class="subtitle">__SUBTITLE__</p>
  <div class="controls">
    <input id="search" type="search" placeholder="搜尋模組...">
    <label><input id="toggle-third-party" type="checkbox" checked> 顯示第三方依賴</label>
    <span id="stats"></span>
  </div>
</header>
<main>
  <div id="canvas">
    <svg id="graph" xmlns="http://www.w3.org/2000/svg">
      <defs>
        <marker id="arrow" viewBox="0 0 10 10" refX="10" refY="5" markerWidth="7" markerHeight="7" orient="auto">
          <path d="M0,0 L10,5 L0,10 z" fill="#999"></path>
        </marker>
      </defs>
      <g id="edges"></g>
      <g id="nodes"></g>
    </svg>
  </div>
  <aside id="details"><p>點擊節點以檢視其依賴關係。</p></aside>
</main>
__STATIC_VIEW__
<script type="application/json" id="graph-data">__GRAPH_DATA__</script>
<script>
(function () {
  "use strict";
  var data = JSON.parse(document.getElementById("graph-data").textContent);
  var NS = "http://www.w3.org/2000/svg";
  var W = data.nodeSize.width, H = data.nodeSize.height;
  var svg = document.getElementById("graph");
  var edgeLayer = document.getElementById("edges");
  var nodeLayer = document.getElementById("nodes");
  var details = document.getElementById("details");
  var byId = {};
  var nodeEls = {};
  var edgeEls = [];
  var selected = null;

  function el(name, attrs) {
    var e = document.createElementNS(NS, name);
    Object.keys(attrs || {}).forEach(function (k) { e.setAttribute(k, attrs[k]); });
    return e;
  }

  var maxX = 0, maxY = 0;
  data.nodes.forEach(function (n) {
    byId[n.id] = n;
    maxX = Math.max(maxX, n.x + W);
    maxY = Math.max(maxY, n.y + H);
  });
  svg.setAttribute("width", maxX + 40);
  svg.setAttribute("height", maxY + 40);

  data.edges.forEach(function (e) {
    var a = byId[e.from], b = byId[e.to];
    if (!a || !b) { return; }
    var x1 = a.x + W / 2, x2 = b.x + W / 2, y1, y2;
    if (b.y > a.y) { y1 = a.y + H; y2 = b.y; }
    else if (b.y < a.y) { y1 = a.y; y2 = b.y + H; }
    else { y1 = a.y + H / 2; y2 = b.y + H / 2; x1 = a.x + (b.x > a.x ? W : 0); x2 = b.x + (b.x > a.x ? 0 : W); }
    var line = el("line", { x1: x1, y1: y1, x2: x2, y2: y2, "class": "edge", "marker-end": "url(#arrow)" });
    if (e.scope !== "compile") { line.setAttribute("stroke-dasharray", "5 3"); }
    var title = el("title");
    title.textContent = e.from + " \\u2192 " + e.to + " (" + e.scope + ")";
    line.appendChild(title);
    edgeLayer.appendChild(line);
    edgeEls.push({ el: line, edge: e, thirdParty: b.isThirdParty });
  });

  data.nodes.forEach(function (n) {
    var g = el("g", { "class": "node" + (n.isThirdParty ? " third-party" : ""), transform: "translate(" + n.x + "," + n.y + ")" });
    g.appendChild(el("rect", { width: W, height: H, rx: 6, fill: n.color, stroke: n.borderColor }));
    var text = el("text", { x: 8, y: H / 2 + 4 });
    text.textContent = n.label.length > 24 ? n.label.slice(0, 23) + "\\u2026" : n.label;
    g.appendChild(text);
    var title = el("title");
    title.textContent = n.id + (n.versions.length ? " (" + n.versions.join(", ") + ")" : "");
    g.appendChild(title);
    g.addEventListener("click", function () { select(n.id); });
    nodeLayer.appendChild(g);
    nodeEls[n.id] = g;
  });

  function list(titleText, ids) {
    var frag = document.createDocumentFragment();
    var h = document.createElement("h3");
    h.textContent = titleText + " (" + ids.length + ")";
    frag.appendChild(h);
    var ul = document.createElement("ul");
    ids.forEach(function (item) {
      var li = document.createElement("li");
      li.textContent = item;
      ul.appendChild(li);
    });
    frag.appendChild(ul);
    return frag;
  }

  function select(id) {
    selected = selected === id ? null : id;
    Object.keys(nodeEls).forEach(function (k) { nodeEls[k].classList.remove("selected"); });
    edgeEls.forEach(function (item) { item.el.classList.remove("highlight"); });
    details.textContent = "";
    if (!selected) {
      var p = document.createElement("p");
      p.textContent = "點擊節點以檢視其依賴關係。";
      details.appendChild(p);
      return;
    }
    var n = byId[selected];
    nodeEls[selected].classList.add("selected");
    var deps = [], dependents = [];
    edgeEls.forEach(function (item) {
      if (item.edge.from === selected) { deps.push(item.edge.to + " [" + item.edge.scope + "]"); item.el.classList.add("highlight"); }
      if (item.edge.to === selected) { dependents.push(item.edge.from + " [" + item.edge.scope + "]"); item.el.classList.add("highlight"); }
    });
    var h = document.createElement("h2");
    h.textContent = n.id;
    details.appendChild(h);
    var meta = document.createElement("p");
    meta.textContent = (n.isThirdParty ? "第三方依賴" : "內部模組") +
      (n.versions.length ? " \\u00b7 " + n.versions.join(", ") : "") +
      (n.sourcePath ? " \\u00b7 " + n.sourcePath : "");
    details.appendChild(meta);
    details.appendChild(list("依賴", deps));
    details.appendChild(list("被依賴", dependents));
  }

  function applyFilters() {
    var query = document.getElementById("search").value.trim().toLowerCase();
    var showThirdParty = document.getElementById("toggle-third-party").checked;
    var visible = 0;
    data.nodes.forEach(function (n) {
      var hidden = n.isThirdParty && !showThirdParty;
      nodeEls[n.id].classList.toggle("hidden", hidden);
      var match = !query || n.id.toLowerCase().indexOf(query) >= 0 || n.label.toLowerCase().indexOf(query) >= 0;
      nodeEls[n.id].classList.toggle("dim", !match);
      if (!hidden) { visible += 1; }
    });
    edgeEls.forEach(function (item) { item.el.classList.toggle("hidden", item.thirdParty && !showThirdParty); });
    document.getElementById("stats").textContent = visible + " 個節點 / " + data.edges.length + " 條邊";
  }

  document.getElementById("search").addEventListener("input", applyFilters);
  document.getElementById("toggle-third-party").addEventListener("change", applyFilters);
  applyFilters();
})();
</script>
</body>
</html>
"""
