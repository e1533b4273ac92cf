# src/depinsight/models.py
"""
依賴圖的資料模型。

核心職責：
1. 定義座標 (group, artifact, version) 與模組記錄等不可變的值物件。
2. 定義由模組記錄與依賴邊組成的 Graph，並按需合成第三方節點。
3. 提供轉換為 networkx 圖的視圖，供版面配置與分析使用。
"""

# 1. 標準庫導入
from collections import defaultdict
from dataclasses import dataclass

# 2. 第三方庫導入
import networkx as nx

# 3. 本專案導入
# (無)

DEFAULT_SCOPE = "compile"


@dataclass(frozen=True)
class Coordinate:
    """一個模組或外部函式庫的 (group, artifact, version) 座標。"""

    group: str
    artifact: str
    version: str | None = None

    @property
    def key(self) -> str:
        """忽略版本的節點識別碼 `group:artifact`。"""
        return f"{self.group}:{self.artifact}"

    def __str__(self) -> str:
        if self.version:
            return f"{self.key}:{self.version}"
        return self.key

    @classmethod
    def parse(cls, text: str) -> "Coordinate":
        """
        解析 `group:artifact[:version]` 形式的座標字串。

        Raises:
            ValueError: 字串的段數不正確或包含空白段。
        """
        parts = [part.strip() for part in str(text).split(":")]
        if len(parts) not in (2, 3) or not all(parts):
            raise ValueError(f"無效的座標 '{text}'，預期格式為 group:artifact[:version]")
        version = parts[2] if len(parts) == 3 else None
        return cls(parts[0], parts[1], version)


@dataclass(frozen=True)
class Dependency:
    """模組描述檔中宣告的一個依賴。"""

    coordinate: Coordinate
    scope: str = DEFAULT_SCOPE
    classifier: str | None = None
    optional: bool = False


@dataclass(frozen=True)
class ModuleRecord:
    """掃描到的一個模組 (bundle)：身分座標、宣告的依賴與描述檔位置。"""

    coordinate: Coordinate
    dependencies: tuple[Dependency, ...] = ()
    source_path: str = ""
    name: str | None = None
    packaging: str | None = None

    @property
    def key(self) -> str:
        return self.coordinate.key


@dataclass(frozen=True)
class DependencyEdge:
    """從一個內部模組指向某個座標的依賴邊。"""

    source: str
    target: Coordinate
    scope: str = DEFAULT_SCOPE
    classifier: str | None = None
    is_third_party: bool = False

    @property
    def target_id(self) -> str:
        return self.target.key

    def sort_key(self) -> tuple[str, str, str, str]:
        return (self.source, str(self.target), self.scope, self.classifier or "")


@dataclass(frozen=True)
class GraphNode:
    """渲染與報告使用的節點視圖。"""

    id: str
    label: str
    is_third_party: bool
    versions: tuple[str, ...] = ()
    source_path: str | None = None
    packaging: str | None = None


@dataclass(frozen=True)
class Graph:
    """
    由模組記錄 (節點) 與依賴邊組成的不可變依賴圖。

    第三方節點不會被儲存，而是在 `nodes()` 中依 `group:artifact` 去重後合成。
    """

    modules: tuple[ModuleRecord, ...] = ()
    edges: tuple[DependencyEdge, ...] = ()

    @property
    def module_keys(self) -> frozenset[str]:
        return frozenset(module.key for module in self.modules)

    def nodes(self) -> list[GraphNode]:
        """回傳按 id 排序的節點列表：內部模組加上合成的第三方節點。"""
        nodes: dict[str, GraphNode] = {}
        for module in self.modules:
            versions = (module.coordinate.version,) if module.coordinate.version else ()
            nodes[module.key] = GraphNode(
                id=module.key,
                label=module.name or module.coordinate.artifact,
                is_third_party=False,
                versions=versions,
                source_path=module.source_path,
                packaging=module.packaging,
            )

        third_party_versions: dict[str, set[str]] = defaultdict(set)
        third_party_ids: set[str] = set()
        for edge in self.edges:
            if not edge.is_third_party:
                continue
            third_party_ids.add(edge.target_id)
            if edge.target.version:
                third_party_versions[edge.target_id].add(edge.target.version)

        for node_id in third_party_ids:
            if node_id in nodes:
                continue
            nodes[node_id] = GraphNode(
                id=node_id,
                label=node_id,
                is_third_party=True,
                versions=tuple(sorted(third_party_versions[node_id])),
            )

        return [nodes[node_id] for node_id in sorted(nodes)]

    def third_party_nodes(self) -> list[GraphNode]:
        return [node for node in self.nodes() if node.is_third_party]

    def to_networkx(self) -> nx.DiGraph:
        """
        轉換為 networkx 有向圖。同一對節點之間的多條邊 (不同 scope/classifier)
        會合併，其 scope 收集在邊屬性 `scopes` 中。
        """
        graph = nx.DiGraph()
        for node in self.nodes():
            graph.add_node(node.id, label=node.label, is_third_party=node.is_third_party)
        for edge in self.edges:
            if graph.has_edge(edge.source, edge.target_id):
                graph.edges[edge.source, edge.target_id]["scopes"].add(edge.scope)
            else:
                graph.add_edge(edge.source, edge.target_id, scopes={edge.scope})
        return graph
