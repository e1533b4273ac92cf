"""
資料模型的單元測試。
"""

import pytest

from depinsight.models import Coordinate, DependencyEdge, Graph, ModuleRecord


class TestCoordinate:
    def test_parse_with_version(self):
        coordinate = Coordinate.parse("com.foo:bar:1.0")
        assert coordinate == Coordinate("com.foo", "bar", "1.0")
        assert coordinate.key == "com.foo:bar"
        assert str(coordinate) == "com.foo:bar:1.0"

    def test_parse_without_version(self):
        coordinate = Coordinate.parse("com.foo:bar")
        assert coordinate.version is None
        assert str(coordinate) == "com.foo:bar"

    @pytest.mark.parametrize("text", ["bar", "com.foo::1.0", "a:b:c:d", ""])
    def test_parse_rejects_malformed(self, text):
        with pytest.raises(ValueError):
            Coordinate.parse(text)


class TestGraphNodes:
    def test_third_party_nodes_are_deduplicated_by_group_and_artifact(self):
        modules = (
            ModuleRecord(Coordinate("com.example", "a", "1.0")),
            ModuleRecord(Coordinate("com.example", "b", "1.0")),
        )
        edges = (
            DependencyEdge("com.example:a", Coordinate("com.foo", "bar", "1.0"), is_third_party=True),
            DependencyEdge("com.example:b", Coordinate("com.foo", "bar", "2.0"), is_third_party=True),
        )
        graph = Graph(modules=modules, edges=edges)

        third_party = graph.third_party_nodes()
        assert [node.id for node in third_party] == ["com.foo:bar"]
        assert third_party[0].versions == ("1.0", "2.0")
        assert [node.id for node in graph.nodes()] == ["com.example:a", "com.example:b", "com.foo:bar"]

    def test_internal_node_label_prefers_module_name(self):
        graph = Graph(modules=(ModuleRecord(Coordinate("g", "core", "1"), name="Core API"),))
        assert graph.nodes()[0].label == "Core API"

    def test_to_networkx_merges_parallel_edges(self):
        modules = (ModuleRecord(Coordinate("g", "a", "1")), ModuleRecord(Coordinate("g", "b", "1")))
        edges = (
            DependencyEdge("g:a", Coordinate("g", "b", "1"), scope="compile"),
            DependencyEdge("g:a", Coordinate("g", "b", "1"), scope="test", classifier="tests"),
        )
        nx_graph = Graph(modules=modules, edges=edges).to_networkx()
        assert nx_graph.number_of_edges() == 1
        assert nx_graph.edges["g:a", "g:b"]["scopes"] == {"compile", "test"}
