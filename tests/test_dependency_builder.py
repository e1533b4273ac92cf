"""
依賴圖建構器的單元測試。
"""

from depinsight.builders.dependency_builder import build_graph
from depinsight.core.graph_store import dumps_graph
from depinsight.models import Coordinate, Dependency, ModuleRecord
from depinsight.parsers.module_scanner import scan_modules


def _module(artifact: str, *deps: Dependency, version: str = "1.0") -> ModuleRecord:
    return ModuleRecord(Coordinate("com.example", artifact, version), dependencies=deps)


def test_two_internal_modules(two_module_tree):
    graph = build_graph(scan_modules(two_module_tree, max_workers=1))

    assert len(graph.nodes()) == 2
    assert len(graph.edges) == 1
    assert graph.third_party_nodes() == []
    [edge] = graph.edges
    assert (edge.source, edge.target_id, edge.scope, edge.is_third_party) == (
        "com.example:a",
        "com.example:b",
        "compile",
        False,
    )


def test_external_dependency_is_third_party(third_party_tree):
    graph = build_graph(scan_modules(third_party_tree, max_workers=1))

    assert [node.id for node in graph.nodes()] == ["com.example:a", "com.foo:bar"]
    [edge] = graph.edges
    assert edge.is_third_party
    assert str(edge.target) == "com.foo:bar:1.0"


def test_internal_match_ignores_version():
    api = _module("api", version="2.0-SNAPSHOT")
    impl = _module("impl", Dependency(Coordinate("com.example", "api", "1.9")))
    graph = build_graph([impl, api])

    [edge] = graph.edges
    assert not edge.is_third_party
    assert [node.id for node in graph.nodes()] == ["com.example:api", "com.example:impl"]


def test_third_party_node_shared_by_many_modules():
    guava = Coordinate("com.google.guava", "guava", "31.1")
    graph = build_graph([_module("a", Dependency(guava)), _module("b", Dependency(guava)), _module("c")])

    assert len(graph.edges) == 2
    assert [node.id for node in graph.third_party_nodes()] == ["com.google.guava:guava"]


def test_duplicate_declarations_collapse_into_one_edge():
    target = Coordinate("com.foo", "bar", "1.0")
    graph = build_graph([_module("a", Dependency(target), Dependency(target))])
    assert len(graph.edges) == 1


def test_distinct_scopes_produce_distinct_edges():
    target = Coordinate("com.foo", "bar", "1.0")
    graph = build_graph([_module("a", Dependency(target, scope="compile"), Dependency(target, scope="test"))])
    assert [edge.scope for edge in graph.edges] == ["compile", "test"]


def test_every_edge_source_is_an_internal_node(ddf_like_tree):
    graph = build_graph(scan_modules(ddf_like_tree, max_workers=1))
    assert {edge.source for edge in graph.edges} <= graph.module_keys
    assert all(edge.is_third_party == (edge.target_id not in graph.module_keys) for edge in graph.edges)


def test_build_is_deterministic_regardless_of_input_order(ddf_like_tree):
    modules = scan_modules(ddf_like_tree, max_workers=1)
    first = build_graph(modules)
    second = build_graph(list(reversed(modules)))

    assert first == second
    assert dumps_graph(first) == dumps_graph(second)
