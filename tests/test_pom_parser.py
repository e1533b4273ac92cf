"""
pom.xml 解析與繼承解析的單元測試。
"""

from pathlib import Path

import pytest
from conftest import dep, write_pom

from depinsight.errors import ScanError
from depinsight.models import Coordinate
from depinsight.parsers.pom_parser import parse_pom, resolve_poms


def _parse(path: Path):
    return parse_pom(path, path.parent.name + "/pom.xml")


def test_parse_pom_reads_identity_and_dependencies(tmp_path):
    path = write_pom(
        tmp_path / "core",
        "core",
        packaging="bundle",
        name="Core",
        dependencies=[dep("com.foo", "bar", "1.0", "test", classifier="tests", optional="true")],
    )
    model = _parse(path)

    [module] = resolve_poms([model])
    assert module.coordinate == Coordinate("com.example", "core", "1.0.0")
    assert module.packaging == "bundle"
    assert module.name == "Core"
    [dependency] = module.dependencies
    assert dependency.coordinate == Coordinate("com.foo", "bar", "1.0")
    assert dependency.scope == "test"
    assert dependency.classifier == "tests"
    assert dependency.optional is True


def test_defaults_scope_and_packaging(tmp_path):
    path = write_pom(tmp_path / "core", "core", dependencies=[dep("com.foo", "bar")])
    [module] = resolve_poms([_parse(path)])
    assert module.packaging == "jar"
    assert module.dependencies[0].scope == "compile"
    assert module.dependencies[0].coordinate.version is None


def test_inherits_group_version_and_properties_from_parent(tmp_path):
    parent_path = write_pom(
        tmp_path / "root", "parent", group="org.acme", version="3.1", properties={"lib.version": "9.9"}
    )
    child_path = write_pom(
        tmp_path / "child",
        "child",
        group=None,
        version=None,
        parent=("org.acme", "parent", "3.1"),
        dependencies=[
            dep("org.lib", "lib", "${lib.version}"),
            dep("${project.groupId}", "sibling", "${project.version}"),
        ],
    )

    modules = {m.coordinate.artifact: m for m in resolve_poms([_parse(parent_path), _parse(child_path)])}
    child = modules["child"]
    assert child.coordinate == Coordinate("org.acme", "child", "3.1")
    assert [str(d.coordinate) for d in child.dependencies] == ["org.lib:lib:9.9", "org.acme:sibling:3.1"]


def test_child_properties_override_parent(tmp_path):
    parent_path = write_pom(tmp_path / "root", "parent", properties={"lib.version": "1"})
    child_path = write_pom(
        tmp_path / "child",
        "child",
        parent=("com.example", "parent", "1.0.0"),
        properties={"lib.version": "2"},
        dependencies=[dep("org.lib", "lib", "${lib.version}")],
    )
    modules = {m.coordinate.artifact: m for m in resolve_poms([_parse(parent_path), _parse(child_path)])}
    assert modules["child"].dependencies[0].coordinate.version == "2"


def test_unresolved_version_placeholder_is_kept(tmp_path):
    path = write_pom(tmp_path / "core", "core", dependencies=[dep("org.lib", "lib", "${missing.version}")])
    [module] = resolve_poms([_parse(path)])
    assert module.dependencies[0].coordinate.version == "${missing.version}"


def test_unresolved_group_placeholder_fails(tmp_path):
    path = write_pom(tmp_path / "core", "core", dependencies=[dep("${unknown.group}", "lib", "1")])
    with pytest.raises(ScanError, match="unknown.group"):
        resolve_poms([_parse(path)])


def test_missing_artifact_id_fails(tmp_path):
    path = tmp_path / "pom.xml"
    path.write_text("<project><groupId>g</groupId><version>1</version></project>", encoding="utf-8")
    with pytest.raises(ScanError, match="artifactId") as exc_info:
        parse_pom(path, "pom.xml")
    assert exc_info.value.path == "pom.xml"


def test_missing_version_without_parent_fails(tmp_path):
    path = write_pom(tmp_path / "core", "core", version=None)
    with pytest.raises(ScanError, match="version"):
        resolve_poms([_parse(path)])


def test_malformed_xml_fails(tmp_path):
    path = tmp_path / "pom.xml"
    path.write_text("<project><artifactId>oops</project>", encoding="utf-8")
    with pytest.raises(ScanError, match="XML"):
        parse_pom(path, "pom.xml")


def test_entity_declarations_are_rejected(tmp_path):
    path = tmp_path / "pom.xml"
    path.write_text(
        '<?xml version="1.0"?>\n'
        '<!DOCTYPE project [<!ENTITY boom "boom">]>\n'
        "<project><groupId>g</groupId><artifactId>&boom;</artifactId><version>1</version></project>",
        encoding="utf-8",
    )
    with pytest.raises(ScanError):
        parse_pom(path, "pom.xml")


def test_dependency_management_is_ignored(tmp_path):
    path = tmp_path / "pom.xml"
    path.write_text(
        "<project><groupId>g</groupId><artifactId>a</artifactId><version>1</version>"
        "<dependencyManagement><dependencies><dependency><groupId>x</groupId><artifactId>y</artifactId>"
        "</dependency></dependencies></dependencyManagement></project>",
        encoding="utf-8",
    )
    [module] = resolve_poms([parse_pom(path, "pom.xml")])
    assert module.dependencies == ()
