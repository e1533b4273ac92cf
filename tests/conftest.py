"""
測試共用的輔助函式與 fixtures：在暫存目錄中建立小型的多模組原始碼樹。
"""

from pathlib import Path

import pytest
import yaml

POM_NAMESPACE = "http://maven.apache.org/POM/4.0.0"


def write_pom(
    directory: Path,
    artifact: str,
    group: str | None = "com.example",
    version: str | None = "1.0.0",
    dependencies: list[dict] | None = None,
    parent: tuple[str, str, str] | None = None,
    properties: dict[str, str] | None = None,
    packaging: str | None = None,
    name: str | None = None,
) -> Path:
    """寫入一個最小的 pom.xml，並回傳其路徑。"""
    directory.mkdir(parents=True, exist_ok=True)
    parts = [f'<project xmlns="{POM_NAMESPACE}">', "  <modelVersion>4.0.0</modelVersion>"]
    if parent:
        parts.append(
            f"  <parent><groupId>{parent[0]}</groupId><artifactId>{parent[1]}</artifactId>"
            f"<version>{parent[2]}</version></parent>"
        )
    if group:
        parts.append(f"  <groupId>{group}</groupId>")
    parts.append(f"  <artifactId>{artifact}</artifactId>")
    if version:
        parts.append(f"  <version>{version}</version>")
    if packaging:
        parts.append(f"  <packaging>{packaging}</packaging>")
    if name:
        parts.append(f"  <name>{name}</name>")
    if properties:
        parts.append("  <properties>")
        parts.extend(f"    <{key}>{value}</{key}>" for key, value in properties.items())
        parts.append("  </properties>")
    if dependencies:
        parts.append("  <dependencies>")
        for dep in dependencies:
            parts.append("    <dependency>")
            for key in ("groupId", "artifactId", "version", "scope", "classifier", "optional"):
                if dep.get(key) is not None:
                    parts.append(f"      <{key}>{dep[key]}</{key}>")
            parts.append("    </dependency>")
        parts.append("  </dependencies>")
    parts.append("</project>")

    path = directory / "pom.xml"
    path.write_text("\n".join(parts) + "\n", encoding="utf-8")
    return path


def write_module_yaml(directory: Path, data: dict) -> Path:
    """寫入一個 module.yaml 描述檔，並回傳其路徑。"""
    directory.mkdir(parents=True, exist_ok=True)
    path = directory / "module.yaml"
    path.write_text(yaml.safe_dump(data, sort_keys=False), encoding="utf-8")
    return path


def dep(group: str, artifact: str, version: str | None = None, scope: str | None = None, **extra) -> dict:
    return {"groupId": group, "artifactId": artifact, "version": version, "scope": scope, **extra}


@pytest.fixture
def two_module_tree(tmp_path: Path) -> Path:
    """模組 A (以 compile scope 依賴 B) 與沒有依賴的模組 B。"""
    root = tmp_path / "source"
    write_pom(root / "a", "a", dependencies=[dep("com.example", "b", "1.0.0", "compile")])
    write_pom(root / "b", "b")
    return root


@pytest.fixture
def third_party_tree(tmp_path: Path) -> Path:
    """模組 A 依賴外部座標 com.foo:bar:1.0。"""
    root = tmp_path / "source"
    write_pom(root / "a", "a", dependencies=[dep("com.foo", "bar", "1.0")])
    return root


@pytest.fixture
def ddf_like_tree(tmp_path_factory: pytest.TempPathFactory) -> Path:
    """
    一個類似 DDF 的多模組樹：根 POM 定義屬性，子模組透過 <parent> 繼承 groupId/version。
    """
    root = tmp_path_factory.mktemp("ddf_tree") / "ddf"
    write_pom(
        root,
        "ddf",
        group="ddf",
        version="2.26.0-SNAPSHOT",
        packaging="pom",
        properties={"guava.version": "31.1-jre", "slf4j.version": "1.7.36"},
    )
    parent = ("ddf", "ddf", "2.26.0-SNAPSHOT")
    write_pom(
        root / "catalog" / "core",
        "catalog-core-api",
        group="ddf.catalog.core",
        version=None,
        parent=parent,
        packaging="bundle",
        dependencies=[
            dep("com.google.guava", "guava", "${guava.version}"),
            dep("org.slf4j", "slf4j-api", "${slf4j.version}"),
            dep("junit", "junit", "4.13.2", "test"),
        ],
    )
    write_pom(
        root / "catalog" / "impl",
        "catalog-core-impl",
        group="ddf.catalog.core",
        version=None,
        parent=parent,
        packaging="bundle",
        dependencies=[
            dep("ddf.catalog.core", "catalog-core-api", "${project.version}"),
            dep("com.google.guava", "guava", "${guava.version}"),
        ],
    )
    write_pom(
        root / "platform" / "security",
        "security-core",
        group=None,
        version=None,
        parent=parent,
        dependencies=[dep("${project.groupId}", "ddf-common", "1.0.0")],
    )
    # 建置輸出目錄中的描述檔必須被略過
    write_pom(root / "catalog" / "core" / "target" / "classes", "should-not-be-scanned")
    return root
