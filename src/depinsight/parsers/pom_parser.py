# src/depinsight/parsers/pom_parser.py
"""
提供 Maven pom.xml 模組描述檔的解析功能。

解析分為兩個階段：
1. `parse_pom`：逐檔解析，彼此獨立，可在工作程序中平行執行。
2. `resolve_poms`：在所有檔案解析完成後，沿著 <parent> 鏈繼承 groupId/version，
   並展開 ${...} 屬性佔位符，產生最終的 ModuleRecord。
"""

# 1. 標準庫導入
import logging
import re
from dataclasses import dataclass, field
from pathlib import Path

# 2. 第三方庫導入
import defusedxml
from defusedxml import ElementTree

# 3. 本專案導入
from depinsight.errors import ScanError
from depinsight.models import DEFAULT_SCOPE, Coordinate, Dependency, ModuleRecord

POM_FILENAME = "pom.xml"
PLACEHOLDER_PATTERN = re.compile(r"\$\{([^}]+)\}")
MAX_RESOLVE_PASSES = 10


@dataclass
class PomModel:
    """單一 pom.xml 的原始內容，佔位符尚未展開。"""

    source_path: str
    artifact_id: str
    group_id: str | None = None
    version: str | None = None
    packaging: str | None = None
    name: str | None = None
    parent: Coordinate | None = None
    properties: dict[str, str] = field(default_factory=dict)
    dependencies: list[dict[str, str | None]] = field(default_factory=list)


def _local_name(tag: str) -> str:
    return tag.rsplit("}", 1)[-1]


def _child(element, name: str):
    for child in element:
        if isinstance(child.tag, str) and _local_name(child.tag) == name:
            return child
    return None


def _child_text(element, name: str) -> str | None:
    child = _child(element, name)
    if child is None or child.text is None:
        return None
    text = child.text.strip()
    return text or None


def parse_pom(path: Path, source_path: str) -> PomModel:
    """
    解析單一 pom.xml。

    Args:
        path: pom.xml 的絕對路徑。
        source_path: 相對於掃描根目錄的路徑，用於記錄與錯誤訊息。

    Raises:
        ScanError: 檔案無法讀取、XML 格式錯誤，或缺少必要的身分欄位。
    """
    logging.debug(f"正在解析 POM: {source_path}")
    try:
        tree = ElementTree.parse(path)
    except OSError as e:
        raise ScanError(source_path, f"無法讀取描述檔: {e}") from e
    except ElementTree.ParseError as e:
        raise ScanError(source_path, f"XML 格式錯誤: {e}") from e
    except defusedxml.DefusedXmlException as e:
        raise ScanError(source_path, f"描述檔包含不安全的 XML 結構: {e}") from e

    project = tree.getroot()
    if _local_name(project.tag) != "project":
        raise ScanError(source_path, f"根元素應為 <project>，實際為 <{_local_name(project.tag)}>")

    artifact_id = _child_text(project, "artifactId")
    if not artifact_id:
        raise ScanError(source_path, "缺少必要的身分欄位 <artifactId>")

    parent = None
    parent_element = _child(project, "parent")
    if parent_element is not None:
        parent_group = _child_text(parent_element, "groupId")
        parent_artifact = _child_text(parent_element, "artifactId")
        if not parent_group or not parent_artifact:
            raise ScanError(source_path, "<parent> 缺少 <groupId> 或 <artifactId>")
        parent = Coordinate(parent_group, parent_artifact, _child_text(parent_element, "version"))

    properties: dict[str, str] = {}
    properties_element = _child(project, "properties")
    if properties_element is not None:
        for prop in properties_element:
            if isinstance(prop.tag, str):
                properties[_local_name(prop.tag)] = (prop.text or "").strip()

    dependencies: list[dict[str, str | None]] = []
    dependencies_element = _child(project, "dependencies")
    if dependencies_element is not None:
        for index, dep in enumerate(dependencies_element):
            if not isinstance(dep.tag, str) or _local_name(dep.tag) != "dependency":
                continue
            group = _child_text(dep, "groupId")
            artifact = _child_text(dep, "artifactId")
            if not group or not artifact:
                raise ScanError(source_path, f"第 {index + 1} 個 <dependency> 缺少 <groupId> 或 <artifactId>")
            dependencies.append(
                {
                    "group": group,
                    "artifact": artifact,
                    "version": _child_text(dep, "version"),
                    "scope": _child_text(dep, "scope"),
                    "classifier": _child_text(dep, "classifier"),
                    "optional": _child_text(dep, "optional"),
                }
            )

    return PomModel(
        source_path=source_path,
        artifact_id=artifact_id,
        group_id=_child_text(project, "groupId"),
        version=_child_text(project, "version"),
        packaging=_child_text(project, "packaging"),
        name=_child_text(project, "name"),
        parent=parent,
        properties=properties,
        dependencies=dependencies,
    )


def _expand(text: str | None, properties: dict[str, str]) -> str | None:
    """以屬性表展開佔位符；無法展開的佔位符保持原樣。"""
    if text is None:
        return None
    for _ in range(MAX_RESOLVE_PASSES):
        expanded = PLACEHOLDER_PATTERN.sub(lambda m: properties.get(m.group(1), m.group(0)), text)
        if expanded == text:
            break
        text = expanded
    return text


class _PomResolver:
    """沿著掃描範圍內的 <parent> 鏈解析繼承欄位與屬性。"""

    def __init__(self, models: list[PomModel]):
        self.models = models
        self.by_key: dict[str, PomModel] = {}
        for model in models:
            group = model.group_id or (model.parent.group if model.parent else None)
            if group:
                self.by_key.setdefault(f"{group}:{model.artifact_id}", model)
        self._property_cache: dict[str, dict[str, str]] = {}

    def _parent_model(self, model: PomModel) -> PomModel | None:
        if model.parent is None:
            return None
        return self.by_key.get(model.parent.key)

    def properties(self, model: PomModel, seen: frozenset[str] = frozenset()) -> dict[str, str]:
        """回傳模型的有效屬性表：父 POM 的屬性、內建屬性，再以自身屬性覆寫。"""
        if model.source_path in self._property_cache:
            return self._property_cache[model.source_path]

        inherited: dict[str, str] = {}
        parent_model = self._parent_model(model)
        if parent_model is not None and parent_model.source_path not in seen:
            inherited = dict(self.properties(parent_model, seen | {model.source_path}))

        group = model.group_id or (model.parent.group if model.parent else None)
        version = model.version or (model.parent.version if model.parent else None)
        builtins: dict[str, str] = {"project.artifactId": model.artifact_id, "artifactId": model.artifact_id}
        if group:
            builtins.update({"project.groupId": group, "groupId": group})
        if version:
            builtins.update({"project.version": version, "version": version})
        if model.packaging:
            builtins["project.packaging"] = model.packaging
        if model.parent is not None:
            builtins["project.parent.groupId"] = model.parent.group
            builtins["project.parent.artifactId"] = model.parent.artifact
            if model.parent.version:
                builtins["project.parent.version"] = model.parent.version
        for key in list(builtins):
            if key.startswith("project."):
                builtins["pom." + key.removeprefix("project.")] = builtins[key]

        resolved = {**inherited, **builtins, **model.properties}
        self._property_cache[model.source_path] = resolved
        return resolved

    def resolve(self, model: PomModel) -> ModuleRecord:
        properties = self.properties(model)
        group = _expand(model.group_id or (model.parent.group if model.parent else None), properties)
        version = _expand(model.version or (model.parent.version if model.parent else None), properties)
        artifact = _expand(model.artifact_id, properties)

        if not group:
            raise ScanError(model.source_path, "缺少必要的身分欄位 <groupId>，且沒有可繼承的 <parent>")
        if not version:
            raise ScanError(model.source_path, "缺少必要的身分欄位 <version>，且沒有可繼承的 <parent>")
        _require_resolved(model.source_path, "groupId", group)
        _require_resolved(model.source_path, "artifactId", artifact)

        dependencies = []
        for raw in model.dependencies:
            dep_group = _expand(raw["group"], properties)
            dep_artifact = _expand(raw["artifact"], properties)
            _require_resolved(model.source_path, "dependency groupId", dep_group)
            _require_resolved(model.source_path, "dependency artifactId", dep_artifact)
            dependencies.append(
                Dependency(
                    coordinate=Coordinate(dep_group, dep_artifact, _expand(raw["version"], properties)),
                    scope=_expand(raw["scope"], properties) or DEFAULT_SCOPE,
                    classifier=_expand(raw["classifier"], properties),
                    optional=(_expand(raw["optional"], properties) or "").lower() == "true",
                )
            )

        return ModuleRecord(
            coordinate=Coordinate(group, artifact, version),
            dependencies=tuple(dependencies),
            source_path=model.source_path,
            name=_expand(model.name, properties),
            packaging=_expand(model.packaging, properties) or "jar",
        )


def _require_resolved(source_path: str, field_name: str, value: str | None):
    if not value or PLACEHOLDER_PATTERN.search(value):
        raise ScanError(source_path, f"無法解析的座標欄位 {field_name}: '{value}'")


def resolve_poms(models: list[PomModel]) -> list[ModuleRecord]:
    """
    將所有 POM 模型解析為 ModuleRecord。

    Raises:
        ScanError: 任一模組的身分欄位或依賴座標無法解析。
    """
    resolver = _PomResolver(models)
    return [resolver.resolve(model) for model in models]
