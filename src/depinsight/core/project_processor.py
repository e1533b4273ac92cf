# src/depinsight/core/project_processor.py
"""
DepInsight 的核心處理引擎。

將掃描、建構、持久化、過濾、渲染與報告等子系統串連為 `generate` 與 `render` 兩個階段。
"""

# 1. 標準庫導入
import logging
from pathlib import Path

# 2. 第三方庫導入
# (無)

# 3. 本專案導入
from depinsight.builders.dependency_builder import build_graph
from depinsight.builders.graph_filter import FilterSpec, filter_graph
from depinsight.core.config_loader import CONFIG_FILENAME, ConfigLoader
from depinsight.core.graph_store import GraphStore
from depinsight.models import Graph
from depinsight.parsers.module_scanner import scan_modules
from depinsight.renderers.html_renderer import RenderOptions, render
from depinsight.reporters.markdown_reporter import generate_markdown_report


class ProjectProcessor:
    """一個處理單一工作目錄中 generate/render 流程的類別。"""

    def __init__(self, workdir: Path, config_path: Path | None = None):
        self.workdir = workdir.resolve()
        self.config_loader = ConfigLoader(config_path or self.workdir / CONFIG_FILENAME)
        self.config = self.config_loader.config
        self.output_dir = self.config_loader.output_dir(self.workdir)
        self.graph_store = GraphStore(self.output_dir / self.config.get("graph_file", "graph.json"))

    @property
    def viz_path(self) -> Path:
        return self.output_dir / self.config.get("viz_file", "viz.html")

    @property
    def report_path(self) -> Path:
        return self.output_dir / self.config.get("report_file", "deps_report.md")

    def generate(self, source_root: Path, max_workers: int | None = None) -> Graph:
        """
        掃描來源樹、建構依賴圖並持久化。掃描失敗時不會寫入任何檔案。

        Raises:
            ScanError: 來源路徑無效或描述檔無法解析。
            RenderError: 依賴圖無法寫入磁碟。
        """
        scan_settings = self.config_loader.scan_settings
        logging.info(f"========== 開始產生依賴資料: {source_root} ==========")

        modules = scan_modules(
            source_root,
            descriptor_names=scan_settings.get("descriptors"),
            exclude_dirs=scan_settings.get("exclude_dirs"),
            max_workers=max_workers or scan_settings.get("max_workers"),
        )
        graph = build_graph(modules)
        self.graph_store.save(graph, str(Path(source_root).resolve()))

        logging.info("========== 依賴資料產生完成 ==========")
        return graph

    def filter_spec(
        self,
        include_third_party: bool | None = None,
        scopes: list[str] | None = None,
        exclude_nodes: list[str] | None = None,
    ) -> FilterSpec:
        """
        合併設定檔與命令列選項，建立 FilterSpec。命令列選項優先。

        Raises:
            FilterError: 任一過濾選項無效。
        """
        render_settings = self.config_loader.render_settings
        options = dict(render_settings.get("filtering", {}))
        options["include_third_party"] = (
            include_third_party
            if include_third_party is not None
            else render_settings.get("include_third_party", False)
        )
        if scopes:
            options["scopes"] = scopes
        if exclude_nodes:
            options["exclude_nodes"] = list(options.get("exclude_nodes") or []) + list(exclude_nodes)
        return FilterSpec.from_options(options)

    def render(self, spec: FilterSpec, report: bool | None = None) -> Path:
        """
        載入最近一次產生的依賴圖，套用過濾並渲染 viz.html。

        Raises:
            RenderError: 沒有已產生的依賴圖，或輸出無法寫入。
        """
        render_settings = self.config_loader.render_settings
        logging.info(f"========== 開始渲染依賴圖 ({spec.describe()}) ==========")

        graph = self.graph_store.load()
        filtered = filter_graph(graph, spec)
        options = RenderOptions.from_settings(render_settings, subtitle=spec.describe())
        output_path = render(filtered, self.viz_path, options)

        write_report = render_settings.get("report", False) if report is None else report
        if write_report:
            generate_markdown_report(filtered, self.report_path, options.title, spec.describe())

        logging.info("========== 依賴圖渲染完成 ==========")
        return output_path
