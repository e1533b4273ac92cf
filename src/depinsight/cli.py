# src/depinsight/cli.py
"""
DepInsight 命令列介面。

兩個子命令：
- generate <pathToSource> [--log]：掃描來源樹並保存依賴資料。
- render [--third-party]：將最近一次產生的依賴資料渲染為 graphs/viz.html。
"""

# 1. 標準庫導入
import argparse
import logging
import os
from dataclasses import dataclass, field
from pathlib import Path

# 2. 第三方庫導入
# (無)

# 3. 本專案導入
from depinsight.core.project_processor import ProjectProcessor
from depinsight.errors import ConfigError, DepInsightError
from depinsight.utils.logging_utils import configure_logging

EXIT_OK = 0
EXIT_FAILURE = 1
EXIT_USAGE = 2
EXIT_INTERRUPTED = 130

HOME_ENV_VAR = "DEPINSIGHT_HOME"


@dataclass(frozen=True)
class GenerateCommand:
    path: Path
    verbose: bool = False
    workers: int | None = None


@dataclass(frozen=True)
class RenderCommand:
    include_third_party: bool | None = None
    scopes: list[str] = field(default_factory=list)
    exclude_nodes: list[str] = field(default_factory=list)
    report: bool | None = None
    verbose: bool = False


def _positive_int(value: str) -> int:
    number = int(value)
    if number < 1:
        raise argparse.ArgumentTypeError(f"必須是正整數: {value}")
    return number


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="depinsight",
        description="掃描多模組建置原始碼樹，並將模組依賴圖渲染為可在瀏覽器開啟的檔案。",
    )
    parser.add_argument(
        "--workdir",
        type=Path,
        default=None,
        help=f"工作目錄，輸出寫入 <workdir>/graphs/。預設為 ${HOME_ENV_VAR} 或目前目錄。",
    )
    parser.add_argument("--config", type=Path, default=None, help="設定檔路徑，預設為 <workdir>/depinsight.yaml。")
    subparsers = parser.add_subparsers(dest="command", required=True)

    generate = subparsers.add_parser("generate", help="掃描來源樹並產生依賴資料。")
    generate.add_argument("path", type=Path, help="多模組建置原始碼樹的根目錄 (例如 DDF 的根 pom 所在目錄)。")
    generate.add_argument("-l", "--log", action="store_true", help="提高日誌等級以輸出詳細資訊。")
    generate.add_argument("--workers", type=_positive_int, default=None, help="平行解析的工作程序數。")

    render = subparsers.add_parser("render", help="將依賴資料渲染為 graphs/viz.html。")
    render.add_argument(
        "-t",
        "--third-party",
        dest="include_third_party",
        action="store_true",
        default=None,
        help="在圖中包含第三方依賴 (預設不包含)。",
    )
    render.add_argument("--scope", dest="scopes", action="append", default=[], help="只保留指定 scope 的依賴，可重複。")
    render.add_argument(
        "--exclude", dest="exclude_nodes", action="append", default=[], help="排除符合模式的節點，支援 * 萬用字元，可重複。"
    )
    render.add_argument("--report", action="store_true", default=None, help="同時輸出 Markdown 依賴報告。")
    render.add_argument("-l", "--log", action="store_true", help="提高日誌等級以輸出詳細資訊。")
    return parser


def parse_command(args: argparse.Namespace) -> GenerateCommand | RenderCommand:
    """將解析後的命令列參數轉換為命令物件。"""
    if args.command == "generate":
        return GenerateCommand(path=args.path, verbose=args.log, workers=args.workers)
    return RenderCommand(
        include_third_party=args.include_third_party,
        scopes=args.scopes,
        exclude_nodes=args.exclude_nodes,
        report=args.report,
        verbose=args.log,
    )


def run_command(command: GenerateCommand | RenderCommand, processor: ProjectProcessor):
    """依命令類型分派到對應的處理流程。"""
    if isinstance(command, GenerateCommand):
        processor.generate(command.path, max_workers=command.workers)
    elif isinstance(command, RenderCommand):
        spec = processor.filter_spec(command.include_third_party, command.scopes, command.exclude_nodes)
        output_path = processor.render(spec, report=command.report)
        print(f"依賴圖已輸出至: {output_path}")
    else:
        raise TypeError(f"未知的命令類型: {type(command).__name__}")


def resolve_workdir(workdir: Path | None) -> Path:
    if workdir is not None:
        return workdir
    return Path(os.environ.get(HOME_ENV_VAR) or Path.cwd())


def main(argv: list[str] | None = None) -> int:
    """命令列主函式，回傳結束代碼。"""
    parser = build_parser()
    args = parser.parse_args(argv)
    command = parse_command(args)
    configure_logging(command.verbose)

    try:
        processor = ProjectProcessor(resolve_workdir(args.workdir), args.config)
        run_command(command, processor)
    except ConfigError as e:
        logging.error(f"設定檔錯誤: {e}")
        return EXIT_USAGE
    except DepInsightError as e:
        logging.error(f"{type(e).__name__}: {e}")
        return EXIT_FAILURE
    except KeyboardInterrupt:
        logging.error("作業已被中斷，未寫入任何不完整的輸出。")
        return EXIT_INTERRUPTED

    return EXIT_OK
