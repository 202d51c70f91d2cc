# Copyright 2026 Zsolt Kulcsar and Contributors. Licensed under the EUPL-1.2 or later
"""CLI harness mapping a repository's tests to the code they cover."""

import argparse
import logging
import sys
import time
from typing import Callable, TextIO, TypeVar

from rich.console import Console
from rich.logging import RichHandler

from tcm.aggregator import aggregate
from tcm.config import (
    DEFAULT_EXEC_DIR,
    DEFAULT_REPORT_PATH,
    DEFAULT_WORKSPACE_DIR,
    AnalysisConfig,
)
from tcm.extractor import MethodExtractor
from tcm.extractors import JavaMethodExtractor, JavaTestMethodExtractor
from tcm.instrumentation import CoverageToolkit, InstrumentationError
from tcm.inventory import scan_class_sources
from tcm.persistence import PersistenceError, ReportPersistence
from tcm.recorder import CoverageRecorder
from tcm.reports import JsonFilePersistence, render_json
from tcm.toolkits import SourceArtifactToolkit
from tcm.vcs import GitError, GitRepository

logger = logging.getLogger(__name__)

USAGE = "Usage: tcm <git_repo_directory>"

T = TypeVar("T")


def configure_logging(level: int = logging.INFO) -> None:
    """Configure application logging with Rich handler.

    Args:
        level: Logging severity threshold.
    """
    logging.basicConfig(
        level=level,
        format="%(message)s",
        handlers=[RichHandler(rich_tracebacks=True, show_path=False)],
    )


def build_parser() -> argparse.ArgumentParser:
    """Build the CLI parser.

    Returns:
        Configured argument parser instance.
    """
    parser = argparse.ArgumentParser(prog="tcm")
    parser.add_argument(
        "repository", nargs="*", help="Git repository URL or local path."
    )
    parser.add_argument(
        "--workspace",
        default=str(DEFAULT_WORKSPACE_DIR),
        help="Directory receiving the working copy.",
    )
    parser.add_argument(
        "--exec-dir",
        default=str(DEFAULT_EXEC_DIR),
        help="Directory receiving one execution-data file per test.",
    )
    parser.add_argument(
        "--output",
        default=str(DEFAULT_REPORT_PATH),
        help="JSON report file path.",
    )
    parser.add_argument(
        "--baseline-ref",
        required=False,
        help="Ref reset to before each test. Defaults to the checked-out branch.",
    )
    parser.add_argument(
        "--replay-dir",
        required=False,
        help="Directory of pre-recorded <test>.exec execution data.",
    )
    parser.add_argument(
        "--verbose", action="store_true", help="Enable debug logging."
    )
    return parser


def run(
    argv: list[str],
    stdout: TextIO,
    stderr: TextIO,
    toolkit: CoverageToolkit | None = None,
) -> int:
    """Run the coverage mapping command.

    Args:
        argv: CLI arguments.
        stdout: Standard output stream.
        stderr: Standard error stream.
        toolkit: Optional coverage toolkit; defaults to source analysis.

    Returns:
        Exit code.
    """
    parser = build_parser()
    try:
        args = parser.parse_args(argv)
    except SystemExit:
        logger.warning(f"Argument parsing failed (argv={argv})")
        return 2

    console = Console(
        file=stdout, force_terminal=False, color_system="truecolor", emoji=False
    )
    if len(args.repository) != 1:
        console.print(USAGE, markup=False, highlight=False)
        return 0
    if args.verbose:
        logging.getLogger().setLevel(logging.DEBUG)

    config = AnalysisConfig.from_args(args)
    url = args.repository[0]
    try:
        _run_analysis(
            url=url,
            config=config,
            toolkit=toolkit or SourceArtifactToolkit(replay_dir=config.replay_dir),
            console=console,
        )
    except (GitError, InstrumentationError, PersistenceError, OSError) as exc:
        logger.exception(f"Analysis failed (repository={url} error={exc})")
        stderr.write(f"Analysis failed: {exc}\n")
        return 1
    return 0


def _run_analysis(
    url: str,
    config: AnalysisConfig,
    toolkit: CoverageToolkit,
    console: Console,
) -> None:
    """Run all analysis steps and persist the report.

    Args:
        url: Repository URL or local path.
        config: Analysis configuration.
        toolkit: Coverage toolkit used by the recorder.
        console: Console bound to standard output.
    """
    repository = GitRepository.acquire(url, config.workspace_dir)
    baseline_ref = config.baseline_ref or repository.current_ref()
    root = repository.root
    logger.info(f"Analyzing repository (path={root} baseline_ref={baseline_ref})")

    test_extractor: MethodExtractor = JavaTestMethodExtractor(config.layout)
    method_extractor: MethodExtractor = JavaMethodExtractor(config.layout)
    persistence: ReportPersistence = JsonFilePersistence(config.report_path)

    class_sources = _timed(
        console,
        1,
        "Get class names",
        lambda: scan_class_sources(root, config.layout),
    )
    class_ids = [source.identifier for source in class_sources]
    test_methods = _timed(
        console, 2, "Get test method names", lambda: test_extractor.extract(root)
    )
    methods = _timed(
        console, 3, "Count main method names", lambda: method_extractor.extract(root)
    )
    recorder = CoverageRecorder(
        repository=repository,
        toolkit=toolkit,
        exec_dir=config.exec_dir,
        baseline_ref=baseline_ref,
    )
    entries = _timed(
        console,
        4,
        "Analyze test coverage",
        lambda: recorder.record(class_sources, test_methods),
    )
    report = aggregate(
        location=str(root),
        class_ids=class_ids,
        methods=methods,
        test_methods=test_methods,
        entries=entries,
    )

    _timed(
        console,
        5,
        "Create JSON result",
        lambda: console.print(
            render_json(report), markup=False, highlight=False, soft_wrap=True
        ),
    )
    written = _timed(
        console,
        6,
        "Save the JSON result to a file",
        lambda: persistence.write(report),
    )
    logger.info(
        f"Report written (output_path={written} tests={len(report.coverage)})"
    )


def _timed(console: Console, step: int, label: str, action: Callable[[], T]) -> T:
    """Run one analysis step and print its execution time."""
    started = time.monotonic()
    result = action()
    elapsed_ms = int(round((time.monotonic() - started) * 1000))
    console.print(
        f"Step {step} ({label}) Execution Time: {elapsed_ms} ms",
        markup=False,
        highlight=False,
    )
    return result


def main() -> None:
    """Run the CLI application and exit."""
    configure_logging()
    exit_code = run(sys.argv[1:], stdout=sys.stdout, stderr=sys.stderr)
    raise SystemExit(exit_code)


if __name__ == "__main__":
    main()
