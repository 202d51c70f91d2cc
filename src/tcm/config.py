# Copyright 2026 Zsolt Kulcsar and Contributors. Licensed under the EUPL-1.2 or later
"""Analysis run configuration."""

import argparse
from dataclasses import dataclass, field
from pathlib import Path

from tcm.inventory import DEFAULT_LAYOUT, SourceLayout

DEFAULT_WORKSPACE_DIR = Path("test_coverage_projects")
DEFAULT_EXEC_DIR = Path("exec-data")
DEFAULT_REPORT_PATH = Path("test_coverage.json")


@dataclass(frozen=True)
class AnalysisConfig:
    """Describe all settings of one analysis run.

    Attributes:
        workspace_dir: Directory holding working copies.
        exec_dir: Directory receiving one execution-data file per test.
        report_path: JSON report file path.
        baseline_ref: Ref reset to before each test; ``None`` uses the ref
            checked out when the working copy is opened.
        replay_dir: Optional directory of pre-recorded execution data.
        layout: Source layout convention.
    """

    workspace_dir: Path = DEFAULT_WORKSPACE_DIR
    exec_dir: Path = DEFAULT_EXEC_DIR
    report_path: Path = DEFAULT_REPORT_PATH
    baseline_ref: str | None = None
    replay_dir: Path | None = None
    layout: SourceLayout = field(default=DEFAULT_LAYOUT)

    @classmethod
    def from_args(cls, args: argparse.Namespace) -> "AnalysisConfig":
        """Build configuration from parsed CLI arguments.

        Args:
            args: Parsed CLI arguments.

        Returns:
            Analysis configuration.
        """
        return cls(
            workspace_dir=Path(args.workspace),
            exec_dir=Path(args.exec_dir),
            report_path=Path(args.output),
            baseline_ref=args.baseline_ref,
            replay_dir=Path(args.replay_dir) if args.replay_dir else None,
        )
