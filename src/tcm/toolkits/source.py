# Copyright 2026 Zsolt Kulcsar and Contributors. Licensed under the EUPL-1.2 or later
"""Coverage toolkit that analyzes Java source artifacts directly."""

import hashlib
import logging
import re
from pathlib import Path

from tcm.execdata import read_execution_record
from tcm.instrumentation import UNKNOWN_LINE, ClassCoverageInfo, ExecutionRecord

logger = logging.getLogger(__name__)

_COMMENT_PREFIXES = ("//", "/*", "*")
_IDENTITY_MASK = 0x7FFF_FFFF_FFFF_FFFF


class SourceArtifactToolkit:
    """Analyze source files and provide per-test execution accumulators.

    Execution data is not produced by this toolkit. When ``replay_dir`` is set,
    ``record_execution`` loads ``<replay_dir>/<test_id>.exec`` captured by an
    external instrumented run; otherwise every accumulator starts empty.
    Replayed classes keyed by an agent identity are matched on their VM name
    (``a/B``) by the recorder.
    """

    def __init__(self, replay_dir: Path | None = None) -> None:
        """Initialize toolkit.

        Args:
            replay_dir: Optional directory of pre-recorded execution data.
        """
        self._replay_dir = replay_dir

    def analyze(self, artifact_path: Path) -> list[ClassCoverageInfo]:
        """Analyze the primary type declared in a Java source file.

        Args:
            artifact_path: Java source file.

        Returns:
            One coverage info for the primary type, or an empty list when no
            matching type declaration is found.

        Raises:
            FileNotFoundError: If the artifact does not exist.
        """
        payload = artifact_path.read_bytes()
        lines = payload.decode("utf-8", errors="replace").splitlines()
        type_name = artifact_path.stem
        declaration = re.compile(
            rf"\b(class|interface|enum|record)\s+{re.escape(type_name)}\b"
        )
        package = ""
        declaration_index: int | None = None
        for index, line in enumerate(lines):
            stripped = line.strip()
            if stripped.startswith("package ") and not package:
                package = stripped[len("package ") :].replace(";", "").strip()
            if declaration.search(line):
                declaration_index = index
                break
        if declaration_index is None:
            logger.debug(f"No type declaration found (path={artifact_path})")
            return []

        first_line, last_line = _body_line_range(lines, declaration_index)
        name = f"{package}.{type_name}" if package else type_name
        return [
            ClassCoverageInfo(
                name=name,
                class_id=content_identity(payload),
                first_line=first_line,
                last_line=last_line,
            )
        ]

    def record_execution(self, test_id: str) -> ExecutionRecord:
        """Return the execution accumulator for one test.

        Args:
            test_id: Test identifier.

        Returns:
            Replayed execution data, or an empty record.
        """
        if self._replay_dir is not None:
            replay_path = self._replay_dir / f"{test_id}.exec"
            if replay_path.is_file():
                record = read_execution_record(replay_path, test_id=test_id)
                logger.debug(
                    f"Replayed execution data (test_id={test_id} classes={len(record.entries)})"
                )
                return record
        return ExecutionRecord(test_id=test_id)


def content_identity(payload: bytes) -> int:
    """Return a positive 63-bit identity for artifact content."""
    digest = hashlib.md5(payload).digest()  # noqa: S324
    return int.from_bytes(digest[:8], "big") & _IDENTITY_MASK or 1


def _body_line_range(lines: list[str], declaration_index: int) -> tuple[int, int]:
    """Return the first and last code lines inside a type body (1-based)."""
    open_index = next(
        (
            index
            for index in range(declaration_index, len(lines))
            if "{" in lines[index]
        ),
        None,
    )
    close_index = next(
        (
            index
            for index in range(len(lines) - 1, declaration_index, -1)
            if lines[index].strip().startswith("}")
        ),
        None,
    )
    if open_index is None or close_index is None:
        return UNKNOWN_LINE, UNKNOWN_LINE
    code_lines = [
        index + 1
        for index in range(open_index + 1, close_index)
        if _is_code(lines[index])
    ]
    if not code_lines:
        return UNKNOWN_LINE, UNKNOWN_LINE
    return code_lines[0], code_lines[-1]


def _is_code(line: str) -> bool:
    stripped = line.strip()
    return bool(stripped) and not stripped.startswith(_COMMENT_PREFIXES)
