# Copyright 2026 Zsolt Kulcsar and Contributors. Licensed under the EUPL-1.2 or later
"""Per-test coverage recording."""

import logging
import time
from pathlib import Path

from tcm.execdata import write_execution_record
from tcm.instrumentation import ClassCoverageInfo, CoverageToolkit, ExecutionRecord
from tcm.inventory import ClassSource
from tcm.model import CoverageEntry
from tcm.vcs import WorkingCopy

logger = logging.getLogger(__name__)


class CoverageRecorder:
    """Record covered locations for every test, one test at a time.

    The recorder does not execute tests. It resets the working copy, asks the
    toolkit for the test's execution accumulator, analyzes every class
    artifact and reports the lines of classes the accumulator holds execution
    data for. Without a toolkit that supplies execution data, entries are
    empty.
    """

    def __init__(
        self,
        repository: WorkingCopy,
        toolkit: CoverageToolkit,
        exec_dir: Path,
        baseline_ref: str,
    ) -> None:
        """Initialize recorder.

        Args:
            repository: Working copy reset before each test.
            toolkit: Instrumentation and analysis facility.
            exec_dir: Directory receiving one execution-data file per test.
            baseline_ref: Ref the working copy is reset to before each test.
        """
        self._repository = repository
        self._toolkit = toolkit
        self._exec_dir = exec_dir
        self._baseline_ref = baseline_ref

    def record(
        self, classes: list[ClassSource], test_ids: list[str]
    ) -> list[CoverageEntry]:
        """Record coverage entries for all tests.

        Args:
            classes: Inventoried classes with the artifacts they came from.
            test_ids: Test identifiers, processed in order.

        Returns:
            One entry per processed test, in processing order.

        Raises:
            GitError: If the working copy cannot be reset.
            InstrumentationError: If analysis fails for a reason other than a
                missing artifact.
            OSError: If execution data cannot be written.
        """
        self._exec_dir.mkdir(parents=True, exist_ok=True)
        entries: list[CoverageEntry] = []
        for position, test_id in enumerate(test_ids, start=1):
            started = time.monotonic()
            entry = self.record_test(test_id=test_id, classes=classes)
            entries.append(entry)
            elapsed_ms = int(round((time.monotonic() - started) * 1000))
            logger.info(
                f"Recorded test coverage (test_id={test_id} progress={position}/{len(test_ids)} "
                f"locations={len(entry.locations)} elapsed_ms={elapsed_ms})"
            )
        return entries

    def record_test(self, test_id: str, classes: list[ClassSource]) -> CoverageEntry:
        """Reset, analyze and persist execution data for one test.

        Args:
            test_id: Test identifier.
            classes: Inventoried classes with the artifacts they came from.

        Returns:
            Coverage entry of the test.
        """
        self._repository.reset_to_baseline(self._baseline_ref)
        record = self._toolkit.record_execution(test_id)

        matched: list[ClassCoverageInfo] = []
        for source in classes:
            try:
                infos = self._toolkit.analyze(source.path)
            except FileNotFoundError as exc:
                logger.warning(
                    f"Skipping class without source artifact (class_id={source.identifier} error={exc})"
                )
                continue
            matched.extend(info for info in infos if info.name == source.identifier)

        known_ids = frozenset(info.class_id for info in matched)
        locations: list[str] = []
        for info in matched:
            locations.extend(covered_lines(info, record, known_ids))

        write_execution_record(record, self._exec_dir / f"{test_id}.exec", append=True)
        return CoverageEntry(test_id=test_id, locations=tuple(locations))


def covered_lines(
    info: ClassCoverageInfo,
    record: ExecutionRecord,
    known_ids: frozenset[int] = frozenset(),
) -> list[str]:
    """Return ``name#line`` locations of a class with recorded execution.

    Execution data is looked up by the class identity first. Data keyed by a
    foreign identity, as written by an external agent, is matched on the class
    name instead and counts when at least one probe was hit. Data keyed by the
    identity of another analyzed artifact is never matched by name.

    Args:
        info: Analyzed class metadata.
        record: Execution accumulator of the current test.
        known_ids: Identities of every artifact analyzed for the test.

    Returns:
        Every line of the class range when the record holds execution data for
        the class; otherwise an empty list.
    """
    if not info.has_lines:
        return []
    data = record.get(info.class_id)
    if data is not None:
        executed = data.id > 0
    else:
        data = record.find_by_name(info.name, exclude=known_ids)
        executed = data is not None and any(data.probes)
    if not executed:
        return []
    return [f"{info.name}#{line}" for line in range(info.first_line, info.last_line + 1)]
