# Copyright 2026 Zsolt Kulcsar and Contributors. Licensed under the EUPL-1.2 or later
"""Instrumentation capability contract and execution-data model."""

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Protocol

logger = logging.getLogger(__name__)

UNKNOWN_LINE = -1


class InstrumentationError(RuntimeError):
    """Represent a fatal instrumentation or analysis failure."""


@dataclass(frozen=True)
class ClassCoverageInfo:
    """Represent structural coverage metadata of one analyzed class.

    Attributes:
        name: Dotted class identifier of the analyzed type.
        class_id: Positive identity of the analyzed artifact.
        first_line: First line of code (1-based), or ``UNKNOWN_LINE``.
        last_line: Last line of code (1-based), or ``UNKNOWN_LINE``.
    """

    name: str
    class_id: int
    first_line: int = UNKNOWN_LINE
    last_line: int = UNKNOWN_LINE

    @property
    def has_lines(self) -> bool:
        """Return ``True`` when the line range is known."""
        return self.first_line > 0 and self.last_line >= self.first_line


@dataclass(frozen=True)
class SessionInfo:
    """Describe one recorded execution session."""

    id: str
    start: int
    dump: int


@dataclass(frozen=True)
class ExecutionData:
    """Represent probe hits recorded for one class identity."""

    id: int
    name: str
    probes: tuple[bool, ...] = ()

    def merge(self, other: "ExecutionData") -> "ExecutionData":
        """Combine probe hits of the same class.

        Args:
            other: Execution data recorded for the same class identity.

        Returns:
            Execution data with probes OR-ed together.

        Raises:
            InstrumentationError: If identity, name or probe count differ.
        """
        if other.id != self.id or other.name != self.name:
            raise InstrumentationError(
                f"Incompatible execution data for class id {self.id}: "
                f"{self.name} vs {other.name}"
            )
        if len(other.probes) != len(self.probes):
            raise InstrumentationError(
                f"Probe count mismatch for {self.name}: "
                f"{len(self.probes)} vs {len(other.probes)}"
            )
        return ExecutionData(
            id=self.id,
            name=self.name,
            probes=tuple(a or b for a, b in zip(self.probes, other.probes)),
        )


@dataclass
class ExecutionRecord:
    """Accumulate raw execution data for one test.

    Attributes:
        test_id: Test identifier the record belongs to.
        sessions: Recorded sessions in arrival order.
        entries: Execution data keyed by class identity.
    """

    test_id: str
    sessions: list[SessionInfo] = field(default_factory=list)
    entries: dict[int, ExecutionData] = field(default_factory=dict)

    def get(self, class_id: int) -> ExecutionData | None:
        """Return execution data for a class identity, if any."""
        return self.entries.get(class_id)

    def find_by_name(
        self, name: str, exclude: frozenset[int] = frozenset()
    ) -> ExecutionData | None:
        """Return execution data recorded under a dotted or VM class name.

        Args:
            name: Dotted class name.
            exclude: Class identities to skip.

        Returns:
            The first matching execution data, if any.
        """
        for data in self.entries.values():
            if data.id not in exclude and data.name.replace("/", ".") == name:
                return data
        return None

    def put(self, data: ExecutionData) -> None:
        """Add execution data, merging with data already held for the class."""
        existing = self.entries.get(data.id)
        self.entries[data.id] = data if existing is None else existing.merge(data)

    def add_session(self, session: SessionInfo) -> None:
        """Append one session description."""
        self.sessions.append(session)

    @property
    def is_empty(self) -> bool:
        """Return ``True`` when neither sessions nor execution data are held."""
        return not self.sessions and not self.entries


class CoverageToolkit(Protocol):
    """Define the instrumentation facility used by the coverage recorder."""

    def analyze(self, artifact_path: Path) -> list[ClassCoverageInfo]:
        """Analyze one class artifact.

        Args:
            artifact_path: Source or compiled artifact of one class.

        Returns:
            Coverage metadata of every class found in the artifact.

        Raises:
            FileNotFoundError: If the artifact does not exist.
            InstrumentationError: If analysis fails otherwise.
        """

    def record_execution(self, test_id: str) -> ExecutionRecord:
        """Start a fresh execution-data accumulator for one test.

        Args:
            test_id: Test identifier.

        Returns:
            Execution record owned by the caller for that test's analysis.
        """
