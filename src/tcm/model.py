# Copyright 2026 Zsolt Kulcsar and Contributors. Licensed under the EUPL-1.2 or later
"""Domain models for coverage mapping results."""

from dataclasses import dataclass, field
from typing import Any


@dataclass(frozen=True)
class CoverageEntry:
    """Represent the locations covered by one test.

    Attributes:
        test_id: Qualified test method identifier.
        locations: Covered ``ClassIdentifier#line`` strings in recording order.
    """

    test_id: str
    locations: tuple[str, ...] = ()


@dataclass(frozen=True)
class RepositoryStats:
    """Represent counts computed for one analysis run."""

    num_java_files: int
    num_classes: int
    num_methods: int
    num_test_methods: int


@dataclass(frozen=True)
class CoverageReport:
    """Represent the combined result of one analysis run.

    Attributes:
        location: Absolute path of the analyzed working copy.
        stats: Repository statistics.
        coverage: Covered locations keyed by test identifier.
    """

    location: str
    stats: RepositoryStats
    coverage: dict[str, list[str]] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        """Return the report in its serialized field layout."""
        return {
            "location": self.location,
            "stat_of_repository": {
                "num_java_files": self.stats.num_java_files,
                "num_classes": self.stats.num_classes,
                "num_methods": self.stats.num_methods,
                "num_test_methods": self.stats.num_test_methods,
            },
            "test_coverage_against_methods": {
                test_id: list(locations)
                for test_id, locations in self.coverage.items()
            },
        }
