# Copyright 2026 Zsolt Kulcsar and Contributors. Licensed under the EUPL-1.2 or later
"""Aggregation of coverage entries and repository statistics."""

import logging
from collections.abc import Iterable

from tcm.model import CoverageEntry, CoverageReport, RepositoryStats

logger = logging.getLogger(__name__)


def compute_stats(
    class_ids: list[str], methods: list[str], test_methods: list[str]
) -> RepositoryStats:
    """Compute repository statistics from scan results.

    Args:
        class_ids: Class identifiers from the inventory scan.
        methods: General method identifiers.
        test_methods: Test method identifiers.

    Returns:
        Counts equal to the lengths of the corresponding lists.
    """
    return RepositoryStats(
        num_java_files=len(class_ids),
        num_classes=len(class_ids),
        num_methods=len(methods),
        num_test_methods=len(test_methods),
    )


def aggregate(
    location: str,
    class_ids: list[str],
    methods: list[str],
    test_methods: list[str],
    entries: Iterable[CoverageEntry],
) -> CoverageReport:
    """Combine coverage entries and statistics into one report.

    Args:
        location: Absolute path of the analyzed working copy.
        class_ids: Class identifiers from the inventory scan.
        methods: General method identifiers.
        test_methods: Test method identifiers.
        entries: Coverage entries; a later entry replaces an earlier one for
            the same test.

    Returns:
        Combined coverage report.
    """
    coverage: dict[str, list[str]] = {}
    for entry in entries:
        if entry.test_id in coverage:
            logger.debug(f"Replacing coverage entry (test_id={entry.test_id})")
        coverage[entry.test_id] = list(entry.locations)
    return CoverageReport(
        location=location,
        stats=compute_stats(class_ids, methods, test_methods),
        coverage=coverage,
    )
