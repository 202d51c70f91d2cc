# Copyright 2026 Zsolt Kulcsar and Contributors. Licensed under the EUPL-1.2 or later
"""Report persistence contracts."""

import logging
from pathlib import Path
from typing import Protocol

from tcm.model import CoverageReport

logger = logging.getLogger(__name__)


class PersistenceError(RuntimeError):
    """Represent a fatal report persistence failure."""


class ReportPersistence(Protocol):
    """Define the contract for persisting one coverage report."""

    def write(self, report: CoverageReport) -> Path:
        """Persist one complete report and return where it was written."""
