# Copyright 2026 Zsolt Kulcsar and Contributors. Licensed under the EUPL-1.2 or later
"""JSON file implementation for coverage reports."""

import json
import logging
from pathlib import Path

from tcm.model import CoverageReport
from tcm.persistence import PersistenceError

logger = logging.getLogger(__name__)


def render_json(report: CoverageReport) -> str:
    """Serialize a report to JSON text.

    Args:
        report: Coverage report.

    Returns:
        JSON document with fields in report-schema order.
    """
    return json.dumps(report.to_dict(), indent=2)


class JsonFilePersistence:
    """Persist coverage reports to a JSON file."""

    def __init__(self, output_path: Path) -> None:
        """Initialize persistence backend.

        Args:
            output_path: Target report file path.
        """
        self._output_path = output_path

    def write(self, report: CoverageReport) -> Path:
        """Write the report atomically.

        The document is rendered before the target is touched and moved into
        place from a temporary sibling file.

        Args:
            report: Coverage report.

        Returns:
            Path of the written report.

        Raises:
            PersistenceError: If the report cannot be written.
        """
        payload = render_json(report)
        tmp_path = self._output_path.with_suffix(f"{self._output_path.suffix}.tmp")
        try:
            self._output_path.parent.mkdir(parents=True, exist_ok=True)
            tmp_path.write_text(payload, encoding="utf-8")
            tmp_path.replace(self._output_path)
        except OSError as exc:
            logger.warning(
                f"Report persistence failed (output_path={self._output_path} error={exc})"
            )
            tmp_path.unlink(missing_ok=True)
            raise PersistenceError(str(exc)) from exc
        return self._output_path
