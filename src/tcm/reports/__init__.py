# Copyright 2026 Zsolt Kulcsar and Contributors. Licensed under the EUPL-1.2 or later
"""Report backends for the test coverage mapper."""

from tcm.reports.json_file import JsonFilePersistence, render_json

__all__ = ["JsonFilePersistence", "render_json"]
