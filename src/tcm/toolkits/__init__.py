# Copyright 2026 Zsolt Kulcsar and Contributors. Licensed under the EUPL-1.2 or later
"""Coverage toolkit backends for the test coverage mapper."""

from tcm.toolkits.source import SourceArtifactToolkit

__all__ = ["SourceArtifactToolkit"]
