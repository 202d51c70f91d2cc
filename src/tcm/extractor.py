"""Method extractor interfaces for lexical source scanning."""

from pathlib import Path
from typing import Literal, Protocol


MethodKind = Literal["test", "method"]


class MethodExtractor(Protocol):
    """Language-specific method extractor contract."""

    kind: MethodKind

    def extract(self, root_path: Path) -> list[str]:
        """Scan a repository root and return qualified method identifiers."""
