# Copyright 2026 Zsolt Kulcsar and Contributors. Licensed under the EUPL-1.2 or later
"""Source layout conventions and class inventory scanning."""

import logging
from dataclasses import dataclass
from pathlib import Path

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SourceLayout:
    """Describe where a project keeps its sources.

    Attributes:
        test_root: Test-source directory relative to the repository root.
        main_root: Main-source directory relative to the repository root.
        extension: Source file extension, including the leading dot.
    """

    test_root: str = "src/test/java"
    main_root: str = "src/main/java"
    extension: str = ".java"

    def source_files(self, repo_root: Path, relative_root: str) -> list[Path]:
        """List source files beneath one source root.

        Args:
            repo_root: Repository working tree root.
            relative_root: Source root relative to ``repo_root``.

        Returns:
            Sorted source file paths; empty when the root does not exist.
        """
        source_root = repo_root / relative_root
        if not source_root.is_dir():
            logger.debug(f"Source root not found (path={source_root})")
            return []
        return sorted(
            path
            for path in source_root.rglob(f"*{self.extension}")
            if path.is_file()
        )


DEFAULT_LAYOUT = SourceLayout()


@dataclass(frozen=True)
class ClassSource:
    """Pair a class identifier with the source file it was derived from.

    Attributes:
        identifier: Dotted class identifier.
        path: Source artifact the identifier was derived from.
    """

    identifier: str
    path: Path


def class_identifier(source_root: Path, file_path: Path) -> str:
    """Derive the dotted class identifier of one source file.

    Args:
        source_root: Source root the file lives under.
        file_path: Source file path.

    Returns:
        Relative path with the extension stripped and separators as dots.
    """
    relative = file_path.relative_to(source_root).with_suffix("")
    return ".".join(relative.parts)


def scan_class_sources(
    repo_root: Path, layout: SourceLayout = DEFAULT_LAYOUT
) -> list[ClassSource]:
    """Inventory the class sources of a repository.

    Args:
        repo_root: Repository working tree root.
        layout: Source layout convention.

    Returns:
        Test-source classes followed by main-source classes. A name present in
        both roots appears twice, each entry pointing at its own file.
    """
    sources: list[ClassSource] = []
    for relative_root in (layout.test_root, layout.main_root):
        source_root = repo_root / relative_root
        sources.extend(
            ClassSource(
                identifier=class_identifier(source_root, file_path), path=file_path
            )
            for file_path in layout.source_files(repo_root, relative_root)
        )
    logger.info(
        f"Class inventory completed (path={repo_root} classes={len(sources)})"
    )
    return sources


def scan_class_identifiers(
    repo_root: Path, layout: SourceLayout = DEFAULT_LAYOUT
) -> list[str]:
    """Inventory class identifiers of a repository.

    Args:
        repo_root: Repository working tree root.
        layout: Source layout convention.

    Returns:
        Identifiers of ``scan_class_sources`` in the same order.
    """
    return [source.identifier for source in scan_class_sources(repo_root, layout)]
