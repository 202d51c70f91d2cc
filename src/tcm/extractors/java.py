# Copyright 2026 Zsolt Kulcsar and Contributors. Licensed under the EUPL-1.2 or later
"""Line-oriented Java method extraction.

The scanners below are a lexical approximation, not a parser. Each file is
scanned one line at a time with a package tracker and a single "inside" flag
that is cleared by the first line starting with ``}``. Brace depth is not
tracked, so:

* a nested block inside a test clears the flag before the test body ends;
* a ``public void`` method of a local or anonymous class declared inside a
  test body, before any ``}`` line, is reported as a test;
* names are taken from the third whitespace-delimited token, so
  package-private signatures (``void run() {``) and ``else if (x) {`` lines
  yield odd names;
* signatures spanning several lines are missed.
"""

import logging
import re
from pathlib import Path

from tcm.extractor import MethodKind
from tcm.inventory import DEFAULT_LAYOUT, SourceLayout

logger = logging.getLogger(__name__)

TEST_MARKER = "@Test"
TEST_SIGNATURE_PREFIX = "public void"
PACKAGE_PREFIX = "package "
METHOD_DECLARATION = re.compile(r"^(\s*\w+\s+)+\w+\s*\([^)]*\)\s*\{")


def scan_test_methods(lines: list[str], class_name: str) -> list[str]:
    """Extract test method identifiers from one test source file.

    Args:
        lines: Source lines of the file.
        class_name: Class name derived from the file name.

    Returns:
        Qualified test method identifiers in source order.
    """
    package = ""
    inside_test = False
    methods: list[str] = []
    for line in lines:
        stripped = line.strip()
        if stripped.startswith(PACKAGE_PREFIX):
            package = _parse_package(stripped)
        elif TEST_MARKER in line:
            inside_test = True

        if inside_test and stripped.startswith(TEST_SIGNATURE_PREFIX):
            name = _method_name(stripped)
            if name is not None:
                methods.append(_qualify(package, class_name, name))

        if inside_test and stripped.startswith("}"):
            inside_test = False
    return methods


def scan_methods(lines: list[str], class_name: str) -> list[str]:
    """Extract declared method identifiers from one main source file.

    Args:
        lines: Source lines of the file.
        class_name: Class name derived from the file name.

    Returns:
        Qualified method identifiers in source order.
    """
    package = ""
    inside_method = False
    methods: list[str] = []
    for line in lines:
        stripped = line.strip()
        if stripped.startswith(PACKAGE_PREFIX):
            package = _parse_package(stripped)

        if METHOD_DECLARATION.search(line):
            if inside_method:
                logger.debug(
                    f"Declaration found inside a method body (class={class_name} line={stripped})"
                )
            inside_method = True
            name = _method_name(stripped)
            if name is not None:
                methods.append(_qualify(package, class_name, name))

        if inside_method and stripped.startswith("}"):
            inside_method = False
    return methods


class _JavaSourceExtractor:
    kind: MethodKind = "method"

    def __init__(self, layout: SourceLayout = DEFAULT_LAYOUT) -> None:
        """Initialize extractor.

        Args:
            layout: Source layout convention.
        """
        self._layout = layout

    def extract(self, root_path: Path) -> list[str]:
        """Scan every source file beneath the extractor's source root.

        Args:
            root_path: Repository working tree root.

        Returns:
            Qualified method identifiers, files in traversal order.

        Raises:
            OSError: If a source file cannot be read.
        """
        methods: list[str] = []
        files = self._layout.source_files(root_path, self._source_root())
        for file_path in files:
            lines = file_path.read_text(encoding="utf-8", errors="replace").splitlines()
            class_name = file_path.name.removesuffix(self._layout.extension)
            methods.extend(self._scan(lines, class_name))
        logger.info(
            f"Method extraction completed (kind={self.kind} files={len(files)} methods={len(methods)})"
        )
        return methods

    def _source_root(self) -> str:
        return self._layout.main_root

    def _scan(self, lines: list[str], class_name: str) -> list[str]:
        return scan_methods(lines, class_name)


class JavaTestMethodExtractor(_JavaSourceExtractor):
    """Extract ``@Test`` methods from the test-source root."""

    kind: MethodKind = "test"

    def _source_root(self) -> str:
        return self._layout.test_root

    def _scan(self, lines: list[str], class_name: str) -> list[str]:
        return scan_test_methods(lines, class_name)


class JavaMethodExtractor(_JavaSourceExtractor):
    """Extract brace-opened method declarations from the main-source root."""


def _parse_package(stripped: str) -> str:
    return stripped[len(PACKAGE_PREFIX) :].replace(";", "").strip()


def _method_name(stripped: str) -> str | None:
    """Return the third token truncated at ``(``, or ``None`` if too short."""
    tokens = stripped.split()
    if len(tokens) < 3:
        logger.debug(f"Skipping short declaration line (line={stripped})")
        return None
    return tokens[2].split("(")[0]


def _qualify(package: str, class_name: str, method_name: str) -> str:
    if not package:
        return f"{class_name}.{method_name}"
    return f"{package}.{class_name}.{method_name}"
