import shutil
import subprocess
import sys
from pathlib import Path
from typing import Callable

import pytest


def _add_src_to_path() -> None:
    root = Path(__file__).resolve().parents[1]
    src_path = root / "src"
    if str(src_path) not in sys.path:
        sys.path.insert(0, str(src_path))


_add_src_to_path()

GitRepoFactory = Callable[[Path, dict[str, str]], Path]


def _git(cwd: Path, *args: str) -> None:
    subprocess.run(
        [
            "git",
            "-c",
            "user.email=tests@example.com",
            "-c",
            "user.name=Tests",
            "-c",
            "commit.gpgsign=false",
            *args,
        ],
        cwd=cwd,
        check=True,
        capture_output=True,
    )


@pytest.fixture
def git_repo() -> GitRepoFactory:
    """Create committed git repositories on branch ``main``."""
    if shutil.which("git") is None:
        pytest.skip("git not installed")

    def _create(root: Path, files: dict[str, str]) -> Path:
        root.mkdir(parents=True, exist_ok=True)
        for relative, content in files.items():
            target = root / relative
            target.parent.mkdir(parents=True, exist_ok=True)
            target.write_text(content, encoding="utf-8")
        _git(root, "init")
        _git(root, "add", ".")
        _git(root, "commit", "-m", "Initial commit")
        _git(root, "branch", "-M", "main")
        return root

    return _create
