# Copyright 2026 Zsolt Kulcsar and Contributors. Licensed under the EUPL-1.2 or later
"""Working-copy acquisition and reset helpers built on the ``git`` executable."""

import logging
import subprocess
from pathlib import Path
from typing import Protocol, Sequence

logger = logging.getLogger(__name__)


class GitError(RuntimeError):
    """Raised when a git command fails or the repository cannot be used."""


class WorkingCopy(Protocol):
    """Define the working-copy operations needed by the coverage recorder."""

    root: Path

    def reset_to_baseline(self, ref: str) -> None:
        """Make the working tree match ``ref``."""


def repository_name(url: str) -> str:
    """Return the last path segment of a repository URL or path.

    Args:
        url: Repository URL or local path.

    Returns:
        Directory name used for the working copy.
    """
    return url.rstrip("/").split("/")[-1]


def _run(
    args: Sequence[str], cwd: Path, check: bool = True
) -> subprocess.CompletedProcess[str]:
    process = subprocess.run(
        ["git", *args],
        cwd=cwd,
        capture_output=True,
        text=False,
        check=False,
    )
    stdout = process.stdout.decode("utf-8", errors="replace") if process.stdout else ""
    stderr = process.stderr.decode("utf-8", errors="replace") if process.stderr else ""
    result = subprocess.CompletedProcess(process.args, process.returncode, stdout, stderr)
    if check and result.returncode != 0:
        message = result.stderr.strip() or result.stdout.strip() or "unknown git error"
        raise GitError(f"git {' '.join(args)} failed: {message}")
    return result


class GitRepository:
    """Lightweight wrapper around ``git`` commands for one working copy."""

    def __init__(self, root: Path | str) -> None:
        """Open an existing working copy.

        Args:
            root: Working tree root.

        Raises:
            GitError: If ``root`` is not a git working tree.
        """
        self.root = Path(root).resolve()
        if not (self.root / ".git").exists():
            raise GitError(f"Not a git repository: {self.root}")

    @classmethod
    def acquire(cls, url: str, workspace_dir: Path) -> "GitRepository":
        """Clone ``url`` into the workspace unless a working copy already exists.

        Args:
            url: Repository URL or local path.
            workspace_dir: Directory holding working copies.

        Returns:
            Repository wrapper for ``workspace_dir/<name>``.

        Raises:
            GitError: If cloning or opening fails.
        """
        destination = workspace_dir / repository_name(url)
        if not destination.exists():
            workspace_dir.mkdir(parents=True, exist_ok=True)
            _run(["clone", url, str(destination)], cwd=Path.cwd())
            logger.info(
                f"Repository cloned (url={url} path={destination.resolve()})"
            )
        return cls(destination)

    def git(self, *args: str, check: bool = True) -> subprocess.CompletedProcess[str]:
        """Execute ``git`` with ``args`` relative to the repository root."""
        return _run(list(args), cwd=self.root, check=check)

    def current_ref(self) -> str:
        """Return the checked-out branch name, or the commit when detached.

        Raises:
            GitError: If ``HEAD`` cannot be resolved.
        """
        branch = self.git("rev-parse", "--abbrev-ref", "HEAD").stdout.strip()
        if branch and branch != "HEAD":
            return branch
        return self.git("rev-parse", "--verify", "HEAD").stdout.strip()

    def reset_to_baseline(self, ref: str) -> None:
        """Check out ``ref`` and discard tracked changes.

        After the call the tracked working tree matches ``ref``. Untracked
        files are left in place.

        Args:
            ref: Branch, tag or commit to reset to.

        Raises:
            GitError: If checkout or reset fails.
        """
        self.git("checkout", "--force", ref, "--")
        self.git("reset", "--hard")
        logger.debug(f"Working tree reset (path={self.root} ref={ref})")
