"""
Git client implementation for tag_semver.

This module wraps the read-only Git queries needed to infer a version:
listing the tags reachable from HEAD, counting commits between two
revisions and reading the abbreviated id of HEAD. All subprocess calls
go through :meth:`GitClient._run` so that unit tests can mock them easily.
"""

from __future__ import annotations

import logging
import subprocess
from pathlib import Path
from typing import List, Optional


logger = logging.getLogger(__name__)
# Attach a null handler to avoid logging errors when the root logger is not
# configured. Logs will propagate to the root when configured by the CLI.
if not logger.handlers:
    logger.addHandler(logging.NullHandler())


class GitError(Exception):
    """Raised when a Git command fails."""

    pass


class GitClient:
    """Client for reading history and tags from a Git repository."""

    def __init__(self, repo_root: Path) -> None:
        self.repo_root = repo_root

    # ------------------------------------------------------------------
    # Static helpers
    # ------------------------------------------------------------------
    @staticmethod
    def find_repo_root(start: Path) -> Optional[Path]:
        """Find the root of the Git repository starting from ``start``.

        Walk upwards until a ``.git`` entry is found or the filesystem
        root is reached. Worktrees and submodules use a ``.git`` file
        rather than a directory, so either counts.
        """
        current = start.resolve()
        while True:
            if (current / ".git").exists():
                return current
            if current.parent == current:
                # reached filesystem root
                return None
            current = current.parent

    # ------------------------------------------------------------------
    # Basic Git commands
    # ------------------------------------------------------------------
    def _run(self, args: List[str], check: bool = True) -> subprocess.CompletedProcess:
        """Run a Git command in the repository root.

        Raises
        ------
        GitError
            If the command exits with a non-zero status when ``check`` is
            True, or if the ``git`` executable cannot be found.
        """
        full_cmd = ["git"] + args
        logger.debug("Executing Git command: %s", " ".join(full_cmd))
        try:
            result = subprocess.run(
                full_cmd,
                cwd=self.repo_root,
                stdout=subprocess.PIPE,
                stderr=subprocess.PIPE,
                text=True,
                encoding="utf-8",
                errors="replace",
            )
        except FileNotFoundError as e:
            logger.error("Git executable not found: %s", e)
            raise GitError(f"Git executable not found: {e}") from e

        if check and result.returncode != 0:
            logger.error(
                "Git command failed: %s\nSTDOUT: %s\nSTDERR: %s",
                " ".join(full_cmd),
                result.stdout,
                result.stderr,
            )
            raise GitError(result.stderr.strip() or result.stdout.strip())
        return result

    # ------------------------------------------------------------------
    # History queries
    # ------------------------------------------------------------------
    def head_short_id(self) -> str:
        """Return the abbreviated commit id of HEAD.

        Raises
        ------
        GitError
            If HEAD does not point at a commit (e.g. an empty repository).
        """
        result = self._run(["rev-parse", "--short", "HEAD"], check=True)
        return result.stdout.strip()

    def list_merged_tags(self, ref: str = "HEAD") -> List[str]:
        """Return the names of all tags whose commits are reachable from ``ref``."""
        result = self._run(["tag", "--merged", ref], check=True)
        return [line.strip() for line in result.stdout.splitlines() if line.strip()]

    def count_commits(self, revision_range: str) -> int:
        """Return the number of commits in ``revision_range``.

        Parameters
        ----------
        revision_range : str
            Anything ``git rev-list`` accepts, e.g. ``"HEAD"`` or
            ``"v1.0.0..HEAD"``.
        """
        result = self._run(["rev-list", "--count", revision_range], check=True)
        output = result.stdout.strip()
        try:
            return int(output)
        except ValueError as e:
            raise GitError(f"Unexpected output from git rev-list: {output!r}") from e
