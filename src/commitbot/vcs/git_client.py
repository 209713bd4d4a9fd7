"""
Git client implementation for commitbot.

This module wraps the read-only Git operations the pipeline needs:
listing the staged change set with per-file diffs, resolving references
and walking a commit range. The only write is
:meth:`GitClient.write_commit_editmsg`, which prepares a message for the
next ``git commit`` without creating any Git object. All subprocess calls
go through :meth:`GitClient._run` so that unit tests can mock them easily.
"""

from __future__ import annotations

import logging
import subprocess
from pathlib import Path
from typing import List, Optional, Tuple

from commitbot.vcs.base import VersionControlRepository


logger = logging.getLogger(__name__)
# Attach a null handler to avoid "No handler" warnings when the CLI has not
# configured logging. Records still propagate once the root is configured.
if not logger.handlers:
    logger.addHandler(logging.NullHandler())

# Field and record separators for ``git log`` output. Neither can occur in
# a commit subject or body.
_FIELD_SEP = "\x00"
_RECORD_SEP = "\x1e"
_LOG_FORMAT = "%H%x00%s%x00%b%x1e"


class GitError(Exception):
    """Raised when a Git command fails."""

    pass


class GitClient(VersionControlRepository):
    """Client for interacting with a Git repository."""

    def __init__(self, repo_root: Path) -> None:
        self.repo_root = repo_root

    # ------------------------------------------------------------------
    # Static helpers
    # ------------------------------------------------------------------
    @staticmethod
    def is_repo(path: Path) -> bool:
        """Return True if the given path is the root of a Git repository."""
        return (path / ".git").exists()

    @staticmethod
    def find_repo_root(start: Path) -> Optional[Path]:
        """Find the root of the Git repository starting from ``start``.

        Walk upwards until a ``.git`` entry is found or the filesystem
        root is reached. ``.git`` may be a file for worktrees and
        submodules, so existence is all that is checked.
        """
        current = start.resolve()
        while True:
            if (current / ".git").exists():
                return current
            if current.parent == current:
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
            If the command cannot be started, or exits with a non-zero
            status when ``check`` is True.
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
                errors="replace",  # Replace invalid characters instead of failing
            )
        except OSError as exc:
            logger.debug("Failed to execute git: %s", exc)
            raise GitError(f"Failed to execute git: {exc}") from exc

        if check and result.returncode != 0:
            logger.debug(
                "Git command failed: %s\nSTDOUT: %s\nSTDERR: %s",
                " ".join(full_cmd),
                result.stdout,
                result.stderr,
            )
            raise GitError(result.stderr.strip() or result.stdout.strip())
        return result

    # ------------------------------------------------------------------
    # Staged changes
    # ------------------------------------------------------------------
    def get_staged_paths(self) -> List[str]:
        """Return the paths of all staged files in the order Git reports them."""
        result = self._run(["diff", "--cached", "--name-only", "-z"], check=True)
        return [path for path in result.stdout.split(_FIELD_SEP) if path.strip()]

    def get_staged_diff(self, path: str) -> str:
        """Return the staged unified diff of a single file.

        Mode-only changes and empty files yield whatever header Git
        prints, possibly an empty string.
        """
        result = self._run(["diff", "--cached", "--", path], check=True)
        return result.stdout

    def staged_files(self) -> List[Tuple[str, str]]:
        return [(path, self.get_staged_diff(path)) for path in self.get_staged_paths()]

    # ------------------------------------------------------------------
    # References and history
    # ------------------------------------------------------------------
    def current_branch(self) -> str:
        """Get the name of the current branch.

        Before the first commit ``HEAD`` does not resolve, so the branch
        name is read from the symbolic ref instead.

        Raises
        ------
        GitError
            If unable to determine the current branch.
        """
        result = self._run(["rev-parse", "--abbrev-ref", "HEAD"], check=False)
        if result.returncode == 0:
            return result.stdout.strip()
        logger.debug("HEAD does not resolve; reading the symbolic ref (unborn branch)")
        result = self._run(["symbolic-ref", "--short", "HEAD"], check=True)
        return result.stdout.strip()

    def resolve_ref(self, name: str) -> Optional[str]:
        """Resolve ``name`` to a full commit id, or ``None`` if unknown."""
        if not name or name.startswith("-"):
            return None
        result = self._run(["rev-parse", "--verify", "--quiet", f"{name}^{{commit}}"], check=False)
        if result.returncode != 0:
            logger.debug("Reference '%s' did not resolve", name)
            return None
        return result.stdout.strip() or None

    def commits_between(self, base: str, feature: str) -> List[Tuple[str, str, str]]:
        """Return commits reachable from ``feature`` but not ``base``, oldest first."""
        result = self._run(
            ["log", "--reverse", f"--format={_LOG_FORMAT}", f"{base}..{feature}"],
            check=True,
        )
        commits: List[Tuple[str, str, str]] = []
        for record in result.stdout.split(_RECORD_SEP):
            record = record.lstrip("\n")
            if not record.strip():
                continue
            parts = record.split(_FIELD_SEP, 2)
            # Pad records that lack a body field
            while len(parts) < 3:
                parts.append("")
            commit_hash, subject, body = parts
            commits.append((commit_hash.strip(), subject.strip(), body.rstrip()))
        return commits

    # ------------------------------------------------------------------
    # Commit message preparation
    # ------------------------------------------------------------------
    def git_dir(self) -> Path:
        """Return the path of the repository's Git directory."""
        result = self._run(["rev-parse", "--git-dir"], check=True)
        git_dir = Path(result.stdout.strip())
        if not git_dir.is_absolute():
            git_dir = self.repo_root / git_dir
        return git_dir

    def write_commit_editmsg(self, message: str) -> Path:
        """Write ``message`` into ``COMMIT_EDITMSG`` for the next ``git commit``.

        No commit is created. Returns the path that was written.
        """
        path = self.git_dir() / "COMMIT_EDITMSG"
        try:
            path.write_text(message if message.endswith("\n") else message + "\n", encoding="utf-8")
        except OSError as exc:
            logger.debug("Failed to write %s: %s", path, exc)
            raise GitError(f"Failed to write commit message to {path}: {exc}") from exc
        return path
