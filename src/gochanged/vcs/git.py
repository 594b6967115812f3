"""Thin wrapper around the git command line."""

from __future__ import annotations

import logging
import os
import subprocess
from pathlib import Path

from gochanged.config import VCSConfig
from gochanged.exceptions import NotFoundError, ToolchainError

logger = logging.getLogger("gochanged.vcs")

# stderr fragments git prints when `git show <rev>:<path>` names a missing file
_NOT_FOUND_MARKERS = ("does not exist in", "exists on disk, but not in")


class GitRepository:
    """Queries a git working tree."""

    def __init__(self, path: str | Path, config: VCSConfig | None = None) -> None:
        self.path = Path(path)
        self.config = config or VCSConfig()

    def _run(self, args: list[str]) -> subprocess.CompletedProcess:
        command = [self.config.git_binary, "-C", str(self.path), *args]
        logger.debug("running %s", " ".join(command))
        try:
            return subprocess.run(
                command,
                capture_output=True,
                timeout=self.config.command_timeout,
            )
        except subprocess.TimeoutExpired as e:
            raise ToolchainError(command, f"timed out after {e.timeout}s") from e
        except FileNotFoundError as e:
            raise ToolchainError(command, f"executable not found: {e}") from e

    def root(self) -> Path:
        """Absolute top-level directory of the working tree."""
        result = self._run(["rev-parse", "--show-toplevel"])
        if result.returncode != 0:
            raise ToolchainError(result.args, result.stderr.decode(errors="replace"))
        return Path(os.fsdecode(result.stdout).rstrip("\n"))

    def diff_name_status(self, treeish: str = "") -> str:
        """NUL-separated `git diff --name-status -z` output against `treeish`.

        Paths are decoded like file names, so undecodable bytes survive as
        surrogate escapes instead of failing.
        """
        args = ["diff", "--name-status", "-z"]
        if treeish:
            args.append(treeish)
        result = self._run([*args, "--"])
        if result.returncode != 0:
            raise ToolchainError(result.args, result.stderr.decode(errors="replace"))
        return os.fsdecode(result.stdout)

    def read_file(self, treeish: str, path: str) -> bytes:
        """Content of `path` (relative to the repository root) at `treeish`.

        An empty `treeish` reads the staged version from the index.
        """
        result = self._run(["show", f"{treeish}:{path}"])
        if result.returncode != 0:
            stderr = result.stderr.decode(errors="replace")
            if any(marker in stderr for marker in _NOT_FOUND_MARKERS):
                raise NotFoundError(path, treeish, stderr.strip())
            raise ToolchainError(result.args, stderr)
        return result.stdout
