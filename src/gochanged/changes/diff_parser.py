"""Parse `git diff --name-status -z` output into changed file paths."""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

from gochanged.exceptions import InputError


@dataclass(frozen=True)
class DiffEntry:
    """One name-status entry."""

    status: str  # 'A', 'D', 'M' or 'R'
    paths: tuple[str, ...]


_PATH_COUNTS = {"A": 1, "D": 1, "M": 1, "R": 2}


def parse_name_status(text: str) -> list[DiffEntry]:
    """Parse NUL-separated name-status output.

    Each entry is a status code (renames carry a similarity score, e.g.
    `R087`) followed by one path, or two for a rename. With `-z` git never
    quotes paths, so they are taken verbatim.
    """
    fields = text.split("\0")
    if fields[-1] == "":
        fields.pop()

    entries: list[DiffEntry] = []
    i = 0
    while i < len(fields):
        code = fields[i].strip()
        if not code:
            raise InputError(f"bad entry in git-diff: empty status at field {i}")
        status = code[0]
        if status == "C":
            raise InputError(f"copied entries are not supported in git-diff: {code!r}")
        if status not in _PATH_COUNTS:
            raise InputError(f"unknown status {status!r} in git-diff: {code!r}")

        count = _PATH_COUNTS[status]
        paths = tuple(fields[i + 1:i + 1 + count])
        if len(paths) != count or not all(paths):
            raise InputError(f"bad entry in git-diff: {code!r} needs {count} path(s)")
        entries.append(DiffEntry(status=status, paths=paths))
        i += 1 + count
    return entries


def changed_files(entries: list[DiffEntry], root: str | Path) -> list[str]:
    """Flatten diff entries into absolute paths under `root`.

    Renames contribute both the old and the new path.
    """
    root = str(root)
    files: list[str] = []
    for entry in entries:
        for path in entry.paths:
            files.append(os.path.normpath(os.path.join(root, path)))
    return files
