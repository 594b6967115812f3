"""Turn raw change sources into directory records and dependency deltas."""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass

from gochanged.analysis.models import (
    DeltaKind,
    DependencyDelta,
    DirectoryChangeRecord,
    Severity,
)
from gochanged.changes.diff_parser import changed_files, parse_name_status
from gochanged.config import ClassifierConfig
from gochanged.toolchain.modfile import ModFile

logger = logging.getLogger("gochanged.changes")


@dataclass(frozen=True)
class FallbackReason:
    """Why the whole filtered set must be treated as affected."""

    reason: str


def is_test_change(file_path: str, module_root: str, config: ClassifierConfig) -> bool:
    """Whether a changed file can only influence tests."""
    directory = os.path.dirname(file_path)
    relative = os.path.relpath(directory, module_root)
    if config.test_data_segment and config.test_data_segment in relative.split(os.sep):
        return True
    name = os.path.basename(file_path)
    return any(name.endswith(suffix) for suffix in config.test_file_suffixes)


def directory_records(
    files: list[str],
    module_root: str,
    config: ClassifierConfig | None = None,
) -> list[DirectoryChangeRecord]:
    """One record per distinct changed directory; the worse severity wins.

    Records are keyed by the file's own directory. A golden file under
    `pkg/testdata/` yields a record for `pkg/testdata`, which only matches a
    package living in that directory, never `pkg` itself.
    """
    config = config or ClassifierConfig()
    module_root = os.path.normpath(module_root)
    severities: dict[str, Severity] = {}
    for file_path in files:
        file_path = os.path.normpath(file_path)
        directory = os.path.dirname(file_path)
        severity = (
            Severity.TEST_AFFECTED
            if is_test_change(file_path, module_root, config)
            else Severity.FULLY_AFFECTED
        )
        severities[directory] = max(severities.get(directory, Severity.UNAFFECTED), severity)

    return [
        DirectoryChangeRecord(
            directory=directory,
            severity=severity,
            relative=os.path.relpath(directory, module_root),
        )
        for directory, severity in severities.items()
    ]


def dependency_deltas(current: ModFile, historical: ModFile) -> list[DependencyDelta]:
    """Diff the require and replace tables of two go.mod snapshots."""
    deltas: list[DependencyDelta] = []

    past_requires = {req.path: req for req in historical.require}
    for req in current.require:
        past = past_requires.get(req.path)
        if past is None:
            deltas.append(DependencyDelta(req.path, DeltaKind.NEW_REQUIRE))
        elif past.version != req.version:
            deltas.append(DependencyDelta(req.path, DeltaKind.VERSION_CHANGED))

    past_replaces = {rep.old_path: rep for rep in historical.replace}
    for rep in current.replace:
        past = past_replaces.pop(rep.old_path, None)
        if past is None:
            deltas.append(DependencyDelta(rep.old_path, DeltaKind.NEW_REPLACE))
        elif (
            past.old_version != rep.old_version
            or past.new_path != rep.new_path
            or past.new_version != rep.new_version
        ):
            deltas.append(DependencyDelta(rep.old_path, DeltaKind.REPLACE_CHANGED))

    for old_path in past_replaces:
        deltas.append(DependencyDelta(old_path, DeltaKind.REPLACE_REMOVED))

    return deltas


def detect_fallback(
    current: ModFile,
    historical: ModFile | None,
    workspace: str = "",
) -> FallbackReason | None:
    """Conditions under which graph analysis is skipped entirely."""
    if historical is None:
        return FallbackReason("module descriptor is new")
    if workspace:
        return FallbackReason(f"workspace mode ({workspace})")
    if current.go != historical.go:
        return FallbackReason(
            f"go version changed from {historical.go or 'unset'} to {current.go or 'unset'}"
        )
    if current.toolchain != historical.toolchain:
        return FallbackReason(
            f"toolchain changed from {historical.toolchain or 'unset'} to {current.toolchain or 'unset'}"
        )
    return None


@dataclass
class ChangeSet:
    """Everything that changed between the comparison revision and now."""

    files: list[str]
    directories: list[DirectoryChangeRecord]
    deltas: list[DependencyDelta]


def collect_changes(
    diff_text: str,
    repo_root: str,
    module_root: str,
    current: ModFile,
    historical: ModFile,
    config: ClassifierConfig | None = None,
) -> ChangeSet:
    """Build the change set from name-status output and two go.mod snapshots."""
    files = changed_files(parse_name_status(diff_text), repo_root)
    change_set = ChangeSet(
        files=files,
        directories=directory_records(files, module_root, config),
        deltas=dependency_deltas(current, historical),
    )
    logger.info(
        "%d changed file(s) in %d director(ies), %d dependency change(s)",
        len(change_set.files), len(change_set.directories), len(change_set.deltas),
    )
    return change_set
