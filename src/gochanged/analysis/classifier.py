"""Seed initial package severities from the collected changes."""

from __future__ import annotations

import logging
import os

from gochanged.analysis.models import (
    DependencyDelta,
    DirectoryChangeRecord,
    PackageStatus,
    Severity,
)
from gochanged.config import ClassifierConfig
from gochanged.graph.catalog import Universe

logger = logging.getLogger("gochanged.analysis")


def new_status_table(universe: Universe) -> dict[str, PackageStatus]:
    """An UNAFFECTED status for every vertex, in catalog order."""
    return {pkg.import_path: PackageStatus() for pkg in universe.packages}


def _matches_module(import_path: str, module_path: str, prefix: bool) -> bool:
    if import_path == module_path:
        return True
    return prefix and import_path.startswith(module_path + "/")


class Classifier:
    """Raises packages touched directly by a change.

    Dependency deltas are matched against every package in the universe:
    packages from required modules live in the auxiliary set and reach the
    primary set through propagation. Directory records only apply to primary
    packages, since auxiliary ones live outside the module.
    """

    def __init__(self, universe: Universe, config: ClassifierConfig | None = None) -> None:
        self.universe = universe
        self.config = config or ClassifierConfig()

    def classify_deltas(
        self, statuses: dict[str, PackageStatus], deltas: list[DependencyDelta]
    ) -> None:
        for delta in deltas:
            matched = False
            for pkg in self.universe.packages:
                if _matches_module(
                    pkg.import_path, delta.module_path, self.config.match_module_prefix
                ):
                    statuses[pkg.import_path].raise_to(
                        Severity.FULLY_AFFECTED, full_reasons={delta.reason}
                    )
                    matched = True
            if not matched:
                logger.debug("%s matches no package", delta.reason)

    def classify_directories(
        self, statuses: dict[str, PackageStatus], records: list[DirectoryChangeRecord]
    ) -> None:
        by_dir = {record.directory: record for record in records}
        for pkg in self.universe.primary:
            record = by_dir.get(os.path.normpath(pkg.dir)) if pkg.dir else None
            if record is None:
                continue
            where = record.relative or record.directory
            if record.severity is Severity.FULLY_AFFECTED:
                statuses[pkg.import_path].raise_to(
                    record.severity, full_reasons={f"source changed in {where}"}
                )
            else:
                statuses[pkg.import_path].raise_to(
                    record.severity, test_reasons={f"tests changed in {where}"}
                )

    def classify(
        self,
        deltas: list[DependencyDelta],
        records: list[DirectoryChangeRecord],
    ) -> dict[str, PackageStatus]:
        """Build a fresh status table seeded from deltas and directory records."""
        statuses = new_status_table(self.universe)
        self.classify_deltas(statuses, deltas)
        self.classify_directories(statuses, records)
        seeded = sum(1 for s in statuses.values() if s.severity > Severity.UNAFFECTED)
        logger.debug("classifier seeded %d package(s)", seeded)
        return statuses
