"""Change detection pipeline.

Ties the collaborators together:
1. Resolve the git root and build the package catalog
2. Check the filtered packages share one module under the git root
3. Compare go.mod with its historical version, falling back to
   "everything affected" when a comparison is not meaningful
4. Classify changed directories and dependencies, then propagate
5. Report the affected primary packages
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field
from pathlib import Path

from gochanged.analysis.classifier import Classifier
from gochanged.analysis.models import Severity
from gochanged.analysis.propagation import PropagationEngine
from gochanged.analysis.reporter import AffectedPackage, Reporter
from gochanged.changes.collector import collect_changes, detect_fallback
from gochanged.config import ProjectConfig
from gochanged.exceptions import ConfigurationError, InputError, NotFoundError
from gochanged.graph.catalog import PackageCatalog, Universe
from gochanged.toolchain.golist import GoPackageLister
from gochanged.toolchain.modfile import ModFile, parse_modfile
from gochanged.vcs.git import GitRepository

logger = logging.getLogger("gochanged.detector")


@dataclass
class ImpactResult:
    """Outcome of one run."""

    affected: list[AffectedPackage]
    fallback: str | None = None
    stats: dict = field(default_factory=dict)


class ChangeDetector:
    """Computes the packages affected since a revision."""

    def __init__(
        self,
        repo: GitRepository,
        lister: GoPackageLister,
        config: ProjectConfig | None = None,
    ) -> None:
        self.repo = repo
        self.lister = lister
        self.config = config or ProjectConfig()

    def _module_location(self, universe: Universe, git_root: Path) -> tuple[Path, str]:
        """Absolute go.mod path and its path relative to the git root."""
        go_mod = Path(os.path.normpath(universe.module_descriptor()))
        try:
            relative = go_mod.relative_to(git_root)
        except ValueError:
            raise ConfigurationError(f"{go_mod} is not under git root {git_root}") from None
        return go_mod, relative.as_posix()

    def _read_current(self, go_mod: Path) -> ModFile:
        try:
            data = go_mod.read_bytes()
        except OSError as e:
            raise InputError(f"cannot read {go_mod}: {e}") from e
        return parse_modfile(data, str(go_mod))

    def _read_historical(self, treeish: str, relative: str) -> ModFile | None:
        try:
            data = self.repo.read_file(treeish, relative)
        except NotFoundError as e:
            logger.info("%s", e)
            return None
        return parse_modfile(data, f"{treeish}:{relative}")

    def _everything(self, universe: Universe, reason: str) -> list[AffectedPackage]:
        return [
            AffectedPackage(pkg.import_path, Severity.FULLY_AFFECTED, (reason,))
            for pkg in universe.primary
        ]

    def run(self, treeish: str = "", patterns: list[str] | None = None) -> ImpactResult:
        """Run the full pipeline. Raises GoChangedError subclasses on failure."""
        patterns = list(patterns or self.config.default_patterns)
        git_root = Path(os.path.normpath(self.repo.root()))

        universe = PackageCatalog(self.lister).build_universe(patterns)
        stats = universe.stats()

        go_mod, relative = self._module_location(universe, git_root)
        current = self._read_current(go_mod)
        historical = self._read_historical(treeish, relative)

        fallback = detect_fallback(current, historical, self.lister.workspace())
        if fallback is not None:
            logger.info("treating every package as affected: %s", fallback.reason)
            affected = self._everything(universe, fallback.reason)
            stats["affected"] = len(affected)
            return ImpactResult(affected=affected, fallback=fallback.reason, stats=stats)

        changes = collect_changes(
            self.repo.diff_name_status(treeish),
            str(git_root),
            str(go_mod.parent),
            current,
            historical,
            self.config.classifier,
        )

        statuses = Classifier(universe, self.config.classifier).classify(
            changes.deltas, changes.directories
        )
        engine = PropagationEngine(universe, statuses)
        engine.run()

        affected = Reporter(universe.primary, statuses).affected()
        stats.update(
            changed_files=len(changes.files),
            changed_dirs=len(changes.directories),
            dependency_changes=len(changes.deltas),
            passes=engine.passes,
            affected=len(affected),
        )
        return ImpactResult(affected=affected, stats=stats)
