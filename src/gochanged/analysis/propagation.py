"""Propagate change status through the package graph to a fixed point."""

from __future__ import annotations

import logging

from gochanged.analysis.models import PackageStatus, Severity
from gochanged.exceptions import ConfigurationError
from gochanged.graph.catalog import Universe
from gochanged.graph.models import TEST_EDGE_KINDS, EdgeKind

logger = logging.getLogger("gochanged.analysis")


class PropagationEngine:
    """Runs full passes over the graph until nothing changes.

    Compiled-code edges carry full severity: a package importing a fully
    affected package is fully affected too, and inherits its full reasons.
    Test edges raise the importer to at most TEST_AFFECTED, whatever the
    dependency's severity, and feed the dependency's reasons into the
    importer's test reasons. Since only full severity travels over compiled
    edges, a package raised by its tests never raises its own importers.

    Severity only goes up and has three levels, so the loop terminates.
    """

    def __init__(self, universe: Universe, statuses: dict[str, PackageStatus]) -> None:
        self.universe = universe
        self.statuses = statuses
        self.passes = 0
        self.max_passes = 2 * universe.graph.number_of_nodes() + 2

    def step(self) -> bool:
        """One full pass in catalog order. Returns True if any status changed."""
        changed = False
        for pkg in self.universe.packages:
            status = self.statuses[pkg.import_path]
            for dep, kinds in self.universe.dependencies(pkg.import_path):
                dep_status = self.statuses[dep]
                if dep_status.severity is Severity.UNAFFECTED:
                    continue
                if (
                    EdgeKind.IMPORTS in kinds
                    and dep_status.severity is Severity.FULLY_AFFECTED
                ):
                    changed |= status.raise_to(
                        Severity.FULLY_AFFECTED, full_reasons=dep_status.full_reasons
                    )
                if kinds & TEST_EDGE_KINDS:
                    changed |= status.raise_to(
                        Severity.TEST_AFFECTED, test_reasons=dep_status.reasons
                    )
        self.passes += 1
        return changed

    def run(self) -> dict[str, PackageStatus]:
        """Iterate to the fixed point and return the status table."""
        while self.step():
            if self.passes >= self.max_passes:
                raise ConfigurationError(
                    f"propagation did not converge after {self.passes} passes"
                )
        logger.debug("propagation converged after %d pass(es)", self.passes)
        return self.statuses
