"""Build the package graph used for change propagation."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

import networkx as nx

from gochanged.exceptions import ConfigurationError
from gochanged.graph.models import EdgeKind, Package

if TYPE_CHECKING:
    from gochanged.toolchain.golist import GoPackageLister

logger = logging.getLogger("gochanged.graph")


@dataclass
class Universe:
    """Every package relevant to one run.

    `primary` are the packages matched by the user's patterns and are the only
    ones ever reported. `auxiliary` are their dependencies outside that set,
    loaded without test metadata just to complete the graph.

    Graph nodes are import paths; each edge carries a `kinds` set of
    EdgeKind values.
    """

    primary: list[Package]
    auxiliary: list[Package]
    graph: nx.DiGraph = field(default_factory=nx.DiGraph)

    @property
    def packages(self) -> list[Package]:
        return self.primary + self.auxiliary

    def dependencies(self, import_path: str) -> list[tuple[str, frozenset[EdgeKind]]]:
        """Dependencies of a package with the edge kinds linking them."""
        return [
            (dep, data["kinds"])
            for dep, data in self.graph.adj[import_path].items()
        ]

    def module_descriptor(self) -> str:
        """The one go.mod shared by every primary package."""
        if not self.primary:
            raise ConfigurationError("no packages matched the given patterns")
        common = ""
        for pkg in self.primary:
            if not pkg.go_mod:
                raise ConfigurationError(f"package {pkg.import_path} does not belong to a module")
            if not common:
                common = pkg.go_mod
            elif pkg.go_mod != common:
                raise ConfigurationError(
                    f"no common module: {pkg.import_path} belongs to {pkg.go_mod}, "
                    f"expected {common}"
                )
        return common

    def stats(self) -> dict:
        kinds: dict[str, int] = {}
        for _, _, data in self.graph.edges(data=True):
            for kind in data["kinds"]:
                kinds[kind.value] = kinds.get(kind.value, 0) + 1
        return {
            "primary": len(self.primary),
            "auxiliary": len(self.auxiliary),
            "total_nodes": self.graph.number_of_nodes(),
            "total_edges": self.graph.number_of_edges(),
            "edge_types": kinds,
        }


def compiled_view(graph: nx.DiGraph) -> nx.DiGraph:
    """Read-only view of the graph restricted to compiled-code edges."""
    return nx.subgraph_view(
        graph, filter_edge=lambda u, v: EdgeKind.IMPORTS in graph.edges[u, v]["kinds"]
    )


def build_graph(primary: list[Package], auxiliary: list[Package]) -> nx.DiGraph:
    """Build the dependency graph and check it for compiled-code cycles."""
    graph = nx.DiGraph()
    for pkg in primary:
        graph.add_node(pkg.import_path, package=pkg, primary=True)
    for pkg in auxiliary:
        graph.add_node(pkg.import_path, package=pkg, primary=False)

    for pkg in primary + auxiliary:
        for kind in EdgeKind:
            for dep in pkg.edges(kind):
                # pseudo-packages like "C" never show up in the listing
                if dep not in graph or dep == pkg.import_path:
                    continue
                if graph.has_edge(pkg.import_path, dep):
                    edge = graph.edges[pkg.import_path, dep]
                    edge["kinds"] = edge["kinds"] | {kind}
                else:
                    graph.add_edge(pkg.import_path, dep, kinds=frozenset({kind}))

    try:
        cycle = nx.find_cycle(compiled_view(graph))
    except nx.NetworkXNoCycle:
        return graph
    path = " -> ".join([u for u, _ in cycle] + [cycle[0][0]])
    raise ConfigurationError(f"import cycle detected: {path}")


class PackageCatalog:
    """Loads packages from the toolchain in two phases.

    The first phase lists the filtered packages with test metadata. The
    second lists the non-test dependency closure of whatever they reference
    but does not contain; test metadata is not needed there because those
    packages only matter for compiled-code propagation.
    """

    def __init__(self, lister: GoPackageLister) -> None:
        self.lister = lister

    def build_universe(self, patterns: list[str]) -> Universe:
        primary = _dedupe(self.lister.list_packages(patterns, test=True))
        known = {pkg.import_path for pkg in primary}

        missing: dict[str, None] = {}
        for pkg in primary:
            for dep in pkg.all_dependencies():
                if dep not in known:
                    missing.setdefault(dep, None)

        auxiliary: list[Package] = []
        if missing:
            for pkg in self.lister.list_packages(sorted(missing), test=False):
                if pkg.import_path not in known:
                    known.add(pkg.import_path)
                    auxiliary.append(pkg)

        logger.debug(
            "catalog: %d primary, %d auxiliary packages", len(primary), len(auxiliary)
        )
        return Universe(primary=primary, auxiliary=auxiliary, graph=build_graph(primary, auxiliary))


def _dedupe(packages: list[Package]) -> list[Package]:
    seen: set[str] = set()
    result = []
    for pkg in packages:
        if pkg.import_path not in seen:
            seen.add(pkg.import_path)
            result.append(pkg)
    return result
