"""Shared test fixtures for gochanged."""

from __future__ import annotations

from pathlib import Path

import pytest

from gochanged.exceptions import NotFoundError
from gochanged.graph.models import ModuleInfo, Package

MODULE = "example.com/m"

GO_MOD = """\
module example.com/m

go 1.21

require (
\texample.com/lib v1.1.0
\tgolang.org/x/text v0.14.0 // indirect
)

replace example.com/old => ../old
"""


def make_package(
    import_path: str,
    root: Path | None = None,
    imports: list[str] | None = None,
    test_imports: list[str] | None = None,
    xtest_imports: list[str] | None = None,
    go_mod: str | None = None,
) -> Package:
    """Build a package record the way `go list -json` would describe it."""
    module = None
    directory = ""
    if root is not None:
        rel = import_path[len(MODULE):].lstrip("/") if import_path.startswith(MODULE) else ""
        directory = str(root / rel) if rel else str(root)
        module = ModuleInfo(go_mod=go_mod or str(root / "go.mod"))
    return Package(
        import_path=import_path,
        dir=directory,
        module=module,
        imports=imports or [],
        test_imports=test_imports or [],
        xtest_imports=xtest_imports or [],
    )


class FakeLister:
    """Stands in for `go list`: primary records, then an Imports-only closure."""

    def __init__(self, packages: list[Package], primary: list[str], workspace: str = "") -> None:
        self.packages = {pkg.import_path: pkg for pkg in packages}
        self.primary = primary
        self._workspace = workspace
        self.calls: list[tuple[list[str], bool]] = []

    def list_packages(self, patterns: list[str], test: bool = True) -> list[Package]:
        self.calls.append((list(patterns), test))
        if test:
            return [self.packages[p] for p in self.primary]
        order: list[Package] = []
        seen: set[str] = set()

        def visit(path: str) -> None:
            if path in seen or path not in self.packages:
                return
            seen.add(path)
            for dep in self.packages[path].imports:
                visit(dep)
            order.append(self.packages[path])

        for pattern in patterns:
            visit(pattern)
        return order

    def workspace(self) -> str:
        return self._workspace


class FakeRepo:
    """Stands in for git: a fixed diff and a map of historical files."""

    def __init__(self, root: Path, diff: str = "", history: dict[str, bytes] | None = None) -> None:
        self._root = root
        self.diff = diff
        self.history = history or {}
        self.reads: list[tuple[str, str]] = []

    def root(self) -> Path:
        return self._root

    def diff_name_status(self, treeish: str = "") -> str:
        return self.diff

    def read_file(self, treeish: str, path: str) -> bytes:
        self.reads.append((treeish, path))
        if path not in self.history:
            raise NotFoundError(path, treeish)
        return self.history[path]


@pytest.fixture
def repo_root(tmp_path: Path) -> Path:
    """A git root containing a Go module at its top level."""
    root = tmp_path / "repo"
    root.mkdir()
    (root / "go.mod").write_text(GO_MOD)
    return root


@pytest.fixture
def chain(repo_root: Path) -> list[Package]:
    """a -> b -> c over compiled-code imports."""
    return [
        make_package(f"{MODULE}/a", repo_root, imports=[f"{MODULE}/b", "fmt"]),
        make_package(f"{MODULE}/b", repo_root, imports=[f"{MODULE}/c"]),
        make_package(f"{MODULE}/c", repo_root, imports=["strings"]),
    ]
