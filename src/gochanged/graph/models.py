"""Data models for Go packages as reported by `go list -json`."""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field


class EdgeKind(str, Enum):
    """Kinds of dependency edges between packages."""

    IMPORTS = "imports"
    TEST_IMPORTS = "test_imports"
    XTEST_IMPORTS = "xtest_imports"


TEST_EDGE_KINDS = frozenset({EdgeKind.TEST_IMPORTS, EdgeKind.XTEST_IMPORTS})


class ModuleInfo(BaseModel):
    """The module a package belongs to."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    go_mod: str = Field(default="", alias="GoMod")


class Package(BaseModel):
    """A single Go package and its three kinds of dependencies."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    import_path: str = Field(alias="ImportPath")
    dir: str = Field(default="", alias="Dir")
    module: ModuleInfo | None = Field(default=None, alias="Module")
    standard: bool = Field(default=False, alias="Standard")
    imports: tuple[str, ...] = Field(default=(), alias="Imports")
    test_imports: tuple[str, ...] = Field(default=(), alias="TestImports")
    xtest_imports: tuple[str, ...] = Field(default=(), alias="XTestImports")

    @property
    def go_mod(self) -> str:
        """Path of the go.mod owning this package, empty for the standard library."""
        return self.module.go_mod if self.module else ""

    def edges(self, kind: EdgeKind) -> tuple[str, ...]:
        if kind is EdgeKind.IMPORTS:
            return self.imports
        if kind is EdgeKind.TEST_IMPORTS:
            return self.test_imports
        return self.xtest_imports

    def all_dependencies(self) -> list[str]:
        """Every import path referenced by any edge kind, first-seen order."""
        seen: dict[str, None] = {}
        for kind in EdgeKind:
            for path in self.edges(kind):
                seen.setdefault(path, None)
        return list(seen)
