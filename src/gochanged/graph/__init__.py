"""Package dependency graph."""

from gochanged.graph.catalog import PackageCatalog, Universe
from gochanged.graph.models import EdgeKind, ModuleInfo, Package

__all__ = ["EdgeKind", "ModuleInfo", "Package", "PackageCatalog", "Universe"]
