"""Go toolchain integration."""

from gochanged.toolchain.golist import GoPackageLister
from gochanged.toolchain.modfile import ModFile, parse_modfile

__all__ = ["GoPackageLister", "ModFile", "parse_modfile"]
