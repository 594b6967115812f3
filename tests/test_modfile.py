"""Tests for the go.mod reader."""

from __future__ import annotations

import pytest

from gochanged.exceptions import InputError
from gochanged.toolchain.modfile import Replace, Require, parse_modfile

FULL_GO_MOD = b"""\
// Module comment
module "example.com/m"

go 1.22
toolchain go1.22.3

require example.com/single v0.1.0

require (
    example.com/a v1.0.0
    example.com/b v2.3.4+incompatible // indirect
)

replace (
    example.com/a v1.0.0 => example.com/fork v1.0.1
    example.com/local => ../local
)

exclude example.com/bad v0.0.1

retract (
    v0.9.0 // broken
)
"""


class TestParseModfile:
    def test_module_and_versions(self):
        mod = parse_modfile(FULL_GO_MOD)
        assert mod.module == "example.com/m"
        assert mod.go == "1.22"
        assert mod.toolchain == "go1.22.3"

    def test_requires(self):
        mod = parse_modfile(FULL_GO_MOD)
        assert mod.require == [
            Require("example.com/single", "v0.1.0"),
            Require("example.com/a", "v1.0.0"),
            Require("example.com/b", "v2.3.4+incompatible"),
        ]

    def test_replaces(self):
        mod = parse_modfile(FULL_GO_MOD)
        assert mod.replace == [
            Replace("example.com/a", "v1.0.0", "example.com/fork", "v1.0.1"),
            Replace("example.com/local", "", "../local", ""),
        ]

    def test_empty_file(self):
        mod = parse_modfile(b"")
        assert mod.module == ""
        assert mod.require == []

    def test_empty_block(self):
        mod = parse_modfile("module m\nrequire ()\n")
        assert mod.require == []

    def test_comment_inside_quotes_is_kept(self):
        mod = parse_modfile('module "example.com/a//b"\n')
        assert mod.module == "example.com/a//b"

    def test_unterminated_block(self):
        with pytest.raises(InputError, match="unterminated"):
            parse_modfile("module m\nrequire (\n  example.com/a v1.0.0\n")

    def test_bad_require(self):
        with pytest.raises(InputError, match="go.mod:2"):
            parse_modfile("module m\nrequire example.com/a\n")

    def test_replace_without_arrow(self):
        with pytest.raises(InputError):
            parse_modfile("module m\nreplace example.com/a ../a\n")

    def test_unknown_directive(self):
        with pytest.raises(InputError, match="unknown directive"):
            parse_modfile("module m\nfrobnicate x\n")

    def test_invalid_utf8(self):
        with pytest.raises(InputError):
            parse_modfile(b"module \xff\n")
