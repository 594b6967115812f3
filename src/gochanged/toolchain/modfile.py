"""Minimal go.mod reader.

Only the directives that affect change detection are kept: `module`, `go`,
`toolchain`, `require` and `replace`. Everything else (`exclude`, `retract`,
`godebug`, `tool`, ...) is accepted and ignored.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field

from gochanged.exceptions import InputError

_TOKEN_RE = re.compile(r'"(?:[^"\\]|\\.)*"|`[^`]*`|=>|\S+')

KNOWN_BLOCK_VERBS = {
    "require", "replace", "exclude", "retract", "godebug", "tool", "ignore",
}


@dataclass(frozen=True)
class Require:
    path: str
    version: str


@dataclass(frozen=True)
class Replace:
    """A replace directive. `old_version` is empty when all versions are replaced."""

    old_path: str
    old_version: str
    new_path: str
    new_version: str


@dataclass
class ModFile:
    """The parts of a go.mod file we care about."""

    module: str = ""
    go: str = ""
    toolchain: str = ""
    require: list[Require] = field(default_factory=list)
    replace: list[Replace] = field(default_factory=list)


def _strip_comment(line: str) -> str:
    """Drop a trailing `//` comment, respecting quotes."""
    in_quote = ""
    i = 0
    while i < len(line):
        ch = line[i]
        if in_quote:
            if ch == "\\" and in_quote == '"':
                i += 2
                continue
            if ch == in_quote:
                in_quote = ""
        elif ch in ('"', "`"):
            in_quote = ch
        elif line.startswith("//", i):
            return line[:i]
        i += 1
    return line


def _unquote(token: str) -> str:
    if len(token) >= 2 and token[0] == token[-1] and token[0] in ('"', "`"):
        body = token[1:-1]
        if token[0] == '"':
            body = re.sub(r"\\(.)", r"\1", body)
        return body
    return token


def _tokens(code: str) -> list[str]:
    return [
        tok if tok in ("(", ")", "=>") else _unquote(tok)
        for tok in _TOKEN_RE.findall(code)
    ]


def _apply(mod: ModFile, verb: str, args: list[str], where: str) -> None:
    if verb == "module":
        if len(args) != 1:
            raise InputError(f"{where}: usage: module module/path")
        mod.module = args[0]
    elif verb == "go":
        if len(args) != 1:
            raise InputError(f"{where}: usage: go 1.23")
        mod.go = args[0]
    elif verb == "toolchain":
        if len(args) != 1:
            raise InputError(f"{where}: usage: toolchain go1.23.1")
        mod.toolchain = args[0]
    elif verb == "require":
        if len(args) != 2:
            raise InputError(f"{where}: usage: require module/path v1.2.3")
        mod.require.append(Require(args[0], args[1]))
    elif verb == "replace":
        if "=>" not in args:
            raise InputError(f"{where}: usage: replace module/path [v1.2.3] => other/module v1.4.5")
        arrow = args.index("=>")
        old, new = args[:arrow], args[arrow + 1:]
        if len(old) not in (1, 2) or len(new) not in (1, 2):
            raise InputError(f"{where}: usage: replace module/path [v1.2.3] => other/module v1.4.5")
        mod.replace.append(
            Replace(
                old_path=old[0],
                old_version=old[1] if len(old) == 2 else "",
                new_path=new[0],
                new_version=new[1] if len(new) == 2 else "",
            )
        )
    elif verb not in KNOWN_BLOCK_VERBS:
        raise InputError(f"{where}: unknown directive: {verb}")


def parse_modfile(data: bytes | str, filename: str = "go.mod") -> ModFile:
    """Parse go.mod content into a ModFile."""
    if isinstance(data, bytes):
        try:
            text = data.decode("utf-8")
        except UnicodeDecodeError as e:
            raise InputError(f"{filename}: not valid UTF-8: {e}") from e
    else:
        text = data

    mod = ModFile()
    block_verb: str | None = None

    for lineno, raw in enumerate(text.splitlines(), start=1):
        where = f"{filename}:{lineno}"
        tokens = _tokens(_strip_comment(raw))
        if not tokens:
            continue

        if block_verb is not None:
            if tokens == [")"]:
                block_verb = None
                continue
            _apply(mod, block_verb, tokens, where)
            continue

        verb, args = tokens[0], tokens[1:]
        if args == ["("]:
            block_verb = verb
            continue
        if args in (["(", ")"], ["()"]):
            continue
        _apply(mod, verb, args, where)

    if block_verb is not None:
        raise InputError(f"{filename}: unterminated {block_verb} block")
    return mod
