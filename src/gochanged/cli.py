"""Command-line interface for gochanged."""

from __future__ import annotations

import json
import logging
import sys
from pathlib import Path
from typing import Any

import click

from gochanged import __version__
from gochanged.analysis.reporter import render_json, render_text
from gochanged.config import (
    ProjectConfig,
    find_project_root,
    get_config_value,
    load_config,
    save_config,
    set_config_value,
)
from gochanged.detector import ChangeDetector
from gochanged.exceptions import GoChangedError
from gochanged.toolchain.golist import GoPackageLister
from gochanged.ui.console import Console
from gochanged.vcs.git import GitRepository

console = Console()


def _get_workdir(path: str | None) -> Path:
    """Resolve the working directory or error."""
    root = Path(path or ".").resolve()
    if not root.is_dir():
        console.error(f"Path does not exist: {root}")
        sys.exit(1)
    return root


def _load_project_config(workdir: Path) -> tuple[Path, ProjectConfig]:
    """The project root (nearest .gochanged ancestor, else `workdir`) and its config."""
    root = find_project_root(workdir) or workdir
    try:
        return root, load_config(root)
    except GoChangedError as e:
        console.error(str(e))
        sys.exit(1)


def _make_detector(workdir: Path, config: ProjectConfig) -> ChangeDetector:
    return ChangeDetector(
        repo=GitRepository(workdir, config.vcs),
        lister=GoPackageLister(workdir, config.toolchain),
        config=config,
    )


def _setup_logging(level: str) -> None:
    logger = logging.getLogger("gochanged")
    logger.setLevel(level.upper())
    if not logger.handlers:
        logger.addHandler(console.log_handler())


@click.group()
@click.version_option(version=__version__, prog_name="gochanged")
@click.option(
    "--log-level",
    type=click.Choice(["debug", "info", "warning", "error"], case_sensitive=False),
    default="warning",
    help="Diagnostic log level (written to stderr).",
)
def main(log_level: str):
    """gochanged - list the Go packages affected since a git revision."""
    _setup_logging(log_level)


@main.command()
@click.argument("patterns", nargs=-1)
@click.option("--branch", "-b", default="", help="Git branch or treeish to diff against.")
@click.option("--why", "-w", is_flag=True, help="Explain why each package changed.")
@click.option("--path", "-p", default=None, help="Directory to run in (default: cwd).")
@click.option(
    "--format", "output_format",
    type=click.Choice(["text", "json"]),
    default="text",
    help="Output format.",
)
@click.option("--stats", is_flag=True, help="Show run statistics on stderr.")
def changed(
    patterns: tuple[str, ...],
    branch: str,
    why: bool,
    path: str | None,
    output_format: str,
    stats: bool,
):
    """Print the packages that may have changed behavior.

    PATTERNS are go package patterns and default to ./... (the whole module).
    Affected packages are printed one per line in `go list` order.

    Usage in CI:

        go test $(gochanged changed --branch origin/main)
    """
    workdir = _get_workdir(path)
    _, config = _load_project_config(workdir)
    detector = _make_detector(workdir, config)

    try:
        result = detector.run(treeish=branch, patterns=list(patterns) or None)
    except GoChangedError as e:
        console.error(str(e))
        sys.exit(1)

    if result.fallback and output_format == "text" and not why:
        console.warning(f"Every package is affected: {result.fallback}")

    if output_format == "json":
        click.echo(render_json(result.affected, result.fallback))
    else:
        output = render_text(result.affected, verbose=why)
        if output:
            click.echo(output)

    if stats:
        console.show_stats(result.stats)


# =========================================================================
# Config Management
# =========================================================================

def _parse_value(value: str) -> Any:
    """JSON when it parses, so `true`, `30` and `["./pkg/..."]` keep their types."""
    try:
        return json.loads(value)
    except json.JSONDecodeError:
        return value


@main.command("config")
@click.argument("action", type=click.Choice(["set", "get", "show"]))
@click.argument("key", required=False)
@click.argument("value", required=False)
@click.option("--path", "-p", default=None, help="Path to the project root.")
def config_cmd(action: str, key: str | None, value: str | None, path: str | None):
    """Show or edit .gochanged/config.json.

    Keys use dot notation, e.g. toolchain.command_timeout.
    """
    root, config = _load_project_config(_get_workdir(path))

    if action == "show":
        click.echo(config.model_dump_json(indent=2))
        return
    if not key or (action == "set" and value is None):
        console.error(f"Usage: gochanged config {action} <key>" + (" <value>" if action == "set" else ""))
        sys.exit(1)

    try:
        if action == "get":
            click.echo(f"{key} = {json.dumps(get_config_value(config, key))}")
        else:
            save_config(root, set_config_value(config, key, _parse_value(value)))
            console.success(f"Set {key} = {value}")
    except GoChangedError as e:
        console.error(str(e))
        sys.exit(1)


if __name__ == "__main__":
    main()
