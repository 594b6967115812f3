"""Run `go list` and `go env` to learn about packages in a module."""

from __future__ import annotations

import json
import logging
import subprocess
from pathlib import Path

from pydantic import ValidationError

from gochanged.config import ToolchainConfig
from gochanged.exceptions import ToolchainError
from gochanged.graph.models import Package

logger = logging.getLogger("gochanged.toolchain")


def decode_package_stream(text: str) -> list[Package]:
    """Decode the concatenated JSON objects printed by `go list -json`."""
    decoder = json.JSONDecoder()
    packages: list[Package] = []
    pos = 0
    end = len(text)
    while True:
        while pos < end and text[pos].isspace():
            pos += 1
        if pos >= end:
            break
        try:
            obj, pos = decoder.raw_decode(text, pos)
            packages.append(Package.model_validate(obj))
        except (json.JSONDecodeError, ValidationError) as e:
            raise ToolchainError(["go", "list", "-json"], f"malformed package record: {e}") from e
    return packages


class GoPackageLister:
    """Lists packages by invoking the go tool in a working directory."""

    def __init__(self, workdir: str | Path, config: ToolchainConfig | None = None) -> None:
        self.workdir = Path(workdir)
        self.config = config or ToolchainConfig()

    def _run(self, args: list[str]) -> str:
        command = [self.config.go_binary, *args]
        logger.debug("running %s in %s", " ".join(command), self.workdir)
        try:
            result = subprocess.run(
                command,
                cwd=self.workdir,
                capture_output=True,
                text=True,
                timeout=self.config.command_timeout,
            )
        except subprocess.TimeoutExpired as e:
            raise ToolchainError(command, f"timed out after {e.timeout}s") from e
        except FileNotFoundError as e:
            raise ToolchainError(command, f"executable not found: {e}") from e
        if result.returncode != 0:
            raise ToolchainError(command, result.stderr)
        return result.stdout

    def list_packages(self, patterns: list[str], test: bool = True) -> list[Package]:
        """List packages matching `patterns`.

        With `test` the records carry test import metadata. Without it the
        transitive dependency closure is listed instead (`-deps`), which is
        cheaper when only compiled-code edges matter.
        """
        if not patterns:
            return []
        args = ["list", "-e", "-json", "-compiler", self.config.compiler]
        if not test:
            args.append("-deps")
        return decode_package_stream(self._run([*args, "--", *patterns]))

    def env(self, name: str) -> str:
        """Read a single `go env` variable."""
        return self._run(["env", name]).strip()

    def workspace(self) -> str:
        """Path of the active go.work file, empty outside workspace mode."""
        value = self.env("GOWORK")
        return "" if value == "off" else value
