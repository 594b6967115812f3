"""Configuration management for gochanged."""

from __future__ import annotations

from pathlib import Path
from typing import Any

from pydantic import BaseModel, Field, ValidationError

from gochanged.exceptions import ConfigurationError

GOCHANGED_DIR = ".gochanged"
CONFIG_FILE = "config.json"


class ToolchainConfig(BaseModel):
    """How the Go toolchain is invoked."""

    go_binary: str = "go"
    compiler: str = "gc"
    command_timeout: float | None = None  # seconds, None waits forever


class VCSConfig(BaseModel):
    """How git is invoked."""

    git_binary: str = "git"
    command_timeout: float | None = None


class ClassifierConfig(BaseModel):
    """Rules for deciding whether a change only affects tests."""

    test_data_segment: str = "testdata"
    test_file_suffixes: list[str] = Field(default_factory=lambda: ["_test.go"])
    # Also match packages below a changed dependency's module path.
    match_module_prefix: bool = False


class ProjectConfig(BaseModel):
    """Full project configuration."""

    default_patterns: list[str] = Field(default_factory=lambda: ["./..."])
    toolchain: ToolchainConfig = Field(default_factory=ToolchainConfig)
    vcs: VCSConfig = Field(default_factory=VCSConfig)
    classifier: ClassifierConfig = Field(default_factory=ClassifierConfig)


def find_project_root(start: Path | None = None) -> Path | None:
    """Nearest directory at or above `start` holding a .gochanged directory."""
    current = (start or Path.cwd()).resolve()
    for candidate in (current, *current.parents):
        if (candidate / GOCHANGED_DIR).is_dir():
            return candidate
    return None


def config_path(root: Path) -> Path:
    return root / GOCHANGED_DIR / CONFIG_FILE


def load_config(root: Path) -> ProjectConfig:
    """Load .gochanged/config.json under `root`, or the defaults."""
    path = config_path(root)
    if not path.exists():
        return ProjectConfig()
    try:
        return ProjectConfig.model_validate_json(path.read_text())
    except ValidationError as e:
        raise ConfigurationError(f"invalid configuration in {path}: {e}") from e


def save_config(root: Path, config: ProjectConfig) -> None:
    path = config_path(root)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(config.model_dump_json(indent=2))


def _resolve(data: dict, key: str) -> tuple[dict, str]:
    """Parent mapping and leaf name of a dotted key like `toolchain.go_binary`."""
    *parents, leaf = key.split(".")
    for part in parents:
        data = data.get(part)
        if not isinstance(data, dict):
            raise ConfigurationError(f"unknown config key: {key}")
    if leaf not in data:
        raise ConfigurationError(f"unknown config key: {key}")
    return data, leaf


def get_config_value(config: ProjectConfig, key: str) -> Any:
    data, leaf = _resolve(config.model_dump(mode="json"), key)
    return data[leaf]


def set_config_value(config: ProjectConfig, key: str, value: Any) -> ProjectConfig:
    """Return a copy of `config` with one dotted key replaced and revalidated."""
    data = config.model_dump()
    parent, leaf = _resolve(data, key)
    parent[leaf] = value
    try:
        return ProjectConfig.model_validate(data)
    except ValidationError as e:
        raise ConfigurationError(f"invalid value for {key}: {e}") from e
