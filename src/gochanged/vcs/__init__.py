"""Version control integration."""

from gochanged.vcs.git import GitRepository

__all__ = ["GitRepository"]
