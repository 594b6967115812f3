"""gochanged - find the Go packages affected by a change."""

__version__ = "0.1.0"
