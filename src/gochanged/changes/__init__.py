"""Collect changed files and go.mod differences."""
