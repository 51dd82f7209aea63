"""Collect a Windows machine's specifications and render them as text, CSV, JSON, YAML, TOML or HTML."""

__version__ = "0.1"