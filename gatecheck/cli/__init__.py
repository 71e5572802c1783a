"""Command-line interface for gatecheck."""

from .main import cli, main

__all__ = ["cli", "main"]
