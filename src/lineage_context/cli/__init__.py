"""Command line interface."""

from lineage_context.cli.main import app, main

__all__ = ["app", "main"]
