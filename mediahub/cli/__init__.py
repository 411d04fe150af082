"""
CLI Layer - Command-line interface over the aggregation facade.

This module contains the Typer application; commands live in
mediahub.cli.commands and print through mediahub.ui.
"""

from mediahub.cli.main import app, cli_main

__all__ = ["app", "cli_main"]
