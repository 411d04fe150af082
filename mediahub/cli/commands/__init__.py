"""
CLI Commands - Individual command implementations.

Each module holds plain typer command functions; main.py registers them
on the application.
"""

from mediahub.cli.commands import info, providers, reading, search, sources, trending

__all__ = ["info", "providers", "reading", "search", "sources", "trending"]
