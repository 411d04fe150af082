"""
CLI Main Application - Typer app entry point.

This module builds the typer application, configures logging and the
console in the callback, and registers the command functions.
"""

import logging
import sys
from pathlib import Path
from typing import Optional

import typer
from rich.traceback import install as install_rich_traceback

from mediahub import __version__
from mediahub.cli.context import set_config_manager, set_debug
from mediahub.core import ConfigManager
from mediahub.core.exceptions import MediaHubError
from mediahub.ui import get_console, handle_error, setup_console


# Create main Typer application
app = typer.Typer(
    name="mediahub",
    help="🎬 Search anime, movies, manga, books, comics and news from one place",
    no_args_is_help=True,
    rich_markup_mode="rich",
    context_settings={"help_option_names": ["-h", "--help"]},
)


def _version_callback(value: bool) -> None:
    """Print the version and exit before any command runs."""
    if value:
        get_console().print(f"[bold blue]MediaHub[/bold blue] version [green]{__version__}[/green]")
        raise typer.Exit()


@app.callback()
def main(
    version: bool = typer.Option(
        False,
        "--version",
        "-v",
        help="Show version information and exit",
        is_flag=True,
        callback=_version_callback,
        is_eager=True,
    ),
    config_dir: Optional[Path] = typer.Option(
        None,
        "--config-dir",
        help="Configuration directory path",
        exists=False,
        file_okay=False,
        dir_okay=True,
    ),
    debug: bool = typer.Option(
        False,
        "--debug",
        help="Enable debug mode with detailed logging",
        is_flag=True,
    ),
) -> None:
    """
    🎬 MediaHub - Media source aggregation.

    Search titles, fetch details and resolve playable sources or chapter
    pages across every supported provider through one interface.
    """
    _setup_logging(debug)
    install_rich_traceback(show_locals=debug)
    setup_console()
    set_debug(debug)

    try:
        config_manager = ConfigManager(config_dir)
    except MediaHubError as e:
        handle_error(e, "During application initialization")
        raise typer.Exit(1)

    set_config_manager(config_manager)
    if not debug:
        logging.getLogger().setLevel(config_manager.settings.logging.level)


def _setup_logging(debug: bool = False) -> None:
    """
    Set up application logging.

    Args:
        debug: Enable debug logging
    """
    level = logging.DEBUG if debug else logging.INFO

    logging.basicConfig(
        level=level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        handlers=[
            logging.StreamHandler(sys.stderr),
        ],
    )

    # Reduce noise from third-party libraries
    if not debug:
        logging.getLogger("aiohttp").setLevel(logging.WARNING)


def _register_commands() -> None:
    """Register command functions with the main app."""
    # Import commands here to avoid circular imports
    from mediahub.cli.commands import info, providers, reading, search, sources, trending

    app.command(name="search")(search.search)
    app.command(name="info")(info.info)
    app.command(name="sources")(sources.sources)
    app.command(name="servers")(sources.servers)
    app.command(name="chapter")(reading.chapter)
    app.command(name="page")(reading.page)
    app.command(name="trending")(trending.trending)
    app.command(name="providers")(providers.providers)


# Register commands at module level to ensure they're available for help
_register_commands()


def cli_main() -> None:
    """
    Main CLI entry point for the mediahub command.

    This function is called when the user runs 'mediahub' from the command line.
    """
    try:
        app()
    except KeyboardInterrupt:
        get_console().print("\n[yellow]Operation cancelled by user[/yellow]")
        sys.exit(130)  # Standard exit code for SIGINT
    except Exception as e:
        handle_error(e, "Unexpected error in CLI")
        sys.exit(1)


# Export main components
__all__ = ["app", "cli_main"]
