"""
Info Command - Show the detail record of one title.
"""

from typing import Optional

import typer

from mediahub.cli.context import run_with_aggregator
from mediahub.cli.output import print_json
from mediahub.core.exceptions import MediaHubError
from mediahub.core.models import MediaCategory, MediaInfo
from mediahub.ui import UIComponents, display_warning, get_console, handle_error, status_spinner


def info(
    media_id: str = typer.Argument(..., help="Provider-specific media id"),
    provider: Optional[str] = typer.Option(None, "--provider", "-p", help="Provider name"),
    category: MediaCategory = typer.Option(
        MediaCategory.ANIME, "--category", "-c", help="Category, used to pick the default provider"
    ),
    dub: bool = typer.Option(False, "--dub", help="Ask AniList for dubbed episodes"),
    as_json: bool = typer.Option(False, "--json", help="Print raw JSON"),
) -> None:
    """
    📋 Show details, episodes or chapters of a title.

    Examples:

        mediahub info 21 --provider anilist

        mediahub info tv/watch-the-office-38370 --provider flixhq --category tv
    """
    try:
        with status_spinner("Fetching details...", enabled=not as_json):
            record = run_with_aggregator(
                lambda aggregator: aggregator.get_info(media_id, provider, category, dub=dub)
            )
    except MediaHubError as e:
        handle_error(e, "While fetching details")
        raise typer.Exit(1)

    if as_json:
        print_json(record)
        return

    if record is None:
        display_warning(f"No details found for '{media_id}'.", "📋 Not Found")
        raise typer.Exit(1)

    console = get_console()
    if not isinstance(record, MediaInfo):
        # News articles have no episode or chapter listing
        print_json(record)
        return

    components = UIComponents()
    console.print(components.create_info_panel(record))
    if record.episodes or record.seasons:
        console.print(components.create_episodes_table(record))
    elif record.chapters:
        console.print(components.create_chapters_table(record))


# Export info command
__all__ = ["info"]
