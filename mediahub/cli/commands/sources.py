"""
Sources Commands - Resolve playable sources and list servers for an episode.
"""

from typing import Optional

import typer

from mediahub.cli.context import run_with_aggregator
from mediahub.cli.output import print_json
from mediahub.core.exceptions import MediaHubError
from mediahub.ui import UIComponents, display_warning, get_console, handle_error, status_spinner


def sources(
    episode_id: str = typer.Argument(..., help="Provider-specific episode id"),
    provider: str = typer.Option(..., "--provider", "-p", help="Video provider name"),
    media_id: Optional[str] = typer.Option(
        None, "--media-id", "-m", help="Parent media id, required by movie and TV providers"
    ),
    server: Optional[str] = typer.Option(None, "--server", "-s", help="Preferred server name"),
    audio: str = typer.Option("sub", "--audio", "-a", help="sub, dub or both"),
    as_json: bool = typer.Option(False, "--json", help="Print raw JSON"),
) -> None:
    """
    ▶️  Resolve playable stream URLs for an episode.

    Examples:

        mediahub sources "one-piece-100?ep=2142" --provider hianime

        mediahub sources 10766 --provider flixhq --media-id movie/watch-dune-10766
    """
    if audio not in ("sub", "dub", "both"):
        display_warning("--audio must be one of sub, dub or both.", "⚠️  Invalid Option")
        raise typer.Exit(1)

    try:
        with status_spinner("Resolving sources...", enabled=not as_json):
            result = run_with_aggregator(
                lambda aggregator: aggregator.get_episode_sources(
                    episode_id, provider, media_id=media_id, server=server, sub_or_dub=audio
                )
            )
    except MediaHubError as e:
        handle_error(e, "While resolving sources")
        raise typer.Exit(1)

    if as_json:
        print_json(result)
        return

    if result is None:
        display_warning(
            f"No playable sources found for '{episode_id}' on {provider}.\n"
            "Try another server or provider.",
            "▶️  No Sources"
        )
        raise typer.Exit(1)

    get_console().print(UIComponents().create_sources_table(result))


def servers(
    episode_id: str = typer.Argument(..., help="Provider-specific episode id"),
    provider: str = typer.Option(..., "--provider", "-p", help="Video provider name"),
    media_id: Optional[str] = typer.Option(None, "--media-id", "-m", help="Parent media id"),
    as_json: bool = typer.Option(False, "--json", help="Print raw JSON"),
) -> None:
    """🖥️  List streaming servers offered for an episode."""
    try:
        with status_spinner("Listing servers...", enabled=not as_json):
            result = run_with_aggregator(
                lambda aggregator: aggregator.get_episode_servers(episode_id, provider, media_id=media_id)
            )
    except MediaHubError as e:
        handle_error(e, "While listing servers")
        raise typer.Exit(1)

    if as_json:
        print_json(result)
        return

    if not result:
        display_warning(f"No servers listed for '{episode_id}'.", "🖥️  No Servers")
        return

    get_console().print(UIComponents().create_servers_table(result))


# Export source commands
__all__ = ["sources", "servers"]
