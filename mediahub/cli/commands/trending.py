"""
Trending Command - Curated discovery lists per category.
"""

from enum import Enum

import typer

from mediahub.cli.context import run_with_aggregator
from mediahub.cli.output import print_json
from mediahub.core.exceptions import MediaHubError
from mediahub.core.models import MediaCategory
from mediahub.ui import UIComponents, display_warning, get_console, handle_error, status_spinner


class DiscoveryList(str, Enum):
    TRENDING = "trending"
    POPULAR = "popular"
    RECENT = "recent"


def trending(
    category: MediaCategory = typer.Argument(MediaCategory.ANIME, help="Category to browse"),
    kind: DiscoveryList = typer.Option(DiscoveryList.TRENDING, "--list", "-l", help="Which list to show"),
    page: int = typer.Option(1, "--page", min=1, help="Result page"),
    as_json: bool = typer.Option(False, "--json", help="Print raw JSON"),
) -> None:
    """
    🔥 Show trending, popular or recently updated titles.

    Examples:

        mediahub trending

        mediahub trending manga --list recent
    """
    try:
        with status_spinner(f"Loading {kind.value} {category.value}...", enabled=not as_json):
            results = run_with_aggregator(
                lambda aggregator: getattr(aggregator, kind.value)(category, page)
            )
    except MediaHubError as e:
        handle_error(e, f"While loading {kind.value} list")
        raise typer.Exit(1)

    if as_json:
        print_json(results)
        return

    if not results.results:
        display_warning(f"No {kind.value} list for {category.value}.", "🔥 Nothing Here")
        return

    get_console().print(
        UIComponents().create_results_table(results, f"🔥 {kind.value.title()} {category.value}")
    )


# Export trending command
__all__ = ["trending", "DiscoveryList"]
