"""
Search Command - Search one provider or a category's default provider.
"""

import logging
from typing import Optional

import typer

from mediahub.cli.context import run_with_aggregator
from mediahub.cli.output import print_json
from mediahub.core.exceptions import MediaHubError
from mediahub.core.models import MediaCategory, SearchOptions
from mediahub.ui import UIComponents, display_warning, get_console, handle_error, status_spinner


logger = logging.getLogger(__name__)


def search(
    query: str = typer.Argument(..., help="Title to search for"),
    provider: Optional[str] = typer.Option(
        None, "--provider", "-p", help="Provider name (see 'mediahub providers')"
    ),
    category: MediaCategory = typer.Option(
        MediaCategory.ANIME, "--category", "-c", help="Category, used to pick the default provider"
    ),
    page: int = typer.Option(1, "--page", min=1, help="Result page"),
    as_json: bool = typer.Option(False, "--json", help="Print raw JSON"),
) -> None:
    """
    🔍 Search for a title.

    Examples:

        mediahub search "one piece"

        mediahub search "dune" --category movie

        mediahub search "berserk" --provider mangadex --json
    """
    query = query.strip()
    if not query:
        display_warning("Search query must not be empty.", "⚠️  Empty Query")
        raise typer.Exit(1)

    # An explicit provider picks its own category
    search_category = None if provider else category
    options = SearchOptions(page=page)

    try:
        with status_spinner(f"Searching for '{query}'...", enabled=not as_json):
            results = run_with_aggregator(
                lambda aggregator: aggregator.search(query, provider, search_category, options)
            )
    except MediaHubError as e:
        handle_error(e, "During search")
        raise typer.Exit(1)

    logger.debug(f"Search returned {len(results.results)} result(s)")

    if as_json:
        print_json(results)
        return

    if not results.results:
        display_warning(f"No results for '{query}'.", "🔍 No Results")
        return

    get_console().print(UIComponents().create_results_table(results, f"🔍 Results for '{query}'"))


# Export search command
__all__ = ["search"]
