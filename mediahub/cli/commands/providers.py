"""
Providers Command - List catalogued providers and their reliability.
"""

from typing import Optional

import typer

from mediahub.cli.output import print_json
from mediahub.core.catalog import (
    get_all_providers,
    get_fallback_providers,
    get_primary_provider,
    get_provider_health,
    get_providers_by_category,
)
from mediahub.core.models import MediaCategory
from mediahub.ui import UIComponents, get_console


def providers(
    category: Optional[MediaCategory] = typer.Option(
        None, "--category", "-c", help="Only list providers of this category"
    ),
    as_json: bool = typer.Option(False, "--json", help="Print raw JSON"),
) -> None:
    """
    🔌 List providers with their category and health.

    Examples:

        mediahub providers

        mediahub providers --category anime
    """
    listed = get_all_providers() if category is None else get_providers_by_category(category)
    health = {}
    for provider in listed:
        record = get_provider_health(provider.name)
        if record is not None:
            health[provider.name] = record

    if as_json:
        print_json([
            {**provider.model_dump(mode="json"), "health": health.get(provider.name)}
            for provider in listed
        ])
        return

    console = get_console()
    console.print(UIComponents().create_providers_table(listed, health))

    for kind in ("anime", "movie"):
        if category is None or category.value == kind or (kind == "movie" and category == MediaCategory.TV):
            fallbacks = ", ".join(get_fallback_providers(kind)) or "none"
            console.print(
                f"[dim]{kind.title()}:[/dim] primary [bold]{get_primary_provider(kind)}[/bold], "
                f"fallbacks {fallbacks}"
            )


# Export providers command
__all__ = ["providers"]
