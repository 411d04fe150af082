"""
Reading Commands - Chapter pages, light novel text and MangaPlus page downloads.
"""

from pathlib import Path

import typer

from mediahub.cli.context import run_with_aggregator
from mediahub.cli.output import print_json
from mediahub.core.catalog import get_provider_info
from mediahub.core.exceptions import MediaHubError
from mediahub.core.models import MediaCategory
from mediahub.ui import (
    UIComponents,
    display_info,
    display_warning,
    get_console,
    handle_error,
    status_spinner,
)


def chapter(
    chapter_id: str = typer.Argument(..., help="Chapter id, or a MangaPlus viewer URL"),
    provider: str = typer.Option("mangadex", "--provider", "-p", help="Manga or light novel provider"),
    as_json: bool = typer.Option(False, "--json", help="Print raw JSON"),
) -> None:
    """
    📖 Resolve a chapter: page images for manga, text for light novels.

    Examples:

        mediahub chapter 5f1c6d0e-... --provider mangadex

        mediahub chapter https://mangaplus.shueisha.co.jp/viewer/1000486

        mediahub chapter some-novel/chapter-1 --provider novelupdates
    """
    info = get_provider_info(provider)
    is_novel = info is not None and info.category == MediaCategory.LIGHT_NOVEL

    try:
        with status_spinner("Loading chapter...", enabled=not as_json):
            if is_novel:
                result = run_with_aggregator(lambda aggregator: aggregator.get_chapter_content(chapter_id, provider))
            else:
                result = run_with_aggregator(lambda aggregator: aggregator.get_chapter_pages(chapter_id, provider))
    except MediaHubError as e:
        handle_error(e, "While loading chapter")
        raise typer.Exit(1)

    if as_json:
        print_json(result)
        return

    if result is None:
        display_warning(f"Chapter '{chapter_id}' could not be loaded.", "📖 Not Found")
        raise typer.Exit(1)

    console = get_console()
    if is_novel:
        console.print(result.content or "[dim](empty chapter)[/dim]")
    else:
        console.print(UIComponents().create_pages_table(result))


def page(
    image_url: str = typer.Argument(..., help="MangaPlus CDN image URL"),
    encryption_key: str = typer.Argument(..., help="Hex XOR key from the chapter response"),
    output: Path = typer.Option(
        Path("page.jpg"), "--output", "-o", help="File to write the decrypted image to", dir_okay=False
    ),
) -> None:
    """
    🖼️  Download and decrypt one MangaPlus page.

    Example:

        mediahub page https://jumpg-assets.tokyo-cdn.com/secure/title/.../1.jpg 8a3f... -o 001.jpg
    """
    try:
        with status_spinner("Downloading page..."):
            data = run_with_aggregator(lambda aggregator: aggregator.get_mangaplus_page(image_url, encryption_key))
    except MediaHubError as e:
        handle_error(e, "While downloading page")
        raise typer.Exit(1)

    output.parent.mkdir(parents=True, exist_ok=True)
    output.write_bytes(data)
    display_info(f"Saved {len(data)} bytes to {output}", "🖼️  Page Saved")


# Export reading commands
__all__ = ["chapter", "page"]
