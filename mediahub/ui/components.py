"""
UI Components - Rich tables for the unified media model.

One builder per model the CLI prints. Search pages may hold search
results, books or news items, so the results table only relies on the
fields those share.
"""

from typing import Any, List, Optional

from rich.panel import Panel
from rich.table import Table

from mediahub.core.catalog import ProviderHealth, ProviderInfo
from mediahub.core.models import (
    ChapterPages,
    MediaInfo,
    PaginatedResults,
    Server,
    SourceResult,
)
from mediahub.ui.console import get_console, get_palette


def _year_of(item: Any) -> str:
    year = getattr(item, 'year', None) or getattr(item, 'uploaded_at', None)
    return str(year) if year else "?"


def _number(value: Any) -> str:
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


class UIComponents:
    """Collection of table builders with consistent styling."""

    def __init__(self):
        self.console = get_console()
        self.palette = get_palette()

    def _table(self, title: str) -> Table:
        return Table(
            title=title,
            show_header=True,
            header_style=f"bold {self.palette.secondary}",
            border_style=self.palette.border,
            expand=True
        )

    def create_results_table(self, page: PaginatedResults, title: str = "🔍 Results") -> Table:
        """
        Create a table of one page of results.

        Args:
            page: Search or discovery page
            title: Table title

        Returns:
            Formatted table, footer shows paging state
        """
        table = self._table(title)
        table.add_column("#", style="dim", width=4)
        table.add_column("ID", style=self.palette.muted, overflow="fold")
        table.add_column("Title", style=self.palette.primary, min_width=30)
        table.add_column("Year", width=10)
        table.add_column("Provider", style=self.palette.accent, width=16)

        for i, item in enumerate(page.results, 1):
            table.add_row(str(i), item.id, item.title, _year_of(item), item.provider)

        more = "more pages available" if page.has_next_page else "last page"
        table.caption = f"Page {page.current_page} · {len(page.results)} result(s) · {more}"
        return table

    def create_info_panel(self, info: MediaInfo) -> Panel:
        """Summary panel for a detail record."""
        lines = [f"[bold]{info.title}[/bold] [dim]({info.provider}:{info.id})[/dim]"]
        if info.alt_titles:
            lines.append(f"[dim]Also known as:[/dim] {', '.join(info.alt_titles[:3])}")
        for label, value in (
            ("Type", info.type),
            ("Status", info.status),
            ("Released", info.release_date),
            ("Rating", info.rating),
            ("Episodes", info.total_episodes),
            ("Chapters", info.total_chapters),
            ("Seasons", info.total_seasons),
        ):
            if value is not None:
                lines.append(f"[dim]{label}:[/dim] {value}")
        if info.genres:
            lines.append(f"[dim]Genres:[/dim] {', '.join(info.genres)}")
        if info.description:
            lines.append("")
            lines.append(info.description)

        return Panel("\n".join(lines), title="📋 Details", border_style=self.palette.border, padding=(1, 2))

    def create_episodes_table(self, info: MediaInfo) -> Table:
        """Episodes of a title, with a season column when seasons are known."""
        table = self._table("📺 Episodes")
        has_seasons = bool(info.seasons)
        if has_seasons:
            table.add_column("Season", width=7)
        table.add_column("#", width=6)
        table.add_column("Title", style=self.palette.primary)
        table.add_column("ID", style=self.palette.muted, overflow="fold")

        if has_seasons:
            for season in info.seasons:
                for episode in season.episodes:
                    table.add_row(str(season.season), _number(episode.number), episode.title or "", episode.id)
        else:
            for episode in info.episodes:
                filler = " [dim](filler)[/dim]" if episode.is_filler else ""
                table.add_row(_number(episode.number), f"{episode.title or ''}{filler}", episode.id)
        return table

    def create_chapters_table(self, info: MediaInfo) -> Table:
        table = self._table("📖 Chapters")
        table.add_column("#", width=8)
        table.add_column("Title", style=self.palette.primary)
        table.add_column("Released", width=12)
        table.add_column("ID", style=self.palette.muted, overflow="fold")

        for chapter in info.chapters:
            table.add_row(_number(chapter.number), chapter.title or "", chapter.release_date or "", chapter.id)
        return table

    def create_sources_table(self, result: SourceResult) -> Table:
        """Playable sources, subtitles are listed in the caption."""
        table = self._table("▶️  Sources")
        table.add_column("Quality", style=self.palette.accent, width=10)
        table.add_column("Type", width=6)
        table.add_column("URL", overflow="fold")

        for source in result.sources:
            kind = "HLS" if source.is_m3u8 else ("DASH" if source.is_dash else "File")
            table.add_row(source.quality or "auto", kind, source.url)

        notes = []
        if result.subtitles:
            notes.append("Subtitles: " + ", ".join(track.lang for track in result.subtitles))
        if result.headers.get('Referer'):
            notes.append(f"Referer: {result.headers['Referer']}")
        if notes:
            table.caption = " · ".join(notes)
        return table

    def create_servers_table(self, servers: List[Server]) -> Table:
        table = self._table("🖥️  Servers")
        table.add_column("Name", style=self.palette.primary, width=20)
        table.add_column("URL", overflow="fold")
        for server in servers:
            table.add_row(server.name, server.url)
        return table

    def create_pages_table(self, chapter: ChapterPages) -> Table:
        """Page list; data URLs are shortened to their prefix."""
        table = self._table(f"🖼️  Pages of {chapter.chapter_id}")
        table.add_column("Page", width=6)
        table.add_column("Image", overflow="fold")
        for page in chapter.pages:
            image = page.img if not page.img.startswith("data:") else f"{page.img[:40]}… ({len(page.img)} chars)"
            table.add_row(str(page.page), image)
        return table

    def create_providers_table(self, providers: List[ProviderInfo], health: Optional[dict] = None) -> Table:
        """
        Catalogued providers, with health where a reliability record exists.

        Args:
            providers: Providers to list
            health: Mapping of provider name to ProviderHealth
        """
        health = health or {}
        table = self._table("🔌 Providers")
        table.add_column("Name", style=self.palette.primary, width=16)
        table.add_column("Display Name", width=20)
        table.add_column("Category", style=self.palette.accent, width=11)
        table.add_column("Health", width=10)
        table.add_column("Score", width=6)
        table.add_column("Notes", style=self.palette.muted)

        for provider in providers:
            record: Optional[ProviderHealth] = health.get(provider.name)
            if record is None:
                status = "[ok]working[/ok]" if provider.is_working else "[bad]offline[/bad]"
                table.add_row(provider.name, provider.display_name, str(provider.category), status, "", "")
                continue

            style = {"working": "ok", "partial": "warn"}.get(record.status, "bad")
            table.add_row(
                provider.name,
                provider.display_name,
                str(provider.category),
                f"[{style}]{record.status}[/{style}]",
                str(record.score),
                record.notes or ""
            )
        return table


# Export UI components
__all__ = ["UIComponents"]
