"""
Manga Converter - MangaDex, MangaHere, MangaPill, ComicK, MangaReader, AsuraScans.

Wraps the ``/manga/{provider}`` routes of the scraping API. Requests for
a manga provider the API does not know are served by MangaDex. MangaDex
also exposes popular, recently added, latest updated and random lists.
"""

from typing import Any, Dict, Optional

from mediahub.core.models import (
    ChapterPages,
    MediaCategory,
    MediaInfo,
    PaginatedResults,
    SearchOptions,
    SearchResult,
)
from mediahub.providers.base import CategoryConverter
from mediahub.providers.common.utils import (
    convert_chapter_pages,
    convert_chapters,
    convert_list,
    extract_alt_titles,
    extract_description,
    extract_title,
    numeric_year,
    paginate,
    safe_dict,
    safe_id,
    safe_number,
    safe_string,
    safe_string_array,
)


DEFAULT_PER_PAGE = 20


def convert_manga_result(data: Dict[str, Any], provider: str) -> Optional[SearchResult]:
    """Convert one manga search hit, None when it has no id."""
    item_id = safe_id(data.get('id'))
    if item_id is None:
        return None

    return SearchResult(
        id=item_id,
        title=extract_title(data.get('title')),
        alt_titles=extract_alt_titles(data.get('title')),
        image=safe_string(data.get('image')),
        cover=safe_string(data.get('cover')),
        description=extract_description(data.get('description')),
        status=safe_string(data.get('status')),
        release_date=safe_string(data.get('releaseDate')),
        year=numeric_year(data.get('releaseDate')),
        rating=safe_number(data.get('rating')),
        genres=safe_string_array(data.get('genres')),
        provider=provider,
        url=safe_string(data.get('url')),
    )


def convert_manga_info(data: Dict[str, Any], provider: str) -> Optional[MediaInfo]:
    """Convert a manga detail record, None when it has no id."""
    base = convert_manga_result(data, provider)
    if base is None:
        return None

    chapters = convert_chapters(data.get('chapters'))
    related = convert_list(data.get('recommendations'), lambda r: convert_manga_result(r, provider))

    fields = base.model_dump()
    fields['total_chapters'] = len(chapters) if isinstance(data.get('chapters'), list) else None
    return MediaInfo(
        **fields,
        chapters=chapters,
        similar=related,
        recommendations=list(related),
    )


class MangaConverter(CategoryConverter):
    """Converter for the manga category."""

    category = MediaCategory.MANGA
    fallback_provider = "mangadex"

    def backend(self, provider: str) -> str:
        """Scraping API backend for a provider, MangaDex when unknown."""
        if provider in self.providers:
            return provider
        self.logger.warning(f"Manga provider {provider} not available, using {self.fallback_provider}")
        return self.fallback_provider

    async def search(self, query: str, provider: str = "mangadex", options: Optional[SearchOptions] = None) -> PaginatedResults:
        options = options or SearchOptions()
        backend = self.backend(provider)
        try:
            data = await self.client.get("manga", backend, query, page=options.page)
            return paginate(data, lambda r: convert_manga_result(r, backend), options.page)
        except Exception as e:
            self.logger.warning(f"Manga search error ({provider}): {e}")
            return PaginatedResults.empty(options.page)

    async def get_info(self, media_id: str, provider: str = "mangadex", **kwargs: Any) -> Optional[MediaInfo]:
        backend = self.backend(provider)
        try:
            data = await self.client.get("manga", backend, "info", id=media_id)
            return convert_manga_info(safe_dict(data), backend)
        except Exception as e:
            self.logger.warning(f"Manga info error ({provider}): {e}")
            return None

    async def get_chapter_pages(self, chapter_id: str, provider: str = "mangadex") -> Optional[ChapterPages]:
        """
        Resolve the page images of a chapter.

        Pages come back sorted and numbered 1..N.

        Args:
            chapter_id: Provider chapter id
            provider: Provider name

        Returns:
            Chapter pages, None on failure
        """
        try:
            data = await self.client.get("manga", self.backend(provider), "read", chapterId=chapter_id)
            return convert_chapter_pages(data, chapter_id)
        except Exception as e:
            self.logger.warning(f"Chapter pages error ({provider}): {e}")
            return None

    # MangaDex discovery

    async def _mangadex_page(self, name: str, page: int, per_page: int) -> PaginatedResults:
        try:
            data = await self.client.get("manga", "mangadex", name, page=page, perPage=per_page)
            return paginate(data, lambda r: convert_manga_result(r, "mangadex"), page)
        except Exception as e:
            self.logger.warning(f"MangaDex {name} error: {e}")
            return PaginatedResults.empty(page)

    async def get_popular(self, page: int = 1, per_page: int = DEFAULT_PER_PAGE) -> PaginatedResults:
        return await self._mangadex_page("popular", page, per_page)

    async def get_recently_added(self, page: int = 1, per_page: int = DEFAULT_PER_PAGE) -> PaginatedResults:
        return await self._mangadex_page("recent", page, per_page)

    async def get_latest_updates(self, page: int = 1, per_page: int = DEFAULT_PER_PAGE) -> PaginatedResults:
        return await self._mangadex_page("latest-updates", page, per_page)

    async def get_random(self) -> Optional[MediaInfo]:
        """A random MangaDex title."""
        try:
            data = await self.client.get("manga", "mangadex", "random")
            return convert_manga_info(safe_dict(data), "mangadex")
        except Exception as e:
            self.logger.warning(f"Random manga error: {e}")
            return None


# Export manga converter
__all__ = ["MangaConverter", "convert_manga_result", "convert_manga_info"]
