"""
Meta Converter - AniList, AniList Manga and TMDB.

Meta providers aggregate catalogue data from other sites rather than
hosting media themselves. Their ids are stable catalogue ids, which is
why they are the default entry point for anime searches.
"""

import json
from typing import Any, Dict, List, Literal, Optional

from mediahub.core.models import (
    MediaCategory,
    MediaInfo,
    PaginatedResults,
    SearchOptions,
    SearchResult,
    SourceResult,
)
from mediahub.providers.anime import convert_anime_info, convert_anime_result
from mediahub.providers.base import CategoryConverter
from mediahub.providers.common.utils import (
    convert_chapters,
    convert_list,
    convert_sources,
    extract_alt_titles,
    extract_description,
    extract_title,
    numeric_year,
    paginate,
    release_date_of,
    safe_dict,
    safe_id,
    safe_number,
    safe_string,
    safe_string_array,
)
from mediahub.providers.movie import convert_movie_info, convert_movie_result


DEFAULT_PER_PAGE = 20

TmdbType = Literal["movie", "tv"]
TimePeriod = Literal["day", "week"]


def convert_anilist_manga_result(data: Dict[str, Any]) -> Optional[SearchResult]:
    """Convert one AniList manga hit, None when it has no id."""
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
        release_date=release_date_of(data.get('releaseDate')),
        year=numeric_year(data.get('releaseDate')),
        rating=safe_number(data.get('rating')),
        genres=safe_string_array(data.get('genres')),
        provider="anilist-manga",
        url=safe_string(data.get('url')),
    )


def convert_anilist_manga_info(data: Dict[str, Any]) -> Optional[MediaInfo]:
    """Convert an AniList manga detail record."""
    base = convert_anilist_manga_result(data)
    if base is None:
        return None

    chapters = convert_chapters(data.get('chapters'))
    related = convert_list(data.get('recommendations'), convert_anilist_manga_result)

    fields = base.model_dump()
    fields['total_chapters'] = len(chapters) if isinstance(data.get('chapters'), list) else None
    return MediaInfo(**fields, chapters=chapters, similar=related, recommendations=list(related))


class MetaConverter(CategoryConverter):
    """
    Converter for meta providers.

    Meta providers span categories: anilist and myanimelist list anime,
    anilist-manga lists manga and tmdb lists movies and TV. MyAnimeList
    is catalogued but has no route, so its searches come back empty.
    """

    category = MediaCategory.ANIME

    async def search(self, query: str, provider: str = "anilist", options: Optional[SearchOptions] = None) -> PaginatedResults:
        options = options or SearchOptions()
        if provider == "anilist":
            return await self.search_anilist(query, options)
        if provider == "anilist-manga":
            return await self.search_anilist_manga(query, options)
        if provider == "tmdb":
            return await self.search_tmdb(query, options)

        self.logger.debug(f"Meta provider {provider} has no search route")
        return PaginatedResults.empty(options.page)

    async def get_info(self, media_id: str, provider: str = "anilist", **kwargs: Any) -> Optional[MediaInfo]:
        """
        Fetch a detail record from a meta provider.

        Args:
            media_id: Catalogue id
            provider: Meta provider name
            **kwargs: ``dub`` for AniList, ``media_type`` ("movie" or "tv") for TMDB

        Returns:
            Detail record, None on failure or unsupported provider
        """
        if provider == "anilist":
            return await self.get_anilist_info(media_id, dub=bool(kwargs.get('dub', False)))
        if provider == "anilist-manga":
            return await self.get_anilist_manga_info(media_id)
        if provider == "tmdb":
            return await self.get_tmdb_info(media_id, kwargs.get('media_type') or "movie")

        self.logger.debug(f"Meta provider {provider} has no info route")
        return None

    async def get_episode_sources(
        self,
        episode_id: str,
        provider: str = "anilist",
        media_id: Optional[str] = None,
        server: Optional[str] = None,
        sub_or_dub: Optional[str] = None,
    ) -> Optional[SourceResult]:
        if provider == "anilist":
            return await self._watch(provider, ("meta", "anilist", "watch", episode_id), {})
        if provider == "tmdb":
            return await self._watch(provider, ("meta", "tmdb", "watch", episode_id), {'id': media_id})
        return None

    async def _watch(self, provider: str, segments: tuple, params: Dict[str, Any]) -> Optional[SourceResult]:
        try:
            data = await self.client.get(*segments, **params)
            return convert_sources(data)
        except Exception as e:
            self.logger.warning(f"Episode sources error ({provider}): {e}")
            return None

    # AniList anime

    async def search_anilist(self, query: str, options: Optional[SearchOptions] = None) -> PaginatedResults:
        options = options or SearchOptions()
        try:
            data = await self.client.get("meta", "anilist", query, page=options.page, perPage=options.per_page)
            return paginate(data, lambda r: convert_anime_result(r, "anilist"), options.page)
        except Exception as e:
            self.logger.warning(f"AniList search error: {e}")
            return PaginatedResults.empty(options.page)

    async def get_anilist_info(self, media_id: str, dub: bool = False) -> Optional[MediaInfo]:
        try:
            data = await self.client.get("meta", "anilist", "info", media_id, dub=dub)
            return convert_anime_info(safe_dict(data), "anilist")
        except Exception as e:
            self.logger.warning(f"AniList info error: {e}")
            return None

    async def _anilist_page(self, name: str, page: int, **params: Any) -> PaginatedResults:
        try:
            data = await self.client.get("meta", "anilist", name, page=page, **params)
            return paginate(data, lambda r: convert_anime_result(r, "anilist"), page)
        except Exception as e:
            self.logger.warning(f"AniList {name} error: {e}")
            return PaginatedResults.empty(page)

    async def get_trending_anime(self, page: int = 1, per_page: int = DEFAULT_PER_PAGE) -> PaginatedResults:
        return await self._anilist_page("trending", page, perPage=per_page)

    async def get_popular_anime(self, page: int = 1, per_page: int = DEFAULT_PER_PAGE) -> PaginatedResults:
        return await self._anilist_page("popular", page, perPage=per_page)

    async def get_anime_by_genres(self, genres: List[str], page: int = 1, per_page: int = DEFAULT_PER_PAGE) -> PaginatedResults:
        """
        Browse AniList by genre.

        Args:
            genres: Genre names, e.g. ["Action", "Fantasy"]
        """
        return await self._anilist_page("genre", page, genres=json.dumps(genres), perPage=per_page)

    async def get_airing_schedule(
        self,
        page: int = 1,
        per_page: int = DEFAULT_PER_PAGE,
        week_start: Optional[int] = None,
        week_end: Optional[int] = None,
    ) -> PaginatedResults:
        """
        AniList airing schedule.

        Args:
            week_start: Window start as a unix timestamp
            week_end: Window end as a unix timestamp
        """
        return await self._anilist_page(
            "airing-schedule", page, perPage=per_page, weekStart=week_start, weekEnd=week_end
        )

    # AniList manga

    async def search_anilist_manga(self, query: str, options: Optional[SearchOptions] = None) -> PaginatedResults:
        options = options or SearchOptions()
        try:
            data = await self.client.get("meta", "anilist-manga", query, page=options.page, perPage=options.per_page)
            return paginate(data, convert_anilist_manga_result, options.page)
        except Exception as e:
            self.logger.warning(f"AniList manga search error: {e}")
            return PaginatedResults.empty(options.page)

    async def get_anilist_manga_info(self, media_id: str) -> Optional[MediaInfo]:
        try:
            data = await self.client.get("meta", "anilist-manga", "info", media_id)
            return convert_anilist_manga_info(safe_dict(data))
        except Exception as e:
            self.logger.warning(f"AniList manga info error: {e}")
            return None

    # TMDB

    async def search_tmdb(self, query: str, options: Optional[SearchOptions] = None) -> PaginatedResults:
        options = options or SearchOptions()
        try:
            data = await self.client.get("meta", "tmdb", query, page=options.page)
            return paginate(data, lambda r: convert_movie_result(r, "tmdb"), options.page)
        except Exception as e:
            self.logger.warning(f"TMDB search error: {e}")
            return PaginatedResults.empty(options.page)

    async def get_tmdb_info(self, media_id: str, media_type: TmdbType = "movie") -> Optional[MediaInfo]:
        try:
            data = await self.client.get("meta", "tmdb", "info", media_id, type=media_type)
            return convert_movie_info(safe_dict(data), "tmdb")
        except Exception as e:
            self.logger.warning(f"TMDB info error: {e}")
            return None

    async def get_tmdb_trending(
        self,
        media_type: Literal["all", "movie", "tv", "people"] = "all",
        time_period: TimePeriod = "week",
        page: int = 1,
    ) -> PaginatedResults:
        try:
            data = await self.client.get("meta", "tmdb", "trending", type=media_type, timePeriod=time_period, page=page)
            return paginate(data, lambda r: convert_movie_result(r, "tmdb"), page)
        except Exception as e:
            self.logger.warning(f"TMDB trending error: {e}")
            return PaginatedResults.empty(page)


# Export meta converter
__all__ = ["MetaConverter", "convert_anilist_manga_result", "convert_anilist_manga_info"]
