"""
Anime Converter - HiAnime, AnimePahe, AnimeKai and KickAssAnime.

Wraps the ``/anime/{provider}`` routes of the scraping API. HiAnime
additionally exposes curated lists (top airing, most popular, spotlight,
schedule) which are only available from that provider.
"""

from typing import Any, Dict, List, Optional

from mediahub.core.models import (
    MediaCategory,
    MediaInfo,
    PaginatedResults,
    SearchOptions,
    SearchResult,
    Server,
    SourceResult,
)
from mediahub.providers.base import CategoryConverter
from mediahub.providers.common.utils import (
    convert_episodes,
    convert_list,
    convert_servers,
    convert_sources,
    extract_alt_titles,
    extract_description,
    extract_sub_or_dub,
    extract_title,
    numeric_year,
    paginate,
    release_date_of,
    results_list,
    safe_dict,
    safe_id,
    safe_int,
    safe_number,
    safe_string,
    safe_string_array,
)


HIANIME_LISTS = ("top-airing", "most-popular", "most-favorite", "recently-updated")


def convert_anime_result(data: Dict[str, Any], provider: str) -> Optional[SearchResult]:
    """Convert one anime search hit, None when it has no id."""
    item_id = safe_id(data.get('id'))
    if item_id is None:
        return None

    release_date = release_date_of(data.get('releaseDate'))
    return SearchResult(
        id=item_id,
        title=extract_title(data.get('title')),
        alt_titles=extract_alt_titles(data.get('title')),
        image=safe_string(data.get('image')),
        cover=safe_string(data.get('cover')),
        description=extract_description(data.get('description')),
        type=safe_string(data.get('type')),
        status=safe_string(data.get('status')),
        release_date=release_date,
        year=numeric_year(data.get('releaseDate')),
        rating=safe_number(data.get('rating')),
        genres=safe_string_array(data.get('genres')),
        total_episodes=safe_int(data.get('totalEpisodes')),
        duration=safe_string(data.get('duration')) or safe_int(data.get('duration')),
        sub_or_dub=extract_sub_or_dub(data.get('subOrDub')),
        provider=provider,
        url=safe_string(data.get('url')),
    )


def convert_anime_info(data: Dict[str, Any], provider: str) -> Optional[MediaInfo]:
    """Convert an anime detail record, None when it has no id."""
    base = convert_anime_result(data, provider)
    if base is None:
        return None

    related = convert_list(data.get('recommendations'), lambda r: convert_anime_result(r, provider))
    return MediaInfo(
        **base.model_dump(),
        studios=safe_string_array(data.get('studios')),
        episodes=convert_episodes(data.get('episodes')),
        similar=related,
        recommendations=list(related),
    )


class AnimeConverter(CategoryConverter):
    """Converter for the anime category."""

    category = MediaCategory.ANIME

    async def search(self, query: str, provider: str = "hianime", options: Optional[SearchOptions] = None) -> PaginatedResults:
        options = options or SearchOptions()
        try:
            data = await self.client.get("anime", provider, query, page=options.page)
            return paginate(data, lambda r: convert_anime_result(r, provider), options.page)
        except Exception as e:
            self.logger.warning(f"Anime search error ({provider}): {e}")
            return PaginatedResults.empty(options.page)

    async def get_info(self, media_id: str, provider: str = "hianime", **kwargs: Any) -> Optional[MediaInfo]:
        try:
            data = await self.client.get("anime", provider, "info", id=media_id)
            return convert_anime_info(safe_dict(data), provider)
        except Exception as e:
            self.logger.warning(f"Anime info error ({provider}): {e}")
            return None

    async def get_episode_sources(
        self,
        episode_id: str,
        provider: str = "hianime",
        media_id: Optional[str] = None,
        server: Optional[str] = None,
        sub_or_dub: Optional[str] = None,
    ) -> Optional[SourceResult]:
        """
        Resolve sources through the scraping API.

        Args:
            episode_id: Provider episode id
            provider: Provider name
            media_id: Unused for anime providers
            server: Preferred server name
            sub_or_dub: Audio preference, passed as the category parameter

        Returns:
            Sources, None on failure
        """
        try:
            data = await self.client.get("anime", provider, "watch", episode_id, server=server, category=sub_or_dub)
            return convert_sources(data)
        except Exception as e:
            self.logger.warning(f"Episode sources error ({provider}): {e}")
            return None

    async def get_episode_servers(self, episode_id: str, provider: str = "hianime", media_id: Optional[str] = None) -> List[Server]:
        try:
            data = await self.client.get("anime", provider, "servers", episode_id)
            return convert_servers(data)
        except Exception as e:
            self.logger.warning(f"Episode servers error ({provider}): {e}")
            return []

    # HiAnime curated lists

    async def get_hianime_list(self, name: str, page: int = 1) -> PaginatedResults:
        """
        Fetch one of HiAnime's paginated lists.

        Args:
            name: One of top-airing, most-popular, most-favorite, recently-updated
            page: Page number

        Returns:
            A page of results, empty on failure or unknown list name
        """
        if name not in HIANIME_LISTS:
            self.logger.warning(f"Unknown HiAnime list: {name}")
            return PaginatedResults.empty(page)
        try:
            data = await self.client.get("anime", "hianime", name, page=page)
            return paginate(data, lambda r: convert_anime_result(r, "hianime"), page)
        except Exception as e:
            self.logger.warning(f"HiAnime {name} error: {e}")
            return PaginatedResults.empty(page)

    async def get_top_airing(self, page: int = 1) -> PaginatedResults:
        return await self.get_hianime_list("top-airing", page)

    async def get_most_popular(self, page: int = 1) -> PaginatedResults:
        return await self.get_hianime_list("most-popular", page)

    async def get_most_favorite(self, page: int = 1) -> PaginatedResults:
        return await self.get_hianime_list("most-favorite", page)

    async def get_recently_updated(self, page: int = 1) -> PaginatedResults:
        return await self.get_hianime_list("recently-updated", page)

    async def get_spotlight(self) -> List[SearchResult]:
        """HiAnime's featured titles."""
        try:
            data = await self.client.get("anime", "hianime", "spotlight")
            return results_list(data, lambda r: convert_anime_result(r, "hianime"))
        except Exception as e:
            self.logger.warning(f"Spotlight error: {e}")
            return []

    async def get_schedule(self, date: Optional[str] = None) -> List[SearchResult]:
        """
        HiAnime's airing schedule for one day.

        Args:
            date: Day as YYYY-MM-DD, today when omitted
        """
        try:
            data = await self.client.get("anime", "hianime", "schedule", date=date)
            return results_list(data, lambda r: convert_anime_result(r, "hianime"))
        except Exception as e:
            self.logger.warning(f"Schedule error: {e}")
            return []


# Export anime converter
__all__ = ["AnimeConverter", "convert_anime_result", "convert_anime_info"]
