"""
Movie Converter - FlixHQ, Goku, SFlix, HiMovies and DramaCool.

Wraps the ``/movies/{provider}`` routes of the scraping API. Movie and
TV sources need both the episode id and the media id. TV episodes that
carry season numbers are grouped into seasons.
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
    convert_list,
    convert_servers,
    convert_sources,
    extract_title,
    group_seasons,
    paginate,
    parse_year,
    release_date_of,
    results_list,
    safe_dict,
    safe_id,
    safe_int,
    safe_number,
    safe_string,
    safe_string_array,
)


# Providers served by another provider's backend
BACKEND_ALIASES: Dict[str, str] = {
    "himovies": "flixhq",
}


def convert_movie_result(data: Dict[str, Any], provider: str) -> Optional[SearchResult]:
    """Convert one movie/TV search hit, None when it has no id."""
    item_id = safe_id(data.get('id'))
    if item_id is None:
        return None

    return SearchResult(
        id=item_id,
        title=extract_title(data.get('title')),
        image=safe_string(data.get('image')),
        cover=safe_string(data.get('cover')),
        type=safe_string(data.get('type')),
        release_date=release_date_of(data.get('releaseDate')),
        year=parse_year(data.get('releaseDate')),
        rating=safe_number(data.get('rating')),
        duration=safe_string(data.get('duration')) or safe_int(data.get('duration')),
        provider=provider,
        url=safe_string(data.get('url')),
    )


def convert_movie_info(data: Dict[str, Any], provider: str) -> Optional[MediaInfo]:
    """Convert a movie/TV detail record, None when it has no id."""
    base = convert_movie_result(data, provider)
    if base is None:
        return None

    fields = base.model_dump()
    fields.update(
        description=safe_string(data.get('description')),
        status=safe_string(data.get('status')),
        genres=safe_string_array(data.get('genres')),
        total_episodes=safe_int(data.get('totalEpisodes')),
    )

    episodes, seasons = group_seasons(data.get('episodes'))
    return MediaInfo(
        **fields,
        directors=safe_string_array(data.get('directors')),
        writers=safe_string_array(data.get('writers')),
        actors=safe_string_array(data.get('casts') or data.get('actors')),
        total_seasons=safe_int(data.get('totalSeasons')),
        episodes=episodes,
        seasons=seasons,
        similar=convert_list(data.get('similar'), lambda r: convert_movie_result(r, provider)),
        recommendations=convert_list(data.get('recommendations'), lambda r: convert_movie_result(r, provider)),
    )


class MovieConverter(CategoryConverter):
    """Converter for the movie and TV category."""

    category = MediaCategory.MOVIE

    @staticmethod
    def backend(provider: str) -> str:
        """Scraping API backend serving a provider."""
        return BACKEND_ALIASES.get(provider, provider)

    async def search(self, query: str, provider: str = "flixhq", options: Optional[SearchOptions] = None) -> PaginatedResults:
        options = options or SearchOptions()
        try:
            data = await self.client.get("movies", self.backend(provider), query, page=options.page)
            return paginate(data, lambda r: convert_movie_result(r, provider), options.page)
        except Exception as e:
            self.logger.warning(f"Movie search error ({provider}): {e}")
            return PaginatedResults.empty(options.page)

    async def get_info(self, media_id: str, provider: str = "flixhq", **kwargs: Any) -> Optional[MediaInfo]:
        try:
            data = await self.client.get("movies", self.backend(provider), "info", id=media_id)
            return convert_movie_info(safe_dict(data), provider)
        except Exception as e:
            self.logger.warning(f"Movie info error ({provider}): {e}")
            return None

    async def get_episode_sources(
        self,
        episode_id: str,
        provider: str = "flixhq",
        media_id: Optional[str] = None,
        server: Optional[str] = None,
        sub_or_dub: Optional[str] = None,
    ) -> Optional[SourceResult]:
        """
        Resolve sources for a movie or TV episode.

        Args:
            episode_id: Provider episode id
            provider: Provider name
            media_id: Id of the movie or show the episode belongs to
            server: Preferred server name
            sub_or_dub: Ignored by movie providers

        Returns:
            Sources, None on failure
        """
        try:
            data = await self.client.get(
                "movies", self.backend(provider), "watch",
                episodeId=episode_id, mediaId=media_id, server=server,
            )
            return convert_sources(data)
        except Exception as e:
            self.logger.warning(f"Episode sources error ({provider}): {e}")
            return None

    async def get_episode_servers(self, episode_id: str, provider: str = "flixhq", media_id: Optional[str] = None) -> List[Server]:
        try:
            data = await self.client.get(
                "movies", self.backend(provider), "servers",
                episodeId=episode_id, mediaId=media_id,
            )
            return convert_servers(data)
        except Exception as e:
            self.logger.warning(f"Episode servers error ({provider}): {e}")
            return []

    # FlixHQ discovery

    async def _flixhq_list(self, *segments: str, **params: Any) -> List[SearchResult]:
        label = "/".join(segments)
        try:
            data = await self.client.get("movies", "flixhq", *segments, **params)
            return results_list(data, lambda r: convert_movie_result(r, "flixhq"))
        except Exception as e:
            self.logger.warning(f"FlixHQ {label} error: {e}")
            return []

    async def get_recent_movies(self) -> List[SearchResult]:
        return await self._flixhq_list("recent-movies")

    async def get_recent_shows(self) -> List[SearchResult]:
        return await self._flixhq_list("recent-shows")

    async def get_trending_movies(self) -> List[SearchResult]:
        return await self._flixhq_list("trending", type="movie")

    async def get_trending_shows(self) -> List[SearchResult]:
        return await self._flixhq_list("trending", type="tv")

    async def get_spotlight(self) -> List[SearchResult]:
        return await self._flixhq_list("spotlight")

    async def _flixhq_page(self, kind: str, value: str, page: int) -> PaginatedResults:
        try:
            data = await self.client.get("movies", "flixhq", kind, value, page=page)
            return paginate(data, lambda r: convert_movie_result(r, "flixhq"), page)
        except Exception as e:
            self.logger.warning(f"FlixHQ {kind} '{value}' error: {e}")
            return PaginatedResults.empty(page)

    async def get_by_genre(self, genre: str, page: int = 1) -> PaginatedResults:
        """Browse FlixHQ by genre, e.g. "action"."""
        return await self._flixhq_page("genre", genre, page)

    async def get_by_country(self, country: str, page: int = 1) -> PaginatedResults:
        """Browse FlixHQ by country code, e.g. "US"."""
        return await self._flixhq_page("country", country, page)


# Export movie converter
__all__ = ["MovieConverter", "BACKEND_ALIASES", "convert_movie_result", "convert_movie_info"]
