"""
Media Aggregator - The single entry point over every provider category.

MediaAggregator routes calls by provider name (or by category, using the
category's default provider) to the matching category converter. For
video sources it first consults the extractor registry when a custom
extractor claims the provider, and falls back to the converter when the
extractor asks for it.

Only programmer errors raise (ValidationError): an unknown provider, a
provider used outside its category, or a missing required id. Every
upstream failure comes back as None or an empty value.
"""

import asyncio
import logging
from typing import Any, Dict, List, Optional, Union

from mediahub.core.catalog import (
    ProviderInfo,
    get_all_providers,
    get_default_provider,
    get_provider_info,
    get_providers_by_category,
)
from mediahub.core.config_schemas import AppSettings
from mediahub.core.exceptions import ChapterImageError, ProviderError, ValidationError
from mediahub.core.http import HttpClient
from mediahub.core.mappings import MappingRecorder, MappingSink, ProviderMapping
from mediahub.core.models import (
    ChapterContent,
    ChapterPages,
    MediaCategory,
    PaginatedResults,
    SearchOptions,
    Server,
    SourceResult,
)
from mediahub.extractors.base import ExtractorContext
from mediahub.extractors.registry import ExtractorRegistry, create_registry
from mediahub.mangaplus import MangaPlusClient, is_mangaplus_url
from mediahub.providers import (
    AnimeConverter,
    BookConverter,
    CategoryConverter,
    ComicConverter,
    ConsumetClient,
    LightNovelConverter,
    MangaConverter,
    MetaConverter,
    MovieConverter,
    NewsConverter,
)


logger = logging.getLogger(__name__)


class MediaAggregator:
    """
    Category-and-provider dispatch over the unified model.

    The extractor registry is injected rather than looked up so tests
    can pass their own, or None to disable custom extraction entirely.
    """

    def __init__(
        self,
        consumet: ConsumetClient,
        registry: Optional[ExtractorRegistry] = None,
        mangaplus: Optional[MangaPlusClient] = None,
        recorder: Optional[MappingRecorder] = None,
        http_clients: Optional[List[HttpClient]] = None,
    ):
        """
        Initialize the aggregator.

        Args:
            consumet: Scraping API client shared by all converters
            registry: Custom extractor registry, None to disable
            mangaplus: MangaPlus chapter-image client
            recorder: Provider mapping recorder
            http_clients: HTTP clients owned by this aggregator, closed by close()
        """
        self.registry = registry
        self.mangaplus = mangaplus
        self.recorder = recorder or MappingRecorder()
        self._http_clients = list(http_clients or [])

        self.anime = AnimeConverter(consumet)
        self.movie = MovieConverter(consumet)
        self.manga = MangaConverter(consumet)
        self.meta = MetaConverter(consumet)
        self.book = BookConverter(consumet)
        self.lightnovel = LightNovelConverter(consumet)
        self.comic = ComicConverter(consumet)
        self.news = NewsConverter(consumet)

        self._converters: Dict[MediaCategory, CategoryConverter] = {
            MediaCategory.ANIME: self.anime,
            MediaCategory.MOVIE: self.movie,
            MediaCategory.TV: self.movie,
            MediaCategory.MANGA: self.manga,
            MediaCategory.BOOK: self.book,
            MediaCategory.LIGHT_NOVEL: self.lightnovel,
            MediaCategory.COMIC: self.comic,
            MediaCategory.NEWS: self.news,
        }

    # Routing

    def _provider_info(self, provider: str) -> ProviderInfo:
        info = get_provider_info(provider)
        if info is None:
            raise ProviderError(f"Unknown provider: {provider}", provider=provider)
        return info

    def converter_for(self, provider: str) -> CategoryConverter:
        """
        Get the converter serving a provider.

        Raises:
            ValidationError: If the provider is not catalogued
        """
        info = self._provider_info(provider)
        if info.is_meta:
            return self.meta
        return self._converters[info.category]

    @staticmethod
    def _category(category: Union[MediaCategory, str]) -> MediaCategory:
        try:
            return MediaCategory(category)
        except ValueError:
            raise ValidationError(f"Unknown category: {category}", field_name="category", invalid_value=category)

    def _resolve(self, provider: Optional[str], category: Optional[Union[MediaCategory, str]]) -> str:
        """Pick the provider for a call and check it against the category."""
        if category is not None:
            category = self._category(category)

        if provider is None:
            if category is None:
                raise ValidationError("Either a provider or a category is required", field_name="provider")
            return get_default_provider(category)

        info = self._provider_info(provider)
        if category is not None and info.category != _catalog_category(category):
            raise ValidationError(
                f"Provider {provider} serves {info.category}, not {category}",
                field_name="category",
                invalid_value=str(category)
            )
        return provider

    @staticmethod
    def _require(value: Optional[str], field_name: str) -> str:
        if not value or not str(value).strip():
            raise ValidationError(f"{field_name} is required", field_name=field_name, invalid_value=value)
        return value

    # Search and info

    async def search(
        self,
        query: str,
        provider: Optional[str] = None,
        category: Optional[Union[MediaCategory, str]] = None,
        options: Optional[SearchOptions] = None,
    ) -> PaginatedResults:
        """
        Search one provider.

        Args:
            query: Search text
            provider: Provider name, defaults to the category's default provider
            category: Media category, used when provider is omitted
            options: Paging and filter options

        Returns:
            A page of results, empty on failure

        Raises:
            ValidationError: Unknown provider or category, or a mismatch between them
        """
        provider = self._resolve(provider, category)
        logger.debug(f"Searching {provider} for '{query}'")
        return await self.converter_for(provider).search(query, provider, options or SearchOptions())

    async def get_info(
        self,
        media_id: str,
        provider: Optional[str] = None,
        category: Optional[Union[MediaCategory, str]] = None,
        media_type: Optional[str] = None,
        dub: bool = False,
    ) -> Optional[Any]:
        """
        Fetch the detail record of one title.

        Args:
            media_id: Provider-specific media id
            provider: Provider name, defaults to the category's default provider
            category: Media category, used when provider is omitted
            media_type: "movie" or "tv" for TMDB
            dub: Ask AniList for dubbed episodes

        Returns:
            MediaInfo (NewsInfo for news), None on failure

        Raises:
            ValidationError: Missing id, unknown provider or category mismatch
        """
        self._require(media_id, "media_id")
        provider = self._resolve(provider, category)
        if media_type is None and category is not None and MediaCategory(category) == MediaCategory.TV:
            media_type = "tv"
        return await self.converter_for(provider).get_info(media_id, provider, media_type=media_type, dub=dub)

    # Video

    def _video_converter(self, provider: str) -> CategoryConverter:
        info = self._provider_info(provider)
        if not info.category.is_video:
            raise ValidationError(
                f"Provider {provider} does not serve video",
                field_name="provider",
                invalid_value=provider
            )
        return self.converter_for(provider)

    def _needs_media_id(self, provider: str) -> bool:
        info = self._provider_info(provider)
        return info.category == MediaCategory.MOVIE

    async def get_episode_sources(
        self,
        episode_id: str,
        provider: str,
        media_id: Optional[str] = None,
        server: Optional[str] = None,
        sub_or_dub: Optional[str] = "sub",
    ) -> Optional[SourceResult]:
        """
        Resolve playable sources for an episode.

        Custom extractors are tried first when one claims the provider. A
        successful extraction is returned directly, a terminal failure
        returns None, and any other failure falls back to the converter.
        Providers without extractors go straight to the converter.

        Args:
            episode_id: Provider-specific episode id
            provider: Provider name
            media_id: Parent media id, required by movie and TV providers
            server: Preferred server name
            sub_or_dub: Audio preference

        Returns:
            Sources, None when nothing playable was found

        Raises:
            ValidationError: Missing ids, unknown or non-video provider
        """
        self._require(episode_id, "episode_id")
        converter = self._video_converter(provider)
        if self._needs_media_id(provider):
            self._require(media_id, "media_id")

        if self.registry is not None and self.registry.has_extractors(provider):
            context = ExtractorContext(
                episode_id=episode_id,
                media_id=media_id,
                server=server,
                sub_or_dub=sub_or_dub if sub_or_dub in ("sub", "dub") else None,
            )
            result = await self.registry.extract(provider, context)

            if result.success:
                logger.info(f"Custom extraction succeeded for {provider}:{episode_id}")
                return result.sources
            if not result.should_fallback:
                logger.warning(f"Custom extraction failed terminally for {provider}:{episode_id}: {result.error}")
                return None
            logger.warning(
                f"Custom extraction failed for {provider}:{episode_id} ({result.kind}): {result.error}, "
                f"falling back to scraping API"
            )

        sources = await converter.get_episode_sources(
            episode_id, provider, media_id=media_id, server=server, sub_or_dub=sub_or_dub
        )
        if sources is None or sources.is_empty:
            logger.debug(f"No sources from scraping API for {provider}:{episode_id}")
            return None
        return sources

    async def get_episode_servers(self, episode_id: str, provider: str, media_id: Optional[str] = None) -> List[Server]:
        """
        List streaming servers for an episode.

        Raises:
            ValidationError: Missing ids, unknown or non-video provider
        """
        self._require(episode_id, "episode_id")
        converter = self._video_converter(provider)
        if self._needs_media_id(provider):
            self._require(media_id, "media_id")
        return await converter.get_episode_servers(episode_id, provider, media_id=media_id)

    # Reading

    async def get_chapter_pages(self, chapter_id: str, provider: str = "mangadex") -> Optional[ChapterPages]:
        """
        Resolve the page images of a manga chapter.

        MangaPlus viewer URLs are resolved through the MangaPlus pipeline
        into decrypted data-URL pages.

        Returns:
            Pages numbered 1..N, None on failure

        Raises:
            ValidationError: Missing id, unknown or non-manga provider
        """
        self._require(chapter_id, "chapter_id")
        info = self._provider_info(provider)
        if info.category != MediaCategory.MANGA:
            raise ValidationError(
                f"Provider {provider} does not serve manga chapters",
                field_name="provider",
                invalid_value=provider
            )

        if self.mangaplus is not None and is_mangaplus_url(chapter_id):
            try:
                return await self.mangaplus.get_decrypted_chapter(chapter_id)
            except ChapterImageError as e:
                logger.warning(f"MangaPlus chapter failed ({e.kind}): {e.message}")
                return None

        return await self.converter_for(provider).get_chapter_pages(chapter_id, provider)

    async def get_chapter_content(self, chapter_id: str, provider: str = "novelupdates") -> Optional[ChapterContent]:
        """
        Fetch the text of a light novel chapter.

        Raises:
            ValidationError: Missing id, unknown or non-light-novel provider
        """
        self._require(chapter_id, "chapter_id")
        info = self._provider_info(provider)
        if info.category != MediaCategory.LIGHT_NOVEL:
            raise ValidationError(
                f"Provider {provider} does not serve light novels",
                field_name="provider",
                invalid_value=provider
            )
        return await self.lightnovel.get_chapter_content(chapter_id, provider)

    async def get_mangaplus_chapter(self, viewer_url: str) -> ChapterPages:
        """
        Resolve a MangaPlus chapter into decrypted data-URL pages.

        Raises:
            ChapterImageError: With the failure's ErrorKind
        """
        return await self._mangaplus_client().get_decrypted_chapter(viewer_url)

    async def get_mangaplus_page(self, image_url: str, encryption_key: str) -> bytes:
        """
        Fetch and decrypt one MangaPlus page.

        Raises:
            ChapterImageError: With the failure's ErrorKind
        """
        return await self._mangaplus_client().fetch_page(image_url, encryption_key)

    def _mangaplus_client(self) -> MangaPlusClient:
        if self.mangaplus is None:
            raise ValidationError("MangaPlus client is not configured", field_name="mangaplus")
        return self.mangaplus

    # Discovery

    async def trending(self, category: Union[MediaCategory, str], page: int = 1) -> PaginatedResults:
        """
        Curated trending list for a category.

        Anime comes from AniList, movies and TV from FlixHQ, manga from
        MangaDex's popular list and news from the latest feed. Other
        categories have no trending list and return an empty page.
        """
        category = self._category(category)
        if category == MediaCategory.ANIME:
            return await self.meta.get_trending_anime(page)
        if category == MediaCategory.MOVIE:
            return _as_page(await self.movie.get_trending_movies(), page)
        if category == MediaCategory.TV:
            return _as_page(await self.movie.get_trending_shows(), page)
        if category == MediaCategory.MANGA:
            return await self.manga.get_popular(page)
        if category == MediaCategory.NEWS:
            return _as_page(await self.news.get_feeds(), page)
        return PaginatedResults.empty(page)

    async def popular(self, category: Union[MediaCategory, str], page: int = 1) -> PaginatedResults:
        """Curated popular list for a category, empty when there is none."""
        category = self._category(category)
        if category == MediaCategory.ANIME:
            return await self.meta.get_popular_anime(page)
        if category == MediaCategory.MANGA:
            return await self.manga.get_popular(page)
        if category in (MediaCategory.MOVIE, MediaCategory.TV):
            media_type = "tv" if category == MediaCategory.TV else "movie"
            return await self.meta.get_tmdb_trending(media_type=media_type, page=page)
        return PaginatedResults.empty(page)

    async def recent(self, category: Union[MediaCategory, str], page: int = 1) -> PaginatedResults:
        """Recently updated titles for a category, empty when there is none."""
        category = self._category(category)
        if category == MediaCategory.ANIME:
            return await self.anime.get_recently_updated(page)
        if category == MediaCategory.MOVIE:
            return _as_page(await self.movie.get_recent_movies(), page)
        if category == MediaCategory.TV:
            return _as_page(await self.movie.get_recent_shows(), page)
        if category == MediaCategory.MANGA:
            return await self.manga.get_recently_added(page)
        if category == MediaCategory.NEWS:
            return _as_page(await self.news.get_feeds(), page)
        return PaginatedResults.empty(page)

    # Catalog and mappings

    def list_providers(self, category: Optional[Union[MediaCategory, str]] = None) -> List[ProviderInfo]:
        """Catalogued providers, optionally limited to one category."""
        if category is None:
            return get_all_providers()
        return get_providers_by_category(self._category(category))

    def record_mapping(
        self,
        ref_id: str,
        provider: str,
        provider_id: str,
        provider_title: Optional[str] = None,
        confidence: float = 1.0,
    ) -> Optional[asyncio.Task]:
        """
        Record a resolved provider id in the background.

        Only mappings at or above the configured confidence are written;
        write failures are logged and never reach the caller.

        Returns:
            The scheduled write, or None when skipped
        """
        mapping = ProviderMapping(
            ref_id=ref_id,
            provider=provider,
            provider_id=provider_id,
            provider_title=provider_title,
            confidence=confidence,
        )
        return self.recorder.record(mapping)

    async def close(self) -> None:
        """Wait for pending mapping writes and close owned HTTP clients."""
        await self.recorder.flush()
        for client in self._http_clients:
            await client.close()

    async def __aenter__(self) -> "MediaAggregator":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.close()


def _catalog_category(category: MediaCategory) -> MediaCategory:
    """The catalog lists TV providers under movie."""
    return MediaCategory.MOVIE if category == MediaCategory.TV else category


def _as_page(results: List[Any], page: int) -> PaginatedResults:
    return PaginatedResults(current_page=max(page, 1), has_next_page=False, results=results)


def build_aggregator(settings: Optional[AppSettings] = None, sink: Optional[MappingSink] = None) -> MediaAggregator:
    """
    Wire up an aggregator from settings.

    The extractor registry is built here, once, and injected into the
    aggregator.

    Args:
        settings: Application settings, defaults when None
        sink: Provider mapping storage, discards mappings when None

    Returns:
        Ready-to-use aggregator owning its HTTP clients
    """
    settings = settings or AppSettings()

    # Extractor and MangaPlus requests are never retried
    http = HttpClient(
        timeout=settings.http.timeout,
        user_agent=settings.http.user_agent,
    )
    consumet_http = HttpClient(
        timeout=settings.consumet.timeout,
        user_agent=settings.http.user_agent,
        max_retries=settings.http.max_retries,
    )

    registry = create_registry(settings, http)
    logger.debug(f"Extractor registry built with {len(registry)} extractor(s)")

    return MediaAggregator(
        consumet=ConsumetClient(consumet_http, settings.consumet),
        registry=registry,
        mangaplus=MangaPlusClient(http, settings.mangaplus),
        recorder=MappingRecorder(sink, settings.mappings.min_confidence),
        http_clients=[http, consumet_http],
    )


# Export aggregator
__all__ = ["MediaAggregator", "build_aggregator"]
