"""
Tests for the MediaAggregator facade.

The aggregator runs over FakeConsumet and a RecordingRegistry so every
test can assert which path (custom extractor or scraping API) a call
took.
"""

from typing import Any, Dict

import pytest

from mediahub.core.aggregator import MediaAggregator, build_aggregator
from mediahub.core.config_schemas import AppSettings
from mediahub.core.exceptions import (
    ChapterImageError,
    ErrorKind,
    ExtractionError,
    NetworkError,
    ProviderError,
    ValidationError,
)
from mediahub.core.mappings import InMemoryMappingSink, MappingRecorder
from mediahub.core.models import ChapterPage, ChapterPages, MediaCategory, SourceResult
from mediahub.extractors.base import ExtractorContext
from mediahub.extractors.megacloud import MegaCloudExtractor

from conftest import FakeHttp, StubExtractor, make_sources


VIEWER_URL = "https://mangaplus.shueisha.co.jp/viewer/1000486"
WATCH_PAYLOAD = {"headers": {"Referer": "https://kwik.si/"}, "sources": [{"url": "https://cdn/ep.m3u8", "quality": "1080p"}]}


class CapturingExtractor(StubExtractor):
    """Stub extractor that remembers the context it was given."""

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.contexts = []

    async def run(self, context: ExtractorContext, debug: Dict[str, Any]) -> SourceResult:
        self.contexts.append(context)
        return await super().run(context, debug)


class FakeMangaPlus:
    """Stand-in for MangaPlusClient."""

    def __init__(self, outcome):
        self.outcome = outcome
        self.requested = []

    async def get_decrypted_chapter(self, viewer_url: str) -> ChapterPages:
        self.requested.append(viewer_url)
        if isinstance(self.outcome, Exception):
            raise self.outcome
        return self.outcome


class TestEpisodeSources:
    @pytest.mark.asyncio
    async def test_provider_without_extractor_uses_scraping_api(self, aggregator, fake_consumet, registry):
        fake_consumet.add(("anime", "animepahe", "watch", "abc/def"), WATCH_PAYLOAD)

        result = await aggregator.get_episode_sources("abc/def", "animepahe")

        assert result.sources[0].url == "https://cdn/ep.m3u8"
        assert result.headers == {"Referer": "https://kwik.si/"}
        assert registry.extract_calls == []
        assert fake_consumet.calls[0][1] == {"server": None, "category": "sub"}

    @pytest.mark.asyncio
    async def test_extractor_success_skips_scraping_api(self, aggregator, fake_consumet, registry):
        registry.register(StubExtractor("megacloud", ["hianime"], make_sources("https://mc/x.m3u8", "https://megacloud.blog")))

        result = await aggregator.get_episode_sources("one-piece-100$episode$2142", "hianime")

        assert result.sources[0].url == "https://mc/x.m3u8"
        assert registry.extract_calls == ["hianime"]
        assert fake_consumet.calls == []

    @pytest.mark.asyncio
    async def test_extractor_failure_falls_back(self, aggregator, fake_consumet, registry):
        registry.register(StubExtractor("megacloud", ["hianime"], NetworkError("slow down", status_code=429)))
        fake_consumet.add(("anime", "hianime", "watch", "one-piece-100$episode$2142"), WATCH_PAYLOAD)

        result = await aggregator.get_episode_sources("one-piece-100$episode$2142", "hianime")

        assert result.sources[0].quality == "1080p"
        assert registry.extract_calls == ["hianime"]
        assert len(fake_consumet.calls) == 1

    @pytest.mark.asyncio
    async def test_terminal_extractor_failure_returns_none(self, aggregator, fake_consumet, registry):
        registry.register(StubExtractor(
            "megacloud", ["hianime"],
            ExtractionError("Could not find nonce", kind=ErrorKind.FORMAT, should_fallback=False)
        ))

        assert await aggregator.get_episode_sources("x$episode$1", "hianime") is None
        assert fake_consumet.calls == []

    @pytest.mark.asyncio
    async def test_audio_preference_reaches_extractor(self, aggregator, registry):
        extractor = CapturingExtractor("megacloud", ["hianime"], make_sources())
        registry.register(extractor)

        await aggregator.get_episode_sources("x$episode$1", "hianime", server="HD-2", sub_or_dub="dub")
        await aggregator.get_episode_sources("x$episode$1", "hianime", sub_or_dub="both")

        assert extractor.contexts[0].sub_or_dub == "dub"
        assert extractor.contexts[0].server == "HD-2"
        assert extractor.contexts[1].sub_or_dub is None

    @pytest.mark.asyncio
    async def test_empty_scraping_result_is_none(self, aggregator, fake_consumet):
        fake_consumet.add(("anime", "animekai", "watch", "ep"), {"sources": []})

        assert await aggregator.get_episode_sources("ep", "animekai") is None

    @pytest.mark.asyncio
    async def test_upstream_failure_is_none(self, aggregator):
        assert await aggregator.get_episode_sources("ep", "animekai") is None

    @pytest.mark.asyncio
    async def test_movie_sources(self, aggregator, fake_consumet):
        fake_consumet.add(("movies", "flixhq", "watch"), WATCH_PAYLOAD)

        result = await aggregator.get_episode_sources("10766", "flixhq", media_id="movie/watch-dune-1")

        assert result is not None
        assert fake_consumet.calls[0][1]["mediaId"] == "movie/watch-dune-1"

    @pytest.mark.asyncio
    async def test_without_registry(self, fake_consumet):
        fake_consumet.add(("anime", "hianime", "watch", "x$episode$1"), WATCH_PAYLOAD)
        aggregator = MediaAggregator(consumet=fake_consumet, registry=None)

        assert await aggregator.get_episode_sources("x$episode$1", "hianime") is not None

    @pytest.mark.asyncio
    async def test_servers(self, aggregator, fake_consumet):
        fake_consumet.add(("anime", "hianime", "servers", "x$episode$1"), [{"name": "HD-1", "url": "https://s"}])

        servers = await aggregator.get_episode_servers("x$episode$1", "hianime")

        assert [s.name for s in servers] == ["HD-1"]


class TestValidation:
    @pytest.mark.asyncio
    async def test_unknown_provider(self, aggregator):
        with pytest.raises(ValidationError) as exc_info:
            await aggregator.search("naruto", provider="nosuchsite")
        assert exc_info.value.field_name == "provider"
        assert isinstance(exc_info.value, ProviderError)
        assert exc_info.value.provider == "nosuchsite"

    @pytest.mark.asyncio
    async def test_category_mismatch(self, aggregator):
        with pytest.raises(ValidationError):
            await aggregator.search("naruto", provider="hianime", category=MediaCategory.MANGA)

    @pytest.mark.asyncio
    async def test_unknown_category(self, aggregator):
        with pytest.raises(ValidationError):
            await aggregator.search("naruto", category="podcasts")

    @pytest.mark.asyncio
    @pytest.mark.parametrize("method", ["trending", "popular", "recent"])
    async def test_unknown_discovery_category(self, aggregator, fake_consumet, method):
        with pytest.raises(ValidationError) as exc_info:
            await getattr(aggregator, method)("bogus")
        assert exc_info.value.field_name == "category"
        assert fake_consumet.calls == []

    def test_list_providers_unknown_category(self, aggregator):
        with pytest.raises(ValidationError) as exc_info:
            aggregator.list_providers("bogus")
        assert exc_info.value.invalid_value == "bogus"

    @pytest.mark.asyncio
    async def test_provider_or_category_required(self, aggregator):
        with pytest.raises(ValidationError):
            await aggregator.search("naruto")

    @pytest.mark.asyncio
    async def test_blank_episode_id(self, aggregator):
        with pytest.raises(ValidationError):
            await aggregator.get_episode_sources("  ", "hianime")

    @pytest.mark.asyncio
    async def test_movie_requires_media_id(self, aggregator, fake_consumet):
        with pytest.raises(ValidationError) as exc_info:
            await aggregator.get_episode_sources("10766", "flixhq")
        assert exc_info.value.field_name == "media_id"
        assert fake_consumet.calls == []

    @pytest.mark.asyncio
    async def test_sources_need_video_provider(self, aggregator):
        with pytest.raises(ValidationError):
            await aggregator.get_episode_sources("ch-1", "mangadex")

    @pytest.mark.asyncio
    async def test_chapter_pages_need_manga_provider(self, aggregator):
        with pytest.raises(ValidationError):
            await aggregator.get_chapter_pages("ch-1", "hianime")

    @pytest.mark.asyncio
    async def test_chapter_content_needs_light_novel_provider(self, aggregator):
        with pytest.raises(ValidationError):
            await aggregator.get_chapter_content("ch-1", "mangadex")

    @pytest.mark.asyncio
    async def test_info_requires_id(self, aggregator):
        with pytest.raises(ValidationError):
            await aggregator.get_info("", provider="hianime")


class TestRouting:
    @pytest.mark.asyncio
    async def test_anime_category_defaults_to_anilist(self, aggregator, fake_consumet):
        fake_consumet.add(("meta", "anilist", "naruto"), {"results": [{"id": 20, "title": {"english": "Naruto"}}]})

        page = await aggregator.search("naruto", category="anime")

        assert page.results[0].provider == "anilist"
        assert page.results[0].id == "20"

    @pytest.mark.asyncio
    async def test_tv_category_defaults_to_flixhq(self, aggregator, fake_consumet):
        fake_consumet.add(("movies", "flixhq", "dark"), {"results": []})

        await aggregator.search("dark", category=MediaCategory.TV)

        assert fake_consumet.paths == [("movies", "flixhq", "dark")]

    @pytest.mark.asyncio
    async def test_tv_info_on_tmdb(self, aggregator, fake_consumet):
        fake_consumet.add(("meta", "tmdb", "info", "1399"), {"id": "1399", "title": "Game of Thrones"})

        info = await aggregator.get_info("1399", provider="tmdb", category=MediaCategory.TV)

        assert info.title == "Game of Thrones"
        assert fake_consumet.calls[0][1] == {"type": "tv"}

    @pytest.mark.asyncio
    async def test_news_info(self, aggregator, fake_consumet):
        fake_consumet.add(("news", "ann", "info"), {"id": "2024-01-01/headline", "title": "Headline"})

        info = await aggregator.get_info("2024-01-01/headline", category="news")

        assert info.title == "Headline"

    @pytest.mark.asyncio
    async def test_chapter_content(self, aggregator, fake_consumet):
        fake_consumet.add(("light-novels", "novelupdates", "read"), {"text": "Chapter text"})

        content = await aggregator.get_chapter_content("ch-1")

        assert content.content == "Chapter text"

    def test_list_providers(self, aggregator):
        assert len(aggregator.list_providers()) > len(aggregator.list_providers("anime"))
        assert {p.name for p in aggregator.list_providers("tv")} >= {"flixhq", "goku", "tmdb"}


class TestMangaPlusRouting:
    @pytest.mark.asyncio
    async def test_viewer_url_uses_mangaplus(self, fake_consumet):
        chapter = ChapterPages(chapter_id="1000486", pages=[ChapterPage(page=1, img="data:image/jpeg;base64,AA==")])
        mangaplus = FakeMangaPlus(chapter)
        aggregator = MediaAggregator(consumet=fake_consumet, mangaplus=mangaplus)

        assert await aggregator.get_chapter_pages(VIEWER_URL, "mangadex") == chapter
        assert mangaplus.requested == [VIEWER_URL]
        assert fake_consumet.calls == []

    @pytest.mark.asyncio
    async def test_mangaplus_failure_is_none(self, fake_consumet):
        mangaplus = FakeMangaPlus(ChapterImageError("HTTP 429", kind=ErrorKind.RATE_LIMITED))
        aggregator = MediaAggregator(consumet=fake_consumet, mangaplus=mangaplus)

        assert await aggregator.get_chapter_pages(VIEWER_URL, "mangadex") is None

    @pytest.mark.asyncio
    async def test_regular_chapter_uses_scraping_api(self, aggregator, fake_consumet):
        fake_consumet.add(("manga", "mangadex", "read"), [{"page": 1, "img": "https://img/1.png"}])

        pages = await aggregator.get_chapter_pages("ch-uuid", "mangadex")

        assert [p.img for p in pages.pages] == ["https://img/1.png"]

    @pytest.mark.asyncio
    async def test_page_without_client(self, aggregator):
        with pytest.raises(ValidationError):
            await aggregator.get_mangaplus_page("https://jumpg-assets.tokyo-cdn.com/x.jpg", "0f" * 64)


class TestDiscovery:
    @pytest.mark.asyncio
    async def test_trending_anime(self, aggregator, fake_consumet):
        fake_consumet.add(("meta", "anilist", "trending"), {"currentPage": 2, "hasNextPage": True, "results": [{"id": 1}]})

        page = await aggregator.trending("anime", page=2)

        assert page.current_page == 2
        assert fake_consumet.calls[0][1] == {"page": 2, "perPage": 20}

    @pytest.mark.asyncio
    async def test_trending_movies_are_wrapped(self, aggregator, fake_consumet):
        fake_consumet.add(("movies", "flixhq", "trending"), [{"id": "movie/a", "title": "A"}])

        page = await aggregator.trending(MediaCategory.MOVIE)

        assert [r.id for r in page.results] == ["movie/a"]
        assert page.has_next_page is False

    @pytest.mark.asyncio
    async def test_popular_tv_uses_tmdb(self, aggregator, fake_consumet):
        fake_consumet.add(("meta", "tmdb", "trending"), {"results": []})

        await aggregator.popular("tv")

        assert fake_consumet.calls[0][1]["type"] == "tv"

    @pytest.mark.asyncio
    async def test_recent_manga(self, aggregator, fake_consumet):
        fake_consumet.add(("manga", "mangadex", "recent"), {"results": [{"id": "m", "title": "M"}]})

        page = await aggregator.recent("manga")

        assert page.results[0].provider == "mangadex"

    @pytest.mark.asyncio
    async def test_no_list_for_books(self, aggregator, fake_consumet):
        page = await aggregator.trending("book")

        assert page.results == []
        assert fake_consumet.calls == []


class TestLifecycle:
    @pytest.mark.asyncio
    async def test_record_mapping(self, fake_consumet):
        sink = InMemoryMappingSink()
        aggregator = MediaAggregator(consumet=fake_consumet, recorder=MappingRecorder(sink, min_confidence=0.9))

        assert aggregator.record_mapping("anilist:21", "hianime", "one-piece-100", confidence=0.95) is not None
        assert aggregator.record_mapping("anilist:21", "animepahe", "abc", confidence=0.5) is None

        await aggregator.close()

        assert sink.get("anilist:21", "hianime").provider_id == "one-piece-100"
        assert sink.get("anilist:21", "animepahe") is None

    @pytest.mark.asyncio
    async def test_close_closes_owned_clients(self, fake_consumet):
        http = FakeHttp()
        async with MediaAggregator(consumet=fake_consumet, http_clients=[http]):
            pass

        assert http.closed

    @pytest.mark.asyncio
    async def test_build_aggregator(self):
        aggregator = build_aggregator(AppSettings())
        try:
            extractors = aggregator.registry.get_extractors("hianime")
            assert [type(e) for e in extractors] == [MegaCloudExtractor]
            assert aggregator.mangaplus is not None
            assert aggregator.recorder.min_confidence == 0.9
        finally:
            await aggregator.close()

    @pytest.mark.asyncio
    async def test_retries_only_apply_to_scraping_api(self):
        aggregator = build_aggregator(AppSettings(http={"max_retries": 2}))
        try:
            extractor = aggregator.registry.get_extractors("hianime")[0]
            assert extractor.http.max_retries == 0
            assert aggregator.mangaplus.http.max_retries == 0
            assert aggregator.anime.client.http.max_retries == 2
        finally:
            await aggregator.close()
