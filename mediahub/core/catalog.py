"""
Provider Catalog - Known providers, their categories and health.

The catalog is static data: which providers exist, which category each
one serves, which provider is the default per category, and how
reliable each video provider currently is.
"""

from typing import Dict, List, Literal, Optional

from pydantic import BaseModel, Field

from mediahub.core.models import MediaCategory


class ProviderInfo(BaseModel):
    """Static description of a provider."""

    name: str
    display_name: str
    category: MediaCategory
    language: str = "en"
    is_working: bool = True
    base_url: Optional[str] = None
    supported_types: List[str] = Field(default_factory=list)
    is_meta: bool = Field(False, description="Aggregates data from other sources")


class ProviderHealth(BaseModel):
    """Observed reliability of a video provider."""

    name: str
    display_name: str
    status: Literal["working", "partial", "broken"]
    search_works: bool
    info_works: bool
    sources_work: bool
    has_m3u8: bool
    score: int = Field(..., ge=0, le=100)
    notes: Optional[str] = None


def _provider(name: str, display_name: str, category: MediaCategory, base_url: str, **kwargs) -> ProviderInfo:
    return ProviderInfo(name=name, display_name=display_name, category=category, base_url=base_url, **kwargs)


_MOVIE_TYPES = ["movie", "tv"]

PROVIDERS: Dict[str, ProviderInfo] = {p.name: p for p in [
    # Anime
    _provider("hianime", "HiAnime", MediaCategory.ANIME, "https://hianime.to"),
    _provider("animepahe", "AnimePahe", MediaCategory.ANIME, "https://animepahe.com"),
    _provider("animekai", "AnimeKai", MediaCategory.ANIME, "https://animekai.to"),
    _provider("kickassanime", "KickAssAnime", MediaCategory.ANIME, "https://kickassanime.am"),
    # Movies and TV
    _provider("flixhq", "FlixHQ", MediaCategory.MOVIE, "https://flixhq.to", supported_types=_MOVIE_TYPES),
    _provider("goku", "Goku", MediaCategory.MOVIE, "https://goku.sx", supported_types=_MOVIE_TYPES),
    _provider("sflix", "SFlix", MediaCategory.MOVIE, "https://sflix.to", supported_types=_MOVIE_TYPES),
    _provider("himovies", "HiMovies", MediaCategory.MOVIE, "https://himovies.to", supported_types=_MOVIE_TYPES),
    _provider("dramacool", "DramaCool", MediaCategory.MOVIE, "https://dramacool.ee", supported_types=_MOVIE_TYPES),
    # Manga
    _provider("mangadex", "MangaDex", MediaCategory.MANGA, "https://mangadex.org"),
    _provider("mangahere", "MangaHere", MediaCategory.MANGA, "https://mangahere.cc"),
    _provider("mangapill", "MangaPill", MediaCategory.MANGA, "https://mangapill.com"),
    _provider("comick", "ComicK", MediaCategory.MANGA, "https://comick.io"),
    _provider("mangareader", "MangaReader", MediaCategory.MANGA, "https://mangareader.to"),
    _provider("asurascans", "AsuraScans", MediaCategory.MANGA, "https://asuracomic.net"),
    # Meta
    _provider("anilist", "AniList", MediaCategory.ANIME, "https://anilist.co", is_meta=True),
    _provider("anilist-manga", "AniList Manga", MediaCategory.MANGA, "https://anilist.co", is_meta=True),
    _provider("tmdb", "TMDB", MediaCategory.MOVIE, "https://www.themoviedb.org", supported_types=_MOVIE_TYPES, is_meta=True),
    _provider("myanimelist", "MyAnimeList", MediaCategory.ANIME, "https://myanimelist.net", is_meta=True),
    # Other categories
    _provider("libgen", "Library Genesis", MediaCategory.BOOK, "https://libgen.is"),
    _provider("novelupdates", "NovelUpdates", MediaCategory.LIGHT_NOVEL, "https://www.novelupdates.com"),
    _provider("getcomics", "GetComics", MediaCategory.COMIC, "https://getcomics.info"),
    _provider("animenewsnetwork", "Anime News Network", MediaCategory.NEWS, "https://animenewsnetwork.com"),
]}

DEFAULT_PROVIDERS: Dict[MediaCategory, str] = {
    MediaCategory.ANIME: "anilist",
    MediaCategory.MOVIE: "flixhq",
    MediaCategory.TV: "flixhq",
    MediaCategory.MANGA: "mangadex",
    MediaCategory.BOOK: "libgen",
    MediaCategory.LIGHT_NOVEL: "novelupdates",
    MediaCategory.COMIC: "getcomics",
    MediaCategory.NEWS: "animenewsnetwork",
}

ANIME_HEALTH: List[ProviderHealth] = [
    ProviderHealth(
        name="hianime", display_name="HiAnime", status="working",
        search_works=True, info_works=True, sources_work=True, has_m3u8=True, score=100,
        notes="Primary anime provider. Sources come from the MegaCloud extractor.",
    ),
    ProviderHealth(
        name="animepahe", display_name="AnimePahe", status="working",
        search_works=True, info_works=True, sources_work=True, has_m3u8=True, score=95,
        notes="Reliable sources, multiple quality options.",
    ),
    ProviderHealth(
        name="animekai", display_name="AnimeKai", status="working",
        search_works=True, info_works=True, sources_work=True, has_m3u8=True, score=95,
        notes="Fast and reliable. Good subtitle support.",
    ),
    ProviderHealth(
        name="kickassanime", display_name="KickAssAnime", status="broken",
        search_works=False, info_works=False, sources_work=False, has_m3u8=False, score=6,
        notes="Currently returning 404 errors on all requests.",
    ),
]

MOVIE_HEALTH: List[ProviderHealth] = [
    ProviderHealth(
        name="flixhq", display_name="FlixHQ", status="working",
        search_works=True, info_works=True, sources_work=True, has_m3u8=True, score=100,
        notes="Primary movie/TV provider. Wide content library.",
    ),
    ProviderHealth(
        name="goku", display_name="Goku", status="working",
        search_works=True, info_works=True, sources_work=True, has_m3u8=True, score=100,
        notes="Good backup for FlixHQ. Similar content library.",
    ),
    ProviderHealth(
        name="sflix", display_name="SFlix", status="partial",
        search_works=True, info_works=True, sources_work=False, has_m3u8=False, score=56,
        notes="Search and info work but sources return 502 errors.",
    ),
    ProviderHealth(
        name="himovies", display_name="HiMovies", status="partial",
        search_works=True, info_works=True, sources_work=False, has_m3u8=False, score=50,
        notes="Uses the FlixHQ backend. May have similar issues.",
    ),
    ProviderHealth(
        name="dramacool", display_name="DramaCool", status="broken",
        search_works=False, info_works=False, sources_work=False, has_m3u8=False, score=6,
        notes="For Asian dramas only. Not returning results for general searches.",
    ),
]

VideoKind = Literal["anime", "movie", "tv"]


def get_provider_info(name: str) -> Optional[ProviderInfo]:
    """Look up a provider by name."""
    return PROVIDERS.get(name)


def get_providers_by_category(category: MediaCategory) -> List[ProviderInfo]:
    """All providers serving a category. TV is served by movie providers."""
    category = MediaCategory(category)
    if category == MediaCategory.TV:
        category = MediaCategory.MOVIE
    return [p for p in PROVIDERS.values() if p.category == category]


def get_all_providers() -> List[ProviderInfo]:
    return list(PROVIDERS.values())


def is_valid_provider(name: str) -> bool:
    return name in PROVIDERS


def get_default_provider(category: MediaCategory) -> str:
    """Default provider for a category."""
    return DEFAULT_PROVIDERS.get(MediaCategory(category), "anilist")


def _ranking(records: List[ProviderHealth]) -> List[str]:
    # sorted() is stable, equal scores keep catalog order
    return [p.name for p in sorted((p for p in records if p.sources_work), key=lambda p: -p.score)]


def get_anime_provider_ranking() -> List[str]:
    """Anime providers with working sources, best first."""
    return _ranking(ANIME_HEALTH)


def get_movie_provider_ranking() -> List[str]:
    """Movie/TV providers with working sources, best first."""
    return _ranking(MOVIE_HEALTH)


def get_working_providers(kind: VideoKind) -> List[str]:
    return get_anime_provider_ranking() if kind == "anime" else get_movie_provider_ranking()


def get_primary_provider(kind: VideoKind) -> str:
    """Best provider for a media kind."""
    ranking = get_working_providers(kind)
    if ranking:
        return ranking[0]
    return "animepahe" if kind == "anime" else "flixhq"


def get_fallback_providers(kind: VideoKind) -> List[str]:
    """Working providers other than the primary one."""
    return get_working_providers(kind)[1:]


def get_provider_health(name: str) -> Optional[ProviderHealth]:
    return next((p for p in ANIME_HEALTH + MOVIE_HEALTH if p.name == name), None)


def is_provider_working(name: str) -> bool:
    """Whether a video provider currently yields sources."""
    health = get_provider_health(name)
    return health.sources_work if health else False


def get_provider_display_name(name: str) -> str:
    health = get_provider_health(name)
    if health:
        return health.display_name
    info = get_provider_info(name)
    return info.display_name if info else name


# Export catalog
__all__ = [
    "ProviderInfo",
    "ProviderHealth",
    "PROVIDERS",
    "DEFAULT_PROVIDERS",
    "get_provider_info",
    "get_providers_by_category",
    "get_all_providers",
    "is_valid_provider",
    "get_default_provider",
    "get_anime_provider_ranking",
    "get_movie_provider_ranking",
    "get_working_providers",
    "get_primary_provider",
    "get_fallback_providers",
    "get_provider_health",
    "is_provider_working",
    "get_provider_display_name",
]
