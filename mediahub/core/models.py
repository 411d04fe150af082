"""
Core Data Models - Pydantic models for the unified media model.

Every provider's heterogeneous response is normalized into these models
before it leaves MediaHub. They carry no provider-specific types and no
behaviour beyond validation and a few derived conveniences.
"""

from enum import Enum
from typing import Dict, Generic, List, Literal, Optional, TypeVar, Union

from pydantic import BaseModel, Field, field_validator, model_validator


T = TypeVar("T")

SubOrDub = Literal["sub", "dub", "both"]


class MediaCategory(str, Enum):
    """Provider categories MediaHub can route to."""

    ANIME = "anime"
    MOVIE = "movie"
    TV = "tv"
    MANGA = "manga"
    BOOK = "book"
    LIGHT_NOVEL = "lightnovel"
    COMIC = "comic"
    NEWS = "news"

    @property
    def is_video(self) -> bool:
        """Whether this category resolves to playable video sources."""
        return self in (MediaCategory.ANIME, MediaCategory.MOVIE, MediaCategory.TV)

    def __str__(self) -> str:
        return self.value


class SearchResult(BaseModel):
    """
    One item in a provider's search response.

    The id is opaque and only unique within a single provider and
    category; the provider name is always set.
    """

    id: str = Field(..., min_length=1, description="Provider-specific identifier")
    title: str = Field("Unknown", description="Display title")
    alt_titles: List[str] = Field(default_factory=list, description="Alternative titles")
    image: Optional[str] = Field(None, description="Poster image URL")
    cover: Optional[str] = Field(None, description="Cover/banner image URL")
    description: Optional[str] = Field(None, description="Synopsis")
    type: Optional[str] = Field(None, description="TV, Movie, OVA, ...")
    status: Optional[str] = Field(None, description="Airing or publication status")
    release_date: Optional[Union[str, int]] = Field(None, description="Release date as emitted upstream")
    year: Optional[int] = Field(None, description="Release year")
    rating: Optional[float] = Field(None, description="Provider rating")
    genres: List[str] = Field(default_factory=list, description="Genre tags")
    total_episodes: Optional[int] = Field(None, description="Total episodes")
    total_chapters: Optional[int] = Field(None, description="Total chapters")
    duration: Optional[Union[str, int]] = Field(None, description="Runtime")
    sub_or_dub: Optional[SubOrDub] = Field(None, description="Audio availability")
    provider: str = Field(..., min_length=1, description="Provider name")
    url: Optional[str] = Field(None, description="Upstream page URL")

    @field_validator('title')
    @classmethod
    def validate_title(cls, v: str) -> str:
        """Fall back to a placeholder for blank titles."""
        return v.strip() or "Unknown"

    def __str__(self) -> str:
        return f"{self.title} ({self.provider})"

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(id='{self.id}', provider='{self.provider}')"


class Episode(BaseModel):
    """One playable unit. The id is only meaningful to its own provider."""

    id: str = Field(..., min_length=1, description="Provider-specific episode id")
    number: float = Field(0, description="Episode number")
    title: Optional[str] = Field(None, description="Episode title")
    description: Optional[str] = Field(None, description="Episode synopsis")
    image: Optional[str] = Field(None, description="Episode thumbnail")
    release_date: Optional[str] = Field(None, description="Air date")
    is_filler: Optional[bool] = Field(None, description="Whether the episode is filler")
    url: Optional[str] = Field(None, description="Upstream page URL")
    season: Optional[int] = Field(None, description="Season number, when known")

    def __str__(self) -> str:
        number = int(self.number) if float(self.number).is_integer() else self.number
        return f"Episode {number}" + (f": {self.title}" if self.title else "")


class Chapter(BaseModel):
    """One readable chapter of a manga or light novel."""

    id: str = Field(..., min_length=1, description="Provider-specific chapter id")
    number: Union[float, str] = Field(0, description="Chapter number, may be fractional text")
    title: Optional[str] = Field(None, description="Chapter title")
    release_date: Optional[str] = Field(None, description="Release date")
    pages: Optional[int] = Field(None, description="Page count")
    url: Optional[str] = Field(None, description="Upstream page URL")
    volume: Optional[str] = Field(None, description="Volume label")


class Season(BaseModel):
    """Episodes of one season of a TV show."""

    season: int = Field(..., description="Season number")
    image: Optional[str] = Field(None, description="Season poster")
    episodes: List[Episode] = Field(default_factory=list, description="Episodes in this season")


class MediaInfo(SearchResult):
    """
    Full detail record for one title.

    Episodes describe video media, chapters describe readable media; a
    record never carries both. Seasons only ever accompany video media.
    Episode and chapter order is the provider's own.
    """

    studios: List[str] = Field(default_factory=list)
    directors: List[str] = Field(default_factory=list)
    writers: List[str] = Field(default_factory=list)
    actors: List[str] = Field(default_factory=list)
    total_seasons: Optional[int] = Field(None, description="Number of seasons")
    episodes: List[Episode] = Field(default_factory=list)
    chapters: List[Chapter] = Field(default_factory=list)
    seasons: List[Season] = Field(default_factory=list)
    similar: List[SearchResult] = Field(default_factory=list)
    recommendations: List[SearchResult] = Field(default_factory=list)

    @model_validator(mode='after')
    def validate_media_kind(self) -> 'MediaInfo':
        """Episodes/seasons and chapters are mutually exclusive."""
        if self.chapters and (self.episodes or self.seasons):
            raise ValueError("MediaInfo cannot carry both chapters and episodes/seasons")
        return self

    @property
    def all_episodes(self) -> List[Episode]:
        """Flat episode list, flattening seasons when present."""
        if self.episodes:
            return list(self.episodes)
        return [episode for season in self.seasons for episode in season.episodes]


class PlayableSource(BaseModel):
    """One resolved stream variant."""

    url: str = Field(..., min_length=1, description="Stream URL")
    quality: Optional[str] = Field(None, description="Quality label, e.g. 1080p or auto")
    is_m3u8: Optional[bool] = Field(None, description="HLS playlist hint")
    is_dash: Optional[bool] = Field(None, description="DASH manifest hint")
    size: Optional[int] = Field(None, description="Size in bytes")

    @model_validator(mode='after')
    def derive_stream_hint(self) -> 'PlayableSource':
        """Derive the HLS hint from the URL suffix when upstream omits it."""
        if self.is_m3u8 is None:
            self.is_m3u8 = ".m3u8" in self.url.lower()
        return self


class Subtitle(BaseModel):
    """One subtitle track."""

    url: str = Field(..., min_length=1)
    lang: str = Field("Unknown", description="Language label")


class TimeRange(BaseModel):
    """Intro/outro offsets in seconds."""

    start: float = Field(0, ge=0)
    end: float = Field(0, ge=0)


class SourceResult(BaseModel):
    """
    Sources, subtitles and playback headers for one episode.

    An empty source list is treated as a failure by callers, never as a
    valid empty state.
    """

    headers: Dict[str, str] = Field(default_factory=dict, description="Headers required for playback")
    sources: List[PlayableSource] = Field(default_factory=list)
    subtitles: List[Subtitle] = Field(default_factory=list)
    intro: Optional[TimeRange] = None
    outro: Optional[TimeRange] = None
    download: Optional[str] = Field(None, description="Direct download URL")

    @property
    def is_empty(self) -> bool:
        return not self.sources


class Server(BaseModel):
    """A streaming server offered for an episode."""

    name: str = Field(..., min_length=1)
    url: str = Field("", description="Server embed URL")


class ChapterPage(BaseModel):
    """One page image of a chapter."""

    page: int = Field(..., ge=1, description="1-based page number")
    source_page: Optional[int] = Field(None, ge=1, description="Position in the upstream chapter, before failed pages were dropped")
    img: str = Field(..., min_length=1, description="Image URL or data URL")
    headers: Optional[Dict[str, str]] = Field(None, description="Headers required to fetch the image")


class ChapterPages(BaseModel):
    """Resolved page list for a chapter, always sorted by page number."""

    chapter_id: str = Field(..., min_length=1)
    pages: List[ChapterPage] = Field(default_factory=list)

    @field_validator('pages')
    @classmethod
    def sort_pages(cls, v: List[ChapterPage]) -> List[ChapterPage]:
        """Extraction order is not page order."""
        return sorted(v, key=lambda p: p.page)

    @property
    def is_contiguous(self) -> bool:
        """Whether page numbers run 1..N with no gaps."""
        return [p.page for p in self.pages] == list(range(1, len(self.pages) + 1))


class ChapterContent(BaseModel):
    """Text content of a light-novel chapter."""

    chapter_id: str
    content: str = ""


class BookResult(BaseModel):
    """One book search hit."""

    id: str = Field(..., min_length=1)
    title: str = "Unknown"
    authors: List[str] = Field(default_factory=list)
    publisher: Optional[str] = None
    year: Optional[str] = None
    edition: Optional[str] = None
    volume: Optional[str] = None
    series: Optional[str] = None
    image: Optional[str] = None
    description: Optional[str] = None
    link: Optional[str] = None
    isbn: Optional[str] = None
    language: Optional[str] = None
    format: Optional[str] = None
    size: Optional[str] = None
    provider: str = Field(..., min_length=1)


class NewsResult(BaseModel):
    """One item of a news feed."""

    id: str = Field(..., min_length=1)
    title: str = "Unknown"
    image: Optional[str] = None
    description: Optional[str] = None
    url: str = ""
    uploaded_at: Optional[str] = None
    topics: List[str] = Field(default_factory=list)
    preview: Optional[str] = None
    provider: str = Field(..., min_length=1)


class NewsInfo(BaseModel):
    """A full news article."""

    id: str = Field(..., min_length=1)
    title: str = "Unknown"
    image: Optional[str] = None
    description: Optional[str] = None
    url: str = ""
    uploaded_at: Optional[str] = None
    author: Optional[str] = None
    content: Optional[str] = None
    provider: str = Field(..., min_length=1)


class PaginatedResults(BaseModel, Generic[T]):
    """
    Envelope for list endpoints.

    has_next_page=False with non-empty results is a valid last page.
    """

    current_page: int = Field(1, ge=1)
    has_next_page: bool = False
    total_pages: Optional[int] = None
    total_results: Optional[int] = None
    results: List[T] = Field(default_factory=list)

    @classmethod
    def empty(cls, page: int = 1) -> 'PaginatedResults[T]':
        """The value converters return when the upstream call fails."""
        return cls(current_page=max(page, 1), has_next_page=False, results=[])


class SearchOptions(BaseModel):
    """Optional knobs accepted by search and discovery calls."""

    page: int = Field(1, ge=1)
    per_page: Optional[int] = Field(None, ge=1, le=100)
    year: Optional[Union[str, int]] = None
    season: Optional[str] = None
    genres: List[str] = Field(default_factory=list)
    type: Optional[str] = None
    status: Optional[str] = None
    sort: Optional[str] = None
    language: Optional[str] = None


# Export all models
__all__ = [
    "MediaCategory",
    "SubOrDub",
    "SearchResult",
    "MediaInfo",
    "Episode",
    "Chapter",
    "Season",
    "PlayableSource",
    "Subtitle",
    "TimeRange",
    "SourceResult",
    "Server",
    "ChapterPage",
    "ChapterPages",
    "ChapterContent",
    "BookResult",
    "NewsResult",
    "NewsInfo",
    "PaginatedResults",
    "SearchOptions",
]
