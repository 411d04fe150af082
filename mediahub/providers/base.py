"""
Base Converter Interface - Abstract base class for category converters.

A converter owns one media category. It calls the scraping API for the
providers of that category and maps every response onto the unified
model. Converters never raise for upstream failures: search returns an
empty page, info returns None and list calls return an empty list.
"""

import logging
from abc import ABC, abstractmethod
from typing import Any, List, Optional

from mediahub.core.models import (
    ChapterPages,
    MediaCategory,
    PaginatedResults,
    SearchOptions,
    Server,
    SourceResult,
)
from mediahub.providers.consumet import ConsumetClient


class CategoryConverter(ABC):
    """
    Abstract base class for category converters.

    Subclasses set their category and implement search and info. Source,
    server and chapter lookups default to "not supported" and are
    overridden by the categories that have them.
    """

    category: MediaCategory

    def __init__(self, client: ConsumetClient):
        """
        Initialize the converter.

        Args:
            client: Scraping API client
        """
        self.client = client
        self.logger = logging.getLogger(f"{__name__}.{self.__class__.__name__}")

    @abstractmethod
    async def search(self, query: str, provider: str, options: Optional[SearchOptions] = None) -> PaginatedResults:
        """
        Search one provider.

        Args:
            query: Search text
            provider: Provider name
            options: Paging and filter options

        Returns:
            A page of results, empty on failure
        """
        pass

    @abstractmethod
    async def get_info(self, media_id: str, provider: str, **kwargs: Any) -> Optional[Any]:
        """
        Fetch the detail record of one title.

        Returns:
            Detail record, None on failure
        """
        pass

    async def get_episode_sources(
        self,
        episode_id: str,
        provider: str,
        media_id: Optional[str] = None,
        server: Optional[str] = None,
        sub_or_dub: Optional[str] = None,
    ) -> Optional[SourceResult]:
        """Resolve playable sources. Not supported unless overridden."""
        self.logger.debug(f"{self.category} converter has no episode sources")
        return None

    async def get_episode_servers(self, episode_id: str, provider: str, media_id: Optional[str] = None) -> List[Server]:
        """List streaming servers. Not supported unless overridden."""
        return []

    async def get_chapter_pages(self, chapter_id: str, provider: str) -> Optional[ChapterPages]:
        """Resolve chapter page images. Not supported unless overridden."""
        self.logger.debug(f"{self.category} converter has no chapter pages")
        return None

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(category='{self.category}')"


# Export base converter
__all__ = ["CategoryConverter"]
