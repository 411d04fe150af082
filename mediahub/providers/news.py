"""
News Converter - Anime News Network.

The news feed is browsed by topic rather than searched; the query given
to search is used as the topic filter.
"""

from typing import Any, Dict, List, Optional

from mediahub.core.models import MediaCategory, NewsInfo, NewsResult, PaginatedResults, SearchOptions
from mediahub.providers.base import CategoryConverter
from mediahub.providers.common.utils import (
    convert_list,
    safe_dict,
    safe_id,
    safe_string,
    safe_string_array,
)


NEWS_TOPICS = ("anime", "animation", "manga", "games", "novels", "live-action", "covid-19", "industry", "music", "people", "merch", "events")


def convert_news_result(data: Dict[str, Any], provider: str = "animenewsnetwork") -> Optional[NewsResult]:
    item_id = safe_id(data.get('id'))
    if item_id is None:
        return None

    preview = data.get('preview')
    if isinstance(preview, dict):
        preview = safe_string(preview.get('intro')) or safe_string(preview.get('full'))

    return NewsResult(
        id=item_id,
        title=safe_string(data.get('title')) or "Unknown",
        image=safe_string(data.get('thumbnail')) or safe_string(data.get('image')),
        description=safe_string(data.get('description')),
        url=safe_string(data.get('url')) or "",
        uploaded_at=safe_string(data.get('uploadedAt')),
        topics=safe_string_array(data.get('topics')),
        preview=safe_string(preview),
        provider=provider,
    )


def convert_news_info(data: Dict[str, Any], provider: str = "animenewsnetwork") -> Optional[NewsInfo]:
    item_id = safe_id(data.get('id'))
    if item_id is None:
        return None

    return NewsInfo(
        id=item_id,
        title=safe_string(data.get('title')) or "Unknown",
        image=safe_string(data.get('thumbnail')) or safe_string(data.get('image')),
        description=safe_string(data.get('intro')),
        url=safe_string(data.get('url')) or "",
        uploaded_at=safe_string(data.get('uploadedAt')),
        author=safe_string(data.get('author')),
        content=safe_string(data.get('description')) or safe_string(data.get('content')),
        provider=provider,
    )


class NewsConverter(CategoryConverter):
    """Converter for the news category."""

    category = MediaCategory.NEWS

    async def get_feeds(self, topic: Optional[str] = None) -> List[NewsResult]:
        """
        Latest news items.

        Args:
            topic: Optional topic filter, see NEWS_TOPICS
        """
        try:
            data = await self.client.get("news", "ann", "recent-feeds", topic=topic)
        except Exception as e:
            self.logger.warning(f"News feed error: {e}")
            return []
        items = data if isinstance(data, list) else safe_dict(data).get('results')
        return convert_list(items, convert_news_result)

    async def search(self, query: str, provider: str = "animenewsnetwork", options: Optional[SearchOptions] = None) -> PaginatedResults:
        options = options or SearchOptions()
        topic = query.strip().lower() or None
        if topic is not None and topic not in NEWS_TOPICS:
            self.logger.debug(f"Unknown news topic '{topic}', returning the unfiltered feed")
            topic = None
        return PaginatedResults(current_page=options.page, has_next_page=False, results=await self.get_feeds(topic))

    async def get_info(self, media_id: str, provider: str = "animenewsnetwork", **kwargs: Any) -> Optional[NewsInfo]:
        try:
            data = await self.client.get("news", "ann", "info", id=media_id)
            return convert_news_info(safe_dict(data), provider)
        except Exception as e:
            self.logger.warning(f"News info error: {e}")
            return None


# Export news converter
__all__ = ["NewsConverter", "NEWS_TOPICS", "convert_news_result", "convert_news_info"]
