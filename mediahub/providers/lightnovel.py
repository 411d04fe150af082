"""
Light Novel Converter - NovelUpdates.

Light novels have chapters like manga, but a chapter resolves to text
content instead of page images.
"""

from typing import Any, Dict, Optional

from mediahub.core.models import (
    ChapterContent,
    MediaCategory,
    MediaInfo,
    PaginatedResults,
    SearchOptions,
    SearchResult,
)
from mediahub.providers.base import CategoryConverter
from mediahub.providers.common.utils import (
    convert_chapters,
    extract_description,
    extract_title,
    paginate,
    release_date_of,
    safe_dict,
    safe_id,
    safe_number,
    safe_string,
    safe_string_array,
)


def convert_lightnovel_result(data: Dict[str, Any], provider: str) -> Optional[SearchResult]:
    item_id = safe_id(data.get('id'))
    if item_id is None:
        return None

    return SearchResult(
        id=item_id,
        title=extract_title(data.get('title')),
        image=safe_string(data.get('image')),
        description=extract_description(data.get('description')),
        status=safe_string(data.get('status')),
        release_date=release_date_of(data.get('releaseDate')),
        rating=safe_number(data.get('rating')),
        genres=safe_string_array(data.get('genres')),
        provider=provider,
        url=safe_string(data.get('url')),
    )


def convert_lightnovel_info(data: Dict[str, Any], provider: str) -> Optional[MediaInfo]:
    base = convert_lightnovel_result(data, provider)
    if base is None:
        return None

    fields = base.model_dump()
    fields['cover'] = safe_string(data.get('cover'))
    return MediaInfo(**fields, chapters=convert_chapters(data.get('chapters')))


class LightNovelConverter(CategoryConverter):
    """Converter for the light novel category."""

    category = MediaCategory.LIGHT_NOVEL

    async def search(self, query: str, provider: str = "novelupdates", options: Optional[SearchOptions] = None) -> PaginatedResults:
        options = options or SearchOptions()
        try:
            data = await self.client.get("light-novels", provider, query)
            return paginate(data, lambda r: convert_lightnovel_result(r, provider), options.page)
        except Exception as e:
            self.logger.warning(f"Light novel search error: {e}")
            return PaginatedResults.empty(options.page)

    async def get_info(self, media_id: str, provider: str = "novelupdates", **kwargs: Any) -> Optional[MediaInfo]:
        try:
            data = await self.client.get("light-novels", provider, "info", id=media_id)
            return convert_lightnovel_info(safe_dict(data), provider)
        except Exception as e:
            self.logger.warning(f"Light novel info error: {e}")
            return None

    async def get_chapter_content(self, chapter_id: str, provider: str = "novelupdates") -> Optional[ChapterContent]:
        """
        Fetch the text of one chapter.

        Returns:
            Chapter text, empty when upstream has none, None on failure
        """
        try:
            data = await self.client.get("light-novels", provider, "read", chapterId=chapter_id)
            return ChapterContent(chapter_id=chapter_id, content=safe_string(safe_dict(data).get('text')) or "")
        except Exception as e:
            self.logger.warning(f"Chapter content error: {e}")
            return None


# Export light novel converter
__all__ = ["LightNovelConverter", "convert_lightnovel_result", "convert_lightnovel_info"]
