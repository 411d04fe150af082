"""
Comic Converter - GetComics.

GetComics groups its search hits into containers; the hits are
flattened into one result page. Each hit carries its download mirrors
directly, so download links are read from the search payload.
"""

from typing import Any, Dict, List, Optional

from mediahub.core.models import MediaCategory, PaginatedResults, SearchOptions, SearchResult
from mediahub.providers.base import CategoryConverter
from mediahub.providers.common.utils import (
    convert_list,
    parse_year,
    safe_dict,
    safe_id,
    safe_int,
    safe_list,
    safe_string,
)


DOWNLOAD_LINK_FIELDS = ("download", "readOnline", "ufile", "mega", "mediafire", "zippyshare")


def convert_comic_result(data: Dict[str, Any], provider: str = "getcomics") -> SearchResult:
    """Convert one comic hit. Hits without id or title get the id "unknown"."""
    year = data.get('year')
    return SearchResult(
        id=safe_id(data.get('id')) or safe_id(data.get('title')) or "unknown",
        title=safe_string(data.get('title')) or "Unknown",
        image=safe_string(data.get('image')),
        description=safe_string(data.get('description')) or safe_string(data.get('excerpt')),
        year=parse_year(str(year)) if year else None,
        provider=provider,
        url=safe_string(data.get('upipi')) or safe_string(data.get('url')),
    )


def extract_download_links(data: Dict[str, Any]) -> List[str]:
    """Download mirrors of one comic hit, without duplicates."""
    links: List[str] = []
    for field in DOWNLOAD_LINK_FIELDS:
        value = data.get(field)
        if isinstance(value, dict):
            value = value.get('link')
        if isinstance(value, str) and value and value not in links:
            links.append(value)
    for item in safe_list(data.get('links')):
        value = item if isinstance(item, str) else safe_string(safe_dict(item).get('link'))
        if value and value not in links:
            links.append(value)
    return links


def flatten_comics(raw: Any) -> List[Dict[str, Any]]:
    """Collect comic hits from containers, a results list or a bare list."""
    if isinstance(raw, list):
        return [safe_dict(item) for item in raw]

    data = safe_dict(raw)
    if isinstance(data.get('containers'), list):
        return [
            safe_dict(comic)
            for container in data['containers']
            for comic in safe_list(safe_dict(container).get('comics'))
        ]
    return [safe_dict(item) for item in safe_list(data.get('results'))]


class ComicConverter(CategoryConverter):
    """Converter for the comic category."""

    category = MediaCategory.COMIC

    async def _search_raw(self, query: str, page: int) -> Any:
        return await self.client.get("comics", "getComics", "s", query=query, page=page)

    async def search(self, query: str, provider: str = "getcomics", options: Optional[SearchOptions] = None) -> PaginatedResults:
        options = options or SearchOptions()
        try:
            data = await self._search_raw(query, options.page)
        except Exception as e:
            self.logger.warning(f"Comic search error: {e}")
            return PaginatedResults.empty(options.page)

        results = convert_list(flatten_comics(data), lambda r: convert_comic_result(r, provider))
        envelope = safe_dict(data)
        current_page = safe_int(envelope.get('currentPage'))
        return PaginatedResults(
            current_page=current_page if current_page and current_page > 0 else options.page,
            has_next_page=envelope.get('hasNextPage') is True,
            total_pages=safe_int(envelope.get('totalPages')),
            total_results=len(results),
            results=results,
        )

    async def get_info(self, media_id: str, provider: str = "getcomics", **kwargs: Any) -> Optional[SearchResult]:
        """GetComics has no detail route."""
        self.logger.debug("Comic providers have no info route")
        return None

    async def get_download_links(self, query: str, comic_id: str, page: int = 1) -> List[str]:
        """
        Download mirrors of one comic.

        Args:
            query: Search text the comic was found with
            comic_id: Id of the comic within those results
            page: Result page the comic was on

        Returns:
            Mirror URLs, empty when the comic is not found or the search fails
        """
        try:
            data = await self._search_raw(query, page)
        except Exception as e:
            self.logger.warning(f"Comic download links error: {e}")
            return []

        for comic in flatten_comics(data):
            if convert_comic_result(comic).id == comic_id:
                return extract_download_links(comic)

        self.logger.debug(f"Comic {comic_id} not found in results for '{query}'")
        return []


# Export comic converter
__all__ = ["ComicConverter", "convert_comic_result", "extract_download_links", "flatten_comics"]
