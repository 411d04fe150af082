"""
Book Converter - Library Genesis.

Book search returns BookResult records rather than SearchResult since
books carry authors, ISBNs and file metadata instead of episodes or
chapters.
"""

from typing import Any, Dict, List, Optional

from mediahub.core.models import BookResult, MediaCategory, PaginatedResults, SearchOptions
from mediahub.providers.base import CategoryConverter
from mediahub.providers.common.utils import (
    paginate,
    safe_id,
    safe_int,
    safe_string,
    safe_string_array,
)


def _text(value: Any) -> Optional[str]:
    """Strings as-is, whole numbers as text, string lists joined."""
    if isinstance(value, str):
        return value or None
    if isinstance(value, list):
        return ", ".join(safe_string_array(value)) or None
    number = safe_int(value)
    return str(number) if number is not None else None


def _authors(value: Any) -> List[str]:
    if isinstance(value, str):
        return [author.strip() for author in value.split(",") if author.strip()]
    return safe_string_array(value)


def convert_book_result(data: Dict[str, Any], provider: str) -> Optional[BookResult]:
    """Convert one book hit. Books without an id fall back to their link."""
    book_id = safe_id(data.get('id')) or safe_string(data.get('link'))
    if not book_id:
        return None

    return BookResult(
        id=book_id,
        title=safe_string(data.get('title')) or "Unknown",
        authors=_authors(data.get('authors')),
        publisher=_text(data.get('publisher')),
        year=_text(data.get('year')),
        edition=_text(data.get('edition')),
        volume=_text(data.get('volume')),
        series=_text(data.get('series')),
        image=safe_string(data.get('image')),
        description=safe_string(data.get('description')),
        link=safe_string(data.get('link')),
        isbn=_text(data.get('isbn')),
        language=_text(data.get('language')),
        format=_text(data.get('format')),
        size=_text(data.get('size')),
        provider=provider,
    )


class BookConverter(CategoryConverter):
    """Converter for the book category."""

    category = MediaCategory.BOOK

    async def search(self, query: str, provider: str = "libgen", options: Optional[SearchOptions] = None) -> PaginatedResults:
        options = options or SearchOptions()
        try:
            data = await self.client.get("books", provider, "s", bookTitle=query, page=options.page)
            return paginate(data, lambda r: convert_book_result(r, provider), options.page)
        except Exception as e:
            self.logger.warning(f"Book search error ({provider}): {e}")
            return PaginatedResults.empty(options.page)

    async def get_info(self, media_id: str, provider: str = "libgen", **kwargs: Any) -> Optional[BookResult]:
        """Books have no detail route; search hits already carry every field."""
        self.logger.debug("Book providers have no info route")
        return None


# Export book converter
__all__ = ["BookConverter", "convert_book_result"]
