"""
MangaPlus Client - Chapter fetch and per-page decryption.

The pipeline is linear: viewer URL -> chapter id -> viewer payload ->
page list -> per-page fetch and XOR decrypt. Nothing is retried here;
a caller that fetches pages one by one can retry a single failed page
without touching its siblings.
"""

import asyncio
import base64
import logging
from typing import List, Optional

from mediahub.core.config_schemas import MangaPlusSettings
from mediahub.core.crypto import xor_decrypt
from mediahub.core.exceptions import ChapterImageError, ErrorKind, NetworkError
from mediahub.core.http import HttpClient
from mediahub.core.models import ChapterPage, ChapterPages
from mediahub.mangaplus.parser import (
    MangaPlusPage,
    extract_chapter_id,
    is_valid_cdn_url,
    is_valid_encryption_key,
    parse_viewer_payload,
)


logger = logging.getLogger(__name__)

DATA_URL_PREFIX = "data:image/jpeg;base64,"


class MangaPlusClient:
    """Fetches MangaPlus chapters and decrypts their page images."""

    def __init__(self, http: HttpClient, settings: Optional[MangaPlusSettings] = None):
        """
        Initialize MangaPlus client.

        Args:
            http: Shared HTTP client
            settings: Endpoint configuration
        """
        self.http = http
        self.settings = settings or MangaPlusSettings()

    async def fetch_chapter(self, chapter_id: str) -> List[MangaPlusPage]:
        """
        Fetch and parse the viewer payload of a chapter.

        Args:
            chapter_id: Numeric MangaPlus chapter id

        Returns:
            Pages sorted by page number, never empty

        Raises:
            ChapterImageError: RATE_LIMITED on 429, NOT_AVAILABLE on 404 or
                when no pages are found, NETWORK on transport failure,
                UNKNOWN on any other HTTP status
        """
        params = {
            'chapter_id': chapter_id,
            'split': 'yes',
            'img_quality': 'high',
            'clang': 'eng',
        }

        try:
            payload = await self.http.get_bytes(self.settings.api_url, params=params)
        except NetworkError as e:
            raise self._viewer_error(e, chapter_id)

        pages = parse_viewer_payload(payload)
        logger.debug(f"MangaPlus chapter {chapter_id}: {len(pages)} page(s) in {len(payload)} bytes")

        if not pages:
            raise ChapterImageError(
                "No pages found in this chapter. It may not be available in your region.",
                kind=ErrorKind.NOT_AVAILABLE,
                chapter_id=chapter_id
            )
        return pages

    @staticmethod
    def _viewer_error(error: NetworkError, chapter_id: str) -> ChapterImageError:
        if error.status_code is None:
            return ChapterImageError(
                "Network error while fetching MangaPlus chapter. Please check your connection.",
                kind=ErrorKind.NETWORK, chapter_id=chapter_id, details=error.details
            )
        if error.status_code == 429:
            return ChapterImageError(
                "MangaPlus rate limit reached. Please wait a moment and try again.",
                kind=ErrorKind.RATE_LIMITED, chapter_id=chapter_id
            )
        if error.status_code == 404:
            return ChapterImageError(
                "This chapter is not available on MangaPlus.",
                kind=ErrorKind.NOT_AVAILABLE, chapter_id=chapter_id
            )
        return ChapterImageError(
            f"Failed to fetch MangaPlus chapter: {error.status_code}",
            kind=ErrorKind.UNKNOWN, chapter_id=chapter_id, details=error.details
        )

    async def get_pages(self, viewer_url: str) -> List[MangaPlusPage]:
        """
        Resolve a viewer URL to its page list.

        Raises:
            ChapterImageError: FORMAT if the URL carries no chapter id
        """
        chapter_id = extract_chapter_id(viewer_url)
        if chapter_id is None:
            raise ChapterImageError(
                "Invalid MangaPlus URL: could not extract chapter ID",
                kind=ErrorKind.FORMAT
            )
        return await self.fetch_chapter(chapter_id)

    async def fetch_page(self, image_url: str, encryption_key: str) -> bytes:
        """
        Fetch one page image and decrypt it.

        Both inputs are validated before any request is made.

        Args:
            image_url: Page URL on the MangaPlus CDN
            encryption_key: 128-hex-character XOR key

        Returns:
            Decrypted JPEG bytes

        Raises:
            ChapterImageError: FORMAT for invalid inputs, RATE_LIMITED or
                NETWORK when the fetch fails
        """
        if not is_valid_cdn_url(image_url, self.settings.cdn_base):
            raise ChapterImageError("Invalid image URL", kind=ErrorKind.FORMAT)
        if not is_valid_encryption_key(encryption_key):
            raise ChapterImageError("Invalid encryption key", kind=ErrorKind.FORMAT)

        try:
            encrypted = await self.http.get_bytes(image_url)
        except NetworkError as e:
            kind = ErrorKind.RATE_LIMITED if e.status_code == 429 else ErrorKind.NETWORK
            status = e.status_code if e.status_code is not None else "network error"
            raise ChapterImageError(f"Failed to fetch page: {status}", kind=kind, details=e.details)

        return xor_decrypt(encrypted, encryption_key)

    async def fetch_page_data_url(self, image_url: str, encryption_key: str) -> str:
        """Fetch and decrypt one page as a base64 JPEG data URL."""
        decrypted = await self.fetch_page(image_url, encryption_key)
        return DATA_URL_PREFIX + base64.b64encode(decrypted).decode("ascii")

    async def get_decrypted_chapter(self, viewer_url: str) -> ChapterPages:
        """
        Resolve a whole chapter into data-URL pages.

        Pages are fetched concurrently and independently. Pages that fail
        are logged and left out, the rest are numbered 1..N in chapter
        order and keep their upstream position in source_page.

        Raises:
            ChapterImageError: If the chapter cannot be resolved or every
                page fails
        """
        chapter_id = extract_chapter_id(viewer_url) or viewer_url
        pages = await self.get_pages(viewer_url)

        results = await asyncio.gather(
            *(self.fetch_page_data_url(page.url, page.encryption_key) for page in pages),
            return_exceptions=True
        )

        assembled = []
        last_error: Optional[ChapterImageError] = None
        for position, result in enumerate(results, start=1):
            if isinstance(result, ChapterImageError):
                logger.warning(f"MangaPlus page {position} of chapter {chapter_id} failed: {result.message}")
                last_error = result
                continue
            if isinstance(result, BaseException):
                raise result
            assembled.append(ChapterPage(page=len(assembled) + 1, source_page=position, img=result))

        if not assembled and last_error is not None:
            raise last_error

        return ChapterPages(chapter_id=chapter_id, pages=assembled)


# Export client
__all__ = ["MangaPlusClient", "DATA_URL_PREFIX"]
