"""
MangaPlus Parser - Viewer payload scanning and input validation.

The viewer API answers with a protobuf message. Rather than decoding it,
the payload is decoded leniently as text and scanned for page image URLs
each followed by that page's 128-hex-character XOR key.
"""

import re
from typing import List, Optional
from urllib.parse import quote

from pydantic import BaseModel, Field


MANGAPLUS_HOST = "mangaplus.shueisha.co.jp"
DEFAULT_CDN_BASE = "https://jumpg-assets.tokyo-cdn.com/"

CHAPTER_ID_PATTERN = re.compile(r'viewer/(\d+)')
ENCRYPTION_KEY_PATTERN = re.compile(r'^[0-9a-f]{128}$')
PAGE_PATTERN = re.compile(
    r'(https://jumpg-assets\.tokyo-cdn\.com/secure/title/\d+/chapter/\d+/manga_page/\w+/(\d+)\.jpg\?[^\s\x00-\x1f]+)'
    r'[^\w]*'
    r'([0-9a-f]{128})'
)


class MangaPlusPage(BaseModel):
    """One encrypted page as listed by the viewer payload."""

    url: str
    encryption_key: str = Field(..., min_length=128, max_length=128)
    page_number: int = Field(..., ge=0)


def is_mangaplus_url(url: Optional[str]) -> bool:
    """Whether an external chapter URL points at MangaPlus."""
    return bool(url) and MANGAPLUS_HOST in url


def extract_chapter_id(url: str) -> Optional[str]:
    """
    Pull the chapter id out of a viewer URL.

    e.g. https://mangaplus.shueisha.co.jp/viewer/1027248 -> 1027248
    """
    match = CHAPTER_ID_PATTERN.search(url or "")
    return match.group(1) if match else None


def build_viewer_url(chapter_id: str) -> str:
    """Public viewer URL for a chapter id."""
    return f"https://{MANGAPLUS_HOST}/viewer/{quote(chapter_id)}"


def is_valid_cdn_url(url: str, cdn_base: str = DEFAULT_CDN_BASE) -> bool:
    """Only images under the MangaPlus CDN may be fetched."""
    return isinstance(url, str) and url.startswith(cdn_base)


def is_valid_encryption_key(key: str) -> bool:
    """Keys are exactly 128 lowercase hex characters."""
    return isinstance(key, str) and ENCRYPTION_KEY_PATTERN.match(key) is not None


def parse_viewer_payload(payload: bytes) -> List[MangaPlusPage]:
    """
    Scan a viewer payload for pages.

    Invalid byte sequences are replaced rather than rejected. Pages are
    returned sorted by page number since the payload order is not page
    order.

    Args:
        payload: Raw viewer API response body

    Returns:
        Pages sorted by page number, possibly empty
    """
    text = payload.decode("utf-8", errors="replace")

    pages = [
        MangaPlusPage(url=match.group(1), page_number=int(match.group(2)), encryption_key=match.group(3))
        for match in PAGE_PATTERN.finditer(text)
    ]
    pages.sort(key=lambda page: page.page_number)
    return pages


# Export parser helpers
__all__ = [
    "MangaPlusPage",
    "is_mangaplus_url",
    "extract_chapter_id",
    "build_viewer_url",
    "is_valid_cdn_url",
    "is_valid_encryption_key",
    "parse_viewer_payload",
]
