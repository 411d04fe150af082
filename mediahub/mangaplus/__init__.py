"""
MangaPlus - Chapter-image pipeline for the MangaPlus distribution platform.

MangaDex links some chapters out to MangaPlus. Those chapters are served
as XOR-encrypted images whose keys are embedded in the viewer payload.
"""

from mediahub.mangaplus.client import DATA_URL_PREFIX, MangaPlusClient
from mediahub.mangaplus.parser import (
    MangaPlusPage,
    build_viewer_url,
    extract_chapter_id,
    is_mangaplus_url,
    is_valid_cdn_url,
    is_valid_encryption_key,
    parse_viewer_payload,
)

__all__ = [
    "DATA_URL_PREFIX",
    "MangaPlusClient",
    "MangaPlusPage",
    "build_viewer_url",
    "extract_chapter_id",
    "is_mangaplus_url",
    "is_valid_cdn_url",
    "is_valid_encryption_key",
    "parse_viewer_payload",
]
