"""
MegaCloud Extractor - HiAnime source extraction through the MegaCloud player.
"""

from .extractor import MegaCloudExtractor
from .parser import (
    convert_sources,
    extract_nonce,
    parse_embed_url,
    parse_episode_id,
    parse_servers,
    select_server,
)

__all__ = [
    "MegaCloudExtractor",
    "convert_sources",
    "extract_nonce",
    "parse_embed_url",
    "parse_episode_id",
    "parse_servers",
    "select_server",
]
