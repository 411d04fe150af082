"""
Extractor Layer - Custom video source extraction.

Extractors bypass the generic scraping API for providers whose players
need protocol-level handling. The registry orders them by priority and
tells the aggregator when to fall back to the scraping API.
"""

from mediahub.extractors.base import (
    DecryptionKeys,
    EmbedInfo,
    ExtractionFailure,
    ExtractionSuccess,
    ExtractorContext,
    ExtractorResult,
    ServerInfo,
    SourceExtractor,
)
from mediahub.extractors.registry import ExtractorRegistry, create_registry

__all__ = [
    "DecryptionKeys",
    "EmbedInfo",
    "ExtractionFailure",
    "ExtractionSuccess",
    "ExtractorContext",
    "ExtractorResult",
    "ServerInfo",
    "SourceExtractor",
    "ExtractorRegistry",
    "create_registry",
]
