"""
Core Layer - Unified model, configuration and the aggregation facade.

This module contains the data models every provider is normalized into,
the error taxonomy, configuration handling, the provider catalog and
the MediaAggregator that routes requests to category converters.
"""

from mediahub.core.aggregator import MediaAggregator, build_aggregator
from mediahub.core.catalog import (
    ProviderHealth,
    ProviderInfo,
    get_default_provider,
    get_primary_provider,
    get_provider_info,
)
from mediahub.core.config_manager import ConfigManager
from mediahub.core.config_schemas import AppSettings
from mediahub.core.exceptions import (
    ChapterImageError,
    ConfigurationError,
    CryptoError,
    EnvelopeFormatError,
    ErrorKind,
    ExtractionError,
    MediaHubError,
    NetworkError,
    ProviderError,
    ValidationError,
)
from mediahub.core.mappings import InMemoryMappingSink, MappingSink, ProviderMapping
from mediahub.core.models import (
    ChapterPages,
    Episode,
    MediaCategory,
    MediaInfo,
    PaginatedResults,
    SearchResult,
    SourceResult,
)

__all__ = [
    # Data Models
    "ChapterPages",
    "Episode",
    "MediaCategory",
    "MediaInfo",
    "PaginatedResults",
    "SearchResult",
    "SourceResult",
    # Configuration Management
    "ConfigManager",
    "AppSettings",
    # Provider Catalog
    "ProviderHealth",
    "ProviderInfo",
    "get_default_provider",
    "get_primary_provider",
    "get_provider_info",
    # Aggregation
    "MediaAggregator",
    "build_aggregator",
    # Mappings
    "InMemoryMappingSink",
    "MappingSink",
    "ProviderMapping",
    # Exceptions
    "ChapterImageError",
    "ConfigurationError",
    "CryptoError",
    "EnvelopeFormatError",
    "ErrorKind",
    "ExtractionError",
    "MediaHubError",
    "NetworkError",
    "ProviderError",
    "ValidationError",
]
