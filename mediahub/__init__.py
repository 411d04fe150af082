"""
MediaHub - Media source aggregation and extraction layer.

One normalized interface over anime, movie, manga, book, comic, light
novel and news scraping back-ends, plus custom extraction of streaming
sources and chapter images that the scraping API cannot resolve.
"""

__version__ = "0.1.0"
__author__ = "MediaHub Team"

# Package metadata
__title__ = "mediahub"
__description__ = "Media source aggregation and extraction layer"
__license__ = "MIT"

# Version info tuple for programmatic access
VERSION_INFO = tuple(map(int, __version__.split(".")))

# Export main components for easy importing
from mediahub.core.aggregator import MediaAggregator, build_aggregator
from mediahub.core.models import MediaCategory, MediaInfo, SearchResult, SourceResult

__all__ = [
    "__version__",
    "__author__",
    "MediaAggregator",
    "build_aggregator",
    "MediaCategory",
    "MediaInfo",
    "SearchResult",
    "SourceResult",
]
