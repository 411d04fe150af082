"""
Category converters for MediaHub.

Each converter maps one media category of the Consumet scraping API
onto the unified model.
"""

from .anime import AnimeConverter
from .base import CategoryConverter
from .book import BookConverter
from .comic import ComicConverter
from .consumet import ConsumetClient
from .lightnovel import LightNovelConverter
from .manga import MangaConverter
from .meta import MetaConverter
from .movie import MovieConverter
from .news import NewsConverter

__all__ = [
    "AnimeConverter",
    "BookConverter",
    "CategoryConverter",
    "ComicConverter",
    "ConsumetClient",
    "LightNovelConverter",
    "MangaConverter",
    "MetaConverter",
    "MovieConverter",
    "NewsConverter",
]
