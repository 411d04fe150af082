"""
Common utilities for category converters.

This package contains the field guards and shape converters shared by
every converter that reads scraping API payloads.
"""

from .utils import (
    convert_chapter_pages,
    convert_chapters,
    convert_episodes,
    convert_servers,
    convert_sources,
    extract_alt_titles,
    extract_description,
    extract_title,
    group_seasons,
    paginate,
    results_list,
    safe_number,
    safe_string,
    safe_string_array,
)

__all__ = [
    "convert_chapter_pages",
    "convert_chapters",
    "convert_episodes",
    "convert_servers",
    "convert_sources",
    "extract_alt_titles",
    "extract_description",
    "extract_title",
    "group_seasons",
    "paginate",
    "results_list",
    "safe_number",
    "safe_string",
    "safe_string_array",
]
