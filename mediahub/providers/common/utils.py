"""
Converter Utilities - Defensive field guards shared by category converters.

Scraping API payloads vary in shape between providers and over time.
Every converter reads fields through these guards so that a missing or
mistyped field becomes None instead of an exception.
"""

import logging
import math
import re
from typing import Any, Callable, Dict, List, Optional, Tuple, TypeVar, Union

from mediahub.core.models import (
    Chapter,
    ChapterPage,
    ChapterPages,
    Episode,
    PaginatedResults,
    PlayableSource,
    Season,
    Server,
    SourceResult,
    Subtitle,
    TimeRange,
)


logger = logging.getLogger(__name__)

T = TypeVar("T")

SUB_OR_DUB_VALUES = ("sub", "dub", "both")
LEADING_INT_PATTERN = re.compile(r'^\s*([+-]?\d+)')


def safe_string(value: Any) -> Optional[str]:
    """Return value if it is a string, else None."""
    return value if isinstance(value, str) else None


def safe_number(value: Any) -> Optional[float]:
    """Return value if it is a real number (bools excluded), else None."""
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return None
    return value


def safe_int(value: Any) -> Optional[int]:
    """Return value as int if it is a whole number, else None."""
    number = safe_number(value)
    if number is None or not math.isfinite(number):
        return None
    return int(number)


def safe_string_array(value: Any) -> List[str]:
    """Keep only the string members of a list."""
    if isinstance(value, list):
        return [v for v in value if isinstance(v, str)]
    return []


def safe_dict(value: Any) -> Dict[str, Any]:
    return value if isinstance(value, dict) else {}


def safe_list(value: Any) -> List[Any]:
    return value if isinstance(value, list) else []


def safe_id(value: Any) -> Optional[str]:
    """Stringify an upstream id, None when absent or blank."""
    if value is None or isinstance(value, (dict, list)):
        return None
    text = str(value).strip()
    return text or None


def extract_title(title: Any) -> str:
    """
    Pick a display title.

    Plain strings are used as-is; title objects prefer the English
    title, then romaji, then native.
    """
    if isinstance(title, str):
        return title
    if isinstance(title, dict):
        for key in ('english', 'romaji', 'native'):
            value = title.get(key)
            if isinstance(value, str) and value:
                return value
    return "Unknown"


def extract_alt_titles(title: Any) -> List[str]:
    """Alternative titles from a title object, in romaji, native, english order."""
    if isinstance(title, dict):
        return [v for v in (title.get('romaji'), title.get('native'), title.get('english')) if isinstance(v, str) and v]
    return []


def extract_description(description: Any) -> Optional[str]:
    """Plain string, or the English entry of a localized description."""
    if isinstance(description, str):
        return description
    if isinstance(description, dict) and description:
        for key in ('en', 'english'):
            value = description.get(key)
            if isinstance(value, str) and value:
                return value
        first = next(iter(description.values()))
        return first if isinstance(first, str) else None
    return None


def extract_sub_or_dub(value: Any) -> Optional[str]:
    return value if value in SUB_OR_DUB_VALUES else None


def release_date_of(value: Any) -> Optional[Union[str, int]]:
    """Release date as emitted upstream, string or whole number."""
    return safe_string(value) if safe_string(value) is not None else safe_int(value)


def numeric_year(release_date: Any) -> Optional[int]:
    """Year when the release date is already a number."""
    return safe_int(release_date)


def parse_year(release_date: Any) -> Optional[int]:
    """
    Year from a release date that may be text.

    Text is read up to its first non-digit, so "2019-05-01" gives 2019.
    """
    if isinstance(release_date, str):
        match = LEADING_INT_PATTERN.match(release_date)
        return int(match.group(1)) if match else None
    return safe_int(release_date)


def episode_number(value: Any) -> float:
    number = safe_number(value)
    if number is not None:
        return number
    if isinstance(value, str):
        try:
            return float(value)
        except ValueError:
            return 0
    return 0


def convert_episode(raw: Any, season: Optional[int] = None) -> Optional[Episode]:
    """Convert one upstream episode, None when it has no id."""
    data = safe_dict(raw)
    episode_id = safe_id(data.get('id'))
    if episode_id is None:
        return None

    return Episode(
        id=episode_id,
        number=episode_number(data.get('number')),
        title=safe_string(data.get('title')),
        description=safe_string(data.get('description')),
        image=safe_string(data.get('image')),
        release_date=safe_string(data.get('releaseDate')),
        is_filler=data.get('isFiller') if isinstance(data.get('isFiller'), bool) else None,
        url=safe_string(data.get('url')),
        season=season,
    )


def convert_episodes(raw: Any) -> List[Episode]:
    return [ep for ep in (convert_episode(item) for item in safe_list(raw)) if ep is not None]


def group_seasons(raw: Any) -> Tuple[List[Episode], List[Season]]:
    """
    Split upstream episodes into a flat list or seasons.

    If any episode carries a season number, every episode is grouped by
    season (missing seasons count as season 1), seasons ascending and
    episodes ascending by number within a season. Otherwise the flat
    list is returned in upstream order.

    Returns:
        (episodes, seasons), exactly one of which may be non-empty
    """
    items = [safe_dict(item) for item in safe_list(raw)]
    if not any(item.get('season') is not None for item in items):
        return convert_episodes(items), []

    grouped: Dict[int, List[Episode]] = {}
    for item in items:
        season_num = safe_int(item.get('season'))
        season_num = 1 if season_num is None else season_num
        episode = convert_episode(item, season=season_num)
        if episode is not None:
            grouped.setdefault(season_num, []).append(episode)

    seasons = [
        Season(season=number, episodes=sorted(episodes, key=lambda ep: ep.number))
        for number, episodes in sorted(grouped.items())
    ]
    return [], seasons


def convert_chapter(raw: Any) -> Optional[Chapter]:
    """Convert one upstream chapter, None when it has no id."""
    data = safe_dict(raw)
    chapter_id = safe_id(data.get('id'))
    if chapter_id is None:
        return None

    number = data.get('chapterNumber')
    if number is None:
        number = data.get('number')
    if isinstance(number, bool) or not isinstance(number, (int, float, str)):
        number = 0

    release_date = safe_string(data.get('releasedDate'))
    if release_date is None:
        release_date = safe_string(data.get('releaseDate'))

    volume = safe_string(data.get('volumeNumber'))
    if volume is None:
        volume = safe_string(data.get('volume'))

    return Chapter(
        id=chapter_id,
        number=number,
        title=safe_string(data.get('title')),
        release_date=release_date,
        pages=safe_int(data.get('pages')),
        url=safe_string(data.get('url')),
        volume=volume,
    )


def convert_chapters(raw: Any) -> List[Chapter]:
    return [ch for ch in (convert_chapter(item) for item in safe_list(raw)) if ch is not None]


def convert_time_range(raw: Any) -> Optional[TimeRange]:
    data = safe_dict(raw)
    start, end = safe_number(data.get('start')), safe_number(data.get('end'))
    if start is None or end is None or start < 0 or end < 0:
        return None
    return TimeRange(start=start, end=end)


def convert_sources(raw: Any) -> SourceResult:
    """
    Convert an upstream watch response.

    Entries without a URL are dropped; headers are stringified.
    """
    data = safe_dict(raw)

    sources = []
    for item in safe_list(data.get('sources')):
        entry = safe_dict(item)
        url = safe_string(entry.get('url'))
        if not url:
            continue
        sources.append(PlayableSource(
            url=url,
            quality=safe_string(entry.get('quality')),
            is_m3u8=entry.get('isM3U8') if isinstance(entry.get('isM3U8'), bool) else None,
            is_dash=entry.get('isDASH') if isinstance(entry.get('isDASH'), bool) else None,
            size=safe_int(entry.get('size')),
        ))

    subtitles = []
    for item in safe_list(data.get('subtitles')):
        entry = safe_dict(item)
        url = safe_string(entry.get('url'))
        if url:
            subtitles.append(Subtitle(url=url, lang=safe_string(entry.get('lang')) or "Unknown"))

    headers = {str(k): str(v) for k, v in safe_dict(data.get('headers')).items() if v is not None}

    return SourceResult(
        headers=headers,
        sources=sources,
        subtitles=subtitles,
        intro=convert_time_range(data.get('intro')),
        outro=convert_time_range(data.get('outro')),
        download=safe_string(data.get('download')),
    )


def convert_servers(raw: Any) -> List[Server]:
    servers = []
    for item in safe_list(raw):
        entry = safe_dict(item)
        name = safe_string(entry.get('name'))
        if name:
            servers.append(Server(name=name, url=safe_string(entry.get('url')) or ""))
    return servers


def convert_chapter_pages(raw: Any, chapter_id: str) -> ChapterPages:
    """
    Convert an upstream page list.

    Pages are ordered by the upstream page index (list position when it
    is missing) and renumbered 1..N, so the result is always contiguous
    whether the upstream index starts at 0 or 1.
    """
    indexed = []
    for position, item in enumerate(safe_list(raw)):
        entry = safe_dict(item)
        img = safe_string(entry.get('img'))
        if not img:
            continue
        index = safe_number(entry.get('page'))
        headers = safe_dict(entry.get('headerForImage'))
        indexed.append((index if index is not None else position, position, img, headers))

    indexed.sort(key=lambda item: (item[0], item[1]))

    pages = [
        ChapterPage(
            page=number,
            img=img,
            headers={str(k): str(v) for k, v in headers.items()} or None,
        )
        for number, (_, _, img, headers) in enumerate(indexed, start=1)
    ]
    return ChapterPages(chapter_id=chapter_id, pages=pages)


def convert_list(raw: Any, converter: Callable[[Dict[str, Any]], Optional[T]]) -> List[T]:
    """
    Convert every usable entry of an upstream list.

    Entries the converter rejects (returns None or raises on) are skipped
    so one malformed item does not sink the whole page.
    """
    results = []
    for item in safe_list(raw):
        try:
            converted = converter(safe_dict(item))
        except (ValueError, TypeError) as e:
            logger.debug(f"Skipping malformed entry: {e}")
            continue
        if converted is not None:
            results.append(converted)
    return results


def paginate(raw: Any, converter: Callable[[Dict[str, Any]], Optional[T]], page: int = 1) -> PaginatedResults:
    """
    Wrap an upstream list response in a PaginatedResults envelope.

    Accepts either an envelope with a ``results`` key or a bare list.
    """
    if isinstance(raw, list):
        return PaginatedResults(current_page=max(page, 1), has_next_page=False, results=convert_list(raw, converter))

    data = safe_dict(raw)
    current_page = safe_int(data.get('currentPage'))
    return PaginatedResults(
        current_page=current_page if current_page and current_page > 0 else max(page, 1),
        has_next_page=data.get('hasNextPage') is True,
        total_pages=safe_int(data.get('totalPages')),
        total_results=safe_int(data.get('totalResults')),
        results=convert_list(data.get('results'), converter),
    )


def results_list(raw: Any, converter: Callable[[Dict[str, Any]], Optional[T]]) -> List[T]:
    """Converted results of a response that is either a list or an envelope."""
    if isinstance(raw, list):
        return convert_list(raw, converter)
    return convert_list(safe_dict(raw).get('results'), converter)


# Export utility functions
__all__ = [
    "safe_string",
    "safe_number",
    "safe_int",
    "safe_string_array",
    "safe_dict",
    "safe_list",
    "safe_id",
    "extract_title",
    "extract_alt_titles",
    "extract_description",
    "extract_sub_or_dub",
    "release_date_of",
    "numeric_year",
    "parse_year",
    "convert_episode",
    "convert_episodes",
    "group_seasons",
    "convert_chapter",
    "convert_chapters",
    "convert_time_range",
    "convert_sources",
    "convert_servers",
    "convert_chapter_pages",
    "convert_list",
    "paginate",
    "results_list",
]
