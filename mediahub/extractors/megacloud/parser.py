"""
MegaCloud Parser - Pure parsing helpers for the HiAnime/MegaCloud pipeline.

Nothing in here touches the network, so every heuristic that depends on
the provider's current markup can be exercised against captured HTML.
"""

import logging
import re
from typing import Any, Dict, List, Optional, Sequence
from urllib.parse import urlparse

from bs4 import BeautifulSoup

from mediahub.core.exceptions import ErrorKind, ExtractionError
from mediahub.core.models import PlayableSource, SourceResult, Subtitle, TimeRange
from mediahub.extractors.base import EmbedInfo, ServerInfo


logger = logging.getLogger(__name__)

EPISODE_ID_PATTERN = re.compile(r'^(.+?)\$episode\$(\d+)$')
EMBED_TYPE_PATTERN = re.compile(r'^e-\d+$')
DEFAULT_EMBED_TYPE = "e-1"

NONCE_48_PATTERN = re.compile(r'\b[a-zA-Z0-9]{48}\b')
NONCE_3X16_PATTERN = re.compile(
    r'x:\s*"([a-zA-Z0-9]{16})".*?y:\s*"([a-zA-Z0-9]{16})".*?z:\s*"([a-zA-Z0-9]{16})"',
    re.DOTALL
)
PLAYER_SELECTOR = "#megacloud-player"
MIN_NONCE_LENGTH = 48

SUBTITLE_KINDS = {"captions", "subtitles"}


def parse_episode_id(episode_id: str) -> str:
    """
    Extract HiAnime's numeric episode id.

    Accepts ``<slug>$episode$<digits>`` and otherwise falls back to the
    last run of digits anywhere in the string.

    Args:
        episode_id: Opaque episode id from the scraping API

    Returns:
        Numeric episode id as a string

    Raises:
        ExtractionError: Terminal FORMAT failure when no digits are present
    """
    match = EPISODE_ID_PATTERN.match(episode_id)
    if match:
        return match.group(2)

    digits = re.findall(r'\d+', episode_id)
    if digits:
        return digits[-1]

    raise ExtractionError(
        f"Invalid episode ID format: {episode_id}",
        kind=ErrorKind.FORMAT,
        should_fallback=False
    )


def parse_servers(html: str) -> List[ServerInfo]:
    """
    Parse the server list HTML fragment.

    Args:
        html: ``html`` field of the servers AJAX response

    Returns:
        Servers in document order
    """
    soup = BeautifulSoup(html or "", 'html.parser')
    servers = []

    for element in soup.select('.server-item'):
        server_type = (element.get('data-type') or '').strip().lower()
        servers.append(ServerInfo(
            id=(element.get('data-id') or '').strip(),
            name=element.get_text(strip=True),
            type=server_type if server_type in ("sub", "dub", "raw") else None,
        ))

    return servers


def select_server(
    servers: Sequence[ServerInfo],
    sub_or_dub: Optional[str] = None,
    preferred_name: Optional[str] = None,
    hd_names: Sequence[str] = ("HD-1", "HD-2"),
) -> Optional[ServerInfo]:
    """
    Pick a server deterministically.

    Order: the explicitly requested server name, then an HD alias, then
    any server of the requested type (each matching the type when one is
    requested), then the first server in list order.

    Args:
        servers: Servers as listed by the provider
        sub_or_dub: Requested audio type
        preferred_name: Requested server display name
        hd_names: High-definition aliases to prefer

    Returns:
        Selected server or None for an empty list
    """
    if not servers:
        return None

    def type_ok(server: ServerInfo) -> bool:
        return sub_or_dub is None or server.type == sub_or_dub

    if preferred_name:
        wanted = preferred_name.strip().lower()
        for server in servers:
            if server.name.lower() == wanted and type_ok(server):
                return server

    hd = {name.lower() for name in hd_names}
    for server in servers:
        if server.name.lower() in hd and type_ok(server):
            return server

    if sub_or_dub is not None:
        for server in servers:
            if server.type == sub_or_dub:
                return server

    return servers[0]


def parse_embed_url(url: str, referer: Optional[str] = None) -> EmbedInfo:
    """
    Split an embed URL into origin, video id and embed type.

    Args:
        url: Embed URL, e.g. https://megacloud.blog/embed-2/v3/e-1/AbC123?k=1
        referer: Referer the embed was discovered from

    Returns:
        Parsed embed information

    Raises:
        ExtractionError: If the URL has no host or no path
    """
    parsed = urlparse(url)
    segments = [segment for segment in parsed.path.split('/') if segment]
    if not parsed.scheme or not parsed.netloc or not segments:
        raise ExtractionError(f"Malformed embed URL: {url}", kind=ErrorKind.FORMAT)

    embed_type = next((s for s in segments if EMBED_TYPE_PATTERN.match(s)), DEFAULT_EMBED_TYPE)

    return EmbedInfo(
        url=url,
        domain=f"{parsed.scheme}://{parsed.netloc}",
        video_id=segments[-1],
        embed_type=embed_type,
        referer=referer,
    )


def extract_nonce(html: str) -> Optional[str]:
    """
    Find the player nonce in the embed page.

    Tries a standalone 48-character token, then three 16-character
    tokens bound to x, y and z, then the player element's data-id when
    it is at least 48 characters long.

    Args:
        html: Embed page HTML

    Returns:
        Nonce, or None when no pattern matches
    """
    match = NONCE_48_PATTERN.search(html)
    if match:
        logger.debug("Found 48-char nonce")
        return match.group(0)

    match = NONCE_3X16_PATTERN.search(html)
    if match:
        logger.debug("Found 3x16-char nonce")
        return match.group(1) + match.group(2) + match.group(3)

    soup = BeautifulSoup(html, 'html.parser')
    player = soup.select_one(PLAYER_SELECTOR)
    data_id = player.get('data-id') if player else None
    if data_id and len(data_id) >= MIN_NONCE_LENGTH:
        logger.debug("Found data-id nonce")
        return data_id

    return None


def _time_range(value: Any) -> Optional[TimeRange]:
    if not isinstance(value, dict):
        return None
    start, end = value.get('start'), value.get('end')
    if not isinstance(start, (int, float)) or not isinstance(end, (int, float)):
        return None
    return TimeRange(start=start, end=end)


def convert_sources(payload: Dict[str, Any], referer: str) -> SourceResult:
    """
    Map a decrypted getSources payload onto the unified source model.

    Args:
        payload: Response with ``sources`` already as a list
        referer: Origin that must be sent as Referer during playback

    Returns:
        Unified source result, possibly with no sources
    """
    raw_sources = payload.get('sources')
    raw_sources = raw_sources if isinstance(raw_sources, list) else []

    sources = []
    for item in raw_sources:
        if not isinstance(item, dict) or not isinstance(item.get('file'), str) or not item['file']:
            continue
        sources.append(PlayableSource(
            url=item['file'],
            quality="auto",
            is_m3u8=".m3u8" in item['file'] or item.get('type') == "hls",
        ))

    subtitles = []
    tracks = payload.get('tracks')
    for track in tracks if isinstance(tracks, list) else []:
        if not isinstance(track, dict) or not isinstance(track.get('file'), str) or not track['file']:
            continue
        kind = track.get('kind')
        if kind and kind not in SUBTITLE_KINDS:
            continue
        subtitles.append(Subtitle(url=track['file'], lang=track.get('label') or "Unknown"))

    return SourceResult(
        headers={"Referer": referer},
        sources=sources,
        subtitles=subtitles,
        intro=_time_range(payload.get('intro')),
        outro=_time_range(payload.get('outro')),
    )


# Export parser helpers
__all__ = [
    "parse_episode_id",
    "parse_servers",
    "select_server",
    "parse_embed_url",
    "extract_nonce",
    "convert_sources",
]
