"""
MegaCloud Extractor - Direct source extraction for HiAnime episodes.

HiAnime serves its streams through the MegaCloud player. Resolving them
takes a fixed chain of requests, each depending on the previous one:

    episode id -> server list -> embed URL -> nonce -> getSources

When the player returns ``sources`` as a string, it is a "Salted__"
envelope encrypted with a password published on an external key
document. The key document is fetched fresh for every encrypted
response since it rotates without notice.
"""

import json
import logging
from typing import Any, Dict, List, Optional

from mediahub.core.config_schemas import HiAnimeSettings
from mediahub.core.crypto import decrypt_legacy_envelope
from mediahub.core.exceptions import CryptoError, ErrorKind, ExtractionError
from mediahub.core.http import HttpClient
from mediahub.core.models import SourceResult
from mediahub.extractors.base import (
    DecryptionKeys,
    EmbedInfo,
    ExtractorContext,
    ServerInfo,
    SourceExtractor,
)
from mediahub.extractors.megacloud.parser import (
    convert_sources,
    extract_nonce,
    parse_embed_url,
    parse_episode_id,
    parse_servers,
    select_server,
)


logger = logging.getLogger(__name__)

KEY_NAMES = ("mega", "vidstr")


class MegaCloudExtractor(SourceExtractor):
    """Custom extractor for HiAnime's MegaCloud player."""

    name = "megacloud"
    providers = ["hianime"]
    default_priority = 100

    def __init__(self, http: HttpClient, settings: Optional[HiAnimeSettings] = None, priority: Optional[int] = None):
        """
        Initialize MegaCloud extractor.

        Args:
            http: Shared HTTP client
            settings: Endpoint configuration
            priority: Priority override
        """
        super().__init__(priority)
        self.http = http
        self.settings = settings or HiAnimeSettings()

    @property
    def base_url(self) -> str:
        return self.settings.base_url

    @property
    def ajax_headers(self) -> Dict[str, str]:
        return {
            'Referer': f"{self.base_url}/",
            'X-Requested-With': 'XMLHttpRequest',
            'Accept': 'application/json, text/javascript, */*; q=0.01',
        }

    def can_handle(self, context: ExtractorContext) -> bool:
        """Any HiAnime episode id, in slug or bare numeric form."""
        return "$episode$" in context.episode_id or context.episode_id.isdigit()

    async def run(self, context: ExtractorContext, debug: Dict[str, Any]) -> SourceResult:
        episode_num = parse_episode_id(context.episode_id)
        debug["episodeNum"] = episode_num
        logger.debug(f"Starting MegaCloud extraction for {context.episode_id}")

        servers = await self._get_servers(episode_num)
        if not servers:
            raise ExtractionError("No servers found", kind=ErrorKind.NOT_AVAILABLE)
        logger.debug(f"Found {len(servers)} servers: {', '.join(s.name for s in servers)}")

        server = select_server(
            servers,
            sub_or_dub=context.sub_or_dub,
            preferred_name=context.server,
            hd_names=self.settings.hd_server_names,
        )
        if server is None or not server.id:
            raise ExtractionError("No suitable server found", kind=ErrorKind.NOT_AVAILABLE)
        debug["server"] = server.name
        debug["serverType"] = server.type
        logger.debug(f"Using server {server.name} ({server.type})")

        embed = parse_embed_url(await self._get_embed_url(server), referer=f"{self.base_url}/")
        debug["embedDomain"] = embed.domain

        nonce = await self._get_nonce(embed)
        payload = await self._get_sources_payload(embed, nonce, debug)

        sources = convert_sources(payload, referer=embed.domain or self.settings.fallback_referer)
        debug["sourceCount"] = len(sources.sources)
        debug["subtitleCount"] = len(sources.subtitles)

        if sources.is_empty:
            raise ExtractionError("No sources in response", kind=ErrorKind.NOT_AVAILABLE)
        return sources

    async def _get_servers(self, episode_num: str) -> List[ServerInfo]:
        """Get the server list for a numeric episode id."""
        data = await self.http.get_json(
            f"{self.base_url}/ajax/v2/episode/servers",
            params={'episodeId': episode_num},
            headers=self.ajax_headers,
        )
        if not isinstance(data, dict) or not isinstance(data.get('html'), str):
            raise ExtractionError("Unexpected server list response", kind=ErrorKind.FORMAT)
        return parse_servers(data['html'])

    async def _get_embed_url(self, server: ServerInfo) -> str:
        """Resolve the embed URL of the selected server."""
        data = await self.http.get_json(
            f"{self.base_url}/ajax/v2/episode/sources",
            params={'id': server.id},
            headers=self.ajax_headers,
        )
        link = data.get('link') if isinstance(data, dict) else None
        if not isinstance(link, str) or not link:
            raise ExtractionError("No embed URL in response", kind=ErrorKind.FORMAT)
        logger.debug(f"Embed URL: {link}")
        return link

    async def _get_nonce(self, embed: EmbedInfo) -> str:
        """Fetch the embed page and pull the nonce out of it."""
        html = await self.http.get_text(
            embed.url,
            headers={
                'Referer': f"{self.base_url}/",
                'Accept': 'text/html,application/xhtml+xml,application/xml;q=0.9,*/*;q=0.8',
            },
        )
        nonce = extract_nonce(html)
        if nonce is None:
            raise ExtractionError(
                "Could not find nonce in embed page",
                kind=ErrorKind.FORMAT,
                should_fallback=False
            )
        return nonce

    async def _get_sources_payload(self, embed: EmbedInfo, nonce: str, debug: Dict[str, Any]) -> Dict[str, Any]:
        """Call getSources and decrypt the source list when it is encrypted."""
        data = await self.http.get_json(
            f"{embed.domain}/embed-2/v3/{embed.embed_type}/getSources",
            params={'id': embed.video_id, '_k': nonce},
            headers={
                'Referer': embed.url,
                'Origin': embed.domain,
                'X-Requested-With': 'XMLHttpRequest',
                'Accept': '*/*',
            },
        )
        if not isinstance(data, dict):
            raise ExtractionError("Unexpected getSources response", kind=ErrorKind.FORMAT)

        encrypted = isinstance(data.get('sources'), str)
        debug["encrypted"] = encrypted
        if encrypted:
            logger.debug("Sources are encrypted, decrypting")
            password = (await self._fetch_keys()).first_available(*KEY_NAMES)
            if password is None:
                raise CryptoError("No decryption key available")

            decrypted = decrypt_legacy_envelope(data['sources'], password)
            try:
                data['sources'] = json.loads(decrypted)
            except json.JSONDecodeError as e:
                raise ExtractionError("Decrypted sources are not valid JSON", kind=ErrorKind.CRYPTO, details=str(e))

        return data

    async def _fetch_keys(self) -> DecryptionKeys:
        """Fetch the current key bundle. Never cached."""
        data = await self.http.get_json(self.settings.keys_url)
        if not isinstance(data, dict):
            raise CryptoError("Key document is not a JSON object")
        return DecryptionKeys.model_validate(
            {k: v for k, v in data.items() if isinstance(v, str)}
        )


# Export extractor class
__all__ = ["MegaCloudExtractor"]
