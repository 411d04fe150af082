"""
Tests for the HiAnime/MegaCloud extractor.

Covers:
- Episode id parsing, server list parsing and deterministic server choice
- Embed URL splitting and nonce discovery
- getSources payload conversion
- The full request chain against a fake HTTP client, including
  encrypted sources, missing keys and terminal nonce failures
"""

import json

import pytest

from mediahub.core.config_schemas import HiAnimeSettings
from mediahub.core.crypto import encrypt_legacy_envelope
from mediahub.core.exceptions import ErrorKind, ExtractionError, NetworkError
from mediahub.extractors.base import ExtractorContext, ServerInfo
from mediahub.extractors.megacloud import MegaCloudExtractor
from mediahub.extractors.megacloud.parser import (
    convert_sources,
    extract_nonce,
    parse_embed_url,
    parse_episode_id,
    parse_servers,
    select_server,
)

from conftest import FakeHttp


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

SETTINGS = HiAnimeSettings()
BASE = SETTINGS.base_url
SERVERS_URL = f"{BASE}/ajax/v2/episode/servers"
EMBED_LOOKUP_URL = f"{BASE}/ajax/v2/episode/sources"
EMBED_URL = "https://megacloud.blog/embed-2/v3/e-1/AbCdEf123?k=1"
GET_SOURCES_URL = "https://megacloud.blog/embed-2/v3/e-1/getSources"
NONCE = "N" * 24 + "0123456789abcdefABCDEF12"

SOURCE_LIST = [{"file": "https://cdn.example.com/hls/master.m3u8", "type": "hls"}]
TRACKS = [
    {"file": "https://cdn.example.com/subs/eng.vtt", "label": "English", "kind": "captions"},
    {"file": "https://cdn.example.com/thumbs.vtt", "kind": "thumbnails"},
]


def embed_page(nonce: str = NONCE) -> str:
    return f'<html><body><script>window._xy_ws = "{nonce}";</script></body></html>'


def hianime_http(server_html: str, sources_payload: dict, keys=None, embed_html: str = None) -> FakeHttp:
    http = FakeHttp({
        SERVERS_URL: {"status": True, "html": server_html},
        EMBED_LOOKUP_URL: {"type": "iframe", "link": EMBED_URL},
        EMBED_URL: embed_html if embed_html is not None else embed_page(),
        GET_SOURCES_URL: sources_payload,
    })
    if keys is not None:
        http.add(SETTINGS.keys_url, keys)
    return http


def context(**overrides) -> ExtractorContext:
    defaults = {"episode_id": "one-piece-100$episode$2142", "sub_or_dub": "sub"}
    defaults.update(overrides)
    return ExtractorContext(**defaults)


# ---------------------------------------------------------------------------
# Parser
# ---------------------------------------------------------------------------


class TestParseEpisodeId:
    def test_slug_form(self):
        assert parse_episode_id("one-piece-100$episode$2142") == "2142"

    def test_query_form_uses_last_digits(self):
        assert parse_episode_id("one-piece-100?ep=2142") == "2142"

    def test_bare_number(self):
        assert parse_episode_id("2142") == "2142"

    def test_no_digits_is_terminal(self):
        with pytest.raises(ExtractionError) as exc_info:
            parse_episode_id("no-digits-here")
        assert exc_info.value.kind == ErrorKind.FORMAT
        assert exc_info.value.should_fallback is False


class TestServers:
    def test_parse_servers(self, sample_server_html):
        servers = parse_servers(sample_server_html)
        assert [(s.id, s.name, s.type) for s in servers] == [
            ("641915", "HD-1", "sub"),
            ("641916", "HD-2", "sub"),
            ("641920", "HD-1", "dub"),
            ("641921", "HD-2", "dub"),
        ]

    def test_parse_empty_fragment(self):
        assert parse_servers("") == []

    def test_hd_alias_matching_type(self, sample_server_html):
        servers = parse_servers(sample_server_html)
        assert select_server(servers, sub_or_dub="dub").id == "641920"

    def test_requested_name_wins(self, sample_server_html):
        servers = parse_servers(sample_server_html)
        assert select_server(servers, sub_or_dub="sub", preferred_name="hd-2").id == "641916"

    def test_type_before_list_order(self):
        servers = [
            ServerInfo(id="1", name="StreamSB", type="sub"),
            ServerInfo(id="2", name="Vidstreaming", type="dub"),
        ]
        assert select_server(servers, sub_or_dub="dub").id == "2"

    def test_first_server_when_nothing_matches(self):
        servers = [ServerInfo(id="1", name="StreamSB", type="raw")]
        assert select_server(servers, sub_or_dub="dub").id == "1"

    def test_empty_list(self):
        assert select_server([]) is None


class TestEmbedUrl:
    def test_split(self):
        embed = parse_embed_url(EMBED_URL, referer=f"{BASE}/")
        assert embed.domain == "https://megacloud.blog"
        assert embed.video_id == "AbCdEf123"
        assert embed.embed_type == "e-1"
        assert embed.referer == f"{BASE}/"

    def test_default_embed_type(self):
        assert parse_embed_url("https://megacloud.blog/embed/XyZ").embed_type == "e-1"

    def test_malformed(self):
        with pytest.raises(ExtractionError) as exc_info:
            parse_embed_url("not a url")
        assert exc_info.value.kind == ErrorKind.FORMAT


class TestNonce:
    def test_48_char_token(self):
        assert extract_nonce(embed_page()) == NONCE

    def test_three_16_char_tokens(self):
        html = '<script>window._lk_db = {x: "aaaaaaaaaaaaaaaa", y: "bbbbbbbbbbbbbbbb", z: "cccccccccccccccc"};</script>'
        assert extract_nonce(html) == "a" * 16 + "b" * 16 + "c" * 16

    def test_player_data_id(self):
        token = "Q" * 60
        html = f'<div id="megacloud-player" data-id="{token}"></div>'
        assert extract_nonce(html) == token

    def test_short_data_id_is_ignored(self):
        assert extract_nonce('<div id="megacloud-player" data-id="short"></div>') is None


class TestConvertSources:
    def test_maps_sources_and_caption_tracks(self):
        result = convert_sources(
            {"sources": SOURCE_LIST, "tracks": TRACKS, "intro": {"start": 0, "end": 85}},
            referer="https://megacloud.blog"
        )
        assert result.headers == {"Referer": "https://megacloud.blog"}
        assert [s.url for s in result.sources] == [SOURCE_LIST[0]["file"]]
        assert result.sources[0].is_m3u8 is True
        assert [t.lang for t in result.subtitles] == ["English"]
        assert result.intro.end == 85
        assert result.outro is None

    def test_drops_entries_without_file(self):
        result = convert_sources({"sources": [{"type": "hls"}, "junk"]}, referer="r")
        assert result.is_empty


# ---------------------------------------------------------------------------
# Extractor
# ---------------------------------------------------------------------------


class TestMegaCloudExtractor:
    def test_can_handle(self):
        extractor = MegaCloudExtractor(FakeHttp())
        assert extractor.can_handle(context())
        assert extractor.can_handle(context(episode_id="2142"))
        assert not extractor.can_handle(context(episode_id="one-piece-100?ep=2142"))

    @pytest.mark.asyncio
    async def test_plain_sources(self, sample_server_html):
        http = hianime_http(sample_server_html, {"sources": SOURCE_LIST, "tracks": TRACKS})
        result = await MegaCloudExtractor(http, SETTINGS).extract(context())

        assert result.success
        assert result.sources.sources[0].url == SOURCE_LIST[0]["file"]
        assert result.sources.headers["Referer"] == "https://megacloud.blog"
        assert result.debug["encrypted"] is False
        assert SETTINGS.keys_url not in http.urls

    @pytest.mark.asyncio
    async def test_request_chain(self, sample_server_html):
        http = hianime_http(sample_server_html, {"sources": SOURCE_LIST})
        await MegaCloudExtractor(http, SETTINGS).extract(context(sub_or_dub="dub"))

        assert http.urls == [SERVERS_URL, EMBED_LOOKUP_URL, EMBED_URL, GET_SOURCES_URL]
        assert http.calls[0].params == {"episodeId": "2142"}
        assert http.calls[1].params == {"id": "641920"}
        assert http.calls[3].params == {"id": "AbCdEf123", "_k": NONCE}

    @pytest.mark.asyncio
    async def test_encrypted_sources(self, sample_server_html):
        blob = encrypt_legacy_envelope(json.dumps(SOURCE_LIST), "megakey")
        http = hianime_http(
            sample_server_html,
            {"sources": blob, "tracks": TRACKS},
            keys={"mega": "megakey", "other": 12},
        )
        result = await MegaCloudExtractor(http, SETTINGS).extract(context())

        assert result.success
        assert result.debug["encrypted"] is True
        assert result.sources.sources[0].url == SOURCE_LIST[0]["file"]

    @pytest.mark.asyncio
    async def test_vidstr_key_is_second_choice(self, sample_server_html):
        blob = encrypt_legacy_envelope(json.dumps(SOURCE_LIST), "vidkey")
        http = hianime_http(sample_server_html, {"sources": blob}, keys={"vidstr": "vidkey"})
        result = await MegaCloudExtractor(http, SETTINGS).extract(context())

        assert result.success

    @pytest.mark.asyncio
    async def test_missing_keys_falls_back(self, sample_server_html):
        blob = encrypt_legacy_envelope(json.dumps(SOURCE_LIST), "megakey")
        http = hianime_http(sample_server_html, {"sources": blob}, keys={"unrelated": "x"})
        result = await MegaCloudExtractor(http, SETTINGS).extract(context())

        assert not result.success
        assert result.kind == ErrorKind.CRYPTO
        assert result.should_fallback is True

    @pytest.mark.asyncio
    async def test_missing_nonce_is_terminal(self, sample_server_html):
        http = hianime_http(sample_server_html, {"sources": SOURCE_LIST}, embed_html="<html>nothing</html>")
        result = await MegaCloudExtractor(http, SETTINGS).extract(context())

        assert not result.success
        assert result.kind == ErrorKind.FORMAT
        assert result.should_fallback is False
        assert GET_SOURCES_URL not in http.urls

    @pytest.mark.asyncio
    async def test_invalid_episode_id_is_terminal(self):
        http = FakeHttp()
        result = await MegaCloudExtractor(http, SETTINGS).extract(context(episode_id="$episode$"))

        assert not result.success
        assert result.should_fallback is False
        assert http.calls == []

    @pytest.mark.asyncio
    async def test_rate_limited_server_list(self):
        http = FakeHttp({SERVERS_URL: NetworkError("HTTP 429", status_code=429)})
        result = await MegaCloudExtractor(http, SETTINGS).extract(context())

        assert not result.success
        assert result.kind == ErrorKind.RATE_LIMITED
        assert result.should_fallback is True

    @pytest.mark.asyncio
    async def test_no_servers(self):
        http = FakeHttp({SERVERS_URL: {"html": "<div></div>"}})
        result = await MegaCloudExtractor(http, SETTINGS).extract(context())

        assert not result.success
        assert result.kind == ErrorKind.NOT_AVAILABLE

    @pytest.mark.asyncio
    async def test_empty_source_list(self, sample_server_html):
        http = hianime_http(sample_server_html, {"sources": []})
        result = await MegaCloudExtractor(http, SETTINGS).extract(context())

        assert not result.success
        assert result.kind == ErrorKind.NOT_AVAILABLE
        assert result.should_fallback is True
