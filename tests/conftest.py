"""
Pytest configuration and shared fixtures for MediaHub tests.

No test touches the network: HTTP is served by FakeHttp (URL -> canned
response) and the scraping API by FakeConsumet (path segments -> canned
payload). Both record every call so tests can assert on routing.
"""

import json
from typing import Any, Dict, List, NamedTuple, Optional, Tuple

import pytest

from mediahub.core.aggregator import MediaAggregator
from mediahub.core.exceptions import NetworkError
from mediahub.core.models import PlayableSource, SourceResult, Subtitle
from mediahub.extractors.base import ExtractorContext, SourceExtractor
from mediahub.extractors.registry import ExtractorRegistry


# ---------------------------------------------------------------------------
# HTTP fakes
# ---------------------------------------------------------------------------


class FakeCall(NamedTuple):
    url: str
    params: Optional[Dict[str, Any]]
    headers: Optional[Dict[str, str]]


class FakeHttp:
    """
    Stand-in for HttpClient.

    Responses may be bytes, str, JSON-compatible data, an exception to
    raise, or a callable taking the query params. Unknown URLs answer 404.
    """

    def __init__(self, routes: Optional[Dict[str, Any]] = None):
        self.routes: Dict[str, Any] = dict(routes or {})
        self.calls: List[FakeCall] = []
        self.closed = False

    def add(self, url: str, response: Any) -> None:
        self.routes[url] = response

    @property
    def urls(self) -> List[str]:
        return [call.url for call in self.calls]

    def _respond(self, url: str, params: Optional[Dict[str, Any]], headers: Optional[Dict[str, str]]) -> Any:
        self.calls.append(FakeCall(url, params, headers))
        if url not in self.routes:
            raise NetworkError(f"HTTP 404 error for {url}", url=url, status_code=404)
        response = self.routes[url]
        if callable(response):
            response = response(params)
        if isinstance(response, Exception):
            raise response
        return response

    async def get_bytes(self, url, params=None, headers=None) -> bytes:
        response = self._respond(url, params, headers)
        if isinstance(response, bytes):
            return response
        if isinstance(response, str):
            return response.encode("utf-8")
        return json.dumps(response).encode("utf-8")

    async def get_text(self, url, params=None, headers=None) -> str:
        response = self._respond(url, params, headers)
        if isinstance(response, bytes):
            return response.decode("utf-8", errors="replace")
        if isinstance(response, str):
            return response
        return json.dumps(response)

    async def get_json(self, url, params=None, headers=None) -> Any:
        response = self._respond(url, params, headers)
        if isinstance(response, (bytes, str)):
            return json.loads(response)
        return response

    async def close(self) -> None:
        self.closed = True


class FakeConsumet:
    """Stand-in for ConsumetClient keyed by the tuple of path segments."""

    def __init__(self, responses: Optional[Dict[Tuple[str, ...], Any]] = None):
        self.responses: Dict[Tuple[str, ...], Any] = dict(responses or {})
        self.calls: List[Tuple[Tuple[str, ...], Dict[str, Any]]] = []

    def add(self, segments: Tuple[str, ...], response: Any) -> None:
        self.responses[segments] = response

    @property
    def paths(self) -> List[Tuple[str, ...]]:
        return [segments for segments, _ in self.calls]

    async def get(self, *segments: str, **params: Any) -> Any:
        self.calls.append((segments, params))
        if segments not in self.responses:
            raise NetworkError(f"HTTP 404 error for /{'/'.join(segments)}", status_code=404)
        response = self.responses[segments]
        if isinstance(response, Exception):
            raise response
        return response


# ---------------------------------------------------------------------------
# Extractor fakes
# ---------------------------------------------------------------------------


def make_sources(url: str = "https://cdn.example.com/master.m3u8", referer: Optional[str] = None) -> SourceResult:
    """Create a minimal non-empty SourceResult."""
    return SourceResult(
        headers={"Referer": referer} if referer else {},
        sources=[PlayableSource(url=url, quality="auto")],
        subtitles=[Subtitle(url="https://cdn.example.com/en.vtt", lang="English")],
    )


class StubExtractor(SourceExtractor):
    """Extractor whose run() returns or raises a fixed outcome."""

    def __init__(self, name: str, providers: List[str], outcome: Any, priority: int = 0, handles: bool = True):
        super().__init__(priority)
        self.name = name
        self.providers = providers
        self.outcome = outcome
        self.handles = handles
        self.calls = 0

    def can_handle(self, context: ExtractorContext) -> bool:
        return self.handles

    async def run(self, context: ExtractorContext, debug: Dict[str, Any]) -> SourceResult:
        self.calls += 1
        if isinstance(self.outcome, Exception):
            raise self.outcome
        return self.outcome


class RecordingRegistry(ExtractorRegistry):
    """ExtractorRegistry that remembers which providers extract() was asked for."""

    def __init__(self):
        super().__init__()
        self.extract_calls: List[str] = []

    async def extract(self, provider, context):
        self.extract_calls.append(provider)
        return await super().extract(provider, context)


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def fake_http():
    return FakeHttp()


@pytest.fixture
def fake_consumet():
    return FakeConsumet()


@pytest.fixture
def registry():
    return RecordingRegistry()


@pytest.fixture
def aggregator(fake_consumet, registry):
    """Aggregator over the fake scraping API and an empty recording registry."""
    return MediaAggregator(consumet=fake_consumet, registry=registry)


@pytest.fixture
def sample_server_html():
    """HiAnime server list fragment with sub and dub servers."""
    return """
    <div class="ps_-block ps_-block-sub servers-sub">
        <div class="ps__-list">
            <div class="item server-item" data-type="sub" data-id="641915" data-server-id="4">
                <a href="javascript:;" class="btn">HD-1</a>
            </div>
            <div class="item server-item" data-type="sub" data-id="641916" data-server-id="1">
                <a href="javascript:;" class="btn">HD-2</a>
            </div>
        </div>
    </div>
    <div class="ps_-block ps_-block-sub servers-dub">
        <div class="ps__-list">
            <div class="item server-item" data-type="dub" data-id="641920" data-server-id="4">
                <a href="javascript:;" class="btn">HD-1</a>
            </div>
            <div class="item server-item" data-type="dub" data-id="641921" data-server-id="1">
                <a href="javascript:;" class="btn">HD-2</a>
            </div>
        </div>
    </div>
    """
