"""
HTTP Client - Shared aiohttp wrapper with consistent error mapping.

Every outbound request in MediaHub goes through HttpClient so that HTTP
statuses and transport failures surface as NetworkError with the right
ErrorKind, whichever component made the call.
"""

import asyncio
import json
import logging
from typing import Any, Dict, Optional

import aiohttp

from mediahub.core.exceptions import ErrorKind, MediaHubError, NetworkError


logger = logging.getLogger(__name__)

DEFAULT_USER_AGENT = (
    "Mozilla/5.0 (Linux; Android 10; K) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/137.0.0.0 Mobile Safari/537.36"
)


class HttpClient:
    """
    Thin async HTTP client over a lazily created aiohttp session.

    The client performs no retries by default; callers decide whether a
    failed request is worth another attempt.
    """

    def __init__(
        self,
        timeout: float = 10.0,
        user_agent: str = DEFAULT_USER_AGENT,
        max_retries: int = 0,
        retry_delay: float = 1.0,
    ):
        """
        Initialize the client.

        Args:
            timeout: Per-request total timeout in seconds
            user_agent: Default User-Agent header
            max_retries: Extra attempts on transport failures
            retry_delay: Base delay between attempts in seconds
        """
        self.timeout = timeout
        self.user_agent = user_agent
        self.max_retries = max_retries
        self.retry_delay = retry_delay
        self._session: Optional[aiohttp.ClientSession] = None

    @property
    def session(self) -> aiohttp.ClientSession:
        """Get or create HTTP session with proper configuration."""
        if self._session is None or self._session.closed:
            connector = aiohttp.TCPConnector(
                limit=20,
                limit_per_host=5,
                ttl_dns_cache=300,
                use_dns_cache=True
            )

            self._session = aiohttp.ClientSession(
                connector=connector,
                timeout=aiohttp.ClientTimeout(total=self.timeout),
                headers={
                    'User-Agent': self.user_agent,
                    'Accept-Language': 'en-US,en;q=0.5',
                },
            )

        return self._session

    async def _request(
        self,
        url: str,
        params: Optional[Dict[str, Any]] = None,
        headers: Optional[Dict[str, str]] = None,
    ) -> bytes:
        """
        Perform a GET request and return the raw body.

        Raises:
            NetworkError: On non-2xx status or transport failure
        """
        last_exception: Optional[BaseException] = None

        for attempt in range(self.max_retries + 1):
            try:
                logger.debug(f"GET {url} params={params} (attempt {attempt + 1})")

                async with self.session.get(url, params=params, headers=headers) as response:
                    if response.status >= 400:
                        error_text = await response.text(errors="replace")
                        raise NetworkError(
                            f"HTTP {response.status} error for {url}",
                            url=url,
                            status_code=response.status,
                            details=error_text[:500]
                        )
                    return await response.read()

            except (aiohttp.ClientError, asyncio.TimeoutError) as e:
                last_exception = e
                logger.warning(f"Request to {url} failed (attempt {attempt + 1}): {e!r}")

                if attempt < self.max_retries:
                    await asyncio.sleep(self.retry_delay * (attempt + 1))

        raise NetworkError(
            f"Request failed after {self.max_retries + 1} attempt(s): {last_exception!r}",
            url=url,
            details=str(last_exception)
        )

    async def get_bytes(self, url: str, params: Optional[Dict[str, Any]] = None, headers: Optional[Dict[str, str]] = None) -> bytes:
        """Get the raw response body."""
        return await self._request(url, params=params, headers=headers)

    async def get_text(self, url: str, params: Optional[Dict[str, Any]] = None, headers: Optional[Dict[str, str]] = None) -> str:
        """Get the response body decoded leniently as UTF-8."""
        body = await self._request(url, params=params, headers=headers)
        return body.decode("utf-8", errors="replace")

    async def get_json(self, url: str, params: Optional[Dict[str, Any]] = None, headers: Optional[Dict[str, str]] = None) -> Any:
        """
        Get and parse a JSON response.

        Raises:
            NetworkError: On HTTP or transport failure
            MediaHubError: With kind FORMAT if the body is not JSON
        """
        text = await self.get_text(url, params=params, headers=headers)
        try:
            return json.loads(text)
        except json.JSONDecodeError as e:
            raise MediaHubError(f"Invalid JSON from {url}", details=str(e), kind=ErrorKind.FORMAT)

    async def close(self) -> None:
        """Close the underlying session."""
        if self._session and not self._session.closed:
            await self._session.close()
        self._session = None

    async def __aenter__(self) -> "HttpClient":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.close()


# Export HTTP client
__all__ = ["HttpClient", "DEFAULT_USER_AGENT"]
