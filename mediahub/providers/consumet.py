"""
Consumet Client - HTTP access to the Consumet scraping API.

Converters never build URLs themselves; they hand path segments and
query parameters to ConsumetClient, which quotes every segment so that
ids containing slashes or ``$`` reach the API intact.
"""

import logging
from typing import Any, Dict, Optional
from urllib.parse import quote

from mediahub.core.config_schemas import ConsumetSettings
from mediahub.core.http import HttpClient


logger = logging.getLogger(__name__)


class ConsumetClient:
    """Issues GET requests against a Consumet deployment."""

    def __init__(self, http: HttpClient, settings: Optional[ConsumetSettings] = None):
        """
        Initialize Consumet client.

        Args:
            http: Shared HTTP client
            settings: API location
        """
        self.http = http
        self.settings = settings or ConsumetSettings()

    @property
    def base_url(self) -> str:
        return self.settings.base_url

    def build_url(self, *segments: str) -> str:
        """Join quoted path segments onto the base URL."""
        path = "/".join(quote(str(segment), safe="") for segment in segments)
        return f"{self.base_url}/{path}"

    @staticmethod
    def _clean_params(params: Dict[str, Any]) -> Dict[str, str]:
        cleaned = {}
        for key, value in params.items():
            if value is None:
                continue
            if isinstance(value, bool):
                value = "true" if value else "false"
            cleaned[key] = str(value)
        return cleaned

    async def get(self, *segments: str, **params: Any) -> Any:
        """
        Fetch and decode one API route.

        Args:
            *segments: Path segments, quoted individually
            **params: Query parameters, None values are dropped

        Returns:
            Decoded JSON payload

        Raises:
            NetworkError: On HTTP or transport failure
            MediaHubError: With kind FORMAT if the body is not JSON
        """
        url = self.build_url(*segments)
        logger.debug(f"Consumet request: {url}")
        return await self.http.get_json(url, params=self._clean_params(params) or None)


# Export client
__all__ = ["ConsumetClient"]
