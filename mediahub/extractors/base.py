"""
Base Extractor Interface - Abstract base class for custom source extractors.

A source extractor resolves playable video sources for one provider by
talking to that provider's player directly, instead of going through the
generic scraping API. Extractors never raise out of ``extract()``: every
failure becomes an ExtractionFailure tagged with an ErrorKind and a flag
telling the registry whether another strategy is worth trying.
"""

import logging
from abc import ABC, abstractmethod
from typing import Any, Dict, List, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field

from mediahub.core.exceptions import ErrorKind, ExtractionError, MediaHubError
from mediahub.core.models import SourceResult


logger = logging.getLogger(__name__)


class ExtractorContext(BaseModel):
    """Input to a custom extractor."""

    model_config = ConfigDict(frozen=True)

    episode_id: str = Field(..., description="Provider-specific episode id, validated by the extractor")
    media_id: Optional[str] = Field(None, description="Parent media id, required by some providers")
    server: Optional[str] = Field(None, description="Preferred server name, e.g. HD-1")
    sub_or_dub: Optional[Literal["sub", "dub"]] = Field(None, description="Audio preference")
    extra: Dict[str, Any] = Field(default_factory=dict, description="Provider-specific extras")


class ExtractionSuccess(BaseModel):
    """Successful extraction carrying a non-empty source result."""

    success: Literal[True] = True
    sources: SourceResult
    debug: Dict[str, Any] = Field(default_factory=dict)


class ExtractionFailure(BaseModel):
    """
    Failed extraction.

    should_fallback=True asks the caller to try the next extractor or the
    generic scraping path; False means the input itself is invalid.
    """

    success: Literal[False] = False
    error: str
    kind: ErrorKind = ErrorKind.UNKNOWN
    should_fallback: bool = True
    debug: Dict[str, Any] = Field(default_factory=dict)


ExtractorResult = Union[ExtractionSuccess, ExtractionFailure]


class ServerInfo(BaseModel):
    """A streaming server as listed by the provider."""

    id: str
    name: str
    type: Optional[Literal["sub", "dub", "raw"]] = None
    url: Optional[str] = None


class EmbedInfo(BaseModel):
    """Components of a player embed URL."""

    url: str
    domain: str = Field(..., description="Scheme and host of the embed, e.g. https://megacloud.blog")
    video_id: str
    embed_type: str = "e-1"
    referer: Optional[str] = None


class DecryptionKeys(BaseModel):
    """Named decryption passwords from the external key distribution point."""

    model_config = ConfigDict(extra="allow")

    mega: Optional[str] = None
    vidstr: Optional[str] = None

    def first_available(self, *names: str) -> Optional[str]:
        """Return the first non-empty key among the given names."""
        for name in names:
            value = getattr(self, name, None)
            if isinstance(value, str) and value:
                return value
        return None


class SourceExtractor(ABC):
    """
    Abstract base class for custom video source extractors.

    Subclasses declare which providers they serve and implement ``run()``
    as a chain of steps that raise ExtractionError to short-circuit.
    """

    name: str = "base"
    providers: List[str] = []
    default_priority: int = 0

    def __init__(self, priority: Optional[int] = None):
        """
        Initialize the extractor.

        Args:
            priority: Priority override, higher is tried first
        """
        self.priority = self.default_priority if priority is None else priority
        self.logger = logging.getLogger(f"{__name__}.{self.__class__.__name__}")

    @abstractmethod
    def can_handle(self, context: ExtractorContext) -> bool:
        """Check whether this extractor understands the given context."""
        pass

    @abstractmethod
    async def run(self, context: ExtractorContext, debug: Dict[str, Any]) -> SourceResult:
        """
        Resolve sources for the context.

        Args:
            context: Extraction input
            debug: Mutable dictionary for diagnostic breadcrumbs

        Returns:
            Non-empty SourceResult

        Raises:
            ExtractionError: To end the pipeline with a classified failure
        """
        pass

    async def extract(self, context: ExtractorContext) -> ExtractorResult:
        """
        Run the pipeline and capture every failure into a result value.

        Args:
            context: Extraction input

        Returns:
            ExtractionSuccess or ExtractionFailure, never raises
        """
        debug: Dict[str, Any] = {"extractor": self.name}

        try:
            sources = await self.run(context, debug)
        except ExtractionError as e:
            self.logger.warning(f"{self.name} extraction failed ({e.kind}): {e.message}")
            return ExtractionFailure(error=e.message, kind=e.kind, should_fallback=e.should_fallback, debug=debug)
        except MediaHubError as e:
            self.logger.warning(f"{self.name} extraction failed ({e.kind}): {e.message}")
            return ExtractionFailure(error=e.message, kind=e.kind, should_fallback=True, debug=debug)
        except Exception as e:
            self.logger.error(f"{self.name} extraction crashed: {e!r}")
            return ExtractionFailure(error=f"Unexpected error: {e}", kind=ErrorKind.UNKNOWN, should_fallback=True, debug=debug)

        if sources.is_empty:
            return ExtractionFailure(error="No sources found", kind=ErrorKind.NOT_AVAILABLE, should_fallback=True, debug=debug)

        self.logger.info(f"{self.name} extracted {len(sources.sources)} source(s)")
        return ExtractionSuccess(sources=sources, debug=debug)

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(name='{self.name}', priority={self.priority})"


# Export extractor types
__all__ = [
    "ExtractorContext",
    "ExtractionSuccess",
    "ExtractionFailure",
    "ExtractorResult",
    "ServerInfo",
    "EmbedInfo",
    "DecryptionKeys",
    "SourceExtractor",
]
