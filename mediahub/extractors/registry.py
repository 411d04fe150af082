"""
Extractor Registry - Priority-ordered lookup of custom source extractors.

The registry is built once at startup and handed to the aggregator. It
is append-only: extractors are registered while the process starts and
the table is only read afterwards.
"""

import logging
from typing import TYPE_CHECKING, Callable, Dict, List

from mediahub.core.exceptions import ErrorKind
from mediahub.extractors.base import (
    ExtractionFailure,
    ExtractorContext,
    ExtractorResult,
    SourceExtractor,
)

if TYPE_CHECKING:
    from mediahub.core.config_schemas import AppSettings
    from mediahub.core.http import HttpClient


logger = logging.getLogger(__name__)


class ExtractorRegistry:
    """Holds extractors per provider, highest priority first."""

    def __init__(self):
        self._extractors: Dict[str, List[SourceExtractor]] = {}
        self._all: List[SourceExtractor] = []

    def register(self, extractor: SourceExtractor) -> None:
        """
        Register an extractor for every provider it declares.

        Equal priorities keep registration order.

        Args:
            extractor: Extractor instance
        """
        if not extractor.providers:
            logger.warning(f"Extractor {extractor.name} declares no providers, ignoring")
            return

        self._all.append(extractor)
        for provider in extractor.providers:
            bucket = self._extractors.setdefault(provider, [])
            bucket.append(extractor)
            # sorted() is stable, so ties stay in registration order
            bucket[:] = sorted(bucket, key=lambda e: -e.priority)

        logger.info(
            f"Registered extractor {extractor.name} (priority {extractor.priority}) "
            f"for {', '.join(extractor.providers)}"
        )

    def get_extractors(self, provider: str) -> List[SourceExtractor]:
        """Get extractors for a provider, sorted by priority."""
        return list(self._extractors.get(provider, []))

    def has_extractors(self, provider: str) -> bool:
        """Whether any extractor claims the provider."""
        return bool(self._extractors.get(provider))

    def all_extractors(self) -> List[SourceExtractor]:
        """All registered extractors in registration order."""
        return list(self._all)

    async def extract(self, provider: str, context: ExtractorContext) -> ExtractorResult:
        """
        Try the provider's extractors in priority order.

        The first success wins. A failure with should_fallback=False is
        terminal and returned as-is; otherwise the next candidate is tried.
        When every candidate declines or fails, the last failure is
        returned with should_fallback=True so the caller can use the
        generic scraping path.

        Args:
            provider: Provider name
            context: Extraction input

        Returns:
            Extraction result
        """
        extractors = self._extractors.get(provider)
        if not extractors:
            return ExtractionFailure(
                error=f"No extractors registered for provider: {provider}",
                kind=ErrorKind.NOT_AVAILABLE,
                should_fallback=True,
            )

        last_failure = ExtractionFailure(
            error=f"No extractor could handle episode {context.episode_id}",
            kind=ErrorKind.FORMAT,
            should_fallback=True,
        )

        for extractor in extractors:
            try:
                if not extractor.can_handle(context):
                    logger.debug(f"Extractor {extractor.name} cannot handle {context.episode_id}")
                    continue

                logger.debug(f"Trying extractor {extractor.name} for {provider}")
                result = await extractor.extract(context)
            except Exception as e:
                logger.error(f"Extractor {extractor.name} raised: {e!r}")
                result = ExtractionFailure(error=str(e), kind=ErrorKind.UNKNOWN, should_fallback=True)

            if result.success:
                return result

            if not result.should_fallback:
                logger.warning(f"Extractor {extractor.name} failed terminally: {result.error}")
                return result

            logger.debug(f"Extractor {extractor.name} failed, trying next: {result.error}")
            last_failure = result

        return last_failure

    def __len__(self) -> int:
        return len(self._all)


def create_registry(settings: "AppSettings", http: "HttpClient") -> ExtractorRegistry:
    """
    Build the process-wide registry from configuration.

    Only extractors enabled in settings are registered, with their
    configured priority.

    Args:
        settings: Application settings
        http: Shared HTTP client handed to each extractor

    Returns:
        Populated registry
    """
    from mediahub.extractors.megacloud import MegaCloudExtractor

    factories: Dict[str, Callable[[int], SourceExtractor]] = {
        MegaCloudExtractor.name: lambda priority: MegaCloudExtractor(http, settings.hianime, priority=priority),
    }

    registry = ExtractorRegistry()
    for name, config in settings.get_enabled_extractors().items():
        factory = factories.get(name)
        if factory is None:
            logger.warning(f"Unknown extractor in configuration: {name}")
            continue
        registry.register(factory(config.priority))

    return registry


# Export registry
__all__ = ["ExtractorRegistry", "create_registry"]
