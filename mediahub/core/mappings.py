"""
Provider Mappings - Fire-and-forget persistence of resolved provider ids.

When a caller resolves a catalogue title (a "ref id" such as
``anilist:21``) to an id on a specific provider, the resolution can be
handed to a sink for storage. Writes never block the caller and never
surface errors; a mapping that fails to save is logged and dropped.
"""

import asyncio
import logging
from abc import ABC, abstractmethod
from typing import Dict, List, Optional, Set

from pydantic import BaseModel, Field, field_validator


logger = logging.getLogger(__name__)


class ProviderMapping(BaseModel):
    """One resolved refId to provider-id association."""

    ref_id: str = Field(..., min_length=1, description="Catalogue reference, e.g. anilist:21")
    provider: str = Field(..., min_length=1, description="Provider the id belongs to")
    provider_id: str = Field(..., min_length=1, description="Provider-specific media id")
    provider_title: Optional[str] = Field(None, description="Title as listed by the provider")
    confidence: float = Field(1.0, ge=0.0, le=1.0, description="Match confidence")

    @field_validator('ref_id')
    @classmethod
    def validate_ref_id(cls, v: str) -> str:
        """Ref ids have the form source:id."""
        source, sep, ident = v.partition(":")
        if not sep or not source or not ident:
            raise ValueError("ref_id must look like 'source:id'")
        return v


class MappingSink(ABC):
    """Destination for resolved provider mappings."""

    @abstractmethod
    async def save(self, mapping: ProviderMapping) -> None:
        """
        Persist one mapping.

        Args:
            mapping: Mapping to store

        Raises:
            Exception: Any storage failure; callers swallow it
        """
        pass


class NullMappingSink(MappingSink):
    """Sink that discards every mapping."""

    async def save(self, mapping: ProviderMapping) -> None:
        logger.debug(f"Discarding mapping {mapping.ref_id} -> {mapping.provider}:{mapping.provider_id}")


class InMemoryMappingSink(MappingSink):
    """Keeps mappings in a dict keyed by (ref_id, provider)."""

    def __init__(self):
        self.mappings: Dict[tuple, ProviderMapping] = {}

    async def save(self, mapping: ProviderMapping) -> None:
        self.mappings[(mapping.ref_id, mapping.provider)] = mapping

    def get(self, ref_id: str, provider: str) -> Optional[ProviderMapping]:
        return self.mappings.get((ref_id, provider))

    def all(self) -> List[ProviderMapping]:
        return list(self.mappings.values())


class MappingRecorder:
    """
    Schedules mapping writes in the background.

    Pending tasks are tracked so they are not garbage collected before
    they finish, and so tests and shutdown code can wait for them.
    """

    def __init__(self, sink: Optional[MappingSink] = None, min_confidence: float = 0.9):
        """
        Initialize the recorder.

        Args:
            sink: Storage backend, discards mappings when None
            min_confidence: Lowest confidence that gets written
        """
        self.sink = sink or NullMappingSink()
        self.min_confidence = min_confidence
        self._pending: Set[asyncio.Task] = set()

    def record(self, mapping: ProviderMapping) -> Optional[asyncio.Task]:
        """
        Schedule a write if the mapping is confident enough.

        Must be called from inside a running event loop.

        Args:
            mapping: Resolved mapping

        Returns:
            The scheduled task, or None if the mapping was skipped
        """
        if mapping.confidence < self.min_confidence:
            logger.debug(
                f"Skipping mapping {mapping.ref_id} -> {mapping.provider}: "
                f"confidence {mapping.confidence:.2f} below {self.min_confidence:.2f}"
            )
            return None

        task = asyncio.get_running_loop().create_task(self._write(mapping))
        self._pending.add(task)
        task.add_done_callback(self._pending.discard)
        return task

    async def _write(self, mapping: ProviderMapping) -> None:
        try:
            await self.sink.save(mapping)
            logger.debug(f"Saved mapping {mapping.ref_id} -> {mapping.provider}:{mapping.provider_id}")
        except Exception as e:
            logger.warning(f"Failed to save mapping {mapping.ref_id} -> {mapping.provider}: {e}")

    async def flush(self) -> None:
        """Wait for every pending write to finish."""
        if self._pending:
            await asyncio.gather(*list(self._pending))

    @property
    def pending(self) -> int:
        return len(self._pending)


# Export mapping types
__all__ = [
    "ProviderMapping",
    "MappingSink",
    "NullMappingSink",
    "InMemoryMappingSink",
    "MappingRecorder",
]
