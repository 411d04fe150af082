"""
Tests for provider mapping persistence.
"""

import asyncio

import pytest
from pydantic import ValidationError as PydanticValidationError

from mediahub.core.mappings import (
    InMemoryMappingSink,
    MappingRecorder,
    MappingSink,
    ProviderMapping,
)


class FailingSink(MappingSink):
    def __init__(self):
        self.attempts = 0

    async def save(self, mapping):
        self.attempts += 1
        raise RuntimeError("database is down")


class SlowSink(InMemoryMappingSink):
    async def save(self, mapping):
        await asyncio.sleep(0.01)
        await super().save(mapping)


def mapping(confidence: float = 1.0, provider: str = "hianime") -> ProviderMapping:
    return ProviderMapping(
        ref_id="anilist:21",
        provider=provider,
        provider_id="one-piece-100",
        provider_title="One Piece",
        confidence=confidence,
    )


class TestProviderMapping:
    def test_ref_id_shape(self):
        with pytest.raises(PydanticValidationError):
            ProviderMapping(ref_id="21", provider="hianime", provider_id="x")

    def test_confidence_bounds(self):
        with pytest.raises(PydanticValidationError):
            mapping(confidence=1.5)


class TestMappingRecorder:
    @pytest.mark.asyncio
    async def test_confident_mapping_is_saved(self):
        sink = InMemoryMappingSink()
        recorder = MappingRecorder(sink, min_confidence=0.9)

        task = recorder.record(mapping(0.9))
        await task

        assert sink.get("anilist:21", "hianime").provider_title == "One Piece"

    @pytest.mark.asyncio
    async def test_low_confidence_is_skipped(self):
        sink = InMemoryMappingSink()
        recorder = MappingRecorder(sink, min_confidence=0.9)

        assert recorder.record(mapping(0.89)) is None
        await recorder.flush()

        assert sink.all() == []

    @pytest.mark.asyncio
    async def test_record_does_not_wait_for_the_write(self):
        sink = SlowSink()
        recorder = MappingRecorder(sink)

        recorder.record(mapping())
        assert recorder.pending == 1
        assert sink.all() == []

        await recorder.flush()
        assert len(sink.all()) == 1
        assert recorder.pending == 0

    @pytest.mark.asyncio
    async def test_sink_failure_is_swallowed(self):
        sink = FailingSink()
        recorder = MappingRecorder(sink)

        await recorder.record(mapping())
        await recorder.flush()

        assert sink.attempts == 1

    @pytest.mark.asyncio
    async def test_default_sink_discards(self):
        recorder = MappingRecorder()
        await recorder.record(mapping())
