"""
Shared test helpers: fake clock, event recorder and plan builder.
"""
import uuid
from datetime import datetime, timedelta
from typing import List

from textproc.splitter import Chunk, SplitPlan, TextRange
from textproc.batch.events import BatchEvent


class FakeClock:
    """Manually advanced time source."""

    def __init__(self, start: datetime = None):
        self.now = start or datetime(2024, 1, 1, 12, 0, 0)

    def __call__(self) -> datetime:
        return self.now

    def advance(self, seconds: float):
        self.now += timedelta(seconds=seconds)


class EventRecorder:
    """Event handler that keeps every event it receives."""

    def __init__(self):
        self.events: List[BatchEvent] = []

    def __call__(self, event: BatchEvent):
        self.events.append(event)

    def of_type(self, event_type) -> List[BatchEvent]:
        return [e for e in self.events if e.type == event_type]

    @property
    def types(self):
        return [e.type for e in self.events]


def build_plan(chunk_count: int = 3, chunk_size: int = 10) -> SplitPlan:
    """SplitPlan of ``chunk_count`` back-to-back chunks."""
    chunks = []
    for i in range(chunk_count):
        content = chr(ord("a") + i % 26) * chunk_size
        chunks.append(Chunk(
            id=str(uuid.uuid4()),
            content=content,
            original_range=TextRange(start=i * chunk_size, end=(i + 1) * chunk_size),
            length=chunk_size,
            is_final=i == chunk_count - 1,
        ))
    return SplitPlan(
        chunks=tuple(chunks),
        total_characters=chunk_count * chunk_size,
        max_chunk_size=chunk_size,
    )
