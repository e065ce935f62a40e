#!/usr/bin/env python3
# -*- coding: utf-8 -*-

"""
TextProcessingService - entry point for the chunking and batch engine.

Wires TextSplitter, BatchController and Reaper together. Transport,
authentication and AI provider calls live outside this package; they talk
to the service through process_text / start / record_chunk_result /
get_progress / cancel.

Usage:
    service = TextProcessingService.from_settings(settings)
    service.start_reaper()          # inside a running event loop

    result = service.process_text(document)
    service.controller.start(result.batch_id)
    for chunk in result.split_plan.chunks:
        try:
            corrected = await corrector.correct(chunk.content)
            service.controller.record_chunk_result(result.batch_id, chunk.id, corrected)
        except ProviderError as e:
            service.controller.record_chunk_result(result.batch_id, chunk.id, e)

    await service.shutdown()
"""

from dataclasses import dataclass
from datetime import datetime
from typing import Callable, Optional

from config.logging_config import configure_logging, get_logger

from .batch.controller import BatchController, ControllerConfig
from .batch.events import BatchEventChannel
from .batch.reaper import Reaper
from .splitter import SplitPlan, SplitterConfig, TextSplitter, estimate_processing_time

logger = get_logger(__name__)


@dataclass
class ProcessTextResult:
    """Result of process_text."""
    batch_id: str
    split_plan: SplitPlan
    estimated_time_seconds: float


class TextProcessingService:
    """Facade owning one splitter, one controller and its reaper."""

    def __init__(
        self,
        splitter_config: Optional[SplitterConfig] = None,
        controller_config: Optional[ControllerConfig] = None,
        channel: Optional[BatchEventChannel] = None,
        clock: Callable[[], datetime] = datetime.now,
    ):
        self.splitter = TextSplitter(splitter_config)
        self.controller = BatchController(controller_config, channel=channel, clock=clock)
        self.reaper = Reaper(self.controller)

        logger.info(
            f"TextProcessingService initialized: max_chunk_size={self.splitter.config.max_chunk_size}, "
            f"max_concurrent_batches={self.controller.config.max_concurrent_batches}"
        )

    @classmethod
    def from_settings(cls, settings, **kwargs) -> "TextProcessingService":
        """Build a service from config.settings.Settings (also applies its logging options)."""
        configure_logging(settings.log_level, settings.log_file)
        return cls(
            splitter_config=settings.splitter_config(),
            controller_config=settings.controller_config(),
            **kwargs,
        )

    @property
    def channel(self) -> BatchEventChannel:
        return self.controller.channel

    def process_text(self, text: str) -> ProcessTextResult:
        """
        Split text and admit it as a new Pending batch.

        Capacity is checked before splitting so a full engine does not pay
        for the split.

        Raises:
            InvalidInputError: Empty or oversized text
            CapacityExceededError: Active batch cap reached
        """
        self.controller.ensure_capacity()
        plan = self.splitter.split(text)
        batch_id = self.controller.admit(plan)

        return ProcessTextResult(
            batch_id=batch_id,
            split_plan=plan,
            estimated_time_seconds=estimate_processing_time(
                plan.chunk_count, self.controller.config.seconds_per_chunk_estimate
            ),
        )

    def start_reaper(self):
        """Start periodic cleanup (requires a running event loop)."""
        self.reaper.start()

    async def shutdown(self):
        """Stop the reaper, cancel active batches, run a final cleanup."""
        await self.reaper.stop()
        self.controller.shutdown()
        evicted = self.controller.cleanup()
        logger.info(f"TextProcessingService shutdown completed ({evicted} batches evicted)")
