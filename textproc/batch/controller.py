"""
Batch Lifecycle Controller.

Admission control, state transitions, timeout scheduling and event
emission on top of the BatchRegistry.

State machine:
    PENDING --start--> PROCESSING
    PROCESSING --all chunks accounted, no failures--> COMPLETED
    PROCESSING --all chunks accounted, >=1 failure--> FAILED
    PROCESSING --timeout--> FAILED
    PENDING|PROCESSING --cancel--> FAILED

Every mutating method runs to completion without awaiting, so on a single
asyncio event loop no lock is needed.
"""

import asyncio
import uuid
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Callable, Dict, List, Optional, Union

from config.constants import (
    BATCH_MAX_CONCURRENT,
    BATCH_TIMEOUT_SECONDS,
    BATCH_CLEANUP_INTERVAL_SECONDS,
    BATCH_MAX_AGE_SECONDS,
    BATCH_SECONDS_PER_CHUNK_ESTIMATE,
)
from config.logging_config import get_logger

from ..errors import (
    BatchNotFoundError,
    CapacityExceededError,
    InvalidInputError,
    InvalidStateError,
)
from ..splitter import SplitPlan, estimate_processing_time
from .events import BatchEvent, BatchEventChannel, BatchEventType
from .models import (
    BatchProgress,
    BatchStats,
    BatchStatus,
    ChunkFailure,
    CompletedChunk,
    CorrectionResult,
)
from .registry import BatchRegistry

logger = get_logger(__name__)


ChunkOutcome = Union[CorrectionResult, Exception]

FAILURE_TIMEOUT = "timeout"
FAILURE_CANCELLED = "cancelled"
FAILURE_CHUNKS = "chunk_failures"


@dataclass
class ControllerConfig:
    """Configuration for BatchController."""
    max_concurrent_batches: int = BATCH_MAX_CONCURRENT
    batch_timeout_seconds: float = BATCH_TIMEOUT_SECONDS
    cleanup_interval_seconds: float = BATCH_CLEANUP_INTERVAL_SECONDS
    max_batch_age_seconds: float = BATCH_MAX_AGE_SECONDS
    seconds_per_chunk_estimate: float = BATCH_SECONDS_PER_CHUNK_ESTIMATE

    def validate(self):
        if self.max_concurrent_batches <= 0:
            raise InvalidInputError("max_concurrent_batches must be greater than 0")
        if self.batch_timeout_seconds <= 0:
            raise InvalidInputError("batch_timeout_seconds must be greater than 0")
        if self.cleanup_interval_seconds <= 0:
            raise InvalidInputError("cleanup_interval_seconds must be greater than 0")
        if self.max_batch_age_seconds < 0:
            raise InvalidInputError("max_batch_age_seconds cannot be negative")


@dataclass
class _ScheduledTimeout:
    """Pending timeout for one batch; ``token`` identifies this scheduling."""
    token: str
    handle: asyncio.TimerHandle


class BatchController:
    """
    Owns the BatchRegistry and is the only code that mutates it.

    Usage:
        controller = BatchController(ControllerConfig(max_concurrent_batches=5))
        controller.channel.subscribe(on_event)

        batch_id = controller.admit(plan)
        controller.start(batch_id)          # inside a running event loop
        for chunk in plan.chunks:
            controller.record_chunk_result(batch_id, chunk.id, result)

        progress = controller.get_progress(batch_id)
    """

    def __init__(
        self,
        config: Optional[ControllerConfig] = None,
        channel: Optional[BatchEventChannel] = None,
        clock: Callable[[], datetime] = datetime.now,
    ):
        """
        Initialize controller.

        Args:
            config: Admission, timeout and retention parameters
            channel: Event channel to publish lifecycle events into
            clock: Time source, injectable for tests
        """
        self.config = config or ControllerConfig()
        self.config.validate()
        self.channel = channel or BatchEventChannel()
        self._clock = clock
        self._registry = BatchRegistry()
        self._timeouts: Dict[str, _ScheduledTimeout] = {}

        logger.info(
            f"BatchController initialized: max_concurrent={self.config.max_concurrent_batches}, "
            f"timeout={self.config.batch_timeout_seconds}s"
        )

    # =========================================
    # Admission
    # =========================================

    @property
    def active_count(self) -> int:
        """Batches currently Pending or Processing."""
        return self._registry.count_active()

    def ensure_capacity(self):
        """Raise CapacityExceededError if no batch can be admitted right now."""
        active = self.active_count
        if active >= self.config.max_concurrent_batches:
            raise CapacityExceededError(
                f"Maximum concurrent batches reached ({active}/"
                f"{self.config.max_concurrent_batches}). Please try again later."
            )

    def admit(self, plan: SplitPlan) -> str:
        """
        Register a new Pending batch for a split plan.

        Returns:
            The new batch id.

        Raises:
            CapacityExceededError: If the active batch cap is reached.
        """
        self.ensure_capacity()

        now = self._clock()
        batch_id = str(uuid.uuid4())
        while batch_id in self._registry:
            batch_id = str(uuid.uuid4())

        estimate = estimate_processing_time(
            plan.chunk_count, self.config.seconds_per_chunk_estimate
        )
        progress = BatchProgress(
            batch_id=batch_id,
            plan=plan,
            created_at=now,
            estimated_completion_at=now + timedelta(seconds=estimate),
        )
        self._registry.add(progress)

        logger.info(
            f"Batch created: {batch_id} ({plan.chunk_count} chunks, "
            f"{plan.total_characters} chars)"
        )
        self._publish(BatchEventType.BATCH_CREATED, progress)
        return batch_id

    # =========================================
    # Lifecycle
    # =========================================

    def start(self, batch_id: str):
        """
        Move a Pending batch to Processing and arm its timeout.

        Raises:
            BatchNotFoundError: Unknown batch id
            InvalidStateError: Batch is not Pending
        """
        progress = self._require(batch_id)
        if progress.status != BatchStatus.PENDING:
            raise InvalidStateError(f"Batch is already {progress.status.value}")

        progress.status = BatchStatus.PROCESSING
        progress.started_at = self._clock()

        logger.info(f"Batch started: {batch_id} ({progress.total_chunks} chunks)")
        self._publish(BatchEventType.BATCH_STARTED, progress)
        self._schedule_timeout(batch_id)

    def record_chunk_result(self, batch_id: str, chunk_id: str, result: ChunkOutcome):
        """
        Record the outcome of one chunk. The only progress mutation entry point.

        A CorrectionResult (or a plain corrected string) counts as success,
        an Exception as failure. Re-delivery for a chunk that is already
        accounted for is a no-op. Unknown batches, batches not yet started
        and unknown chunk ids are logged and ignored.
        """
        progress = self._registry.get(batch_id)
        if progress is None:
            logger.warning(f"Result for unknown batch ignored: {batch_id} (chunk {chunk_id})")
            return

        if progress.status == BatchStatus.PENDING:
            logger.warning(f"Result for batch not yet started ignored: {batch_id} (chunk {chunk_id})")
            return

        chunk = progress.plan.get_chunk(chunk_id)
        if chunk is None:
            logger.warning(f"Result for unknown chunk ignored: {chunk_id} (batch {batch_id})")
            return

        if progress.is_accounted(chunk_id):
            logger.debug(f"Duplicate result for chunk {chunk_id} ignored (batch {batch_id})")
            return

        now = self._clock()
        if isinstance(result, Exception):
            message = str(result) or result.__class__.__name__
            progress.failed[chunk_id] = ChunkFailure(
                chunk=chunk, error_message=message, recorded_at=now
            )
            logger.debug(f"Chunk failed: {chunk_id} (batch {batch_id}): {message}")
        else:
            if isinstance(result, str):
                result = CorrectionResult(corrected_text=result, original_text=chunk.content)
            elif not isinstance(result, CorrectionResult):
                raise TypeError(
                    f"Chunk result must be CorrectionResult, str or Exception, "
                    f"got {type(result).__name__}"
                )
            progress.completed[chunk_id] = CompletedChunk(
                chunk=chunk, result=result, recorded_at=now
            )
            logger.debug(f"Chunk completed: {chunk_id} (batch {batch_id})")

        if progress.is_terminal:
            # Late delivery after cancel/timeout: kept, but the state stays put
            logger.debug(
                f"Late result recorded for {progress.status.value} batch {batch_id}"
            )
            return

        if progress.processed_chunks >= progress.total_chunks:
            status = BatchStatus.COMPLETED if not progress.failed else BatchStatus.FAILED
            self._finish(progress, status, None if not progress.failed else FAILURE_CHUNKS)
            logger.info(
                f"Batch {status.value}: {batch_id} "
                f"({len(progress.completed)} completed, {len(progress.failed)} failed)"
            )
            self._publish(BatchEventType.BATCH_COMPLETED, progress)
            return

        # Running average over everything processed so far
        elapsed = (now - (progress.started_at or progress.created_at)).total_seconds()
        avg_per_chunk = elapsed / progress.processed_chunks
        progress.estimated_completion_at = now + timedelta(
            seconds=avg_per_chunk * progress.remaining_chunks
        )
        self._publish(BatchEventType.PROGRESS_UPDATED, progress)

    def cancel(self, batch_id: str) -> bool:
        """
        Force a batch to Failed. In-flight external work is not interrupted.

        Returns:
            False if the batch is unknown or already Completed, else True.
        """
        progress = self._registry.get(batch_id)
        if progress is None:
            return False

        if progress.status == BatchStatus.COMPLETED:
            return False

        if progress.status == BatchStatus.FAILED:
            logger.debug(f"Cancel on already failed batch {batch_id}: no-op")
            return True

        self._finish(progress, BatchStatus.FAILED, FAILURE_CANCELLED)
        logger.info(f"Batch cancelled: {batch_id}")
        self._publish(BatchEventType.BATCH_CANCELLED, progress)
        return True

    # =========================================
    # Queries
    # =========================================

    def get_progress(self, batch_id: str) -> Optional[BatchProgress]:
        """Deep copy of a batch's progress, or None if unknown."""
        progress = self._registry.get(batch_id)
        if progress is None:
            return None
        return progress.snapshot()

    def get_active_batches(self) -> List[BatchProgress]:
        """Deep copies of every Pending or Processing batch."""
        return [p.snapshot() for p in self._registry.values() if p.status.is_active]

    def list_batches(self) -> List[BatchProgress]:
        """Deep copies of every registered batch."""
        return [p.snapshot() for p in self._registry.values()]

    def get_stats(self) -> BatchStats:
        """Aggregate statistics over registered batches."""
        batches = list(self._registry.values())
        terminal = [b for b in batches if b.is_terminal]
        successful = [b for b in terminal if b.status == BatchStatus.COMPLETED]

        durations = [b.duration_seconds for b in terminal if b.duration_seconds is not None]
        average = sum(durations) / len(durations) if durations else 0.0
        success_rate = len(successful) / len(terminal) * 100 if terminal else 0.0

        return BatchStats(
            registered_batches=len(batches),
            active_batches=len(batches) - len(terminal),
            total_processed=len(terminal),
            average_processing_seconds=average,
            success_rate=success_rate,
        )

    # =========================================
    # Cleanup
    # =========================================

    def cleanup(self) -> int:
        """
        Evict terminal batches that finished more than max_batch_age ago.

        Returns:
            Number of evicted batches.
        """
        cutoff = self._clock() - timedelta(seconds=self.config.max_batch_age_seconds)
        evicted = 0

        for batch_id in self._registry.ids():
            progress = self._registry.get(batch_id)
            if progress is None or not progress.is_terminal:
                continue
            if progress.finished_at is not None and progress.finished_at < cutoff:
                self._registry.remove(batch_id)
                self._cancel_timeout(batch_id)
                evicted += 1
                logger.debug(f"Evicted batch {batch_id} ({progress.status.value})")

        if evicted:
            logger.info(f"Batch cleanup completed: {evicted} evicted, {len(self._registry)} remaining")
        return evicted

    def shutdown(self):
        """Cancel every active batch, drop pending timeouts, close the channel."""
        for batch_id in self._registry.ids():
            progress = self._registry.get(batch_id)
            if progress is not None and progress.status.is_active:
                self.cancel(batch_id)

        for batch_id in list(self._timeouts):
            self._cancel_timeout(batch_id)

        self.channel.close()
        logger.info("BatchController shutdown completed")

    # =========================================
    # Internals
    # =========================================

    def _require(self, batch_id: str) -> BatchProgress:
        progress = self._registry.get(batch_id)
        if progress is None:
            raise BatchNotFoundError(batch_id)
        return progress

    def _finish(self, progress: BatchProgress, status: BatchStatus, reason: Optional[str]):
        progress.status = status
        progress.finished_at = self._clock()
        progress.estimated_completion_at = progress.finished_at
        progress.failure_reason = reason

    def _publish(self, event_type: BatchEventType, progress: BatchProgress):
        self.channel.publish(BatchEvent(
            type=event_type,
            batch_id=progress.batch_id,
            progress=progress.snapshot(),
            occurred_at=self._clock(),
        ))

    def _schedule_timeout(self, batch_id: str):
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            logger.warning(f"No running event loop, timeout not scheduled for batch {batch_id}")
            return

        token = uuid.uuid4().hex
        handle = loop.call_later(
            self.config.batch_timeout_seconds, self._handle_timeout, batch_id, token
        )
        self._timeouts[batch_id] = _ScheduledTimeout(token=token, handle=handle)

    def _cancel_timeout(self, batch_id: str):
        scheduled = self._timeouts.pop(batch_id, None)
        if scheduled is not None:
            scheduled.handle.cancel()

    def _handle_timeout(self, batch_id: str, token: str):
        scheduled = self._timeouts.get(batch_id)
        if scheduled is None or scheduled.token != token:
            return
        del self._timeouts[batch_id]

        progress = self._registry.get(batch_id)
        if progress is None or progress.status != BatchStatus.PROCESSING:
            return

        self._finish(progress, BatchStatus.FAILED, FAILURE_TIMEOUT)
        logger.warning(
            f"Batch timeout: {batch_id} "
            f"({progress.processed_chunks}/{progress.total_chunks} chunks processed)"
        )
        self._publish(BatchEventType.BATCH_TIMEOUT, progress)
