"""
Batch data model.

BatchProgress is the mutable aggregate tracking one SplitPlan through the
correction engine. Only BatchController mutates it; everything handed to
callers is a deep copy.
"""

import copy
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Dict, List, Optional

from ..splitter import Chunk, SplitPlan


class BatchStatus(str, Enum):
    """Batch lifecycle states"""
    PENDING = "pending"           # Admitted, waiting for start()
    PROCESSING = "processing"     # Chunk results are being delivered
    COMPLETED = "completed"       # Every chunk succeeded
    FAILED = "failed"             # Failure, timeout or cancellation

    @property
    def is_terminal(self) -> bool:
        return self in (BatchStatus.COMPLETED, BatchStatus.FAILED)

    @property
    def is_active(self) -> bool:
        return not self.is_terminal


@dataclass
class CorrectionResult:
    """Successful correction of one chunk, as delivered by the collaborator."""
    corrected_text: str
    original_text: str = ""
    corrections: List[Dict[str, Any]] = field(default_factory=list)
    processing_time: float = 0.0
    confidence: float = 0.0


@dataclass
class CompletedChunk:
    """A chunk together with its correction."""
    chunk: Chunk
    result: CorrectionResult
    recorded_at: datetime


@dataclass
class ChunkFailure:
    """A chunk whose correction failed, with the error message."""
    chunk: Chunk
    error_message: str
    recorded_at: datetime


@dataclass
class BatchProgress:
    """
    Progress of one batch.

    Attributes:
        batch_id: Unique key generated at admission.
        plan: The SplitPlan being executed.
        completed: Successful results keyed by chunk id.
        failed: Failures keyed by chunk id.
        status: Lifecycle state.
        created_at: Admission time.
        started_at: Time start() was called.
        finished_at: Set only on the terminal transition.
        estimated_completion_at: Recomputed after every chunk update.
        failure_reason: Why a batch ended Failed without full delivery
            ("timeout" or "cancelled").
    """
    batch_id: str
    plan: SplitPlan
    created_at: datetime
    status: BatchStatus = BatchStatus.PENDING
    completed: Dict[str, CompletedChunk] = field(default_factory=dict)
    failed: Dict[str, ChunkFailure] = field(default_factory=dict)
    started_at: Optional[datetime] = None
    finished_at: Optional[datetime] = None
    estimated_completion_at: Optional[datetime] = None
    failure_reason: Optional[str] = None

    @property
    def total_chunks(self) -> int:
        return self.plan.chunk_count

    @property
    def processed_chunks(self) -> int:
        return len(self.completed) + len(self.failed)

    @property
    def remaining_chunks(self) -> int:
        return self.total_chunks - self.processed_chunks

    @property
    def percentage(self) -> float:
        if self.total_chunks == 0:
            return 0.0
        return self.processed_chunks / self.total_chunks

    @property
    def is_terminal(self) -> bool:
        return self.status.is_terminal

    def is_accounted(self, chunk_id: str) -> bool:
        """True if a result for this chunk has already been recorded."""
        return chunk_id in self.completed or chunk_id in self.failed

    def snapshot(self) -> "BatchProgress":
        """
        Deep copy; mutating it never touches the original.

        The plan and its chunks are frozen, so they are shared with the
        snapshot instead of being copied.
        """
        memo = {id(self.plan): self.plan}
        memo.update((id(chunk), chunk) for chunk in self.plan.chunks)
        return copy.deepcopy(self, memo)

    @property
    def duration_seconds(self) -> Optional[float]:
        if self.finished_at is None:
            return None
        begin = self.started_at or self.created_at
        return (self.finished_at - begin).total_seconds()

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "batch_id": self.batch_id,
            "status": self.status.value,
            "total_chunks": self.total_chunks,
            "processed_chunks": self.processed_chunks,
            "percentage": self.percentage,
            "completed_chunk_ids": list(self.completed),
            "failed_chunks": [
                {"chunk_id": chunk_id, "error": failure.error_message}
                for chunk_id, failure in self.failed.items()
            ],
            "created_at": self.created_at.isoformat(),
            "started_at": self.started_at.isoformat() if self.started_at else None,
            "finished_at": self.finished_at.isoformat() if self.finished_at else None,
            "estimated_completion_at": (
                self.estimated_completion_at.isoformat()
                if self.estimated_completion_at else None
            ),
            "failure_reason": self.failure_reason,
        }


@dataclass
class BatchStats:
    """Aggregate statistics over the registry."""
    registered_batches: int = 0
    active_batches: int = 0
    total_processed: int = 0
    average_processing_seconds: float = 0.0
    success_rate: float = 0.0  # percent of terminal batches that completed
