"""
Unit tests for textproc.batch.models and textproc.batch.registry.
"""

import pytest
from datetime import timedelta

from textproc.batch.models import (
    BatchProgress,
    BatchStatus,
    ChunkFailure,
    CompletedChunk,
    CorrectionResult,
)
from textproc.batch.registry import BatchRegistry

from helpers import FakeClock, build_plan


class TestBatchStatus:
    """Tests for BatchStatus enum."""

    def test_status_values(self):
        """Test BatchStatus enum values."""
        assert BatchStatus.PENDING.value == "pending"
        assert BatchStatus.PROCESSING.value == "processing"
        assert BatchStatus.COMPLETED.value == "completed"
        assert BatchStatus.FAILED.value == "failed"

    def test_terminal_states(self):
        """Test only Completed and Failed are terminal."""
        assert not BatchStatus.PENDING.is_terminal
        assert not BatchStatus.PROCESSING.is_terminal
        assert BatchStatus.COMPLETED.is_terminal
        assert BatchStatus.FAILED.is_terminal
        assert BatchStatus.PROCESSING.is_active


class TestBatchProgress:
    """Tests for BatchProgress dataclass."""

    @pytest.fixture
    def progress(self):
        clock = FakeClock()
        return BatchProgress(batch_id="batch-001", plan=build_plan(4), created_at=clock())

    def test_defaults(self, progress):
        """Test a fresh progress record."""
        assert progress.status == BatchStatus.PENDING
        assert progress.total_chunks == 4
        assert progress.processed_chunks == 0
        assert progress.remaining_chunks == 4
        assert progress.percentage == 0.0
        assert progress.duration_seconds is None

    def test_processed_is_derived(self, progress):
        """Test processed = completed + failed."""
        chunks = progress.plan.chunks
        now = progress.created_at
        progress.completed[chunks[0].id] = CompletedChunk(chunks[0], CorrectionResult("x"), now)
        progress.failed[chunks[1].id] = ChunkFailure(chunks[1], "boom", now)

        assert progress.processed_chunks == 2
        assert progress.percentage == 0.5
        assert progress.is_accounted(chunks[0].id)
        assert progress.is_accounted(chunks[1].id)
        assert not progress.is_accounted(chunks[2].id)

    def test_duration(self, progress):
        """Test duration from start to finish."""
        progress.started_at = progress.created_at + timedelta(seconds=1)
        progress.finished_at = progress.created_at + timedelta(seconds=6)
        assert progress.duration_seconds == 5.0

    def test_snapshot_is_independent(self, progress):
        """Test snapshot is a deep copy."""
        copy = progress.snapshot()
        copy.status = BatchStatus.FAILED
        copy.completed["x"] = None
        assert progress.status == BatchStatus.PENDING
        assert progress.completed == {}

    def test_snapshot_shares_frozen_plan(self, progress):
        """Test the plan and chunks are shared while result records are copied."""
        chunk = progress.plan.chunks[0]
        progress.completed[chunk.id] = CompletedChunk(chunk, CorrectionResult("x"), progress.created_at)

        copy = progress.snapshot()

        assert copy.plan is progress.plan
        assert copy.completed[chunk.id].chunk is chunk
        assert copy.completed[chunk.id] is not progress.completed[chunk.id]
        copy.completed[chunk.id].result.corrections.append({"original": "a", "corrected": "b"})
        assert progress.completed[chunk.id].result.corrections == []

    def test_to_dict(self, progress):
        """Test serialization."""
        chunk = progress.plan.chunks[0]
        progress.failed[chunk.id] = ChunkFailure(chunk, "boom", progress.created_at)
        data = progress.to_dict()

        assert data["batch_id"] == "batch-001"
        assert data["status"] == "pending"
        assert data["processed_chunks"] == 1
        assert data["failed_chunks"] == [{"chunk_id": chunk.id, "error": "boom"}]
        assert data["finished_at"] is None


class TestBatchRegistry:
    """Tests for BatchRegistry."""

    def _progress(self, batch_id, status=BatchStatus.PENDING):
        clock = FakeClock()
        return BatchProgress(batch_id=batch_id, plan=build_plan(1), created_at=clock(), status=status)

    def test_add_get_remove(self):
        """Test basic registry operations."""
        registry = BatchRegistry()
        registry.add(self._progress("a"))

        assert "a" in registry
        assert len(registry) == 1
        assert registry.get("a").batch_id == "a"
        assert registry.remove("a").batch_id == "a"
        assert registry.get("a") is None
        assert registry.remove("a") is None

    def test_duplicate_id_rejected(self):
        """Test a batch id cannot be registered twice."""
        registry = BatchRegistry()
        registry.add(self._progress("a"))
        with pytest.raises(KeyError):
            registry.add(self._progress("a"))

    def test_count_active(self):
        """Test active count ignores terminal batches."""
        registry = BatchRegistry()
        registry.add(self._progress("a", BatchStatus.PENDING))
        registry.add(self._progress("b", BatchStatus.PROCESSING))
        registry.add(self._progress("c", BatchStatus.COMPLETED))
        registry.add(self._progress("d", BatchStatus.FAILED))
        assert registry.count_active() == 2

    def test_iteration_over_snapshot(self):
        """Test removing entries while iterating ids is safe."""
        registry = BatchRegistry()
        for batch_id in "abc":
            registry.add(self._progress(batch_id))

        for batch_id in registry.ids():
            registry.remove(batch_id)
        assert len(registry) == 0
