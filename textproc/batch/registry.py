"""
Batch Registry - in-memory arena of BatchProgress keyed by batch id.

The registry never hands out its internal mapping; iteration goes through
id snapshots so callers can mutate the registry while walking it.
"""

from typing import Dict, Iterator, List, Optional

from .models import BatchProgress


class BatchRegistry:
    """Single source of truth for batch state. Owned by BatchController."""

    def __init__(self):
        self._batches: Dict[str, BatchProgress] = {}

    def __len__(self) -> int:
        return len(self._batches)

    def __contains__(self, batch_id: str) -> bool:
        return batch_id in self._batches

    def add(self, progress: BatchProgress):
        if progress.batch_id in self._batches:
            raise KeyError(f"Duplicate batch id: {progress.batch_id}")
        self._batches[progress.batch_id] = progress

    def get(self, batch_id: str) -> Optional[BatchProgress]:
        return self._batches.get(batch_id)

    def remove(self, batch_id: str) -> Optional[BatchProgress]:
        return self._batches.pop(batch_id, None)

    def ids(self) -> List[str]:
        """Snapshot of registered ids."""
        return list(self._batches)

    def values(self) -> Iterator[BatchProgress]:
        """Iterate over a snapshot of the registered batches."""
        return iter(list(self._batches.values()))

    def count_active(self) -> int:
        return sum(1 for p in self._batches.values() if p.status.is_active)
