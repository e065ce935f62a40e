"""
Batch progress engine: registry, lifecycle controller, events and reaper.
"""

from .models import (
    BatchProgress,
    BatchStats,
    BatchStatus,
    ChunkFailure,
    CompletedChunk,
    CorrectionResult,
)
from .events import (
    BatchEvent,
    BatchEventChannel,
    BatchEventHandler,
    BatchEventType,
    create_logging_handler,
)
from .registry import BatchRegistry
from .controller import BatchController, ControllerConfig
from .reaper import Reaper

__all__ = [
    # Models
    'BatchProgress',
    'BatchStats',
    'BatchStatus',
    'ChunkFailure',
    'CompletedChunk',
    'CorrectionResult',
    # Events
    'BatchEvent',
    'BatchEventChannel',
    'BatchEventHandler',
    'BatchEventType',
    'create_logging_handler',
    # Lifecycle
    'BatchRegistry',
    'BatchController',
    'ControllerConfig',
    'Reaper',
]
