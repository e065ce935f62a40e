"""
Chunking & Batch Progress Engine.

Splits long documents into bounded-size chunks for a correction engine and
tracks per-chunk completion of each document as one batch.
"""

from .errors import (
    TextProcessingError,
    InvalidInputError,
    CapacityExceededError,
    BatchNotFoundError,
    InvalidStateError,
)
from .splitter import (
    Chunk,
    SplitPlan,
    SplitterConfig,
    TextRange,
    TextSplitter,
    split_text,
    validate_text_input,
    estimate_processing_time,
    validate_chunks,
    reconstruct_text,
)
from .service import TextProcessingService, ProcessTextResult

__version__ = "1.0.0"

__all__ = [
    # Errors
    'TextProcessingError',
    'InvalidInputError',
    'CapacityExceededError',
    'BatchNotFoundError',
    'InvalidStateError',
    # Splitter
    'Chunk',
    'SplitPlan',
    'SplitterConfig',
    'TextRange',
    'TextSplitter',
    'split_text',
    'validate_text_input',
    'estimate_processing_time',
    'validate_chunks',
    'reconstruct_text',
    # Service
    'TextProcessingService',
    'ProcessTextResult',
]
