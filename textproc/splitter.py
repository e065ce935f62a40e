#!/usr/bin/env python3
# -*- coding: utf-8 -*-

"""
TextSplitter - Bounded-size chunking for the correction engine.

Splits a long document into chunks no larger than ``max_chunk_size``,
cutting at the strongest breakpoint found near the size limit:

- Paragraph break, line break
- Sentence-ending punctuation (CJK and Latin)
- Clause punctuation
- Plain space

If no breakpoint is found the splitter falls back to the nearest
whitespace, and finally to a hard cut at the size limit. Adjacent chunks
can share an overlap region so the correction engine keeps some context
across a cut.

Usage:
    from textproc.splitter import TextSplitter, SplitterConfig

    splitter = TextSplitter(SplitterConfig(max_chunk_size=1000, overlap_size=50))
    plan = splitter.split(document_text)
    for chunk in plan.chunks:
        print(chunk.id, chunk.original_range, chunk.length)

Classes:
    Chunk: Immutable unit of text with its source offsets.
    SplitPlan: Immutable ordered result of one split.
    SplitterConfig: Splitting parameters.
    TextSplitter: The splitting engine.
"""

import math
import uuid
from dataclasses import dataclass, field
from typing import List, Optional, Sequence, Tuple

from config.constants import (
    PARAGRAPH_BREAK,
    SPLIT_BREAKPOINTS,
    SPLIT_LOOKBACK_WINDOW,
    SPLIT_MAX_CHUNK_SIZE,
    SPLIT_MAX_INPUT_CHARS,
    SPLIT_OVERLAP_SIZE,
    SPLIT_WORD_BOUNDARY_RANGE,
    BATCH_SECONDS_PER_CHUNK_ESTIMATE,
)
from config.logging_config import get_logger

from .errors import InvalidInputError

logger = get_logger(__name__)


@dataclass(frozen=True)
class TextRange:
    """Half-open ``[start, end)`` offsets into the source text."""
    start: int
    end: int


@dataclass(frozen=True)
class Chunk:
    """
    One bounded-size unit of a split document.

    Attributes:
        id: Opaque unique identifier. Carries no ordering information.
        content: Trimmed text payload.
        original_range: Pre-trim offsets into the source text. Ranges of
            adjacent chunks overlap when overlap_size > 0.
        length: Character count of ``content``.
        is_final: True only for the last chunk of the plan.
    """
    id: str
    content: str
    original_range: TextRange
    length: int
    is_final: bool = False

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "content": self.content,
            "original_range": {
                "start": self.original_range.start,
                "end": self.original_range.end,
            },
            "length": self.length,
            "is_final": self.is_final,
        }


@dataclass(frozen=True)
class SplitPlan:
    """Ordered, immutable result of one split operation."""
    chunks: Tuple[Chunk, ...]
    total_characters: int
    max_chunk_size: int

    @property
    def chunk_count(self) -> int:
        return len(self.chunks)

    @property
    def chunk_ids(self) -> List[str]:
        return [chunk.id for chunk in self.chunks]

    def get_chunk(self, chunk_id: str) -> Optional[Chunk]:
        for chunk in self.chunks:
            if chunk.id == chunk_id:
                return chunk
        return None

    def to_dict(self) -> dict:
        return {
            "chunks": [chunk.to_dict() for chunk in self.chunks],
            "total_characters": self.total_characters,
            "chunk_count": self.chunk_count,
            "max_chunk_size": self.max_chunk_size,
        }


@dataclass
class SplitterConfig:
    """Configuration for TextSplitter."""
    max_chunk_size: int = SPLIT_MAX_CHUNK_SIZE
    preferred_breakpoints: List[str] = field(
        default_factory=lambda: list(SPLIT_BREAKPOINTS)
    )
    overlap_size: int = SPLIT_OVERLAP_SIZE
    preserve_paragraphs: bool = True
    lookback_window: int = SPLIT_LOOKBACK_WINDOW
    word_boundary_range: int = SPLIT_WORD_BOUNDARY_RANGE
    max_input_chars: int = SPLIT_MAX_INPUT_CHARS

    def validate(self):
        """Raise InvalidInputError if the configuration is unusable."""
        if self.max_chunk_size <= 0:
            raise InvalidInputError("max_chunk_size must be greater than 0")
        if self.overlap_size < 0:
            raise InvalidInputError("overlap_size cannot be negative")
        if self.overlap_size >= self.max_chunk_size:
            raise InvalidInputError("overlap_size must be less than max_chunk_size")
        if not self.preferred_breakpoints or any(not bp for bp in self.preferred_breakpoints):
            raise InvalidInputError("preferred_breakpoints must be non-empty strings")
        if self.max_input_chars <= 0:
            raise InvalidInputError("max_input_chars must be greater than 0")


class TextSplitter:
    """
    Splits text into an ordered SplitPlan under a maximum chunk size.

    The splitter is stateless between calls; one instance can be shared.

    Example:
        >>> splitter = TextSplitter()
        >>> plan = splitter.split("第一段。\\n\\n第二段。")
        >>> plan.chunk_count
        1
    """

    def __init__(self, config: Optional[SplitterConfig] = None):
        """
        Initialize TextSplitter.

        Args:
            config: Splitting parameters. Defaults to SplitterConfig().

        Raises:
            InvalidInputError: If the configuration is malformed.
        """
        self.config = config or SplitterConfig()
        self.config.validate()
        self._breakpoints = self._order_breakpoints()

    @property
    def breakpoints(self) -> List[str]:
        """Breakpoints in the order they are tried, strongest first."""
        return list(self._breakpoints)

    def _order_breakpoints(self) -> List[str]:
        # Without paragraph preservation a paragraph break ranks weakest
        breakpoints = list(self.config.preferred_breakpoints)
        if not self.config.preserve_paragraphs and PARAGRAPH_BREAK in breakpoints:
            breakpoints.remove(PARAGRAPH_BREAK)
            breakpoints.append(PARAGRAPH_BREAK)
        return breakpoints

    def split(self, text: str) -> SplitPlan:
        """
        Split text into chunks.

        Args:
            text: Source document.

        Returns:
            SplitPlan with chunks in source order, last one marked final.

        Raises:
            InvalidInputError: If text is empty, whitespace-only or larger
                than ``max_input_chars``.
        """
        validate_text_input(text, self.config.max_input_chars)

        logger.debug(
            f"Splitting text: {len(text)} chars, "
            f"max_chunk_size={self.config.max_chunk_size}, "
            f"overlap={self.config.overlap_size}"
        )

        if len(text) <= self.config.max_chunk_size:
            spans = [(0, len(text))]
        else:
            spans = self._compute_spans(text)

        chunks = self._package(text, spans)
        plan = SplitPlan(
            chunks=tuple(chunks),
            total_characters=len(text),
            max_chunk_size=self.config.max_chunk_size,
        )

        logger.info(
            f"Text split: {plan.total_characters} chars -> {plan.chunk_count} chunks "
            f"(avg {plan.total_characters // plan.chunk_count} chars)"
        )
        return plan

    def _compute_spans(self, text: str) -> List[Tuple[int, int]]:
        """Walk the text and return raw (start, end) spans in order."""
        spans = []
        position = 0
        text_length = len(text)
        overlap = self.config.overlap_size

        while position < text_length:
            hard_limit = position + self.config.max_chunk_size

            if hard_limit >= text_length:
                spans.append((position, text_length))
                break

            end = self.find_breakpoint(text, position, hard_limit)
            spans.append((position, end))

            next_position = end - overlap if overlap > 0 else end
            # Rewinding must still move the cursor forward
            if next_position <= position:
                next_position = end
            position = next_position

        return spans

    def find_breakpoint(self, text: str, start: int, hard_limit: int) -> int:
        """
        Find where the chunk starting at ``start`` should end.

        Tries each preferred breakpoint, strongest first, within the
        look-back window before ``hard_limit``; the breakpoint itself stays
        in the current chunk. Falls back to the nearest whitespace, then to
        a hard cut at ``hard_limit``.

        Returns:
            End offset (exclusive) of the chunk.
        """
        if hard_limit >= len(text):
            return len(text)

        window_start = max(start, hard_limit - self.config.lookback_window)
        for breakpoint in self._breakpoints:
            index = text.rfind(breakpoint, window_start + 1, hard_limit)
            if index != -1:
                return index + len(breakpoint)

        boundary = self._find_word_boundary(text, start, hard_limit)
        if boundary is not None:
            return boundary

        logger.debug(f"Hard cut at offset {hard_limit} (no natural break)")
        return hard_limit

    def _find_word_boundary(self, text: str, start: int, target: int) -> Optional[int]:
        """
        Nearest whitespace within word_boundary_range of target that keeps
        the chunk inside max_chunk_size.

        Whitespace found after target would overrun the size limit, so only
        whitespace at target itself or before it produces a cut.
        """
        if text[target].isspace():
            return target

        lower = max(start + 1, target - self.config.word_boundary_range)
        for i in range(target - 1, lower - 1, -1):
            if text[i].isspace():
                return i + 1

        return None

    def _package(self, text: str, spans: Sequence[Tuple[int, int]]) -> List[Chunk]:
        """
        Trim spans into Chunks and mark the last one final.

        A span that is all whitespace still becomes a chunk (with empty
        content) so every region of the source is accounted for.
        """
        chunks = []
        last = len(spans) - 1
        for index, (start, end) in enumerate(spans):
            content = text[start:end].strip()
            chunks.append(Chunk(
                id=str(uuid.uuid4()),
                content=content,
                original_range=TextRange(start=start, end=end),
                length=len(content),
                is_final=index == last,
            ))
        return chunks


def validate_text_input(text: str, max_chars: int = SPLIT_MAX_INPUT_CHARS):
    """
    Validate text before splitting.

    Raises:
        InvalidInputError: If text is not a string, is empty or whitespace
            only, or is longer than ``max_chars``.
    """
    if not isinstance(text, str) or not text:
        raise InvalidInputError("Text input must be a non-empty string")

    if not text.strip():
        raise InvalidInputError("Text input cannot be empty or contain only whitespace")

    if len(text) > max_chars:
        raise InvalidInputError(
            f"Text input too large (maximum {max_chars:,} characters)",
            status_code=413,
        )


def split_text(text: str, max_chunk_size: int = SPLIT_MAX_CHUNK_SIZE) -> SplitPlan:
    """Split text with default configuration and a custom chunk size."""
    config = SplitterConfig(
        max_chunk_size=max_chunk_size,
        overlap_size=min(SPLIT_OVERLAP_SIZE, max_chunk_size - 1),
    )
    return TextSplitter(config).split(text)


def estimate_processing_time(
    chunk_count: int,
    seconds_per_chunk: float = BATCH_SECONDS_PER_CHUNK_ESTIMATE,
) -> float:
    """Naive estimate (seconds) before any chunk latency has been observed."""
    return chunk_count * seconds_per_chunk


def minimum_chunk_count(text_length: int, max_chunk_size: int) -> int:
    """Lower bound on the number of chunks a split can produce."""
    return max(1, math.ceil(text_length / max_chunk_size))


def validate_chunks(chunks: Sequence[Chunk], max_size: int) -> bool:
    """True if every chunk fits in ``max_size`` characters (after trimming)."""
    return all(chunk.length <= max_size for chunk in chunks)


def reconstruct_text(chunks: Sequence[Chunk], original_text: str) -> str:
    """
    Rebuild a document from its chunks.

    Chunks are ordered by source offset; gaps are filled from the original
    text and overlap regions are emitted once.
    """
    ordered = sorted(chunks, key=lambda c: c.original_range.start)

    parts = []
    last_end = 0
    for chunk in ordered:
        start, end = chunk.original_range.start, chunk.original_range.end
        content = chunk.content

        if start > last_end:
            parts.append(original_text[last_end:start])
        elif start < last_end:
            raw = original_text[start:end]
            leading_ws = len(raw) - len(raw.lstrip())
            content = content[max(0, (last_end - start) - leading_ws):]

        parts.append(content)
        last_end = max(last_end, end)

    return "".join(parts)
