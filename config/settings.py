#!/usr/bin/env python3
# -*- coding: utf-8 -*-

"""
Settings - Centralized configuration management
"""

from pathlib import Path
from typing import List, Optional
from pydantic_settings import BaseSettings

from .constants import (
    SPLIT_MAX_CHUNK_SIZE,
    SPLIT_OVERLAP_SIZE,
    SPLIT_LOOKBACK_WINDOW,
    SPLIT_WORD_BOUNDARY_RANGE,
    SPLIT_MAX_INPUT_CHARS,
    SPLIT_BREAKPOINTS,
    BATCH_MAX_CONCURRENT,
    BATCH_TIMEOUT_SECONDS,
    BATCH_CLEANUP_INTERVAL_SECONDS,
    BATCH_MAX_AGE_SECONDS,
    BATCH_SECONDS_PER_CHUNK_ESTIMATE,
    LOG_LEVEL,
    LOG_FILE,
)


# Base directory
BASE_DIR = Path(__file__).resolve().parent.parent


class Settings(BaseSettings):
    """Application settings (env prefix: TEXTPROC_)"""

    # ========== Splitter ==========
    max_chunk_size: int = SPLIT_MAX_CHUNK_SIZE
    overlap_size: int = SPLIT_OVERLAP_SIZE
    preserve_paragraphs: bool = True
    preferred_breakpoints: List[str] = list(SPLIT_BREAKPOINTS)
    lookback_window: int = SPLIT_LOOKBACK_WINDOW
    word_boundary_range: int = SPLIT_WORD_BOUNDARY_RANGE
    max_input_chars: int = SPLIT_MAX_INPUT_CHARS

    # ========== Batch lifecycle ==========
    max_concurrent_batches: int = BATCH_MAX_CONCURRENT
    batch_timeout_seconds: float = BATCH_TIMEOUT_SECONDS
    cleanup_interval_seconds: float = BATCH_CLEANUP_INTERVAL_SECONDS
    max_batch_age_seconds: float = BATCH_MAX_AGE_SECONDS
    seconds_per_chunk_estimate: float = BATCH_SECONDS_PER_CHUNK_ESTIMATE

    # ========== Logging ==========
    log_level: str = LOG_LEVEL
    log_file: Optional[str] = LOG_FILE

    class Config:
        env_prefix = "TEXTPROC_"
        env_file = str(BASE_DIR / ".env")
        env_file_encoding = "utf-8"
        case_sensitive = False
        extra = "ignore"  # Allow extra fields from .env that aren't defined in model

    def splitter_config(self):
        """Build the SplitterConfig used by TextSplitter."""
        from textproc.splitter import SplitterConfig

        return SplitterConfig(
            max_chunk_size=self.max_chunk_size,
            overlap_size=self.overlap_size,
            preserve_paragraphs=self.preserve_paragraphs,
            preferred_breakpoints=list(self.preferred_breakpoints),
            lookback_window=self.lookback_window,
            word_boundary_range=self.word_boundary_range,
            max_input_chars=self.max_input_chars,
        )

    def controller_config(self):
        """Build the ControllerConfig used by BatchController."""
        from textproc.batch.controller import ControllerConfig

        return ControllerConfig(
            max_concurrent_batches=self.max_concurrent_batches,
            batch_timeout_seconds=self.batch_timeout_seconds,
            cleanup_interval_seconds=self.cleanup_interval_seconds,
            max_batch_age_seconds=self.max_batch_age_seconds,
            seconds_per_chunk_estimate=self.seconds_per_chunk_estimate,
        )

    def describe(self) -> dict:
        """Configuration summary for startup logs"""
        return {
            "max_chunk_size": self.max_chunk_size,
            "overlap_size": self.overlap_size,
            "max_input_chars": self.max_input_chars,
            "max_concurrent_batches": self.max_concurrent_batches,
            "batch_timeout_seconds": self.batch_timeout_seconds,
            "cleanup_interval_seconds": self.cleanup_interval_seconds,
            "max_batch_age_seconds": self.max_batch_age_seconds,
            "log_level": self.log_level,
        }


# Global settings instance
settings = Settings()
