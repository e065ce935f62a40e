"""
Pytest configuration and shared fixtures for the text processing engine tests.
"""
import sys
import pytest
from pathlib import Path

# Add project root to path
PROJECT_ROOT = Path(__file__).parent.parent
sys.path.insert(0, str(PROJECT_ROOT))

from textproc.batch.controller import BatchController, ControllerConfig
from textproc.batch.events import BatchEventChannel
from textproc.splitter import SplitPlan

from helpers import EventRecorder, FakeClock, build_plan


# ============================================================================
# Fixtures: Batch engine
# ============================================================================

@pytest.fixture
def fake_clock() -> FakeClock:
    """Deterministic clock starting at 2024-01-01 12:00."""
    return FakeClock()


@pytest.fixture
def recorder() -> EventRecorder:
    """Collects published batch events."""
    return EventRecorder()


@pytest.fixture
def plan() -> SplitPlan:
    """Three-chunk plan."""
    return build_plan(3)


@pytest.fixture
def controller(fake_clock, recorder) -> BatchController:
    """Controller (cap 2) with fake clock and an event recorder subscribed."""
    channel = BatchEventChannel([recorder])
    return BatchController(
        ControllerConfig(max_concurrent_batches=2, max_batch_age_seconds=3600),
        channel=channel,
        clock=fake_clock,
    )


# ============================================================================
# Fixtures: Sample Data
# ============================================================================

@pytest.fixture
def sample_texts():
    """Sample texts for splitting."""
    return {
        "short_zh": "第一段。\n\n第二段。",
        "short_en": "Hello, world! This is a test.",
        "mixed": "中文 English 日本語 한국어 العربية",
        "paragraphs_zh": "第一段文字。\n\n第二段文字。\n\n第三段文字。" * 50,
        "sentences_zh": "測試文字。" * 320,  # 1600 chars
        "no_breaks": "a" * 2500,
    }
